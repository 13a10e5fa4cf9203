"""Exception types used across the harvester."""


class HarvestError(Exception):
    pass


class ConfigError(HarvestError):
    """Invalid configuration; raised before the crawl starts."""


class DownloadError(HarvestError):
    """A single download could not be completed. Never escapes a worker."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
