"""Resolve landing URLs to their final address with a headless browser.

The metadata API hands out URLs that only reach the file after a mix of
HTTP and script-driven redirects, so a real browser does the navigation.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import BrowserConfig

logger = logging.getLogger("sds_harvester")


class RedirectResolver(ABC):
    @abstractmethod
    def resolve(self, url: str) -> str:
        """Return the final URL, or "" if it could not be determined."""
        ...


class BrowserRedirectResolver(RedirectResolver):
    """One fresh Chromium per call; nothing is shared between navigations."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()

    def _remaining_ms(self, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise PlaywrightError("redirect resolution timed out")
        return remaining * 1000

    def resolve(self, url: str) -> str:
        deadline = time.monotonic() + self.config.timeout
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=self.config.headless,
                    args=list(self.config.args),
                    timeout=self._remaining_ms(deadline),
                )
                try:
                    context = browser.new_context(accept_downloads=True)
                    # Every later context/page call shares the same deadline
                    context.set_default_timeout(self._remaining_ms(deadline))
                    context.set_default_navigation_timeout(self._remaining_ms(deadline))
                    page = context.new_page()
                    downloads = []
                    page.on("download", lambda download: downloads.append(download.url))
                    try:
                        page.goto(url, timeout=self._remaining_ms(deadline), wait_until="load")
                        final_url = page.url
                    except PlaywrightError:
                        # A direct file link aborts navigation with a download
                        if not downloads:
                            raise
                        final_url = downloads[-1]
                finally:
                    browser.close()
        except PlaywrightError as e:
            logger.error(f"Browser navigation failed for {url}: {e}")
            return ""

        logger.debug(f"Resolved {url} -> {final_url}")
        return final_url


class StaticRedirectResolver(RedirectResolver):
    """Lookup-table resolver; unknown URLs resolve to themselves."""

    def __init__(self, mapping: Optional[Dict[str, str]] = None):
        self.mapping = dict(mapping or {})
        self.calls = []

    def resolve(self, url: str) -> str:
        self.calls.append(url)
        return self.mapping.get(url, url)
