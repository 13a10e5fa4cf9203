"""Shared HTTP client for search, metadata and file requests."""

import logging
import threading
from typing import Optional

import httpx

from .config import DownloadConfig

logger = logging.getLogger("sds_harvester")


class HttpClient:
    def __init__(self, config: DownloadConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        # Download workers share this client, so creation is serialized
        with self._lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(
                    timeout=httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout),
                    follow_redirects=True,
                    headers={"User-Agent": self.config.user_agent},
                    transport=self._transport,
                )
            return self._client

    def close(self):
        if self._client and not self._client.is_closed:
            self._client.close()

    def fetch_text(self, url: str) -> str:
        """Fetch a body as text. Returns "" on any request failure."""
        logger.debug(f"Fetching {url}")
        try:
            resp = self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Request failed for {url}: {e}")
            return ""
        return resp.text
