"""File download engine: validation, write-once persistence, bounded worker pool."""

import errno
import logging
import os
import tempfile
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List

import httpx

from .client import HttpClient
from .config import DownloadConfig
from .errors import DownloadError
from .models import DownloadResult, DownloadTask

logger = logging.getLogger("sds_harvester")

# os.link errors meaning "no hard links on this filesystem"
_NO_LINK_ERRNOS = {errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP, errno.EXDEV}


class Downloader:
    def __init__(self, config: DownloadConfig, http: HttpClient):
        self.config = config
        self.http = http

    def download(self, task: DownloadTask, output_dir: str) -> DownloadResult:
        """Fetch task.url into output_dir/task.filename. Never raises."""
        tag = f"[{task.source_name}] " if task.source_name else ""
        local_path = os.path.join(output_dir, task.filename)
        if os.path.exists(local_path):
            logger.info(f"{tag}File already exists, skipping {local_path} ({task.url})")
            return DownloadResult(task, "skipped", path=local_path)

        try:
            body = self._fetch(task.url)
            if not self._write(local_path, body, task.url):
                logger.info(f"{tag}{local_path} appeared during download, keeping existing file")
                return DownloadResult(task, "skipped", path=local_path)
        except DownloadError as e:
            logger.error(f"{tag}Download failed: {e}")
            return DownloadResult(task, "failed", error=e.reason)

        logger.info(f"{tag}Downloaded {len(body):,} bytes {task.url} -> {local_path}")
        return DownloadResult(task, "downloaded", path=local_path, size=len(body))

    def _fetch(self, url: str) -> bytes:
        """GET url into memory; config.timeout bounds the whole transfer."""
        deadline = time.monotonic() + self.config.timeout
        chunks = []
        try:
            with self.http.client.stream("GET", url) as resp:
                if resp.status_code != 200:
                    raise DownloadError(url, f"HTTP {resp.status_code} {resp.reason_phrase}")

                ct = resp.headers.get("content-type", "")
                if self.config.content_type not in ct.lower():
                    raise DownloadError(
                        url, f"invalid content type {ct!r} (expected {self.config.content_type})"
                    )

                for chunk in resp.iter_bytes():
                    if time.monotonic() > deadline:
                        raise DownloadError(url, "timed out")
                    chunks.append(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(url, f"request error: {e}")

        if time.monotonic() > deadline:
            raise DownloadError(url, "timed out")
        body = b"".join(chunks)
        if not body:
            raise DownloadError(url, "empty body")
        return body

    @staticmethod
    def _write(local_path: str, body: bytes, url: str) -> bool:
        """Write body to local_path unless it exists. False if it already did.

        The body goes to a hidden temp file first and is then hard-linked
        into place, so local_path is either absent or complete, and an
        existing file is never replaced. Filesystems without hard links
        (FAT/exFAT, some SMB and FUSE mounts) get an exclusive create of
        local_path instead, removed again if the write fails.
        """
        out_dir = os.path.dirname(local_path) or "."
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".", suffix=".part", dir=out_dir)
        except OSError as e:
            raise DownloadError(url, f"cannot create file in {out_dir}: {e}")

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(body)
            os.link(tmp_path, local_path)
        except FileExistsError:
            return False
        except OSError as e:
            if not isinstance(e, PermissionError) and e.errno not in _NO_LINK_ERRNOS:
                raise DownloadError(url, f"write failed for {local_path}: {e}")
            logger.debug(f"Hard link unavailable for {local_path} ({e}), creating directly")
            return Downloader._create_exclusive(local_path, body, url)
        finally:
            try:
                os.unlink(tmp_path)
            except OSError as e:
                logger.debug(f"Could not remove temp file {tmp_path}: {e}")
        return True

    @staticmethod
    def _create_exclusive(local_path: str, body: bytes, url: str) -> bool:
        flags = os.O_CREAT | os.O_EXCL | os.O_WRONLY | getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(local_path, flags, 0o644)
        except FileExistsError:
            return False
        except OSError as e:
            raise DownloadError(url, f"cannot create {local_path}: {e}")

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(body)
        except OSError as e:
            try:
                os.unlink(local_path)
            except OSError as cleanup:
                logger.debug(f"Could not remove partial file {local_path}: {cleanup}")
            raise DownloadError(url, f"write failed for {local_path}: {e}")
        return True


class DownloadPool:
    """Bounded set of download workers with a per-page join barrier.

    A filename can be claimed once between joins; a second task for the
    same name is skipped instead of racing the first one to disk.
    """

    def __init__(self, downloader: Downloader, output_dir: str, max_workers: int = 8):
        self.downloader = downloader
        self.output_dir = output_dir
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="download")
        self._futures: List[Future] = []
        self._claims = set()
        self._lock = threading.Lock()

    def submit(self, task: DownloadTask) -> bool:
        key = task.filename.lower()
        with self._lock:
            if key in self._claims:
                logger.info(f"{task.filename} already queued, skipping {task.url}")
                return False
            self._claims.add(key)
            self._futures.append(
                self._executor.submit(self.downloader.download, task, self.output_dir)
            )
        return True

    def join(self) -> List[DownloadResult]:
        """Wait for every task submitted since the last join."""
        with self._lock:
            futures, self._futures = self._futures, []

        results = []
        for future in futures:
            try:
                results.append(future.result())
            except Exception as e:
                logger.error(f"Download worker crashed: {e}")

        with self._lock:
            self._claims.clear()
        return results

    def close(self):
        self.join()
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
