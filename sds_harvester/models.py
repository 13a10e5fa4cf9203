"""Data models for the harvester."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CandidateFile:
    name: str
    remote_url: str

    @property
    def key(self) -> str:
        # Dedup key: every comparison is case-insensitive
        return self.name.lower()


@dataclass
class DownloadTask:
    url: str
    filename: str
    source_name: str = ""


@dataclass
class DownloadResult:
    task: DownloadTask
    status: str  # downloaded, skipped, failed
    path: Optional[str] = None
    size: int = 0
    error: Optional[str] = None


@dataclass
class PageSummary:
    page: int
    ids: int = 0
    candidates: int = 0
    kept: int = 0
    dispatched: int = 0
    downloaded: int = 0
    failed: int = 0
