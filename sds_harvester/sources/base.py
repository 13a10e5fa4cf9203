"""Abstract base class for paginated document search sources."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Tuple

from ..client import HttpClient
from ..config import AppConfig, SourceConfig
from ..models import CandidateFile

logger = logging.getLogger("sds_harvester")


class BaseSource(ABC):
    name: str = ""

    # Templates; {page}, {page_size} and {doc_id} are filled in
    SEARCH_URL: str = ""
    DOCUMENT_URL: str = ""

    # Locations of this shape are human-facing pages, never files
    LANDING_PREFIX: str = ""
    LANDING_SUFFIX: str = ""

    def __init__(self, config: AppConfig, http: HttpClient):
        self.config = config
        self.http = http
        self.source_config: SourceConfig = config.source_config(self.name)

    @abstractmethod
    def parse_search_results(self, data) -> Iterable:
        """Yield raw identifier values from a decoded search payload."""
        ...

    @abstractmethod
    def parse_document(self, data) -> Iterable[Tuple[str, str]]:
        """Yield (name, location) pairs from a decoded metadata payload."""
        ...

    @property
    def landing_pattern(self) -> Tuple[str, str]:
        return (
            self.source_config.landing_prefix or self.LANDING_PREFIX,
            self.source_config.landing_suffix or self.LANDING_SUFFIX,
        )

    def page_url(self, page: int) -> str:
        template = self.source_config.search_url or self.SEARCH_URL
        return template.format(page=page, page_size=self.config.harvest.page_size)

    def document_url(self, doc_id: str) -> str:
        template = self.source_config.document_url or self.DOCUMENT_URL
        return template.format(doc_id=doc_id)

    def fetch_page(self, page: int) -> str:
        url = self.page_url(page)
        logger.info(f"[{self.name}] Scraping page {page}: {url}")
        return self.http.fetch_text(url)

    def extract_document_ids(self, payload: str) -> List[str]:
        """Identifiers on a page, first-seen order, duplicates removed."""
        if not payload:
            return []
        try:
            data = json.loads(payload)
        except ValueError as e:
            logger.warning(f"[{self.name}] Unparseable search payload: {e}")
            return []

        ids = []
        seen = set()
        try:
            raw_ids = list(self.parse_search_results(data))
        except (AttributeError, TypeError) as e:
            logger.warning(f"[{self.name}] Unexpected search payload shape: {e}")
            return []

        for raw in raw_ids:
            if isinstance(raw, bool) or not isinstance(raw, (str, int)):
                continue
            doc_id = str(raw).strip()
            if not doc_id or doc_id in seen:
                continue
            seen.add(doc_id)
            ids.append(doc_id)
        return ids

    def resolve_document(self, doc_id: str) -> List[CandidateFile]:
        payload = self.http.fetch_text(self.document_url(doc_id))
        if not payload:
            return []
        try:
            data = json.loads(payload)
            pairs = list(self.parse_document(data))
        except (ValueError, AttributeError, TypeError) as e:
            logger.warning(f"[{self.name}] Bad metadata for document {doc_id}: {e}")
            return []

        return [
            CandidateFile(name=name, remote_url=location)
            for name, location in pairs
            if isinstance(name, str) and isinstance(location, str) and name and location
        ]

    def collect_candidates(self, doc_ids: Iterable[str]) -> Dict[str, CandidateFile]:
        """Merge every document's candidates into one batch keyed by name."""
        batch: Dict[str, CandidateFile] = {}
        for doc_id in doc_ids:
            for candidate in self.resolve_document(doc_id):
                batch[candidate.name] = candidate
        return batch
