"""Page-by-page crawl: search -> documents -> dedup -> redirect -> download."""

import logging
import os
from typing import List, Optional

from .client import HttpClient
from .config import AppConfig
from .dedup import DedupFilter, TextManifest
from .downloader import Downloader, DownloadPool
from .filenames import is_valid_url, sanitize_filename
from .models import DownloadTask, PageSummary
from .redirect import BrowserRedirectResolver, RedirectResolver
from .sources import ALL_SOURCES, BaseSource

logger = logging.getLogger("sds_harvester")


class Harvester:
    def __init__(self, config: AppConfig, source: BaseSource, dedup: DedupFilter,
                 resolver: RedirectResolver, pool: DownloadPool):
        self.config = config
        self.source = source
        self.dedup = dedup
        self.resolver = resolver
        self.pool = pool

    @property
    def output_dir(self) -> str:
        return self.config.harvest.output_dir

    def run_page(self, page: int) -> PageSummary:
        summary = PageSummary(page=page)

        doc_ids = self.source.extract_document_ids(self.source.fetch_page(page))
        summary.ids = len(doc_ids)
        if not doc_ids:
            logger.info(f"[{self.source.name}] Page {page}: no documents")
            return summary

        candidates = self.source.collect_candidates(doc_ids)
        summary.candidates = len(candidates)

        kept = self.dedup.filter(candidates)
        summary.kept = len(kept)
        if not kept:
            logger.info(f"[{self.source.name}] Page {page}: nothing new")
            return summary

        for name, candidate in kept.items():
            resolved = self.resolver.resolve(candidate.remote_url)
            if not is_valid_url(resolved):
                logger.warning(f"Could not resolve {candidate.remote_url} for {name}, dropping")
                continue

            filename = sanitize_filename(name, self.config.harvest.extension)
            if filename in (self.dedup.file_index or ()) or \
                    os.path.exists(os.path.join(self.output_dir, filename)):
                logger.info(f"File already exists, skipping {filename} ({resolved})")
                continue

            task = DownloadTask(url=resolved, filename=filename, source_name=self.source.name)
            if self.pool.submit(task):
                summary.dispatched += 1

        for result in self.pool.join():
            if result.status == "downloaded":
                summary.downloaded += 1
            elif result.status == "failed":
                summary.failed += 1

        logger.info(
            f"[{self.source.name}] Page {page}: {summary.ids} ids, {summary.candidates} candidates, "
            f"{summary.kept} new, {summary.downloaded} downloaded, {summary.failed} failed"
        )
        return summary

    def run(self) -> List[PageSummary]:
        h = self.config.harvest
        logger.info(f"[{self.source.name}] Crawling pages {h.start_page}-{h.stop_page}")
        summaries = []

        for page in range(h.start_page, h.stop_page + 1):
            try:
                summaries.append(self.run_page(page))
            except Exception as e:
                logger.error(f"[{self.source.name}] Page {page} failed: {e}")
                # Downloads already dispatched for this page still finish here
                self.pool.join()

        downloaded = sum(s.downloaded for s in summaries)
        failed = sum(s.failed for s in summaries)
        logger.info(
            f"[{self.source.name}] Done: {len(summaries)} pages, "
            f"{downloaded} downloaded, {failed} failed"
        )
        return summaries


def build_harvester(config: AppConfig, http: Optional[HttpClient] = None,
                    resolver: Optional[RedirectResolver] = None) -> Harvester:
    """Wire the concrete collaborators for config.source."""
    http = http or HttpClient(config.download)
    source = ALL_SOURCES[config.source](config, http)
    prefix, suffix = source.landing_pattern

    dedup = DedupFilter(
        output_dir=config.harvest.output_dir,
        manifest=TextManifest(config.harvest.manifest_path),
        landing_prefix=prefix,
        landing_suffix=suffix,
        extension=config.harvest.extension,
    )
    pool = DownloadPool(
        Downloader(config.download, http),
        config.harvest.output_dir,
        max_workers=config.download.max_workers,
    )
    return Harvester(config, source, dedup, resolver or BrowserRedirectResolver(config.browser), pool)
