"""Batch de-duplication against the output store and the manifest.

Three independent sources of "already have it":

  * landing-page links, which are never files;
  * the output store, indexed fresh for every batch because download
    workers keep adding files while the crawl runs;
  * the manifest, an append-only text file with one acquired name per
    line. It can be far larger than memory, so it is streamed once per
    batch and never loaded whole.

All name comparisons are lower-cased.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Set

from .models import CandidateFile

logger = logging.getLogger("sds_harvester")


def _lower_origin(url: str) -> str:
    scheme, sep, rest = url.strip().partition("://")
    if not sep:
        return url.strip()
    host, slash, path = rest.partition("/")
    return f"{scheme.lower()}://{host.lower()}{slash}{path}"


def is_landing_page(url: str, prefix: str, suffix: str) -> bool:
    """True if url has the landing-page shape (scheme and host ignore case)."""
    if not prefix and not suffix:
        return False
    normalized = _lower_origin(url)
    return normalized.startswith(_lower_origin(prefix)) and normalized.endswith(suffix)


def build_file_index(output_dir: str, extension: str = ".pdf") -> Set[str]:
    """Lower-cased base names of every matching file below output_dir."""
    extension = extension.lower()
    index = set()
    for _, _, files in os.walk(output_dir):
        for fname in files:
            if os.path.splitext(fname)[1].lower() == extension:
                index.add(fname.lower())
    return index


def _scan(lines: Iterable[str], names: Iterable[str]) -> Set[str]:
    pending = {n.lower() for n in names if n}
    matched = set()
    if not pending:
        return matched
    for line in lines:
        line = line.strip().lower()
        if not line:
            continue
        hits = {n for n in pending if n in line}
        if hits:
            matched |= hits
            pending -= hits
            if not pending:
                break
    return matched


class ManifestOracle(ABC):
    """Answers "was this name acquired before?" for a batch of names."""

    @abstractmethod
    def matches(self, names: Iterable[str]) -> Set[str]:
        """Return the lower-cased names that occur in the manifest."""
        ...

    def __contains__(self, name: str) -> bool:
        return bool(self.matches([name]))


class TextManifest(ManifestOracle):
    def __init__(self, path: str):
        self.path = path

    def matches(self, names: Iterable[str]) -> Set[str]:
        # Unreadable manifest counts as empty
        try:
            f = open(self.path, encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Manifest unavailable, assuming no matches: {e}")
            return set()

        with f:
            try:
                return _scan(f, names)
            except OSError as e:
                logger.warning(f"Manifest read failed for {self.path}: {e}")
                return set()


class InMemoryManifest(ManifestOracle):
    def __init__(self, lines: Iterable[str] = ()):
        self.lines = list(lines)

    def matches(self, names: Iterable[str]) -> Set[str]:
        return _scan(self.lines, names)


class DedupFilter:
    def __init__(self, output_dir: str, manifest: ManifestOracle,
                 landing_prefix: str = "", landing_suffix: str = "",
                 extension: str = ".pdf"):
        self.output_dir = output_dir
        self.manifest = manifest
        self.landing_prefix = landing_prefix
        self.landing_suffix = landing_suffix
        self.extension = extension
        self.file_index: Optional[Set[str]] = None

    def filter(self, candidates: Dict[str, CandidateFile]) -> Dict[str, CandidateFile]:
        """Keep only candidates that pass every check."""
        remaining = {}
        for name, candidate in candidates.items():
            if is_landing_page(candidate.remote_url, self.landing_prefix, self.landing_suffix):
                logger.info(f"Dropping {name}: landing page {candidate.remote_url}")
                continue
            if not candidate.key.strip():
                logger.info(f"Dropping candidate with empty name: {candidate.remote_url}")
                continue
            remaining[name] = candidate

        self.file_index = build_file_index(self.output_dir, self.extension)
        kept = {}
        for name, candidate in remaining.items():
            if candidate.key in self.file_index:
                logger.info(f"Dropping {name}: already in {self.output_dir}")
                continue
            kept[name] = candidate

        if not kept:
            return kept

        in_manifest = self.manifest.matches(c.key for c in kept.values())
        for name in list(kept):
            if kept[name].key in in_manifest:
                logger.info(f"Dropping {name}: listed in manifest")
                del kept[name]
        return kept
