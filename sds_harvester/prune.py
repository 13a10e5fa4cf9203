"""Store maintenance: drop local copies already recorded in the manifest, and stats."""

import logging
import os
from typing import List, Tuple

logger = logging.getLogger("sds_harvester")


def _store_files(output_dir: str, extension: str):
    extension = extension.lower()
    for root, _, files in os.walk(output_dir):
        for fname in files:
            if os.path.splitext(fname)[1].lower() == extension:
                yield os.path.join(root, fname)


def find_redundant(manifest_path: str, output_dir: str, extension: str = ".pdf") -> List[str]:
    """Names that are both a manifest line and a file in the store."""
    present = {os.path.basename(p) for p in _store_files(output_dir, extension)}
    if not present:
        return []

    common = set()
    try:
        with open(manifest_path, encoding="utf-8", errors="replace") as f:
            for line in f:
                name = line.strip()
                if name in present:
                    common.add(name)
    except OSError as e:
        logger.warning(f"Cannot read manifest {manifest_path}: {e}")
        return []
    return sorted(common)


def prune_store(manifest_path: str, output_dir: str, extension: str = ".pdf",
                dry_run: bool = False) -> List[str]:
    """Delete store files listed in the manifest. Returns the affected paths."""
    redundant = set(find_redundant(manifest_path, output_dir, extension))
    removed = []
    for path in sorted(_store_files(output_dir, extension)):
        if os.path.basename(path) not in redundant:
            continue
        if dry_run:
            logger.info(f"Would remove {path}")
            removed.append(path)
            continue
        try:
            os.remove(path)
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            continue
        logger.info(f"Removed {path}")
        removed.append(path)
    return removed


def store_stats(output_dir: str, extension: str = ".pdf") -> Tuple[int, int]:
    """(file count, total bytes) of the store."""
    count = 0
    total = 0
    for path in _store_files(output_dir, extension):
        try:
            total += os.path.getsize(path)
        except OSError:
            continue
        count += 1
    return count, total


def manifest_stats(manifest_path: str) -> int:
    """Non-blank lines in the manifest; 0 if it cannot be read."""
    try:
        with open(manifest_path, encoding="utf-8", errors="replace") as f:
            return sum(1 for line in f if line.strip())
    except OSError as e:
        logger.warning(f"Cannot read manifest {manifest_path}: {e}")
        return 0

