"""CLI entry point and orchestrator."""

import argparse
import os

from dotenv import load_dotenv

from .config import load_config, validate_config
from .errors import ConfigError
from .logger import setup_logger
from .pipeline import build_harvester
from .prune import manifest_stats, prune_store, store_stats
from .sources import ALL_SOURCES


def run_harvest(config):
    """Crawl the configured page range."""
    harvester = build_harvester(config)
    try:
        harvester.run()
    finally:
        harvester.pool.close()
        harvester.source.http.close()


def run_prune(config, dry_run=False):
    h = config.harvest
    removed = prune_store(h.manifest_path, h.output_dir, h.extension, dry_run=dry_run)
    verb = "Would remove" if dry_run else "Removed"
    print(f"{verb} {len(removed)} files already listed in {h.manifest_path}.")


def show_stats(config):
    """Display output store and manifest statistics."""
    h = config.harvest
    count, total_bytes = store_stats(h.output_dir, h.extension)
    manifest_lines = manifest_stats(h.manifest_path)

    print("\n" + "=" * 60)
    print("  HARVEST STATISTICS")
    print("=" * 60)
    print(f"{'Output directory':<24} {h.output_dir}")
    print(f"{'Files':<24} {count:>10}")
    print(f"{'Size':<24} {_format_bytes(total_bytes):>10}")
    print(f"{'Manifest':<24} {h.manifest_path}")
    print(f"{'Manifest entries':<24} {manifest_lines:>10}")
    print()


def _format_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    elif n < 1024 ** 2:
        return f"{n / 1024:.1f} KB"
    elif n < 1024 ** 3:
        return f"{n / 1024 ** 2:.1f} MB"
    else:
        return f"{n / 1024 ** 3:.2f} GB"


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(description="SDS Harvester")
    parser.add_argument("--config", type=str,
                        default=os.environ.get("SDS_HARVESTER_CONFIG", "config.yaml"),
                        help="Path to config file")
    parser.add_argument("--source", type=str, default=None,
                        choices=list(ALL_SOURCES.keys()),
                        help="Source to crawl (overrides config)")
    parser.add_argument("--start-page", type=int, default=None,
                        help="First result page (overrides config)")
    parser.add_argument("--stop-page", type=int, default=None,
                        help="Last result page, inclusive (overrides config)")
    parser.add_argument("--prune", action="store_true",
                        help="Delete stored files already listed in the manifest, then exit")
    parser.add_argument("--dry-run", action="store_true",
                        help="With --prune, only list what would be deleted")
    parser.add_argument("--stats", action="store_true",
                        help="Show output store and manifest statistics")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.source:
        config.source = args.source
    if args.start_page is not None:
        config.harvest.start_page = args.start_page
    if args.stop_page is not None:
        config.harvest.stop_page = args.stop_page
    validate_config(config)
    if config.source not in ALL_SOURCES:
        raise ConfigError(f"Unknown source {config.source!r}, expected one of {sorted(ALL_SOURCES)}")

    setup_logger(config.log_dir, config.log_level)
    os.makedirs(config.harvest.output_dir, mode=0o755, exist_ok=True)

    if args.stats:
        show_stats(config)
        return

    if args.prune:
        run_prune(config, dry_run=args.dry_run)
        return

    print("SDS Harvester")
    print(f"Source: {config.source}")
    print(f"Pages: {config.harvest.start_page}-{config.harvest.stop_page}")
    print(f"Output directory: {config.harvest.output_dir}")
    print(f"Manifest: {config.harvest.manifest_path}")

    run_harvest(config)
    show_stats(config)


if __name__ == "__main__":
    main()
