"""Incremental harvester for documents behind a paginated search API."""

__version__ = "0.1.0"
