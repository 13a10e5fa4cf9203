"""YAML config loader."""

from dataclasses import dataclass, field
from typing import List

import yaml

from .errors import ConfigError


@dataclass
class HarvestConfig:
    start_page: int = 0
    stop_page: int = 15084
    page_size: int = 60
    output_dir: str = "PDFs"
    manifest_path: str = "downloaded.txt"
    extension: str = ".pdf"


@dataclass
class DownloadConfig:
    timeout: int = 180
    connect_timeout: int = 30
    max_workers: int = 8
    user_agent: str = "SDSHarvester/1.0"
    content_type: str = "application/pdf"


@dataclass
class BrowserConfig:
    timeout: int = 180  # seconds, launch + navigation
    headless: bool = True
    args: List[str] = field(default_factory=lambda: ["--no-sandbox", "--disable-gpu"])


@dataclass
class SourceConfig:
    search_url: str = ""
    document_url: str = ""
    landing_prefix: str = ""
    landing_suffix: str = ""
    description: str = ""


@dataclass
class AppConfig:
    log_dir: str = "logs"
    log_level: str = "INFO"
    source: str = "thermofisher"
    harvest: HarvestConfig = field(default_factory=HarvestConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    sources: dict = field(default_factory=dict)

    def source_config(self, name: str) -> SourceConfig:
        return self.sources.get(name, SourceConfig())


def _section(cls, raw):
    return cls(**{k: v for k, v in (raw or {}).items() if k in cls.__dataclass_fields__})


def validate_config(config: AppConfig) -> AppConfig:
    h = config.harvest
    if h.start_page < 0:
        raise ConfigError(f"start_page must be >= 0, got {h.start_page}")
    if h.stop_page < h.start_page:
        raise ConfigError(f"stop_page ({h.stop_page}) is before start_page ({h.start_page})")
    if h.page_size <= 0:
        raise ConfigError(f"page_size must be positive, got {h.page_size}")
    if not h.extension.startswith("."):
        raise ConfigError(f"extension must start with '.', got {h.extension!r}")
    if config.download.max_workers <= 0:
        raise ConfigError(f"max_workers must be positive, got {config.download.max_workers}")
    return config


def load_config(config_path: str = "config.yaml") -> AppConfig:
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    sources = {}
    for name, src_raw in (raw.get("sources") or {}).items():
        sources[name] = _section(SourceConfig, src_raw)

    config = AppConfig(
        log_dir=raw.get("log_dir", "logs"),
        log_level=raw.get("log_level", "INFO"),
        source=raw.get("source", "thermofisher"),
        harvest=_section(HarvestConfig, raw.get("harvest")),
        download=_section(DownloadConfig, raw.get("download")),
        browser=_section(BrowserConfig, raw.get("browser")),
        sources=sources,
    )
    return validate_config(config)
