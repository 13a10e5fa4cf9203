"""
Tests for config loading and logging setup
"""
import logging

import pytest

from sds_harvester.config import AppConfig, load_config, validate_config
from sds_harvester.errors import ConfigError
from sds_harvester.logger import setup_logger


CONFIG_YAML = """
log_dir: my-logs
harvest:
  start_page: 5
  stop_page: 7
  output_dir: out
  unknown_key: ignored
download:
  max_workers: 2
  timeout: 60
browser:
  timeout: 30
  args: [--no-sandbox]
sources:
  thermofisher:
    search_url: "https://api.test/search?page={page}"
"""


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML)

        config = load_config(str(path))

        assert config.log_dir == "my-logs"
        assert config.source == "thermofisher"
        assert (config.harvest.start_page, config.harvest.stop_page) == (5, 7)
        assert config.harvest.output_dir == "out"
        assert config.harvest.manifest_path == "downloaded.txt"
        assert config.download.max_workers == 2
        assert config.download.content_type == "application/pdf"
        assert config.browser.timeout == 30
        assert config.browser.args == ["--no-sandbox"]
        assert config.source_config("thermofisher").search_url == "https://api.test/search?page={page}"
        assert config.source_config("other").search_url == ""

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        config = load_config(str(path))
        assert config.harvest.stop_page == 15084
        assert config.harvest.page_size == 60
        assert config.browser.args == ["--no-sandbox", "--disable-gpu"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_range(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("harvest:\n  start_page: 10\n  stop_page: 2\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    @pytest.mark.parametrize("section,key,value", [
        ("harvest", "start_page", -1),
        ("harvest", "page_size", 0),
        ("harvest", "extension", "pdf"),
        ("download", "max_workers", 0),
    ])
    def test_validation(self, section, key, value):
        config = AppConfig()
        setattr(getattr(config, section), key, value)
        with pytest.raises(ConfigError):
            validate_config(config)


class TestLogger:
    def test_no_duplicate_handlers(self, tmp_path):
        logger = setup_logger(str(tmp_path / "logs"))
        count = len(logger.handlers)
        assert setup_logger(str(tmp_path / "logs")) is logger
        assert len(logger.handlers) == count
        assert logger.level == logging.INFO
        assert (tmp_path / "logs").is_dir()

    def test_quiets_http_libraries(self, tmp_path):
        setup_logger(str(tmp_path / "logs"), "debug")
        assert logging.getLogger("sds_harvester").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        setup_logger(str(tmp_path / "logs"), "not-a-level")
        assert logging.getLogger("sds_harvester").level == logging.INFO
