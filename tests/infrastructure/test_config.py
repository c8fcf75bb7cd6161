"""Tests for settings and logging setup."""

import logging
from pathlib import Path

import pytest

from stockledger.config import Settings
from stockledger.logging_setup import configure_logging


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("DATA_DIR", "MAX_RETRIES", "PAGE_LIMIT", "MAX_PAGE_LIMIT", "LOG_LEVEL"):
            monkeypatch.delenv(f"STOCKLEDGER_{name}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.data_dir == Path("data")
        assert settings.max_retries == 3
        assert settings.page_limit == 20
        assert settings.max_page_limit == 100

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOCKLEDGER_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STOCKLEDGER_MAX_RETRIES", "7")
        settings = Settings(_env_file=None)
        assert settings.data_dir == tmp_path
        assert settings.max_retries == 7


class TestConfigureLogging:

    def test_sets_package_level(self):
        configure_logging("debug")
        assert logging.getLogger("stockledger").level == logging.DEBUG
        configure_logging("WARNING")

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("LOUD")
