"""Tests for ledger configuration and logging setup."""

import logging
from decimal import Decimal

import pytest

from projectledger.config import (
    CASH_ACCOUNT_ENV,
    DB_PATH_ENV,
    LOG_LEVEL_ENV,
    LedgerConfig,
    default_database_path,
)
from projectledger.logging_config import configure_logging, reset_logging


def test_default_config():
    config = LedgerConfig()
    assert config.receivable_account == "1201"
    assert config.payable_account == "2102"
    assert config.cash_account == "1101"
    assert config.balance_tolerance == Decimal("0.01")


def test_cash_account_from_env(monkeypatch):
    monkeypatch.setenv(CASH_ACCOUNT_ENV, " 1102 ")
    assert LedgerConfig.from_env().cash_account == "1102"


def test_reserved_asset_codes():
    """Test fixed-asset codes and the WIP account are reserved."""
    config = LedgerConfig()
    assert config.is_reserved_asset_code("1501")
    assert config.is_reserved_asset_code("1505")
    assert config.is_reserved_asset_code("1301")
    assert not config.is_reserved_asset_code("1101")
    assert not config.is_reserved_asset_code("1601")


def test_database_path_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "env.db"))
    assert default_database_path("/explicit.db") == "/explicit.db"
    assert default_database_path() == str(tmp_path / "env.db")


def test_database_path_default(monkeypatch, tmp_path):
    monkeypatch.delenv(DB_PATH_ENV, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_database_path() == str(tmp_path / ".projectledger" / "ledger.db")
    assert (tmp_path / ".projectledger").is_dir()


class TestLogging:
    """Tests for configure_logging."""

    def test_default_level_is_warning(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        logger = configure_logging()
        assert logger.name == "projectledger"
        assert logger.level == logging.WARNING

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        assert configure_logging().level == logging.DEBUG

    def test_repeated_calls_add_one_handler(self):
        logger = configure_logging("INFO")
        handlers = list(logger.handlers)
        configure_logging("ERROR")

        assert logger.handlers == handlers
        assert logger.level == logging.ERROR

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level 'LOUD'"):
            configure_logging("LOUD")

    def test_reset_removes_handler(self):
        logger = configure_logging("INFO")
        count = len(logger.handlers)

        reset_logging()

        assert len(logger.handlers) == count - 1
        assert logger.level == logging.NOTSET

    def test_module_loggers_propagate(self, caplog):
        configure_logging("INFO")
        with caplog.at_level(logging.INFO, logger="projectledger"):
            logging.getLogger("projectledger.domain.journal").info("posted")
        assert "posted" in caplog.text
