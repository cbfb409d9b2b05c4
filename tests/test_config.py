"""
tests/test_config.py - Startup validation and logging configuration.
"""

import logging

import pytest

from rackt.config import Config
from rackt.engine import RacktEngine
from rackt.utils.logger import setup_logger


def test_defaults_are_valid():
    Config.validate()


@pytest.mark.parametrize("name,value", [
    ("TRANSACTION_MAX_RETRIES", 0),
    ("LOSS_MITIGATION_FACTOR", 1.5),
    ("K_FACTOR", 0),
    ("DATABASE_URL", ""),
])
def test_invalid_settings_rejected(monkeypatch, name, value):
    monkeypatch.setattr(Config, name, value)
    with pytest.raises(ValueError):
        Config.validate()


async def test_connect_validates_config(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "TRANSACTION_MAX_RETRIES", 0)
    with pytest.raises(ValueError):
        await RacktEngine.connect(f"sqlite:///{tmp_path / 'never.db'}")
    assert not (tmp_path / "never.db").exists()


def test_file_logging_creates_nested_directory(monkeypatch, tmp_path):
    log_dir = tmp_path / "var" / "log" / "rackt"
    monkeypatch.setattr(Config, "LOG_TO_FILE", True)
    monkeypatch.setattr(Config, "LOG_DIR", str(log_dir))

    logger = setup_logger("rackt.tests.file_logging")
    try:
        logger.info("hello")
        assert log_dir.is_dir()
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
