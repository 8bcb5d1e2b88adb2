"""Tests for CLI logging configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
from rich.logging import RichHandler

from mediastamp.config.models import LoggingSettings
from mediastamp.logging_setup import DEBUG_LOG_NAME, configure_logging, default_debug_log_path


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("mediastamp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_console_handler_uses_configured_level() -> None:
    log_path = configure_logging(LoggingSettings(level="info"))

    logger = logging.getLogger("mediastamp")
    assert log_path is None
    assert logger.level == logging.INFO
    assert [type(handler) for handler in logger.handlers] == [RichHandler]
    assert not logger.propagate


def test_debug_writes_rotating_log(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "debug.log"
    settings = LoggingSettings(debug_log_path=str(target), backup_count=2)

    log_path = configure_logging(settings, debug=True)
    logging.getLogger("mediastamp.timestamps").debug("probe message")

    logger = logging.getLogger("mediastamp")
    assert log_path == target
    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "probe message" in target.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(LoggingSettings())
    configure_logging(LoggingSettings())

    assert len(logging.getLogger("mediastamp").handlers) == 1


def test_default_debug_log_path() -> None:
    assert default_debug_log_path().name == DEBUG_LOG_NAME
