"""Logging configuration for the CLI."""

from __future__ import annotations

import logging
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from mediastamp.config.models import LoggingSettings

DEBUG_LOG_NAME = "timestamp_update_debug.log"
_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def default_debug_log_path() -> Path:
    """Return the debug log location used when none is configured."""
    return Path(tempfile.gettempdir()) / DEBUG_LOG_NAME


def configure_logging(
    settings: LoggingSettings,
    *,
    debug: bool = False,
    console: Optional[Console] = None,
) -> Optional[Path]:
    """Install handlers on the `mediastamp` logger.

    Console output goes through Rich on stderr at the configured level. With
    `debug`, everything down to DEBUG is also written to a rotating log file.

    Args:
        settings: Logging section of the effective configuration.
        debug: Whether verbose file logging is enabled.
        console: Console used for rendering; a stderr console when omitted.

    Returns:
        Optional[Path]: Debug log path when file logging was enabled.
    """
    logger = logging.getLogger("mediastamp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    stream_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    log_path: Optional[Path] = None
    if debug:
        log_path = Path(settings.debug_log_path).expanduser() if settings.debug_log_path else None
        log_path = log_path or default_debug_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
        logger.debug("Debug log started at %s", log_path)
    else:
        logger.setLevel(level)

    return log_path


__all__ = ["DEBUG_LOG_NAME", "configure_logging", "default_debug_log_path"]
