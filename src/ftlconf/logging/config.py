"""Logging configuration for ftlconf.

Provides configure_logging() to set up logging based on LoggingConfig.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from ftlconf.logging.context import ConfigFileFilter
from ftlconf.logging.handlers import JSONFormatter, SettingFormatter

if TYPE_CHECKING:
    from ftlconf.config.models import LoggingConfig

# CRITICAL is not exposed via CLI configuration.
_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# source_tag names the document being read, e.g. "[pihole-FTL.conf] "
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(source_tag)s%(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _build_formatter(format_name: str) -> logging.Formatter:
    if format_name.casefold() == "json":
        return JSONFormatter()
    return SettingFormatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger based on LoggingConfig.

    Replaces any existing root handlers. Every handler gets a
    ConfigFileFilter so records name the document being read. When the log
    file cannot be opened a warning is written to stderr and logging falls
    back to stderr.

    Args:
        config: Logging configuration.
    """
    level = _LEVEL_MAP.get(config.level.casefold(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = _build_formatter(config.format)
    file_filter = ConfigFileFilter()

    file_handler_added = False
    if config.file:
        try:
            file_path = Path(config.file).expanduser()
            file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(file_filter)
            root_logger.addHandler(file_handler)
            file_handler_added = True
        except OSError as e:
            sys.stderr.write(f"Warning: Could not open log file {config.file}: {e}\n")

    if config.include_stderr or not file_handler_added:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(level)
        stderr_handler.setFormatter(formatter)
        stderr_handler.addFilter(file_filter)
        root_logger.addHandler(stderr_handler)
