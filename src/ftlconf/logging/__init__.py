"""Logging setup for ftlconf.

Provides configurable logging with JSON format support and file rotation.
Records logged during a read pass carry the document being read and, for
per-setting problems, the setting key.
"""

from ftlconf.logging.config import configure_logging
from ftlconf.logging.context import (
    ConfigFileFilter,
    config_file_context,
    setting_extra,
)
from ftlconf.logging.handlers import JSONFormatter, SettingFormatter

__all__ = [
    "ConfigFileFilter",
    "JSONFormatter",
    "SettingFormatter",
    "config_file_context",
    "configure_logging",
    "setting_extra",
]
