"""Formatters for ftlconf log output."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes rendered as top-level JSON fields, with their field name
SETTING_FIELDS: tuple[tuple[str, str], ...] = (
    ("config_file", "file"),
    ("setting", "setting"),
    ("legacy_key", "legacy_key"),
)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Fields: ``timestamp`` (ISO-8601 UTC), ``level``, ``logger``, ``message``
    and, when known, the ``file`` being read, the dotted ``setting`` key and
    the ``legacy_key`` it was read from. Other ``extra=`` values are dropped.
    """

    def format(self, record: logging.LogRecord) -> str:
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr, field_name in SETTING_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                log_entry[field_name] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class SettingFormatter(logging.Formatter):
    """Text formatter that appends the setting a record is about.

    ``Invalid value`` becomes ``Invalid value (dns.blockingmode)``, or
    ``Invalid value (dns.blockingmode via BLOCKINGMODE)`` for the legacy
    document.
    """

    def formatMessage(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "source_tag"):
            record.source_tag = ""
        text = super().formatMessage(record)
        setting = getattr(record, "setting", None)
        if setting is None:
            return text
        legacy_key = getattr(record, "legacy_key", None)
        if legacy_key is not None:
            return f"{text} ({setting} via {legacy_key})"
        return f"{text} ({setting})"
