"""Config file context for structured logging.

A read pass sets the document it is working on; every record logged while
the pass runs carries that path, so per-setting warnings name the file they
came from without each call site passing it along.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

_config_file: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "config_file", default=None
)


@contextmanager
def config_file_context(path: Path | str) -> Generator[None, None, None]:
    """Attribute records logged inside the block to ``path``.

    Example:
        with config_file_context("/etc/pihole/pihole-FTL.toml"):
            logger.warning("Config setting %s is invalid", key)
    """
    token = _config_file.set(str(path))
    try:
        yield
    finally:
        _config_file.reset(token)


def get_config_file() -> str | None:
    """Return the document of the read pass in progress, if any."""
    return _config_file.get()


def setting_extra(key: str, legacy_key: str | None = None) -> dict[str, Any]:
    """Build the ``extra=`` mapping that names a setting in a log record."""
    extra: dict[str, Any] = {"setting": key}
    if legacy_key is not None:
        extra["legacy_key"] = legacy_key
    return extra


class ConfigFileFilter(logging.Filter):
    """Inject the current config file into log records.

    Sets ``config_file`` (unless the record already has one) and a
    ``source_tag`` such as ``[pihole-FTL.toml] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "config_file", None) is None:
            record.config_file = get_config_file()

        config_file = record.config_file
        record.source_tag = f"[{Path(config_file).name}] " if config_file else ""
        return True
