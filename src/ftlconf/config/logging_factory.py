"""Logging configuration factory.

Builds the tool's LoggingConfig from FTLCONF_* environment variables and
CLI overrides, CLI taking precedence.
"""

from __future__ import annotations

from pathlib import Path

from ftlconf.config.env import (
    ENV_LOG_FILE,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_LOG_STDERR,
    EnvReader,
)
from ftlconf.config.models import LoggingConfig


def logging_config_from_env(reader: EnvReader | None = None) -> LoggingConfig:
    """Build LoggingConfig from FTLCONF_LOG_* variables.

    Raises:
        ValueError: If FTLCONF_LOG_LEVEL or FTLCONF_LOG_FORMAT is invalid.
    """
    reader = reader or EnvReader()
    defaults = LoggingConfig()
    return LoggingConfig(
        level=reader.get_str(ENV_LOG_LEVEL, defaults.level) or defaults.level,
        file=reader.get_path(ENV_LOG_FILE),
        format=reader.get_str(ENV_LOG_FORMAT, defaults.format) or defaults.format,
        include_stderr=bool(
            reader.get_bool(ENV_LOG_STDERR, defaults.include_stderr)
        ),
    )


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of ``base`` with every non-None override applied.

    Example:
        logging_config = build_logging_config(
            logging_config_from_env(),
            level=log_level,  # From CLI option
            format="json" if json_flag else None,
        )
    """
    return LoggingConfig(
        level=level if level is not None else base.level,
        file=file if file is not None else base.file,
        format=format if format is not None else base.format,
        include_stderr=(
            include_stderr if include_stderr is not None else base.include_stderr
        ),
        max_bytes=base.max_bytes,
        backup_count=base.backup_count,
    )


def configure_logging_from_cli(
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
    reader: EnvReader | None = None,
) -> LoggingConfig:
    """Configure logging from the environment plus CLI overrides.

    Returns:
        The LoggingConfig that was applied.
    """
    from ftlconf.logging import configure_logging

    final_config = build_logging_config(
        logging_config_from_env(reader),
        level=level,
        file=file,
        format=format,
        include_stderr=include_stderr,
    )
    configure_logging(final_config)
    return final_config
