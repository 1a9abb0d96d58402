"""Environment variable reader with dependency injection support.

The package's own settings (where to look for configuration files, how to
log) can be steered through ``FTLCONF_*`` environment variables. Reading
goes through EnvReader so tests can inject a plain dict instead of
touching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

# Recognized variables
ENV_TOML_PATH = "FTLCONF_TOML_PATH"
ENV_LEGACY_PATH = "FTLCONF_LEGACY_PATH"
ENV_CONFIG_DIR = "FTLCONF_CONFIG_DIR"
ENV_LOG_LEVEL = "FTLCONF_LOG_LEVEL"
ENV_LOG_FILE = "FTLCONF_LOG_FILE"
ENV_LOG_FORMAT = "FTLCONF_LOG_FORMAT"
ENV_LOG_STDERR = "FTLCONF_LOG_STDERR"

_TRUE_VALUES = ("true", "1", "yes", "on")


class EnvReader:
    """Typed access to environment variables.

    Example:
        reader = EnvReader(env={"FTLCONF_CONFIG_DIR": "/tmp/pihole"})
        reader.get_path("FTLCONF_CONFIG_DIR", must_exist=False)
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the reader.

        Args:
            env: Mapping to read instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the variable's value, or default if unset."""
        value = self._env.get(var)
        return default if value is None else value

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Return True for "true", "1", "yes" or "on" (any case).

        Any other non-empty value is False; an unset variable gives default.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.strip().lower() in _TRUE_VALUES

    def get_path(
        self, var: str, must_exist: bool = False, default: Path | None = None
    ) -> Path | None:
        """Return the variable as an expanded Path.

        Args:
            var: Environment variable name.
            must_exist: Fall back to default (with a warning) when the path
                does not exist.
            default: Value returned when unset or rejected.
        """
        value = self._env.get(var)
        if not value:
            return default

        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return default
        return path
