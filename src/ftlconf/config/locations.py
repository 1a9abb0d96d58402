"""Where configuration files are looked for.

For each format a file in the working directory overrides the system-wide
file. The first existing candidate is used exclusively; files are never
merged. Writing always targets the system-wide structured file unless an
override is configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ftlconf.config.env import (
    ENV_CONFIG_DIR,
    ENV_LEGACY_PATH,
    ENV_TOML_PATH,
    EnvReader,
)

logger = logging.getLogger(__name__)

TOML_NAME = "pihole-FTL.toml"
LEGACY_NAME = "pihole-FTL.conf"
GLOBAL_CONFIG_DIR = Path("/etc/pihole")

LOCAL_TOML = Path(TOML_NAME)
GLOBAL_TOML = GLOBAL_CONFIG_DIR / TOML_NAME
LOCAL_LEGACY = Path(LEGACY_NAME)
GLOBAL_LEGACY = GLOBAL_CONFIG_DIR / LEGACY_NAME


@dataclass(frozen=True)
class ConfigLocations:
    """Search order for both formats."""

    toml: tuple[Path, ...] = (LOCAL_TOML, GLOBAL_TOML)
    """Structured document candidates, highest precedence first."""

    legacy: tuple[Path, ...] = (LOCAL_LEGACY, GLOBAL_LEGACY)
    """Legacy document candidates, highest precedence first."""

    toml_target: Path = GLOBAL_TOML
    """Where the structured document is written."""

    @classmethod
    def from_env(cls, reader: EnvReader | None = None) -> ConfigLocations:
        """Build the search order, honoring FTLCONF_* overrides.

        FTLCONF_TOML_PATH / FTLCONF_LEGACY_PATH pin a single file for one
        format. FTLCONF_CONFIG_DIR replaces the system-wide directory.
        """
        reader = reader or EnvReader()
        config_dir = reader.get_path(ENV_CONFIG_DIR) or GLOBAL_CONFIG_DIR

        toml_path = reader.get_path(ENV_TOML_PATH)
        legacy_path = reader.get_path(ENV_LEGACY_PATH)

        global_toml = config_dir / TOML_NAME
        return cls(
            toml=(toml_path,) if toml_path else (LOCAL_TOML, global_toml),
            legacy=(
                (legacy_path,)
                if legacy_path
                else (LOCAL_LEGACY, config_dir / LEGACY_NAME)
            ),
            toml_target=toml_path or global_toml,
        )


def _first_existing(candidates: tuple[Path, ...], kind: str) -> Path | None:
    for path in candidates:
        if path.is_file():
            logger.debug("Using %s config file %s", kind, path)
            return path
    logger.debug(
        "No %s config file available (tried %s)",
        kind,
        ", ".join(str(p) for p in candidates),
    )
    return None


def find_toml(locations: ConfigLocations | None = None) -> Path | None:
    """Return the structured document to read, or None if there is none."""
    locations = locations or ConfigLocations.from_env()
    return _first_existing(locations.toml, "TOML")


def find_legacy(locations: ConfigLocations | None = None) -> Path | None:
    """Return the legacy document to read, or None if there is none."""
    locations = locations or ConfigLocations.from_env()
    return _first_existing(locations.legacy, "legacy")
