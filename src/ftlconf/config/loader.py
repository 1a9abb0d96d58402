"""Configuration loading with precedence handling.

Sources, highest precedence first:
1. Structured document (pihole-FTL.toml, working directory then /etc/pihole)
2. Legacy document (pihole-FTL.conf, working directory then /etc/pihole)
3. Default values

The structured document is authoritative. The legacy document seeds the
registry only when no structured document could be read, which is the
one-time upgrade path. When both exist, the legacy document only gets a say
on the privacy level, and only towards more privacy.

Environment variables:
- FTLCONF_TOML_PATH: Use this structured document only
- FTLCONF_LEGACY_PATH: Use this legacy document only
- FTLCONF_CONFIG_DIR: System-wide directory (default /etc/pihole)
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from ftlconf.config.debug import DebugFlagSet, flags_from_registry
from ftlconf.config.exceptions import ConfigLoadError
from ftlconf.config.legacy_reader import get_privacy_level_legacy, read_legacy
from ftlconf.config.locations import ConfigLocations, find_legacy
from ftlconf.config.registry import Registry, default_registry
from ftlconf.config.toml_codec import write_toml
from ftlconf.config.toml_reader import read_toml

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Outcome of a configuration load."""

    registry: Registry
    toml_path: Path | None = None
    legacy_path: Path | None = None
    migrated: bool = False

    @property
    def debug_flags(self) -> DebugFlagSet:
        return flags_from_registry(self.registry)

    @property
    def loaded(self) -> bool:
        """True if any document contributed values."""
        return self.toml_path is not None or self.legacy_path is not None


def load_config(
    locations: ConfigLocations | None = None,
    *,
    registry: Registry | None = None,
    migrate: bool = True,
    require: bool = False,
) -> LoadResult:
    """Load the configuration from the available documents.

    Args:
        locations: Search order for both formats. Defaults to
            ConfigLocations.from_env().
        registry: Registry to populate. Defaults to a fresh one.
        migrate: Consult the legacy document (upgrade path and privacy
            ratchet).
        require: Raise if no document could be read at all.

    Returns:
        LoadResult describing which documents were used.

    Raises:
        ConfigLoadError: If ``require`` is set and neither document could be
            read. Per-item problems never raise.
    """
    locations = locations or ConfigLocations.from_env()
    registry = registry if registry is not None else default_registry()
    result = LoadResult(registry=registry)

    result.toml_path = read_toml(registry, locations=locations)

    if migrate:
        legacy = find_legacy(locations)
        if legacy is not None and result.toml_path is None:
            logger.info("No TOML config available, importing legacy config %s", legacy)
            result.legacy_path = read_legacy(registry, legacy)
            result.migrated = result.legacy_path is not None
        elif legacy is not None:
            if get_privacy_level_legacy(
                registry, locations=ConfigLocations(legacy=(legacy,))
            ):
                result.legacy_path = legacy

    if require and not result.loaded:
        raise ConfigLoadError("No configuration document could be read")

    if not result.loaded:
        logger.debug("No config file available, using defaults")
    return result


def write_config(registry: Registry, path: Path) -> None:
    """Write the registry as a structured document.

    The document is written to a temporary file in the target directory
    and moved into place, so readers never see a partial file.

    Args:
        registry: Registry to serialize.
        path: Target file.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    # Same directory keeps the rename on one filesystem
    fd, temp_path_str = tempfile.mkstemp(
        suffix=path.suffix, dir=path.parent, text=True
    )
    temp_path = Path(temp_path_str)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as stream:
            write_toml(registry, stream)
        temp_path.replace(path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    logger.info("Wrote config file %s", path)


def migrate_legacy(
    locations: ConfigLocations | None = None,
    target: Path | None = None,
) -> LoadResult:
    """Convert the legacy document into a structured document.

    Reads the legacy document on top of the defaults and writes the result.

    Args:
        locations: Search order. Defaults to ConfigLocations.from_env().
        target: Output file. Defaults to ``locations.toml_target``.

    Returns:
        LoadResult with ``migrated`` set if a legacy document was converted.

    Raises:
        ConfigLoadError: If there is no legacy document to convert.
    """
    locations = locations or ConfigLocations.from_env()
    registry = default_registry()

    legacy_path = read_legacy(registry, locations=locations)
    if legacy_path is None:
        raise ConfigLoadError("No legacy config file found to migrate")

    write_config(registry, target or locations.toml_target)
    return LoadResult(registry=registry, legacy_path=legacy_path, migrated=True)
