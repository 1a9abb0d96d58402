"""Read pass over the structured (TOML) configuration document."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ftlconf.config.debug import (
    DEBUG_TABLE,
    apply_to_registry,
    report_debug_flags,
    resolve_debug_flags,
)
from ftlconf.config.exceptions import TomlParseError
from ftlconf.config.locations import ConfigLocations, find_toml
from ftlconf.config.registry import Registry
from ftlconf.config.toml_codec import decode
from ftlconf.config.toml_parser import load_toml_file
from ftlconf.logging.context import config_file_context

logger = logging.getLogger(__name__)


def _load_document(
    path: Path | None, locations: ConfigLocations | None
) -> tuple[Path, dict[str, Any]] | None:
    """Locate and parse the structured document.

    Returns:
        Tuple of (path, parsed document), or None if no document is
        available or it cannot be parsed.
    """
    if path is None:
        path = find_toml(locations)
        if path is None:
            return None

    try:
        return path, load_toml_file(path)
    except FileNotFoundError:
        logger.debug("No config file available (%s), using defaults", path)
    except TomlParseError as e:
        logger.error("Cannot parse config file: %s", e)
    except OSError as e:
        logger.error("Cannot read config file %s: %s", path, e)
    return None


def _table(document: Mapping[str, Any], name: str) -> Mapping[str, Any] | None:
    table = document.get(name)
    if not isinstance(table, Mapping):
        logger.debug("%s does not exist", name)
        return None
    return table


def read_toml(
    registry: Registry,
    path: Path | None = None,
    locations: ConfigLocations | None = None,
) -> Path | None:
    """Populate the registry from the structured document.

    The registry is reset to defaults first. If the document is missing or
    cannot be parsed, the registry keeps its defaults; a broken document is
    never partially applied.

    Args:
        registry: Registry to populate in place.
        path: Document to read. Defaults to the first file found in
            ``locations``.
        locations: Search order used when ``path`` is None.

    Returns:
        The path that was read, or None if nothing was applied.
    """
    registry.reset()

    loaded = _load_document(path, locations)
    if loaded is None:
        return None
    path, document = loaded

    with config_file_context(path):
        _apply_document(registry, document)

    logger.info("Read config file %s", path)
    return path


def _apply_document(registry: Registry, document: Mapping[str, Any]) -> None:
    # debug.config is read first so it already applies to the full pass
    debug_table = _table(document, DEBUG_TABLE)
    if debug_table is not None:
        decode(debug_table, "config", registry.get_by_path((DEBUG_TABLE, "config")))

    logger.debug("Reading TOML config file: full config")

    for item in registry:
        table = registry.resolve_table(document, item)
        if table is None:
            continue
        decode(table, item.leaf, item)

    def lookup(name: str) -> bool | None:
        value = debug_table.get(name) if debug_table is not None else None
        return value if isinstance(value, bool) else None

    flags, all_directive = resolve_debug_flags(lookup)
    apply_to_registry(registry, flags, all_directive)
    report_debug_flags(flags)


def get_privacy_level(
    registry: Registry,
    path: Path | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Read only ``misc.privacylevel`` from the structured document.

    Returns:
        True if the document was parsed and holds the setting.
    """
    logger.debug("Reading TOML config file: privacy level")
    loaded = _load_document(path, locations)
    if loaded is None:
        return False

    misc = _table(loaded[1], "misc")
    item = registry.get_by_path("misc.privacylevel")
    if misc is None or "privacylevel" not in misc:
        logger.debug("%s does not exist", item.key)
        return False

    if not decode(misc, "privacylevel", item):
        logger.warning("Invalid setting for %s", item.key)
    return True


def get_blocking_mode(
    registry: Registry,
    path: Path | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Read only ``dns.blockingmode`` from the structured document.

    Returns:
        True if the document was parsed and holds the setting.
    """
    logger.debug("Reading TOML config file: DNS blocking mode")
    loaded = _load_document(path, locations)
    if loaded is None:
        return False

    dns = _table(loaded[1], "dns")
    item = registry.get_by_path("dns.blockingmode")
    if dns is None or not isinstance(dns.get("blockingmode"), str):
        logger.debug("%s does not exist", item.key)
        return False

    decode(dns, "blockingmode", item)
    return True


def get_log_file_path(
    registry: Registry,
    path: Path | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Read only ``files.log`` from the structured document.

    Returns:
        True if the document was parsed and holds the setting.
    """
    logger.debug("Reading TOML config file: log file path")
    loaded = _load_document(path, locations)
    if loaded is None:
        return False

    files = _table(loaded[1], "files")
    item = registry.get_by_path("files.log")
    if files is None or not isinstance(files.get("log"), str):
        logger.debug("%s does not exist", item.key)
        return False

    decode(files, "log", item)
    return True
