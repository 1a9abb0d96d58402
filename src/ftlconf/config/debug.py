"""Debug flag bitmask derived from the ``debug`` config items.

Each debug category is one bit. A read pass resets every bit, applies the
blanket ``all`` directive and then lets every individually named directive
override it, so ``DEBUG_ALL=true`` plus ``DEBUG_DATABASE=false`` enables
everything except database debugging.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import IntFlag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ftlconf.config.registry import Registry

logger = logging.getLogger(__name__)

DEBUG_TABLE = "debug"
ALL_KEY = "all"


class DebugFlag(IntFlag):
    """Debug categories, one bit each."""

    DATABASE = 1 << 0
    NETWORKING = 1 << 1
    LOCKS = 1 << 2
    QUERIES = 1 << 3
    FLAGS = 1 << 4
    SHMEM = 1 << 5
    GC = 1 << 6
    ARP = 1 << 7
    REGEX = 1 << 8
    API = 1 << 9
    OVERTIME = 1 << 10
    STATUS = 1 << 11
    CAPS = 1 << 12
    DNSSEC = 1 << 13
    VECTORS = 1 << 14
    RESOLVER = 1 << 15
    EDNS0 = 1 << 16
    CLIENTS = 1 << 17
    ALIASCLIENTS = 1 << 18
    EVENTS = 1 << 19
    HELPER = 1 << 20
    CONFIG = 1 << 21
    EXTRA = 1 << 22


ALL_FLAGS = DebugFlag((int(DebugFlag.EXTRA) << 1) - 1)


def flag_name(flag: DebugFlag) -> str:
    """Return the upper-case category name of a single-bit flag."""
    name = flag.name
    if name is None:
        raise ValueError(f"Not a single debug flag: {int(flag)}")
    return name


def config_key(flag: DebugFlag) -> str:
    """Key of the flag inside the structured ``[debug]`` table."""
    return flag_name(flag).lower()


def legacy_key(flag: DebugFlag) -> str:
    """Key of the flag in the flat legacy document."""
    return f"DEBUG_{flag_name(flag)}"


def iter_flags(stop: DebugFlag | None = None) -> Iterator[DebugFlag]:
    """Yield single-bit flags by stepping through powers of two.

    Args:
        stop: First flag not to yield. Defaults to yielding every flag.
    """
    bit = int(DebugFlag.DATABASE)
    limit = int(stop) if stop is not None else int(DebugFlag.EXTRA) << 1
    while bit < limit:
        yield DebugFlag(bit)
        bit <<= 1


@dataclass(frozen=True)
class DebugFlagSet:
    """Bitmask over the debug categories."""

    mask: DebugFlag = DebugFlag(0)

    @property
    def any(self) -> bool:
        """True if at least one category is enabled."""
        return bool(self.mask)

    def is_set(self, flag: DebugFlag) -> bool:
        return bool(self.mask & flag)

    def names(self) -> list[str]:
        """Names of the enabled categories in bit order."""
        return [flag_name(f) for f in iter_flags() if self.mask & f]


def resolve_debug_flags(
    lookup: Callable[[str], bool | None],
    *,
    stop: DebugFlag | None = None,
) -> tuple[DebugFlagSet, bool | None]:
    """Derive the flag set from one source.

    Args:
        lookup: Returns the directive for a key (``"all"`` or a category
            key such as ``"database"``), or None if the source does not
            mention it.
        stop: First flag whose directive is not consulted.

    Returns:
        Tuple of (flag set, value of the ``all`` directive or None).
    """
    mask = DebugFlag(0)

    all_directive = lookup(ALL_KEY)
    if all_directive:
        mask = ALL_FLAGS

    for flag in iter_flags(stop):
        directive = lookup(config_key(flag))
        if directive is None:
            continue
        if directive:
            mask |= flag
        else:
            mask &= ~flag

    return DebugFlagSet(mask), all_directive


def apply_to_registry(
    registry: Registry, flags: DebugFlagSet, all_directive: bool | None = None
) -> None:
    """Store a flag set in the registry's ``debug`` items."""
    for flag in iter_flags():
        registry.get_by_path((DEBUG_TABLE, config_key(flag))).set(
            flags.is_set(flag)
        )
    registry.get_by_path((DEBUG_TABLE, ALL_KEY)).set(bool(all_directive))


def flags_from_registry(registry: Registry) -> DebugFlagSet:
    """Rebuild the flag set from the registry's ``debug`` items."""
    mask = DebugFlag(0)
    for flag in iter_flags():
        if registry.get_by_path((DEBUG_TABLE, config_key(flag))).value:
            mask |= flag
    return DebugFlagSet(mask)


def report_debug_flags(flags: DebugFlagSet) -> None:
    """Log a table of all debug settings at debug level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("***********************")
    logger.debug("*    DEBUG SETTINGS   *")
    for flag in iter_flags():
        name = flag_name(flag)
        logger.debug(
            "* %-20s %s  *", name + ":", "YES" if flags.is_set(flag) else "NO "
        )
    logger.debug("***********************")
