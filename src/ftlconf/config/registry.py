"""Schema registry: ordered storage of config items with path lookup.

No parsing or validation policy lives here. The registry only stores items,
addresses them by stable index or by path, and walks nested tables of a
parsed structured document on behalf of the codecs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any

from ftlconf.config.items import ConfigItem

logger = logging.getLogger(__name__)


def _normalize_path(path: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(path.split("."))
    return tuple(path)


class Registry:
    """Ordered collection of ConfigItem addressed by index and by path.

    Iteration order is the declaration order and is stable across runs,
    which keeps serialized documents deterministic.

    Example:
        registry = default_registry()
        registry.get_by_path("dns.blockingmode").value
        for item in registry:
            ...
    """

    def __init__(self, items: Iterable[ConfigItem]) -> None:
        """Build the registry.

        Args:
            items: Items in their serialization order.

        Raises:
            ValueError: If two items share a path, or an item's path is a
                prefix of another item's path (a leaf cannot also be a table).
        """
        self._items: list[ConfigItem] = list(items)
        self._by_path: dict[tuple[str, ...], ConfigItem] = {}
        tables: set[tuple[str, ...]] = set()

        for item in self._items:
            if item.path in self._by_path:
                raise ValueError(f"Duplicate config path: {item.key}")
            self._by_path[item.path] = item
            for depth in range(1, len(item.path)):
                tables.add(item.path[:depth])

        clashes = tables.intersection(self._by_path)
        if clashes:
            names = ", ".join(".".join(p) for p in sorted(clashes))
            raise ValueError(f"Config paths used as both table and value: {names}")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ConfigItem]:
        return iter(self._items)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, tuple, list)):
            return False
        return _normalize_path(path) in self._by_path

    def get(self, index: int) -> ConfigItem:
        """Return the item at a stable index.

        Raises:
            IndexError: If the index is out of range.
        """
        return self._items[index]

    def get_by_path(self, path: str | Iterable[str]) -> ConfigItem:
        """Return the item at a path.

        Args:
            path: Dotted string ("dns.blockingmode") or sequence of segments.

        Raises:
            KeyError: If no item has this path.
        """
        key = _normalize_path(path)
        try:
            return self._by_path[key]
        except KeyError:
            raise KeyError(".".join(key)) from None

    def for_each(self) -> Iterator[ConfigItem]:
        """Iterate over all items in index order."""
        return iter(self._items)

    def find_legacy(self, legacy_key: str) -> ConfigItem | None:
        """Return the item aliased by a legacy key, if any."""
        for item in self._items:
            if item.legacy_key == legacy_key:
                return item
        return None

    def reset(self) -> None:
        """Set every item back to its default value."""
        for item in self._items:
            item.reset()

    def changed(self) -> list[ConfigItem]:
        """Return items whose value differs from the default."""
        return [item for item in self._items if not item.is_default]

    def resolve_table(
        self, document: Mapping[str, Any], item: ConfigItem
    ) -> Mapping[str, Any] | None:
        """Walk the nested tables leading to an item's leaf key.

        Performs ``len(item.path) - 1`` table lookups. A missing table at
        any level aborts resolution for this item only.

        Args:
            document: Parsed structured document (top-level table).
            item: Item whose parent table is wanted.

        Returns:
            The table holding the item's leaf key, or None if an
            intermediate table does not exist.
        """
        table: Any = document
        for depth, segment in enumerate(item.path[:-1]):
            table = table.get(segment)
            if not isinstance(table, Mapping):
                logger.debug(
                    "%s does not exist (missing table %s)",
                    item.key,
                    ".".join(item.path[: depth + 1]),
                )
                return None
        return table

    def as_dict(self) -> dict[str, Any]:
        """Return current values as a nested plain dict.

        Enums become their tokens (privacy level stays an int) and addresses
        become strings, so the result can be dumped as JSON.
        """
        result: dict[str, Any] = {}
        for item in self._items:
            target = result
            for segment in item.path[:-1]:
                target = target.setdefault(segment, {})
            target[item.leaf] = plain_value(item.value)
        return result


def plain_value(value: Any) -> Any:
    """Convert a typed value into a JSON-compatible one."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (IPv4Address, IPv6Address)):
        return str(value)
    return value


def default_registry() -> Registry:
    """Build a fresh registry holding every known item at its default."""
    from ftlconf.config.schema import build_items

    return Registry(build_items())
