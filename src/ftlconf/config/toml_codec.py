"""Structured-format codec: TOML values <-> typed config items.

Decoding never raises for bad input. An absent key or a value of the wrong
TOML type leaves the item untouched and is logged at debug level; a value
of the right TOML type that is not acceptable (unknown enum token, invalid
address, out of range) is logged as a warning naming the accepted options.
"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Mapping
from datetime import datetime, timezone
from io import StringIO
from ipaddress import AddressValueError, IPv4Address, IPv6Address
from typing import Any, TextIO

from ftlconf.config.items import ConfigItem
from ftlconf.config.registry import Registry
from ftlconf.config.types import (
    ENUM_TYPES,
    INT_RANGES,
    ConfType,
    PrivacyLevel,
    from_token,
    token,
)
from ftlconf.logging.context import setting_extra

logger = logging.getLogger(__name__)

# Backslash escapes for the control characters TOML names explicitly
_ESCAPES: dict[int, str] = {
    0x08: "\\b",
    0x09: "\\t",
    0x0A: "\\n",
    0x0C: "\\f",
    0x0D: "\\r",
    0x22: '\\"',
    0x5C: "\\\\",
}

_MISSING = object()


def _is_plain(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E and byte not in (0x22, 0x5C)


def escape_string(s: str | None) -> str:
    """Quote a string for the structured document.

    Printable ASCII without ``"`` or ``\\`` is emitted verbatim in quotes.
    Otherwise every byte of the UTF-8 encoding is looked at on its own:
    printable bytes pass through, named control characters get their
    backslash escape and anything else becomes ``\\0xHH``.

    Args:
        s: String to quote. None is written as an empty string.

    Returns:
        The quoted string including the surrounding double quotes.
    """
    if s is None:
        s = ""
    data = s.encode("utf-8")
    if all(_is_plain(b) for b in data):
        return f'"{s}"'

    out = ['"']
    for b in data:
        if _is_plain(b):
            out.append(chr(b))
        elif b in _ESCAPES:
            out.append(_ESCAPES[b])
        else:
            out.append(f"\\0x{b:02x}")
    out.append('"')
    return "".join(out)


def round_trips(s: str | None) -> bool:
    """Return True if the quoted form of ``s`` is valid TOML.

    Bytes written as ``\\0xHH`` are not a TOML escape, so a document
    holding them cannot be parsed again.
    """
    return all(_is_plain(b) or b in _ESCAPES for b in (s or "").encode("utf-8"))


def encode_value(conf_type: ConfType, value: Any) -> str:
    """Render a typed value as a TOML scalar."""
    if conf_type is ConfType.BOOL:
        return "true" if value else "false"
    if conf_type in INT_RANGES or conf_type is ConfType.ENUM_PRIVACY_LEVEL:
        return str(int(value))
    if conf_type is ConfType.STRING:
        return escape_string(value)
    if conf_type in ENUM_TYPES:
        return escape_string(token(value))
    if conf_type in (ConfType.IPV4_ADDRESS, ConfType.IPV6_ADDRESS):
        return escape_string(str(value))
    raise ValueError(f"Unhandled config type: {conf_type}")


def encode(item: ConfigItem) -> str:
    """Render an item's current value as a TOML scalar."""
    return encode_value(item.conf_type, item.value)


def _reject(item: ConfigItem, raw: Any) -> bool:
    logger.warning(
        "Config setting %s is invalid (%r), allowed options are: %s",
        item.key,
        raw,
        item.help,
        extra=setting_extra(item.key),
    )
    return False


def _absent(item: ConfigItem, expected: str) -> bool:
    logger.debug(
        "%s does not exist or is not of type %s",
        item.key,
        expected,
        extra=setting_extra(item.key),
    )
    return False


def _apply(item: ConfigItem, value: Any, raw: Any) -> bool:
    if not item.accepts(value):
        return _reject(item, raw)
    item.set(value)
    return True


def decode(table: Mapping[str, Any] | None, key: str, item: ConfigItem) -> bool:
    """Read one item from a TOML table.

    Args:
        table: Table holding the item's leaf key, or None if the table
            itself is missing.
        key: Leaf key inside the table.
        item: Item to update in place.

    Returns:
        True if the item's value was replaced.
    """
    raw = table.get(key, _MISSING) if table is not None else _MISSING
    conf_type = item.conf_type

    if conf_type is ConfType.BOOL:
        if raw is _MISSING or not isinstance(raw, bool):
            return _absent(item, "bool")
        item.set(raw)
        return True

    if conf_type in INT_RANGES:
        if raw is _MISSING or isinstance(raw, bool) or not isinstance(raw, int):
            return _absent(item, conf_type.value)
        low, high = INT_RANGES[conf_type]
        if not low <= raw <= high:
            # Negative values for unsigned kinds are treated as absent
            return _absent(item, conf_type.value)
        return _apply(item, raw, raw)

    if conf_type is ConfType.STRING:
        if raw is _MISSING or not isinstance(raw, str):
            return _absent(item, "string")
        item.set(raw)
        return True

    if conf_type is ConfType.ENUM_PRIVACY_LEVEL:
        if raw is _MISSING or isinstance(raw, bool) or not isinstance(raw, int):
            return _absent(item, "integer")
        if not PrivacyLevel.SHOW_ALL <= raw <= PrivacyLevel.NOSTATS:
            logger.debug(
                "%s is invalid (%d)", item.key, raw, extra=setting_extra(item.key)
            )
            return False
        return _apply(item, PrivacyLevel(raw), raw)

    if conf_type in ENUM_TYPES:
        if raw is _MISSING or not isinstance(raw, str):
            return _absent(item, "string")
        member = from_token(ENUM_TYPES[conf_type], raw)
        if member is None:
            return _reject(item, raw)
        item.set(member)
        return True

    if conf_type in (ConfType.IPV4_ADDRESS, ConfType.IPV6_ADDRESS):
        if raw is _MISSING or not isinstance(raw, str):
            return _absent(item, "string")
        address_cls = IPv4Address if conf_type is ConfType.IPV4_ADDRESS else IPv6Address
        try:
            address = address_cls(raw)
        except AddressValueError:
            return _reject(item, raw)
        item.set(address)
        return True

    raise ValueError(f"Unhandled config type: {conf_type}")


def _write_comment(stream: TextIO, text: str, indent: str) -> None:
    for line in textwrap.wrap(text, width=76):
        stream.write(f"{indent}# {line}\n")


def write_toml(
    registry: Registry,
    stream: TextIO,
    *,
    timestamp: datetime | None = None,
    comments: bool = True,
) -> None:
    """Serialize the registry as a structured document.

    Items are written in registry order. Each item's table is opened when it
    differs from the previous item's table; nested tables are indented two
    spaces per level.

    Args:
        registry: Registry to serialize.
        stream: Writable text stream.
        timestamp: Time written into the header. Defaults to now (UTC).
        comments: Write help texts and default-value markers.

    Raises:
        ValueError: If the registry order would reopen a table that was
            already closed (not representable in TOML).
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    stream.write("# Pi-hole FTL configuration file\n")
    stream.write(f"# Last updated on {timestamp.strftime('%Y-%m-%d %H:%M:%S %Z')}\n")
    stream.write("# Settings marked with CHANGED differ from their default\n")

    current: tuple[str, ...] | None = None
    closed: set[tuple[str, ...]] = set()

    for item in registry:
        table = item.path[:-1]
        if table != current:
            if table in closed:
                raise ValueError(f"Table [{'.'.join(table)}] would be reopened")
            if current is not None:
                closed.add(current)
            current = table
            if table:
                header_indent = "  " * (len(table) - 1)
                stream.write(f"\n{header_indent}[{'.'.join(table)}]\n")

        indent = "  " * len(table)
        if item.conf_type is ConfType.STRING and not round_trips(item.value):
            logger.warning(
                "Value of %s has bytes without a TOML escape, "
                "the written document will not parse",
                item.key,
                extra=setting_extra(item.key),
            )
        if comments:
            _write_comment(stream, item.help, indent)
        stream.write(f"{indent}{item.leaf} = {encode(item)}")
        if comments and not item.is_default:
            default = encode_value(item.conf_type, item.default)
            stream.write(f" ### CHANGED, default = {default}")
        stream.write("\n")
        if comments:
            stream.write("\n")


def dumps(registry: Registry, **kwargs: Any) -> str:
    """Return the structured document for a registry as a string."""
    buffer = StringIO()
    write_toml(registry, buffer, **kwargs)
    return buffer.getvalue()
