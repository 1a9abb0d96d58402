"""Value kinds for configuration items and their enum string tables.

Every config item carries a ``ConfType`` tag. The tag decides which Python
type its value must have:

- BOOL: ``bool``
- INT, UINT, LONG, ULONG: ``int`` within the matching C range
- STRING: ``str``
- IPV4_ADDRESS / IPV6_ADDRESS: ``ipaddress.IPv4Address`` / ``IPv6Address``
- ENUM_*: a member of the matching enum class below

Enum values are persisted as their canonical string token, except
``PrivacyLevel`` which is persisted as an integer.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)


class ConfType(Enum):
    """Kind tag of a configuration value."""

    BOOL = "bool"
    INT = "int"
    UINT = "unsigned int"
    LONG = "long"
    ULONG = "unsigned long"
    STRING = "string"
    IPV4_ADDRESS = "IPv4 address"
    IPV6_ADDRESS = "IPv6 address"
    ENUM_PTR_TYPE = "enum (PTR type)"
    ENUM_BUSY_TYPE = "enum (busy reply)"
    ENUM_BLOCKING_MODE = "enum (blocking mode)"
    ENUM_REFRESH_HOSTNAMES = "enum (refresh hostnames)"
    ENUM_PRIVACY_LEVEL = "enum (privacy level)"


class PtrType(Enum):
    """Answer given to PTR queries for the local interface addresses."""

    NONE = "NONE"
    HOSTNAME = "HOSTNAME"
    HOSTNAMEFQDN = "HOSTNAMEFQDN"
    PIHOLE = "PI.HOLE"


class BusyReply(Enum):
    """Reply sent while the blocking database is unavailable."""

    BLOCK = "BLOCK"
    ALLOW = "ALLOW"
    REFUSE = "REFUSE"
    DROP = "DROP"


class BlockingMode(Enum):
    """How a blocked query is answered."""

    NULL = "NULL"
    IP_NODATA_AAAA = "IP_NODATA_AAAA"
    IP = "IP"
    NX = "NX"
    NODATA = "NODATA"


class RefreshHostnames(Enum):
    """Which client host names are periodically re-resolved."""

    IPV4_ONLY = "IPV4_ONLY"
    ALL = "ALL"
    UNKNOWN = "UNKNOWN"
    NONE = "NONE"


class PrivacyLevel(IntEnum):
    """How much query and client detail is retained (higher is more private)."""

    SHOW_ALL = 0
    HIDE_DOMAINS = 1
    HIDE_DOMAINS_CLIENTS = 2
    MAXIMUM = 3
    NOSTATS = 4


# Enum class backing each enum kind
ENUM_TYPES: dict[ConfType, type[Enum]] = {
    ConfType.ENUM_PTR_TYPE: PtrType,
    ConfType.ENUM_BUSY_TYPE: BusyReply,
    ConfType.ENUM_BLOCKING_MODE: BlockingMode,
    ConfType.ENUM_REFRESH_HOSTNAMES: RefreshHostnames,
    ConfType.ENUM_PRIVACY_LEVEL: PrivacyLevel,
}

# Inclusive ranges of the integer kinds (C int / long widths)
INT_RANGES: dict[ConfType, tuple[int, int]] = {
    ConfType.INT: (-(2**31), 2**31 - 1),
    ConfType.UINT: (0, 2**32 - 1),
    ConfType.LONG: (-(2**63), 2**63 - 1),
    ConfType.ULONG: (0, 2**64 - 1),
}

INT_MAX = 2**31 - 1


def from_token(enum_cls: type[E], text: str) -> E | None:
    """Map a canonical token to its enum member.

    The match is exact and case-sensitive.

    Args:
        enum_cls: One of the string enums in this module.
        text: Token read from a document.

    Returns:
        The enum member, or None if the token is not known.
    """
    try:
        return enum_cls(text)
    except ValueError:
        return None


def token(member: Enum) -> str:
    """Return the canonical token of a string enum member."""
    return str(member.value)


def options(enum_cls: type[Enum]) -> list[str]:
    """Return all tokens of a string enum in declaration order."""
    return [token(m) for m in enum_cls]


def is_integer_kind(conf_type: ConfType) -> bool:
    return conf_type in INT_RANGES


def check_value(conf_type: ConfType, value: Any) -> bool:
    """Check that a value has the Python type required by a kind.

    Args:
        conf_type: Kind tag of the item.
        value: Candidate value.

    Returns:
        True if the value may be stored in an item of this kind.

    Raises:
        ValueError: If the kind is not handled (a new kind was added
            without teaching this function about it).
    """
    if conf_type is ConfType.BOOL:
        return isinstance(value, bool)
    if conf_type in INT_RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        low, high = INT_RANGES[conf_type]
        return low <= value <= high
    if conf_type is ConfType.STRING:
        return isinstance(value, str)
    if conf_type is ConfType.IPV4_ADDRESS:
        return isinstance(value, IPv4Address)
    if conf_type is ConfType.IPV6_ADDRESS:
        return isinstance(value, IPv6Address)
    if conf_type in ENUM_TYPES:
        return isinstance(value, ENUM_TYPES[conf_type])
    raise ValueError(f"Unhandled config type: {conf_type}")
