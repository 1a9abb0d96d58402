"""Reader for the flat legacy ``KEY=value`` document.

The legacy document is a migration source only. The read pass walks the
registry and, for every item with a legacy alias, looks the alias up in the
document and coerces the text. Most keys follow the generic rules of
LegacyCodec.decode(); keys with their own historical semantics (float
minutes, clamped day counts, ``count/interval`` pairs, address overrides,
deprecated aliases) are handled by dedicated functions registered in
``_SPECIAL_KEYS``.

Coercion failures never abort the pass: the item keeps its current value.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from ipaddress import AddressValueError, IPv4Address, IPv6Address
from pathlib import Path

from ftlconf.config.debug import (
    DebugFlag,
    DebugFlagSet,
    apply_to_registry,
    legacy_key,
    report_debug_flags,
    resolve_debug_flags,
)
from ftlconf.config.items import ConfigItem
from ftlconf.config.legacy_scanner import LegacyScanner
from ftlconf.config.locations import ConfigLocations, find_legacy
from ftlconf.config.precedence import apply_privacy_ratchet
from ftlconf.config.registry import Registry
from ftlconf.config.schema import MAX_DB_DAYS, MAX_LOG_AGE_HOURS
from ftlconf.config.types import (
    ENUM_TYPES,
    BlockingMode,
    BusyReply,
    ConfType,
    PrivacyLevel,
    PtrType,
    RefreshHostnames,
)
from ftlconf.logging.context import config_file_context, setting_extra

logger = logging.getLogger(__name__)

# Longest path accepted from the legacy document
MAX_PATH_LENGTH = 127

_INT_PATTERN = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_UINT_PATTERN = re.compile(r"\s*\+?([0-9]+)")
_FLOAT_PATTERN = re.compile(
    r"\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_RATE_LIMIT_PATTERN = re.compile(r"\s*\+?([0-9]+)/\s*\+?([0-9]+)")

# Legacy spellings of enum values (matched case-insensitively)
_BLOCKING_MODES: dict[str, BlockingMode] = {
    "nxdomain": BlockingMode.NX,
    "null": BlockingMode.NULL,
    "ip-nodata-aaaa": BlockingMode.IP_NODATA_AAAA,
    "ip": BlockingMode.IP,
    "nodata": BlockingMode.NODATA,
}
_PTR_TYPES: dict[str, PtrType] = {
    "none": PtrType.NONE,
    "false": PtrType.NONE,
    "hostname": PtrType.HOSTNAME,
    "hostnamefqdn": PtrType.HOSTNAMEFQDN,
    "pi.hole": PtrType.PIHOLE,
    "true": PtrType.PIHOLE,
}
_BUSY_REPLIES: dict[str, BusyReply] = {
    "drop": BusyReply.DROP,
    "refuse": BusyReply.REFUSE,
    "block": BusyReply.BLOCK,
    "allow": BusyReply.ALLOW,
}
_REFRESH_HOSTNAMES: dict[str, RefreshHostnames] = {
    "all": RefreshHostnames.ALL,
    "none": RefreshHostnames.NONE,
    "unknown": RefreshHostnames.UNKNOWN,
}


def parse_bool(text: str | None) -> bool | None:
    """Coerce a legacy boolean.

    ``yes``/``true`` and ``no``/``false`` are accepted in any case. Anything
    else (including None) yields None, meaning "keep the current value".
    """
    if text is None:
        return None
    lowered = text.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    return None


def parse_int(text: str | None) -> int | None:
    """Parse a leading integer the way C's ``%i`` conversion does.

    Decimal, ``0x`` hexadecimal and leading-zero octal are recognized after
    optional whitespace and sign. Trailing text is ignored.
    """
    if text is None:
        return None
    match = _INT_PATTERN.match(text)
    if not match:
        return None
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits, 16)
    elif digits.startswith("0"):
        # Leading zero means octal
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


def parse_uint(text: str | None) -> int | None:
    """Parse a leading non-negative decimal integer."""
    if text is None:
        return None
    match = _UINT_PATTERN.match(text)
    return int(match.group(1)) if match else None


def parse_float(text: str | None) -> float | None:
    """Parse a leading decimal floating point number."""
    if text is None:
        return None
    match = _FLOAT_PATTERN.match(text)
    return float(match.group(0)) if match else None


def parse_path(text: str | None) -> str | None:
    """Return the first whitespace-delimited token, at most 127 characters."""
    if text is None:
        return None
    tokens = text.split()
    if not tokens:
        return None
    return tokens[0][:MAX_PATH_LENGTH]


def parse_rate_limit(text: str | None) -> tuple[int, int] | None:
    """Parse a ``count/interval`` pair such as ``1000/60``."""
    if text is None:
        return None
    match = _RATE_LIMIT_PATTERN.match(text)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def _parse_address(
    text: str | None, address_cls: type[IPv4Address] | type[IPv6Address]
) -> IPv4Address | IPv6Address | None:
    if text is None:
        return None
    try:
        return address_cls(text)
    except AddressValueError:
        logger.warning("Invalid address %r, ignoring", text)
        return None


def _set_checked(item: ConfigItem, value: object, raw: str) -> bool:
    if value is None:
        logger.warning(
            "Invalid value %r for legacy option %s, allowed options are: %s",
            raw,
            item.legacy_key,
            item.help,
            extra=setting_extra(item.key, item.legacy_key),
        )
        return False
    if not item.accepts(value):
        logger.debug(
            "Ignoring out-of-range value %r for %s",
            raw,
            item.legacy_key,
            extra=setting_extra(item.key, item.legacy_key),
        )
        return False
    item.set(value)
    return True


class LegacyCodec:
    """Generic coercion of legacy text into a typed item."""

    def decode(self, scanner: LegacyScanner, item: ConfigItem) -> bool:
        """Look up an item's legacy alias and store the coerced value.

        Args:
            scanner: Open legacy document.
            item: Item with a ``legacy_key``.

        Returns:
            True if the item's value was replaced.
        """
        if item.legacy_key is None:
            return False
        raw = scanner.lookup(item.legacy_key)
        if raw is None:
            return False
        return self.decode_text(raw, item)

    def decode_text(self, raw: str, item: ConfigItem) -> bool:
        conf_type = item.conf_type

        if conf_type is ConfType.BOOL:
            value = parse_bool(raw)
            if value is None:
                logger.debug(
                    "Ignoring non-boolean %r for %s",
                    raw,
                    item.legacy_key,
                    extra=setting_extra(item.key, item.legacy_key),
                )
                return False
            item.set(value)
            return True

        if conf_type in (ConfType.INT, ConfType.LONG):
            return _set_checked(item, parse_int(raw), raw)

        if conf_type in (ConfType.UINT, ConfType.ULONG):
            return _set_checked(item, parse_uint(raw), raw)

        if conf_type is ConfType.STRING:
            value = parse_path(raw)
            if value is None:
                logger.info(
                    "   %s: Empty path is not possible, using default",
                    item.legacy_key,
                )
                return False
            item.set(value)
            return True

        if conf_type is ConfType.ENUM_PRIVACY_LEVEL:
            value = parse_int(raw)
            level = (
                PrivacyLevel(value)
                if value is not None and 0 <= value <= PrivacyLevel.NOSTATS
                else None
            )
            return _set_checked(item, level, raw)

        if conf_type in ENUM_TYPES:
            lowered = raw.lower()
            for member in ENUM_TYPES[conf_type]:
                if str(member.value).lower() == lowered:
                    item.set(member)
                    return True
            return _set_checked(item, None, raw)

        if conf_type is ConfType.IPV4_ADDRESS:
            return _set_checked(item, _parse_address(raw, IPv4Address), raw)

        if conf_type is ConfType.IPV6_ADDRESS:
            return _set_checked(item, _parse_address(raw, IPv6Address), raw)

        raise ValueError(f"Unhandled config type: {conf_type}")


@contextmanager
def _scanner_scope(
    scanner: LegacyScanner | None, locations: ConfigLocations | None
) -> Iterator[LegacyScanner | None]:
    """Yield the given scanner, or open (and afterwards close) our own."""
    if scanner is not None:
        yield scanner
        return

    path = find_legacy(locations)
    if path is None:
        yield None
        return
    try:
        own = LegacyScanner.open(path)
    except OSError as e:
        logger.debug("Cannot open legacy config file %s: %s", path, e)
        yield None
        return
    with own:
        yield own


def get_privacy_level_legacy(
    registry: Registry,
    scanner: LegacyScanner | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Apply ``PRIVACYLEVEL`` with the privacy ratchet.

    The level is only applied if it is valid and strictly greater than the
    current value.

    Returns:
        True if the privacy level was raised.
    """
    with _scanner_scope(scanner, locations) as active:
        if active is None:
            return False
        try:
            value = parse_int(active.lookup("PRIVACYLEVEL"))
        finally:
            active.release()

    item = registry.get_by_path("misc.privacylevel")
    if value is None or not PrivacyLevel.SHOW_ALL <= value <= PrivacyLevel.MAXIMUM:
        return False
    return apply_privacy_ratchet(item, value)


def get_blocking_mode_legacy(
    registry: Registry,
    scanner: LegacyScanner | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Apply ``BLOCKINGMODE``.

    An unknown mode logs a warning and keeps the current value.

    Returns:
        True if a known blocking mode was applied.
    """
    item = registry.get_by_path("dns.blockingmode")

    with _scanner_scope(scanner, locations) as active:
        if active is None:
            return False
        try:
            raw = active.lookup("BLOCKINGMODE")
        finally:
            active.release()

    if raw is None:
        return False
    mode = _BLOCKING_MODES.get(raw.lower())
    if mode is None:
        logger.warning(
            "Unknown blocking mode %r, keeping %s",
            raw,
            item.value.value,
            extra=setting_extra(item.key, "BLOCKINGMODE"),
        )
        return False
    item.set(mode)
    return True


def get_log_file_path_legacy(
    registry: Registry,
    scanner: LegacyScanner | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Apply ``LOGFILE``.

    An empty value means syslog. An absent key keeps the current value.

    Returns:
        True if a legacy document was available.
    """
    item = registry.get_by_path("files.log")
    with _scanner_scope(scanner, locations) as active:
        if active is None:
            return False
        raw = active.lookup("LOGFILE")

    if raw is None:
        return True
    path = parse_path(raw)
    if path is None:
        logger.info("Using syslog facility")
        item.set("")
    else:
        item.set(path)
    return True


def read_debug_settings_legacy(
    registry: Registry,
    scanner: LegacyScanner | None = None,
    locations: ConfigLocations | None = None,
) -> bool:
    """Derive the debug flags from ``DEBUG_ALL`` and ``DEBUG_*`` keys.

    All flags are reset first. The buffer of a caller-provided scanner is
    left alone since the caller may still be extracting values.

    Returns:
        True if a legacy document was available.
    """
    apply_to_registry(registry, DebugFlagSet())

    with _scanner_scope(scanner, locations) as active:
        if active is None:
            return False

        def lookup(name: str) -> bool | None:
            key = "DEBUG_ALL" if name == "all" else f"DEBUG_{name.upper()}"
            return parse_bool(active.lookup(key))

        # DEBUG_EXTRA has no legacy key
        flags, all_directive = resolve_debug_flags(lookup, stop=DebugFlag.EXTRA)

    apply_to_registry(registry, flags, all_directive)
    report_debug_flags(flags)
    return True


def _set_legacy(registry: Registry, path: str, value: object, key: str) -> bool:
    """Store a value read by a per-key rule unless the item rejects it."""
    item = registry.get_by_path(path)
    if not item.accepts(value):
        logger.debug(
            "Ignoring out-of-range value %r for %s",
            value,
            key,
            extra=setting_extra(item.key, key),
        )
        return False
    item.set(value)
    return True


def _read_maxdbdays(scanner: LegacyScanner, registry: Registry) -> None:
    value = parse_int(scanner.lookup("MAXDBDAYS"))
    if value is None:
        return
    # Prevent overflow of the value in seconds
    value = min(value, MAX_DB_DAYS)
    _set_legacy(registry, "database.maxDBdays", value, "MAXDBDAYS")


def _read_dbinterval(scanner: LegacyScanner, registry: Registry) -> None:
    # Minutes, fractions allowed, between 6 seconds and once a day
    minutes = parse_float(scanner.lookup("DBINTERVAL"))
    if minutes is not None and 0.1 <= minutes <= 1440.0:
        _set_legacy(registry, "database.DBinterval", int(minutes * 60), "DBINTERVAL")


def _read_maxlogage(scanner: LegacyScanner, registry: Registry) -> None:
    hours = parse_float(scanner.lookup("MAXLOGAGE"))
    if hours is not None and 0.0 <= hours <= MAX_LOG_AGE_HOURS:
        _set_legacy(registry, "database.maxHistory", int(hours * 3600), "MAXLOGAGE")


def _read_dbfile(scanner: LegacyScanner, registry: Registry) -> None:
    raw = scanner.lookup("DBFILE")
    if raw is None:
        return
    path = parse_path(raw)
    if path is None:
        # An empty database file disables the database
        registry.get_by_path("files.database").reset()
        registry.get_by_path("database.maxDBdays").set(0)
        logger.info("DBFILE is empty, disabling the database")
        return
    registry.get_by_path("files.database").set(path)


def _read_delay_startup(scanner: LegacyScanner, registry: Registry) -> None:
    value = parse_uint(scanner.lookup("DELAY_STARTUP"))
    if value is not None and 0 < value <= 300:
        _set_legacy(registry, "misc.delay_startup", value, "DELAY_STARTUP")


def _read_webport(scanner: LegacyScanner, registry: Registry) -> None:
    raw = scanner.lookup("WEBPORT")
    if raw:
        registry.get_by_path("http.port").set(raw)


def _read_webacl(scanner: LegacyScanner, registry: Registry) -> None:
    raw = scanner.lookup("WEBACL")
    if raw is not None:
        registry.get_by_path("http.acl").set(raw)


def _read_session_timeout(scanner: LegacyScanner, registry: Registry) -> None:
    value = parse_int(scanner.lookup("API_SESSION_TIMEOUT"))
    if value is not None and value > 0:
        _set_legacy(registry, "http.sessionTimeout", value, "API_SESSION_TIMEOUT")


def _read_nice(scanner: LegacyScanner, registry: Registry) -> None:
    value = parse_int(scanner.lookup("NICE"))
    if value is not None:
        _set_legacy(registry, "misc.nice", value, "NICE")


def _read_maxnetage(scanner: LegacyScanner, registry: Registry) -> None:
    value = parse_int(scanner.lookup("MAXNETAGE"))
    # 8760 days = 24 years
    if value is not None and 0 < value <= 8760:
        _set_legacy(registry, "database.network.expire", value, "MAXNETAGE")


def _read_percentage(key: str, path: str) -> Callable[[LegacyScanner, Registry], None]:
    def read(scanner: LegacyScanner, registry: Registry) -> None:
        value = parse_int(scanner.lookup(key))
        if value is not None:
            _set_legacy(registry, path, value, key)

    return read


def _read_refresh_hostnames(scanner: LegacyScanner, registry: Registry) -> None:
    raw = scanner.lookup("REFRESH_HOSTNAMES")
    if raw is None:
        return
    registry.get_by_path("resolver.refreshNames").set(
        _REFRESH_HOSTNAMES.get(raw.lower(), RefreshHostnames.IPV4_ONLY)
    )


def _read_enum(
    key: str, path: str, table: dict
) -> Callable[[LegacyScanner, Registry], None]:
    def read(scanner: LegacyScanner, registry: Registry) -> None:
        raw = scanner.lookup(key)
        if raw is None:
            return
        item = registry.get_by_path(path)
        member = table.get(raw.lower())
        if member is None:
            logger.warning(
                "Invalid value %r for legacy option %s, allowed options are: %s",
                raw,
                key,
                item.help,
                extra=setting_extra(item.key, key),
            )
            return
        item.set(member)

    return read


def _read_rate_limit(scanner: LegacyScanner, registry: Registry) -> None:
    raw = scanner.lookup("RATE_LIMIT")
    parsed = parse_rate_limit(raw)
    if parsed is None:
        if raw is not None:
            logger.warning("Invalid RATE_LIMIT %r, expected count/interval", raw)
        return
    count, interval = parsed
    count_item = registry.get_by_path("dns.rateLimit.count")
    interval_item = registry.get_by_path("dns.rateLimit.interval")
    if count_item.accepts(count) and interval_item.accepts(interval):
        count_item.set(count)
        interval_item.set(interval)


def _read_address(
    key: str, table: str, family: int
) -> Callable[[LegacyScanner, Registry], None]:
    address_cls = IPv4Address if family == 4 else IPv6Address

    def read(scanner: LegacyScanner, registry: Registry) -> None:
        force = registry.get_by_path(("dns", "reply", table, f"force{family}"))
        address = registry.get_by_path(("dns", "reply", table, f"IPv{family}"))
        value = _parse_address(scanner.lookup(key), address_cls)
        if value is not None:
            address.set(value)
            force.set(True)

    return read


def _read_reply_addr(scanner: LegacyScanner, registry: Registry, family: int) -> None:
    """Apply deprecated REPLY_ADDR4/6 to both host and blocking replies."""
    key = f"REPLY_ADDR{family}"
    address_cls = IPv4Address if family == 4 else IPv6Address
    raw = scanner.lookup(key)
    value = _parse_address(raw, address_cls)
    if value is None:
        return

    targets = ("host", "blocking")
    forced = [
        registry.get_by_path(("dns", "reply", t, f"force{family}")).value
        for t in targets
    ]
    if any(forced):
        logger.warning(
            "Ignoring %s as LOCAL_IPV%d or BLOCK_IPV%d has been specified.",
            key,
            family,
            family,
        )
        return

    for t in targets:
        registry.get_by_path(("dns", "reply", t, f"force{family}")).set(True)
        registry.get_by_path(("dns", "reply", t, f"IPv{family}")).set(value)


def _read_privacy_level(scanner: LegacyScanner, registry: Registry) -> None:
    get_privacy_level_legacy(registry, scanner)


def _read_blocking_mode(scanner: LegacyScanner, registry: Registry) -> None:
    get_blocking_mode_legacy(registry, scanner)


def _read_log_file(scanner: LegacyScanner, registry: Registry) -> None:
    get_log_file_path_legacy(registry, scanner)


_SPECIAL_KEYS: dict[str, Callable[[LegacyScanner, Registry], None]] = {
    "MAXDBDAYS": _read_maxdbdays,
    "DBINTERVAL": _read_dbinterval,
    "MAXLOGAGE": _read_maxlogage,
    "DBFILE": _read_dbfile,
    "PRIVACYLEVEL": _read_privacy_level,
    "BLOCKINGMODE": _read_blocking_mode,
    "LOGFILE": _read_log_file,
    "DELAY_STARTUP": _read_delay_startup,
    "WEBPORT": _read_webport,
    "WEBACL": _read_webacl,
    "API_SESSION_TIMEOUT": _read_session_timeout,
    "NICE": _read_nice,
    "MAXNETAGE": _read_maxnetage,
    "CHECK_SHMEM": _read_percentage("CHECK_SHMEM", "misc.check.shmem"),
    "CHECK_DISK": _read_percentage("CHECK_DISK", "misc.check.disk"),
    "REFRESH_HOSTNAMES": _read_refresh_hostnames,
    "PIHOLE_PTR": _read_enum("PIHOLE_PTR", "dns.piholePTR", _PTR_TYPES),
    "REPLY_WHEN_BUSY": _read_enum(
        "REPLY_WHEN_BUSY", "dns.replyWhenBusy", _BUSY_REPLIES
    ),
    "RATE_LIMIT": _read_rate_limit,
    "LOCAL_IPV4": _read_address("LOCAL_IPV4", "host", 4),
    "LOCAL_IPV6": _read_address("LOCAL_IPV6", "host", 6),
    "BLOCK_IPV4": _read_address("BLOCK_IPV4", "blocking", 4),
    "BLOCK_IPV6": _read_address("BLOCK_IPV6", "blocking", 6),
}

# Keys read by read_debug_settings_legacy() at the very end of the pass
_DEBUG_KEYS = frozenset(["DEBUG_ALL", *(legacy_key(f) for f in DebugFlag)])


def read_legacy_from(registry: Registry, scanner: LegacyScanner) -> None:
    """Populate the registry from an open legacy document.

    Walks the registry in index order. Every legacy key is handled once, even
    if several items share it. Deprecated keys and debug flags come last.
    The scanner's buffer is released when the pass is done.
    """
    codec = LegacyCodec()
    seen: set[str] = set()

    try:
        for item in registry:
            key = item.legacy_key
            if key is None or key in seen or key in _DEBUG_KEYS:
                continue
            seen.add(key)

            handler = _SPECIAL_KEYS.get(key)
            if handler is not None:
                handler(scanner, registry)
            else:
                codec.decode(scanner, item)

        _read_reply_addr(scanner, registry, 4)
        _read_reply_addr(scanner, registry, 6)

        # Last, as it logs the resulting debug table
        read_debug_settings_legacy(registry, scanner)
    finally:
        scanner.release()


def read_legacy(
    registry: Registry,
    path: Path | None = None,
    locations: ConfigLocations | None = None,
) -> Path | None:
    """Populate the registry from the legacy document.

    The registry is not reset: legacy values are applied on top of the
    current values.

    Args:
        registry: Registry to update in place.
        path: Document to read. Defaults to the first file found in
            ``locations``.
        locations: Search order used when ``path`` is None.

    Returns:
        The path that was read, or None if no legacy document is available.
    """
    if path is None:
        path = find_legacy(locations)
        if path is None:
            return None

    try:
        scanner = LegacyScanner.open(path)
    except OSError as e:
        logger.debug("Cannot open legacy config file %s: %s", path, e)
        return None

    logger.info("Reading legacy config file %s", path)
    with scanner, config_file_context(path):
        read_legacy_from(registry, scanner)
    return path
