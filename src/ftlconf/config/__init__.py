"""Configuration registry for Pi-hole FTL.

Configuration loading with precedence handling:
1. Structured document (pihole-FTL.toml)
2. Legacy document (pihole-FTL.conf), upgrade path and privacy ratchet only
3. Default values

Building blocks:
- Registry/ConfigItem: Ordered, typed item storage addressed by path
- toml_codec/toml_reader: Structured document encode, decode and read pass
- LegacyScanner/legacy_reader: Flat legacy document import
- DebugFlag/DebugFlagSet: Debug bitmask derived from the debug table
- load_config/migrate_legacy: Precedence and migration policy
"""

from ftlconf.config.debug import DebugFlag, DebugFlagSet, flags_from_registry
from ftlconf.config.env import EnvReader
from ftlconf.config.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValueError,
    ScannerClosedError,
    TomlParseError,
)
from ftlconf.config.items import ConfigItem
from ftlconf.config.legacy_reader import read_legacy
from ftlconf.config.legacy_scanner import LegacyScanner
from ftlconf.config.loader import (
    LoadResult,
    load_config,
    migrate_legacy,
    write_config,
)
from ftlconf.config.locations import ConfigLocations, find_legacy, find_toml
from ftlconf.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from ftlconf.config.models import LoggingConfig
from ftlconf.config.registry import Registry, default_registry
from ftlconf.config.toml_codec import dumps, write_toml
from ftlconf.config.toml_parser import load_toml_file, parse_toml
from ftlconf.config.toml_reader import read_toml
from ftlconf.config.types import (
    BlockingMode,
    BusyReply,
    ConfType,
    PrivacyLevel,
    PtrType,
    RefreshHostnames,
)

__all__ = [
    # Types
    "BlockingMode",
    "BusyReply",
    "ConfType",
    "PrivacyLevel",
    "PtrType",
    "RefreshHostnames",
    # Registry
    "ConfigItem",
    "Registry",
    "default_registry",
    # Structured document
    "dumps",
    "load_toml_file",
    "parse_toml",
    "read_toml",
    "write_toml",
    # Legacy document
    "LegacyScanner",
    "read_legacy",
    # Debug flags
    "DebugFlag",
    "DebugFlagSet",
    "flags_from_registry",
    # Loading and migration
    "ConfigLocations",
    "LoadResult",
    "find_legacy",
    "find_toml",
    "load_config",
    "migrate_legacy",
    "write_config",
    # Environment and logging
    "EnvReader",
    "LoggingConfig",
    "build_logging_config",
    "configure_logging_from_cli",
    # Errors
    "ConfigError",
    "ConfigLoadError",
    "ConfigValueError",
    "ScannerClosedError",
    "TomlParseError",
]
