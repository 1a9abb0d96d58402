"""Declarations of every known configuration item.

Items are declared once here and take part in both the structured and the
legacy format. The order of ``build_items()`` is the serialization order.
"""

from __future__ import annotations

from ipaddress import IPv4Address, IPv6Address

from ftlconf.config.debug import ALL_KEY, DEBUG_TABLE, config_key, iter_flags
from ftlconf.config.debug import legacy_key as debug_legacy_key
from ftlconf.config.items import ConfigItem
from ftlconf.config.types import (
    INT_MAX,
    BlockingMode,
    BusyReply,
    ConfType,
    PrivacyLevel,
    PtrType,
    RefreshHostnames,
    options,
)

# Largest day count whose value in seconds still fits into a C int
MAX_DB_DAYS = INT_MAX // 24 // 60 // 60

# Upper bound of the query history imported at startup [hours]
MAX_LOG_AGE_HOURS = 24

# Niceness that leaves the process priority untouched
NICE_DISABLED = -999


def nice_allowed(value: int) -> bool:
    """Niceness is -20..19, or NICE_DISABLED."""
    return -20 <= value <= 19 or value == NICE_DISABLED


DEFAULT_LOG_FILE = "/var/log/pihole/FTL.log"
DEFAULT_DB_FILE = "/etc/pihole/pihole-FTL.db"


def _choices(enum_cls) -> str:
    return "[ " + ", ".join(f'"{o}"' for o in options(enum_cls)) + " ]"


def _dns_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("dns", "CNAMEdeepInspect"),
            ConfType.BOOL,
            True,
            "Use this option to control deep CNAME inspection. Disabling it "
            "might be beneficial for very low-end devices",
            legacy_key="CNAME_DEEP_INSPECT",
        ),
        ConfigItem(
            ("dns", "blockESNI"),
            ConfType.BOOL,
            True,
            "Should _esni. subdomains be blocked by default? Encrypted Server "
            "Name Indication (ESNI) is certainly a good step into the right "
            "direction to enhance privacy on the web",
            legacy_key="BLOCK_ESNI",
        ),
        ConfigItem(
            ("dns", "EDNS0ECS"),
            ConfType.BOOL,
            True,
            "Should we overwrite the query source when client information is "
            "provided through EDNS0 client subnet (ECS) information?",
            legacy_key="EDNS0_ECS",
        ),
        ConfigItem(
            ("dns", "ignoreLocalhost"),
            ConfType.BOOL,
            False,
            "Should FTL hide queries made by localhost?",
            legacy_key="IGNORE_LOCALHOST",
        ),
        ConfigItem(
            ("dns", "showDNSSEC"),
            ConfType.BOOL,
            True,
            "Should FTL analyze and show internally generated DNSSEC queries?",
            legacy_key="SHOW_DNSSEC",
        ),
        ConfigItem(
            ("dns", "analyzeAAAA"),
            ConfType.BOOL,
            True,
            "Should FTL analyze AAAA queries?",
            legacy_key="AAAA_QUERY_ANALYSIS",
        ),
        ConfigItem(
            ("dns", "analyzeOnlyAandAAAA"),
            ConfType.BOOL,
            False,
            "Should FTL analyze only A and AAAA queries?",
            legacy_key="ANALYZE_ONLY_A_AND_AAAA",
        ),
        ConfigItem(
            ("dns", "piholePTR"),
            ConfType.ENUM_PTR_TYPE,
            PtrType.PIHOLE,
            "Controls whether and how FTL replies to PTR requests for the "
            "addresses of local interfaces. Possible values are "
            + _choices(PtrType),
            legacy_key="PIHOLE_PTR",
        ),
        ConfigItem(
            ("dns", "replyWhenBusy"),
            ConfType.ENUM_BUSY_TYPE,
            BusyReply.BLOCK,
            "How should FTL handle queries when the gravity database is not "
            "available? Possible values are " + _choices(BusyReply),
            legacy_key="REPLY_WHEN_BUSY",
        ),
        ConfigItem(
            ("dns", "blockTTL"),
            ConfType.UINT,
            2,
            "TTL (in seconds) of the replies to blocked queries",
            legacy_key="BLOCK_TTL",
        ),
        ConfigItem(
            ("dns", "blockingmode"),
            ConfType.ENUM_BLOCKING_MODE,
            BlockingMode.IP,
            "How should FTL reply to blocked queries? Possible values are "
            + _choices(BlockingMode),
            legacy_key="BLOCKINGMODE",
        ),
        ConfigItem(
            ("dns", "specialDomains", "mozillaCanary"),
            ConfType.BOOL,
            True,
            "Should FTL handle use-application-dns.net specifically and "
            "always return NXDOMAIN?",
            legacy_key="MOZILLA_CANARY",
        ),
        ConfigItem(
            ("dns", "specialDomains", "iCloudPrivateRelay"),
            ConfType.BOOL,
            True,
            "Should FTL handle the iCloud privacy relay domains specifically "
            "and always return NXDOMAIN?",
            legacy_key="BLOCK_ICLOUD_PR",
        ),
        ConfigItem(
            ("dns", "reply", "host", "force4"),
            ConfType.BOOL,
            False,
            "Use a specific IPv4 address for the host's A record replies",
            legacy_key="LOCAL_IPV4",
        ),
        ConfigItem(
            ("dns", "reply", "host", "IPv4"),
            ConfType.IPV4_ADDRESS,
            IPv4Address(0),
            "Custom IPv4 address for the host's A record replies",
            legacy_key="LOCAL_IPV4",
        ),
        ConfigItem(
            ("dns", "reply", "host", "force6"),
            ConfType.BOOL,
            False,
            "Use a specific IPv6 address for the host's AAAA record replies",
            legacy_key="LOCAL_IPV6",
        ),
        ConfigItem(
            ("dns", "reply", "host", "IPv6"),
            ConfType.IPV6_ADDRESS,
            IPv6Address(0),
            "Custom IPv6 address for the host's AAAA record replies",
            legacy_key="LOCAL_IPV6",
        ),
        ConfigItem(
            ("dns", "reply", "blocking", "force4"),
            ConfType.BOOL,
            False,
            "Use a specific IPv4 address in IP blocking mode",
            legacy_key="BLOCK_IPV4",
        ),
        ConfigItem(
            ("dns", "reply", "blocking", "IPv4"),
            ConfType.IPV4_ADDRESS,
            IPv4Address(0),
            "Custom IPv4 address for IP blocking mode",
            legacy_key="BLOCK_IPV4",
        ),
        ConfigItem(
            ("dns", "reply", "blocking", "force6"),
            ConfType.BOOL,
            False,
            "Use a specific IPv6 address in IP blocking mode",
            legacy_key="BLOCK_IPV6",
        ),
        ConfigItem(
            ("dns", "reply", "blocking", "IPv6"),
            ConfType.IPV6_ADDRESS,
            IPv6Address(0),
            "Custom IPv6 address for IP blocking mode",
            legacy_key="BLOCK_IPV6",
        ),
        ConfigItem(
            ("dns", "rateLimit", "count"),
            ConfType.UINT,
            1000,
            "How many queries are permitted per client within the rate "
            "limiting interval? Set to 0 to disable rate limiting",
            legacy_key="RATE_LIMIT",
        ),
        ConfigItem(
            ("dns", "rateLimit", "interval"),
            ConfType.UINT,
            60,
            "Length of the rate limiting interval [seconds]",
            legacy_key="RATE_LIMIT",
        ),
    ]


def _resolver_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("resolver", "resolveIPv4"),
            ConfType.BOOL,
            True,
            "Should FTL try to resolve IPv4 addresses to hostnames?",
            legacy_key="RESOLVE_IPV4",
        ),
        ConfigItem(
            ("resolver", "resolveIPv6"),
            ConfType.BOOL,
            True,
            "Should FTL try to resolve IPv6 addresses to hostnames?",
            legacy_key="RESOLVE_IPV6",
        ),
        ConfigItem(
            ("resolver", "networkNames"),
            ConfType.BOOL,
            True,
            "Obtain client names from the network table as a fallback",
            legacy_key="NAMES_FROM_NETDB",
        ),
        ConfigItem(
            ("resolver", "refreshNames"),
            ConfType.ENUM_REFRESH_HOSTNAMES,
            RefreshHostnames.IPV4_ONLY,
            "Which client host names should be refreshed periodically? "
            "Possible values are " + _choices(RefreshHostnames),
            legacy_key="REFRESH_HOSTNAMES",
        ),
    ]


def _database_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("database", "DBimport"),
            ConfType.BOOL,
            True,
            "Should FTL load information from the database on startup?",
            legacy_key="DBIMPORT",
        ),
        ConfigItem(
            ("database", "maxHistory"),
            ConfType.UINT,
            MAX_LOG_AGE_HOURS * 3600,
            "How much history should be imported from the database [seconds]?",
            legacy_key="MAXLOGAGE",
            bounds=(0, MAX_LOG_AGE_HOURS * 3600),
        ),
        ConfigItem(
            ("database", "maxDBdays"),
            ConfType.INT,
            365,
            "How long should queries be stored in the database [days]? "
            "Setting this to 0 disables the database, -1 keeps everything",
            legacy_key="MAXDBDAYS",
            bounds=(-1, MAX_DB_DAYS),
        ),
        ConfigItem(
            ("database", "DBinterval"),
            ConfType.UINT,
            60,
            "How often do we store queries in FTL's database [seconds]?",
            legacy_key="DBINTERVAL",
        ),
        ConfigItem(
            ("database", "network", "parseARPcache"),
            ConfType.BOOL,
            True,
            "Should FTL analyze the local ARP cache?",
            legacy_key="PARSE_ARP_CACHE",
        ),
        ConfigItem(
            ("database", "network", "expire"),
            ConfType.UINT,
            365,
            "How long should IP addresses be kept in the network table [days]?",
            legacy_key="MAXNETAGE",
            bounds=(0, 8760),
        ),
    ]


def _http_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("http", "localAPIauth"),
            ConfType.BOOL,
            True,
            "Does local clients need to authenticate to access the API?",
            legacy_key="API_AUTH_FOR_LOCALHOST",
        ),
        ConfigItem(
            ("http", "prettyJSON"),
            ConfType.BOOL,
            False,
            "Should FTL insert extra spaces to prettify the API output?",
            legacy_key="API_PRETTY_JSON",
        ),
        ConfigItem(
            ("http", "sessionTimeout"),
            ConfType.UINT,
            300,
            "How long should a session be considered valid after login [seconds]?",
            legacy_key="API_SESSION_TIMEOUT",
        ),
        ConfigItem(
            ("http", "domain"),
            ConfType.STRING,
            "pi.hole",
            "On which domain is the web interface served?",
            legacy_key="WEBDOMAIN",
        ),
        ConfigItem(
            ("http", "acl"),
            ConfType.STRING,
            "",
            "Web server access control list. Comma-separated list of subnets, "
            "each prefixed by + (allow) or - (deny)",
            legacy_key="WEBACL",
        ),
        ConfigItem(
            ("http", "port"),
            ConfType.STRING,
            "8080",
            "Ports to be used by the webserver",
            legacy_key="WEBPORT",
        ),
        ConfigItem(
            ("http", "paths", "webroot"),
            ConfType.STRING,
            "/var/www/html",
            "Server root on the host",
            legacy_key="WEBROOT",
        ),
        ConfigItem(
            ("http", "paths", "webhome"),
            ConfType.STRING,
            "/admin/",
            "Sub-directory of the root containing the web interface",
            legacy_key="WEBHOME",
        ),
    ]


def _files_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("files", "pid"),
            ConfType.STRING,
            "/run/pihole-FTL.pid",
            "The file which contains the PID of FTL's main process",
            legacy_key="PIDFILE",
        ),
        ConfigItem(
            ("files", "database"),
            ConfType.STRING,
            DEFAULT_DB_FILE,
            "The location of FTL's long-term database",
            legacy_key="DBFILE",
        ),
        ConfigItem(
            ("files", "gravity"),
            ConfType.STRING,
            "/etc/pihole/gravity.db",
            "The location of the gravity database",
            legacy_key="GRAVITYDB",
        ),
        ConfigItem(
            ("files", "macvendor"),
            ConfType.STRING,
            "/etc/pihole/macvendor.db",
            "The database containing MAC -> Vendor information",
            legacy_key="MACVENDORDB",
        ),
        ConfigItem(
            ("files", "setupVars"),
            ConfType.STRING,
            "/etc/pihole/setupVars.conf",
            "The config file of Pi-hole",
            legacy_key="SETUPVARSFILE",
        ),
        ConfigItem(
            ("files", "http_info"),
            ConfType.STRING,
            "/var/log/pihole/HTTP_info.log",
            "The log file used by the webserver",
            legacy_key="API_INFO_LOG",
        ),
        ConfigItem(
            ("files", "ph7_error"),
            ConfType.STRING,
            "/var/log/pihole/PH7.log",
            "The log file used by the dynamic interpreter",
            legacy_key="API_ERROR_LOG",
        ),
        ConfigItem(
            ("files", "log"),
            ConfType.STRING,
            DEFAULT_LOG_FILE,
            "The location of FTL's log file. An empty string logs to syslog",
            legacy_key="LOGFILE",
        ),
    ]


def _misc_items() -> list[ConfigItem]:
    return [
        ConfigItem(
            ("misc", "privacylevel"),
            ConfType.ENUM_PRIVACY_LEVEL,
            PrivacyLevel.SHOW_ALL,
            "Using privacy levels you can specify which level of detail you "
            "want to see in your Pi-hole statistics. Possible values are "
            "[ 0, 1, 2, 3, 4 ]",
            legacy_key="PRIVACYLEVEL",
            bounds=(PrivacyLevel.SHOW_ALL, PrivacyLevel.NOSTATS),
        ),
        ConfigItem(
            ("misc", "delay_startup"),
            ConfType.UINT,
            0,
            "During startup, delay DNS resolution by this many seconds "
            "(at most 300)",
            legacy_key="DELAY_STARTUP",
            bounds=(0, 300),
        ),
        ConfigItem(
            ("misc", "nice"),
            ConfType.INT,
            -10,
            "Niceness of FTL's main process (-20 to 19). Set to -999 to leave "
            "the niceness untouched",
            legacy_key="NICE",
            allowed=nice_allowed,
        ),
        ConfigItem(
            ("misc", "addr2line"),
            ConfType.BOOL,
            True,
            "Should FTL try to call addr2line when generating backtraces?",
            legacy_key="ADDR2LINE",
        ),
        ConfigItem(
            ("misc", "check", "load"),
            ConfType.BOOL,
            True,
            "Complain if the 15 minute load average exceeds the number of cores",
            legacy_key="CHECK_LOAD",
        ),
        ConfigItem(
            ("misc", "check", "shmem"),
            ConfType.UINT,
            90,
            "Limit above which FTL complains about shared-memory shortage [%]",
            legacy_key="CHECK_SHMEM",
            bounds=(0, 100),
        ),
        ConfigItem(
            ("misc", "check", "disk"),
            ConfType.UINT,
            90,
            "Limit above which FTL complains about disk shortage [%]",
            legacy_key="CHECK_DISK",
            bounds=(0, 100),
        ),
    ]


def _debug_items() -> list[ConfigItem]:
    items = [
        ConfigItem(
            (DEBUG_TABLE, ALL_KEY),
            ConfType.BOOL,
            False,
            "Enable all debug flags. Individual flags set below take precedence",
            legacy_key="DEBUG_ALL",
        )
    ]
    for flag in iter_flags():
        items.append(
            ConfigItem(
                (DEBUG_TABLE, config_key(flag)),
                ConfType.BOOL,
                False,
                f"Print debugging information for {flag.name} (true or false)",
                legacy_key=debug_legacy_key(flag),
            )
        )
    return items


def build_items() -> list[ConfigItem]:
    """Return fresh items for every known setting, in serialization order."""
    return [
        *_dns_items(),
        *_resolver_items(),
        *_database_items(),
        *_files_items(),
        *_http_items(),
        *_misc_items(),
        *_debug_items(),
    ]
