"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (documents, keys)
    20-29: Target/file errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for ftlconf CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1

    # Validation errors (10-19)
    CONFIG_ERROR = 10
    PARSE_ERROR = 11
    INVALID_SETTINGS = 12
    UNKNOWN_KEY = 13

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    TARGET_EXISTS = 21
    WRITE_ERROR = 22
