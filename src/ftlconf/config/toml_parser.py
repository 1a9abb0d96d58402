"""TOML document parsing.

Uses tomllib on Python 3.11+ and the tomli package on older interpreters.
Both expose the same ``loads`` API and ``TOMLDecodeError``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from ftlconf.config.exceptions import TomlParseError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)


def parse_toml(content: str, path: str | None = None) -> dict[str, Any]:
    """Parse TOML content into a dictionary.

    Args:
        content: TOML document text.
        path: Source path, only used in the error message.

    Returns:
        Parsed top-level table.

    Raises:
        TomlParseError: If the document is not valid TOML. Nothing of a
            broken document is returned.
    """
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise TomlParseError(str(e), path) from e


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed top-level table.

    Raises:
        FileNotFoundError: If the file does not exist.
        TomlParseError: If the file is not valid TOML or not UTF-8.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TomlParseError(f"not valid UTF-8: {e}", str(path)) from e
    config = parse_toml(content, str(path))
    logger.debug("TOML file parsing: OK (%s)", path)
    return config
