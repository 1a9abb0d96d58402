"""Shared test fixtures for ftlconf."""

import logging
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from ftlconf.config.locations import LEGACY_NAME, TOML_NAME, ConfigLocations
from ftlconf.config.registry import Registry, default_registry


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Save and restore root logger state between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)


@pytest.fixture
def registry() -> Registry:
    """Return a fresh registry holding every item at its default."""
    return default_registry()


@pytest.fixture
def locations(tmp_path: Path) -> ConfigLocations:
    """Return a search order confined to tmp_path."""
    return ConfigLocations(
        toml=(tmp_path / TOML_NAME,),
        legacy=(tmp_path / LEGACY_NAME,),
        toml_target=tmp_path / TOML_NAME,
    )


@pytest.fixture
def write_legacy(locations: ConfigLocations) -> Callable[[str], Path]:
    """Return a helper writing the legacy document of ``locations``."""

    def _write(text: str) -> Path:
        path = locations.legacy[0]
        path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_toml_doc(locations: ConfigLocations) -> Callable[[str], Path]:
    """Return a helper writing the structured document of ``locations``."""

    def _write(text: str) -> Path:
        path = locations.toml[0]
        path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write
