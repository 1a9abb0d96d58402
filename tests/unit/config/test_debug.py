"""Tests for the debug flag subsystem."""

import logging

import pytest

from ftlconf.config.debug import (
    ALL_FLAGS,
    DebugFlag,
    DebugFlagSet,
    apply_to_registry,
    config_key,
    flags_from_registry,
    iter_flags,
    legacy_key,
    report_debug_flags,
    resolve_debug_flags,
)
from ftlconf.config.registry import Registry


class TestDebugFlag:
    """Tests for flag enumeration and naming."""

    def test_iter_flags_powers_of_two(self) -> None:
        """Should yield every single-bit flag in order."""
        flags = list(iter_flags())
        assert len(flags) == 23
        assert flags[0] is DebugFlag.DATABASE
        assert flags[-1] is DebugFlag.EXTRA
        assert [int(f) for f in flags] == [1 << i for i in range(23)]

    def test_iter_flags_stop(self) -> None:
        """Should stop before the given flag."""
        flags = list(iter_flags(DebugFlag.EXTRA))
        assert flags[-1] is DebugFlag.CONFIG
        assert DebugFlag.EXTRA not in flags

    def test_all_flags(self) -> None:
        """Should cover every bit."""
        assert int(ALL_FLAGS) == (1 << 23) - 1

    def test_keys(self) -> None:
        """Should derive document keys from the flag name."""
        assert config_key(DebugFlag.ALIASCLIENTS) == "aliasclients"
        assert legacy_key(DebugFlag.ALIASCLIENTS) == "DEBUG_ALIASCLIENTS"


class TestDebugFlagSet:
    """Tests for DebugFlagSet."""

    def test_empty(self) -> None:
        """Should have no flags by default."""
        flags = DebugFlagSet()
        assert not flags.any
        assert flags.names() == []

    def test_names_in_bit_order(self) -> None:
        """Should list enabled categories in bit order."""
        flags = DebugFlagSet(DebugFlag.API | DebugFlag.DATABASE)
        assert flags.any
        assert flags.is_set(DebugFlag.API)
        assert not flags.is_set(DebugFlag.GC)
        assert flags.names() == ["DATABASE", "API"]


class TestResolveDebugFlags:
    """Tests for resolve_debug_flags()."""

    def test_nothing_set(self) -> None:
        """Should yield no flags when the source is silent."""
        flags, all_directive = resolve_debug_flags(lambda name: None)
        assert not flags.any
        assert all_directive is None

    def test_all(self) -> None:
        """Should enable every flag for all=true."""
        flags, all_directive = resolve_debug_flags(lambda name: name == "all" or None)
        assert flags.mask == ALL_FLAGS
        assert all_directive is True

    def test_override_after_all(self) -> None:
        """Should let named flags override the blanket directive."""
        directives = {"all": True, "database": False, "gc": False}
        flags, _ = resolve_debug_flags(directives.get)
        assert not flags.is_set(DebugFlag.DATABASE)
        assert not flags.is_set(DebugFlag.GC)
        assert flags.is_set(DebugFlag.NETWORKING)

    def test_individual_without_all(self) -> None:
        """Should enable individual flags without the blanket directive."""
        directives = {"all": False, "networking": True}
        flags, all_directive = resolve_debug_flags(directives.get)
        assert flags.names() == ["NETWORKING"]
        assert all_directive is False

    def test_stop_skips_lookups(self) -> None:
        """Should not consult flags from stop onwards."""
        asked: list[str] = []

        def lookup(name: str) -> bool | None:
            asked.append(name)
            return None

        resolve_debug_flags(lookup, stop=DebugFlag.EXTRA)
        assert "extra" not in asked
        assert asked[0] == "all"
        assert "config" in asked


class TestRegistryIntegration:
    """Tests for storing flags in the registry."""

    def test_apply_and_rebuild(self, registry: Registry) -> None:
        """Should round-trip a flag set through the registry."""
        flags = DebugFlagSet(DebugFlag.LOCKS | DebugFlag.EXTRA)
        apply_to_registry(registry, flags, all_directive=False)
        assert registry.get_by_path("debug.locks").value is True
        assert registry.get_by_path("debug.all").value is False
        assert flags_from_registry(registry) == flags

    def test_apply_clears_other_flags(self, registry: Registry) -> None:
        """Should switch off flags not in the set."""
        registry.get_by_path("debug.regex").set(True)
        apply_to_registry(registry, DebugFlagSet())
        assert registry.get_by_path("debug.regex").value is False


class TestReportDebugFlags:
    """Tests for report_debug_flags()."""

    def test_table_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should log one line per flag at debug level."""
        caplog.set_level(logging.DEBUG, logger="ftlconf.config.debug")
        report_debug_flags(DebugFlagSet(DebugFlag.SHMEM))
        assert "DEBUG SETTINGS" in caplog.text
        assert "SHMEM:" in caplog.text
        lines = [r.getMessage() for r in caplog.records if "YES" in r.getMessage()]
        assert len(lines) == 1

    def test_silent_above_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should not log when debug level is disabled."""
        caplog.set_level(logging.INFO, logger="ftlconf.config.debug")
        report_debug_flags(DebugFlagSet(DebugFlag.SHMEM))
        assert caplog.records == []
