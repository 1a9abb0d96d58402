"""Unit tests for the ftlconf CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import ftlconf.cli
from ftlconf.cli import _build_locations, main
from ftlconf.cli.exit_codes import ExitCode
from ftlconf.config.locations import ConfigLocations
from ftlconf.config.toml_parser import load_toml_file


@pytest.fixture(autouse=True)
def skip_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CLI from reconfiguring the root logger."""
    monkeypatch.setattr(ftlconf.cli, "_logging_configured", True)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, locations: ConfigLocations, *args: str):
    return runner.invoke(main, list(args), obj={"locations": locations})


class TestBuildLocations:
    """Tests for the --toml/--legacy group options."""

    def test_overrides(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should pin both formats to the given files."""
        monkeypatch.delenv("FTLCONF_TOML_PATH", raising=False)
        toml_path = tmp_path / "a.toml"
        legacy_path = tmp_path / "a.conf"
        locations = _build_locations(toml_path, legacy_path)
        assert locations.toml == (toml_path,)
        assert locations.toml_target == toml_path
        assert locations.legacy == (legacy_path,)

    def test_no_overrides_uses_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should honor FTLCONF_CONFIG_DIR without options."""
        monkeypatch.delenv("FTLCONF_TOML_PATH", raising=False)
        monkeypatch.delenv("FTLCONF_LEGACY_PATH", raising=False)
        monkeypatch.setenv("FTLCONF_CONFIG_DIR", str(tmp_path))
        locations = _build_locations(None, None)
        assert locations.toml_target == tmp_path / "pihole-FTL.toml"

    def test_options_reach_commands(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should read the document given with --toml."""
        path = tmp_path / "custom.toml"
        path.write_text("[misc]\nnice = 4\n")
        result = runner.invoke(main, ["--toml", str(path), "get", "misc.nice"])
        assert result.exit_code == 0
        assert result.output == "4\n"


class TestShowCommand:
    """Tests for the show command."""

    def test_defaults_as_toml(
        self, runner: CliRunner, locations: ConfigLocations
    ) -> None:
        """Should print the full structured document."""
        result = _invoke(runner, locations, "show")
        assert result.exit_code == 0
        assert result.output.startswith("# Pi-hole FTL configuration file")
        assert "\n[dns]\n" in result.output
        assert '  blockingmode = "IP"' in result.output

    def test_json(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should print the effective values as JSON."""
        write_toml_doc("[misc]\nprivacylevel = 2\n")
        result = _invoke(runner, locations, "show", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["misc"]["privacylevel"] == 2
        assert data["dns"]["blockingmode"] == "IP"

    def test_changed_only(
        self, runner: CliRunner, locations: ConfigLocations, write_legacy
    ) -> None:
        """Should list changed settings, including legacy-seeded ones."""
        write_legacy("BLOCKINGMODE=NXDOMAIN\n")
        result = _invoke(runner, locations, "show", "--changed")
        assert result.exit_code == 0
        assert result.output == 'dns.blockingmode = "NX"\n'

    def test_changed_json(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should print changed settings as a flat JSON object."""
        write_toml_doc("[debug]\napi = true\n")
        result = _invoke(runner, locations, "show", "--changed", "--json")
        assert json.loads(result.output) == {"debug.api": True}

    def test_no_comments(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should omit help texts."""
        result = _invoke(runner, locations, "show", "--no-comments")
        body = result.output.splitlines()[3:]
        assert not any(line.lstrip().startswith("#") for line in body)


class TestGetCommand:
    """Tests for the get command."""

    def test_enum(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should print the plain token."""
        result = _invoke(runner, locations, "get", "dns.piholePTR")
        assert result.exit_code == 0
        assert result.output == "PI.HOLE\n"

    def test_bool(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should print booleans in lower case."""
        result = _invoke(runner, locations, "get", "dns.blockESNI")
        assert result.output == "true\n"

    def test_toml_value(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should quote strings with --toml-value."""
        result = _invoke(runner, locations, "get", "--toml-value", "http.domain")
        assert result.output == '"pi.hole"\n'

    def test_privacy_level(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should print the privacy level as a number."""
        write_toml_doc("[misc]\nprivacylevel = 3\n")
        result = _invoke(runner, locations, "get", "misc.privacylevel")
        assert result.output == "3\n"

    def test_unknown_key(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should fail for unknown settings."""
        result = _invoke(runner, locations, "get", "dns.nope")
        assert result.exit_code == ExitCode.UNKNOWN_KEY
        assert "Unknown setting 'dns.nope'" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_valid_document(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should accept a valid document."""
        path = write_toml_doc('[dns]\nblockingmode = "NX"\n')
        result = _invoke(runner, locations, "check", str(path))
        assert result.exit_code == 0
        assert f"{path}: OK" in result.output

    def test_default_location(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should check the document found in the search order."""
        path = write_toml_doc("[misc]\nnice = 0\n")
        result = _invoke(runner, locations, "check")
        assert result.exit_code == 0
        assert f"{path}: OK" in result.output

    def test_nothing_to_check(
        self, runner: CliRunner, locations: ConfigLocations
    ) -> None:
        """Should fail when no document is found."""
        result = _invoke(runner, locations, "check")
        assert result.exit_code == ExitCode.TARGET_NOT_FOUND

    def test_missing_file(
        self, runner: CliRunner, locations: ConfigLocations, tmp_path: Path
    ) -> None:
        """Should fail for a missing file."""
        result = _invoke(runner, locations, "check", str(tmp_path / "nope.toml"))
        assert result.exit_code == ExitCode.TARGET_NOT_FOUND

    def test_parse_error(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should fail for invalid TOML."""
        path = write_toml_doc("[dns\n")
        result = _invoke(runner, locations, "check", str(path))
        assert result.exit_code == ExitCode.PARSE_ERROR

    def test_invalid_values(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should report settings with rejected values."""
        path = write_toml_doc(
            """
            [dns]
            blockingmode = "SINKHOLE"

            [misc.check]
            shmem = 150
            """
        )
        result = _invoke(runner, locations, "check", str(path))
        assert result.exit_code == ExitCode.INVALID_SETTINGS
        assert "Invalid value for dns.blockingmode" in result.output
        assert "Invalid value for misc.check.shmem" in result.output
        assert "2 invalid setting(s)" in result.output

    def test_unknown_settings_warn(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should warn about unknown settings without failing."""
        path = write_toml_doc("[dns]\nnotAThing = 1\n")
        result = _invoke(runner, locations, "check", str(path))
        assert result.exit_code == 0
        assert "Unknown setting dns.notAThing" in result.output


class TestMigrateCommand:
    """Tests for the migrate command."""

    def test_migrate(
        self, runner: CliRunner, locations: ConfigLocations, write_legacy
    ) -> None:
        """Should write the structured document."""
        write_legacy("BLOCKINGMODE=NULL\nPRIVACYLEVEL=1\n")
        result = _invoke(runner, locations, "migrate")
        assert result.exit_code == 0
        assert "(2 changed)" in result.output

        document = load_toml_file(locations.toml_target)
        assert document["dns"]["blockingmode"] == "NULL"
        assert document["misc"]["privacylevel"] == 1

    def test_target_exists(
        self,
        runner: CliRunner,
        locations: ConfigLocations,
        write_legacy,
        write_toml_doc,
    ) -> None:
        """Should refuse to overwrite without --force."""
        write_legacy("BLOCKINGMODE=NULL\n")
        write_toml_doc("[misc]\nnice = 1\n")
        result = _invoke(runner, locations, "migrate")
        assert result.exit_code == ExitCode.TARGET_EXISTS
        assert "nice = 1" in locations.toml_target.read_text()

    def test_force(
        self,
        runner: CliRunner,
        locations: ConfigLocations,
        write_legacy,
        write_toml_doc,
    ) -> None:
        """Should overwrite with --force."""
        write_legacy("BLOCKINGMODE=NULL\n")
        write_toml_doc("[misc]\nnice = 1\n")
        result = _invoke(runner, locations, "migrate", "--force")
        assert result.exit_code == 0
        assert load_toml_file(locations.toml_target)["misc"]["nice"] == -10

    def test_explicit_target(
        self,
        runner: CliRunner,
        locations: ConfigLocations,
        write_legacy,
        tmp_path: Path,
    ) -> None:
        """Should write to --target."""
        write_legacy("NICE=5\n")
        target = tmp_path / "out.toml"
        result = _invoke(runner, locations, "migrate", "--target", str(target))
        assert result.exit_code == 0
        assert load_toml_file(target)["misc"]["nice"] == 5

    def test_no_legacy(self, runner: CliRunner, locations: ConfigLocations) -> None:
        """Should fail without a legacy document."""
        result = _invoke(runner, locations, "migrate")
        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "No legacy config file" in result.output


class TestDebugCommand:
    """Tests for the debug command."""

    def test_lists_all_flags(
        self, runner: CliRunner, locations: ConfigLocations
    ) -> None:
        """Should list every flag."""
        result = _invoke(runner, locations, "debug")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 23
        assert lines[0].split() == ["database", "NO"]

    def test_enabled_json(
        self, runner: CliRunner, locations: ConfigLocations, write_toml_doc
    ) -> None:
        """Should print enabled flags as JSON."""
        write_toml_doc("[debug]\nall = true\nqueries = false\n")
        result = _invoke(runner, locations, "debug", "--enabled", "--json")
        data = json.loads(result.output)
        assert "queries" not in data
        assert data["database"] is True
        assert len(data) == 22


class TestConfigureLogging:
    """Tests for the one-time logging setup of the CLI group."""

    def test_configures_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should pass the options through on the first call only."""
        calls = []

        def fake_configure(**kwargs):
            calls.append(kwargs)

        monkeypatch.setattr(ftlconf.cli, "_logging_configured", False)
        monkeypatch.setattr(
            "ftlconf.config.logging_factory.configure_logging_from_cli",
            fake_configure,
        )
        ftlconf.cli._configure_logging("debug", None, True)
        ftlconf.cli._configure_logging("error", None, False)

        assert calls == [{"level": "debug", "file": None, "format": "json"}]
        assert ftlconf.cli._logging_configured is True
