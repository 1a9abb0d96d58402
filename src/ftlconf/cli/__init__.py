"""CLI module for ftlconf."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import click

from ftlconf.config.locations import ConfigLocations

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from ftlconf.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


def _build_locations(
    toml_path: Path | None, legacy_path: Path | None
) -> ConfigLocations:
    """Apply --toml/--legacy on top of the environment's search order."""
    locations = ConfigLocations.from_env()
    overrides: dict[str, object] = {}
    if toml_path is not None:
        overrides["toml"] = (toml_path,)
        overrides["toml_target"] = toml_path
    if legacy_path is not None:
        overrides["legacy"] = (legacy_path,)
    return dataclasses.replace(locations, **overrides)


def get_locations(ctx: click.Context) -> ConfigLocations:
    """Return the search order chosen by the group options."""
    return ctx.obj["locations"]


@click.group()
@click.version_option(package_name="ftlconf")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--toml",
    "toml_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Use this pihole-FTL.toml instead of searching for one.",
)
@click.option(
    "--legacy",
    "legacy_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Use this pihole-FTL.conf instead of searching for one.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    toml_path: Path | None,
    legacy_path: Path | None,
) -> None:
    """ftlconf - Inspect, validate and migrate Pi-hole FTL configuration."""
    ctx.ensure_object(dict)

    _configure_logging(log_level, log_file, log_json)

    # Preserve locations passed in by tests
    if "locations" not in ctx.obj:
        ctx.obj["locations"] = _build_locations(toml_path, legacy_path)


# Defer import to avoid circular dependency
def _register_commands():
    from ftlconf.cli.config import check_command, get_command, show_command
    from ftlconf.cli.debug import debug_command
    from ftlconf.cli.migrate import migrate_command

    main.add_command(show_command)
    main.add_command(get_command)
    main.add_command(check_command)
    main.add_command(migrate_command)
    main.add_command(debug_command)


_register_commands()
