"""CLI command converting the legacy document into pihole-FTL.toml."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from ftlconf.cli import get_locations
from ftlconf.cli.exit_codes import ExitCode
from ftlconf.config.exceptions import ConfigLoadError
from ftlconf.config.loader import migrate_legacy

logger = logging.getLogger(__name__)


@click.command("migrate")
@click.option(
    "--target",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write the TOML document here (default: /etc/pihole/pihole-FTL.toml).",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite an existing TOML document.",
)
@click.pass_context
def migrate_command(ctx: click.Context, target: Path | None, force: bool) -> None:
    """Convert pihole-FTL.conf into pihole-FTL.toml.

    Settings missing from the legacy document are written with their
    default values.

    Examples:

        # Convert the system-wide legacy document
        ftlconf migrate

        # Convert a specific file
        ftlconf --legacy ./pihole-FTL.conf migrate --target ./pihole-FTL.toml
    """
    locations = get_locations(ctx)
    target = target or locations.toml_target

    if target.exists() and not force:
        click.echo(
            f"Error: {target} already exists. Use --force to overwrite.", err=True
        )
        ctx.exit(ExitCode.TARGET_EXISTS)

    try:
        result = migrate_legacy(locations, target)
    except ConfigLoadError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.TARGET_NOT_FOUND)
    except OSError as e:
        logger.error("Cannot write %s: %s", target, e)
        click.echo(f"Error: Cannot write {target}: {e}", err=True)
        ctx.exit(ExitCode.WRITE_ERROR)

    changed = len(result.registry.changed())
    click.echo(f"Migrated {result.legacy_path} to {target} ({changed} changed)")
