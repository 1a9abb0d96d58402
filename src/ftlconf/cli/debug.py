"""CLI command listing the effective debug flags."""

from __future__ import annotations

import json

import click

from ftlconf.cli import get_locations
from ftlconf.config.debug import config_key, iter_flags
from ftlconf.config.loader import load_config


@click.command("debug")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)
@click.option(
    "--enabled",
    is_flag=True,
    help="Only list enabled flags.",
)
@click.pass_context
def debug_command(ctx: click.Context, json_output: bool, enabled: bool) -> None:
    """List the debug flags of the effective configuration.

    Examples:

        ftlconf debug
        ftlconf debug --enabled --json
    """
    flags = load_config(get_locations(ctx)).debug_flags
    rows = [
        (config_key(flag), flags.is_set(flag))
        for flag in iter_flags()
        if flags.is_set(flag) or not enabled
    ]

    if json_output:
        click.echo(json.dumps(dict(rows), indent=2))
        return

    for name, value in rows:
        click.echo(f"{name:<15} {'YES' if value else 'NO'}")
