"""CLI commands for inspecting and validating configuration documents."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import click

from ftlconf.cli import get_locations
from ftlconf.cli.exit_codes import ExitCode
from ftlconf.config.exceptions import TomlParseError
from ftlconf.config.loader import LoadResult, load_config
from ftlconf.config.registry import Registry, default_registry, plain_value
from ftlconf.config.toml_codec import decode, dumps, encode
from ftlconf.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)


def _describe_sources(result: LoadResult) -> str:
    if result.toml_path is not None:
        return str(result.toml_path)
    if result.legacy_path is not None:
        return f"{result.legacy_path} (legacy)"
    return "defaults"


@click.command("show")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)
@click.option(
    "--changed",
    is_flag=True,
    help="Only list settings that differ from their default.",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit help texts from the TOML output.",
)
@click.pass_context
def show_command(
    ctx: click.Context, json_output: bool, changed: bool, no_comments: bool
) -> None:
    """Print the effective configuration.

    The structured document is read if present; otherwise a legacy
    document seeds the settings.

    Examples:

        # Print the configuration as pihole-FTL.toml would contain it
        ftlconf show

        # Only settings that differ from their default
        ftlconf show --changed

        # Output as JSON
        ftlconf show --json
    """
    result = load_config(get_locations(ctx))
    registry = result.registry
    logger.debug("Showing configuration from %s", _describe_sources(result))

    if json_output:
        if changed:
            data = {item.key: plain_value(item.value) for item in registry.changed()}
        else:
            data = registry.as_dict()
        click.echo(json.dumps(data, indent=2))
        return

    if changed:
        for item in registry.changed():
            click.echo(f"{item.key} = {encode(item)}")
        return

    click.echo(dumps(registry, comments=not no_comments), nl=False)


@click.command("get")
@click.argument("key")
@click.option(
    "--toml-value",
    is_flag=True,
    help="Print the value as a TOML scalar (strings quoted).",
)
@click.pass_context
def get_command(ctx: click.Context, key: str, toml_value: bool) -> None:
    """Print the effective value of one setting.

    KEY is the dotted path of the setting, e.g. dns.blockingmode.

    Examples:

        ftlconf get misc.privacylevel
        ftlconf get dns.reply.host.IPv4
    """
    registry = load_config(get_locations(ctx)).registry
    try:
        item = registry.get_by_path(key)
    except KeyError:
        click.echo(f"Error: Unknown setting '{key}'.", err=True)
        ctx.exit(ExitCode.UNKNOWN_KEY)

    if toml_value:
        click.echo(encode(item))
        return

    value = plain_value(item.value)
    if isinstance(value, bool):
        value = "true" if value else "false"
    click.echo(value)


def _unknown_keys(
    registry: Registry, table: Mapping[str, Any], prefix: tuple[str, ...] = ()
) -> Iterator[str]:
    """Yield dotted keys of the document that no setting corresponds to."""
    for name, value in table.items():
        path = (*prefix, name)
        if isinstance(value, Mapping):
            yield from _unknown_keys(registry, value, path)
        elif path not in registry:
            yield ".".join(path)


def validate_document(
    registry: Registry, document: Mapping[str, Any]
) -> tuple[list[str], list[str]]:
    """Decode every present setting of a parsed document.

    Args:
        registry: Registry to decode into.
        document: Parsed structured document.

    Returns:
        Tuple of (keys with rejected values, keys not known to the registry).
    """
    invalid: list[str] = []
    for item in registry:
        table = registry.resolve_table(document, item)
        if table is None or item.leaf not in table:
            continue
        if not decode(table, item.leaf, item):
            invalid.append(item.key)
    return invalid, list(_unknown_keys(registry, document))


@click.command("check")
@click.argument(
    "path",
    type=click.Path(path_type=Path, dir_okay=False),
    required=False,
)
@click.pass_context
def check_command(ctx: click.Context, path: Path | None) -> None:
    """Validate a pihole-FTL.toml document.

    PATH defaults to the structured document found in the search order.
    Unknown settings are reported but do not fail the check.

    Examples:

        ftlconf check /etc/pihole/pihole-FTL.toml
    """
    if path is None:
        candidates = get_locations(ctx).toml
        path = next((p for p in candidates if p.is_file()), None)
        if path is None:
            click.echo("Error: No pihole-FTL.toml found.", err=True)
            ctx.exit(ExitCode.TARGET_NOT_FOUND)

    try:
        document = load_toml_file(path)
    except FileNotFoundError:
        click.echo(f"Error: File not found: {path}", err=True)
        ctx.exit(ExitCode.TARGET_NOT_FOUND)
    except TomlParseError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.PARSE_ERROR)

    invalid, unknown = validate_document(default_registry(), document)

    for key in unknown:
        click.echo(f"Warning: Unknown setting {key}", err=True)
    for key in invalid:
        click.echo(f"Invalid value for {key}", err=True)

    if invalid:
        click.echo(f"{path}: {len(invalid)} invalid setting(s)")
        ctx.exit(ExitCode.INVALID_SETTINGS)
    click.echo(f"{path}: OK")
