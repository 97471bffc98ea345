# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Snapshot command implementation.
"""

import asyncio

import click

from ..context import CliContext


@click.command()
@click.option(
    "--source", "-s",
    default="",
    help="Id or name of the target to read (default: first running target)"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def snapshot(ctx: CliContext, source: str, format: str):
    """
    Snapshot the keyspace of a running database target.

    Examples:
        cartograph snapshot                  # First running target
        cartograph snapshot -s InternalDB    # Select by name or id
        cartograph snapshot -f json          # Machine-readable output
    """
    formatter = ctx.formatter(format)

    try:
        service = ctx.build_service()
        response = asyncio.run(service.list_and_snapshot(source or None))

        output_format = format or ctx.default_format
        if source and response.selected_source is not None and output_format == "table":
            selected = next(s for s in response.sources if s.id == response.selected_source)
            if source.strip() not in (selected.id, selected.name):
                formatter.format_warning(f"Source '{source}' is not running; showing {selected.id}")

        formatter.format_snapshot(response)

    except Exception as e:
        formatter.format_error(str(e))
        raise click.Abort()
