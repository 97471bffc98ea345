# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Sources command implementation.
"""

import asyncio

import click
from rich.console import Console

from ..context import CliContext

console = Console()


@click.command()
@click.option(
    "--running-only",
    is_flag=True,
    help="Only list targets that answered the probe"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def sources(ctx: CliContext, running_only: bool, format: str):
    """
    Probe every configured database target.

    Examples:
        cartograph sources                  # All targets with status
        cartograph sources --running-only   # Reachable targets only
        cartograph sources -f json          # Machine-readable output
    """
    formatter = ctx.formatter(format)

    try:
        service = ctx.build_service()

        if (format or ctx.default_format) == "table":
            with console.status("Probing targets..."):
                results = asyncio.run(service.probe_sources())
        else:
            results = asyncio.run(service.probe_sources())

        if running_only:
            results = [result for result in results if result.running]

        formatter.format_sources(results)

    except Exception as e:
        formatter.format_error(str(e))
        raise click.Abort()
