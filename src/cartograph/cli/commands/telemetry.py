# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Telemetry command implementation.
"""

from pathlib import Path
from typing import Optional

import click

from ...telemetry.provider import JsonFileTelemetryProvider
from ..context import CliContext


@click.command()
@click.option(
    "--input", "-i", "input_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON telemetry dump (default: telemetry.rows_file from config)"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def telemetry(ctx: CliContext, input_path: Optional[Path], format: str):
    """
    Aggregate network telemetry per shard.

    Examples:
        cartograph telemetry -i telemetry.json
        cartograph telemetry -f json
    """
    formatter = ctx.formatter(format)

    path = input_path or ctx.config.telemetry_rows_file
    if path is None:
        formatter.format_error("No telemetry input; pass --input or set telemetry.rows_file")
        raise click.Abort()

    try:
        service = ctx.build_service(telemetry_provider=JsonFileTelemetryProvider(path))
        shards = service.get_network_telemetry()
        formatter.format_telemetry(shards)

    except Exception as e:
        formatter.format_error(str(e))
        raise click.Abort()
