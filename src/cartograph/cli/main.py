# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Main CLI entry point for Cartograph.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .commands import snapshot, sources, telemetry
from .context import CliContext
from ..service import setup_logging
from ..shared.config import Config

# Create console for rich output
console = Console()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit"
)
@click.option(
    "--config", "config_path",
    envvar="CARTOGRAPH_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.yaml (default: ~/.cartograph/config.yaml)"
)
@click.option(
    "--format",
    envvar="CARTOGRAPH_FORMAT",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Default output format"
)
@click.option(
    "--debug",
    envvar="CARTOGRAPH_DEBUG",
    is_flag=True,
    help="Enable debug logging"
)
@click.option(
    "--no-color",
    envvar="NO_COLOR",
    is_flag=True,
    help="Disable colored output"
)
@click.pass_context
def cli(ctx, version: bool, config_path: Optional[Path], format: str, debug: bool, no_color: bool):
    """
    Cartograph - keyspace snapshots and network telemetry for AtlasNet.

    Examples:
        cartograph sources
        cartograph snapshot --source InternalDB
        cartograph telemetry --input telemetry.json
    """
    if version:
        click.echo(f"Cartograph CLI version {__version__}")
        ctx.exit()

    config = Config(config_path=config_path)
    setup_logging("DEBUG" if debug else config.log_level)

    if not config.validate():
        raise click.UsageError(f"Invalid configuration in {config.config_path}")

    ctx.obj = CliContext(
        config=config,
        default_format=format,
        no_color=no_color,
        debug=debug,
    )

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Add commands
cli.add_command(sources.sources)
cli.add_command(snapshot.snapshot)
cli.add_command(telemetry.telemetry)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("CARTOGRAPH_DEBUG"):
            console.print_exception()
        else:
            console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
