# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Table formatter using Rich for terminal output.
"""

from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...snapshot.models import ProbeResult, SnapshotResponse
from ...telemetry.models import ShardTelemetry
from .base import BaseFormatter

console = Console()


class TableFormatter(BaseFormatter):
    """Format output as tables using Rich."""

    def format_sources(self, sources: List[ProbeResult]):
        """Format probe results as a table."""
        if not sources:
            console.print("[yellow]No targets configured[/yellow]")
            return

        table = Table(title="Database Targets", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="blue")
        table.add_column("Address", style="dim")
        table.add_column("Status", justify="center")
        table.add_column("Latency", justify="right")

        for source in sources:
            status = "[green]✓ running[/green]" if source.running else "[red]✗ down[/red]"
            table.add_row(
                source.id,
                source.name,
                f"{source.host}:{source.port}",
                status,
                self._format_latency(source.latency_ms),
            )

        console.print(table)

    def format_snapshot(self, snapshot: SnapshotResponse):
        """Format a keyspace snapshot as a table."""
        if snapshot.selected_source is None:
            console.print("[yellow]No running database sources[/yellow]")
            return

        title = f"Keyspace of {snapshot.selected_source} ({len(snapshot.records)} keys)"
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Type", style="blue")
        table.add_column("TTL", justify="right")
        table.add_column("Entries", justify="right")
        table.add_column("Payload")

        for record in snapshot.records:
            # Stored values may contain Rich markup; print them verbatim
            table.add_row(
                escape(record.key),
                record.type,
                self._format_ttl(record.ttl_seconds),
                f"{record.entry_count:,}",
                escape(self._preview(record.payload)),
            )

        console.print(table)

        if snapshot.truncated:
            self.format_warning("Key limit reached; the keyspace has more keys than shown")

    def format_telemetry(self, shards: List[ShardTelemetry]):
        """Format per-shard telemetry as a table."""
        if not shards:
            console.print("[yellow]No live shards[/yellow]")
            return

        table = Table(title="Network Telemetry", show_header=True, header_style="bold magenta")
        table.add_column("Shard", style="cyan", no_wrap=True)
        table.add_column("Connections", justify="right")
        table.add_column("Download", justify="right")
        table.add_column("Upload", justify="right")
        table.add_column("Avg Ping", justify="right")

        for shard in shards:
            if shard.connections:
                avg_ping = sum(c.ping_ms for c in shard.connections) / len(shard.connections)
                ping = f"{avg_ping:.0f} ms"
            else:
                ping = "-"
            table.add_row(
                shard.shard_id,
                str(len(shard.connections)),
                self._format_rate(shard.download_kbps),
                self._format_rate(shard.upload_kbps),
                ping,
            )

        console.print(table)

    def format_error(self, error: str):
        """Format error message."""
        console.print(f"[red]Error:[/red] {error}")
