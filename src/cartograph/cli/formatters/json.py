# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
JSON formatter for structured output.
"""

import json
from typing import Any, List

from rich.console import Console
from rich.syntax import Syntax

from ...snapshot.models import ProbeResult, SnapshotResponse
from ...telemetry.models import ShardTelemetry
from .base import BaseFormatter

console = Console()


class JSONFormatter(BaseFormatter):
    """Format output as JSON for scripting and automation."""

    def __init__(self, pretty: bool = True, colored: bool = True):
        """Initialize JSON formatter.

        Args:
            pretty: Whether to pretty-print JSON
            colored: Whether to use syntax highlighting
        """
        self.pretty = pretty
        self.colored = colored

    def format_sources(self, sources: List[ProbeResult]):
        """Format probe results as JSON."""
        output = {
            "sources": [source.to_dict() for source in sources],
            "count": len(sources)
        }
        self._print_json(output)

    def format_snapshot(self, snapshot: SnapshotResponse):
        """Format a keyspace snapshot as JSON."""
        self._print_json(snapshot.to_dict())

    def format_telemetry(self, shards: List[ShardTelemetry]):
        """Format per-shard telemetry as JSON."""
        self._print_json([shard.to_dict() for shard in shards])

    def format_error(self, error: str):
        """Format error message as JSON."""
        output = {
            "error": error,
            "success": False
        }
        self._print_json(output)

    def _print_json(self, data: Any):
        """Print JSON with optional formatting and coloring."""
        if self.pretty:
            json_str = json.dumps(data, indent=2, sort_keys=False, default=str)
        else:
            json_str = json.dumps(data, default=str)

        if self.colored:
            syntax = Syntax(json_str, "json", theme="monokai")
            console.print(syntax)
        else:
            print(json_str)
