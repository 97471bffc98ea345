# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Base formatter class for output formatting.
"""

import math
from abc import ABC, abstractmethod
from typing import List, Optional

from rich.console import Console

from ...snapshot.models import ProbeResult, SnapshotResponse
from ...telemetry.models import ShardTelemetry

console = Console()


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_sources(self, sources: List[ProbeResult]):
        """Format probe results for output."""
        pass

    @abstractmethod
    def format_snapshot(self, snapshot: SnapshotResponse):
        """Format a keyspace snapshot for output."""
        pass

    @abstractmethod
    def format_telemetry(self, shards: List[ShardTelemetry]):
        """Format per-shard network telemetry for output."""
        pass

    @abstractmethod
    def format_error(self, error: str):
        """Format error message for output."""
        pass

    def format_warning(self, message: str):
        """Format warning message for output."""
        console.print(f"[yellow]⚠[/yellow] {message}")

    def _format_latency(self, latency_ms: Optional[float]) -> str:
        if latency_ms is None:
            return "-"
        return f"{latency_ms:.1f} ms"

    def _format_ttl(self, ttl_seconds: int) -> str:
        """Format a TTL; -1 means no expiry, -2 unknown."""
        if ttl_seconds == -1:
            return "∞"
        if ttl_seconds < 0:
            return "?"
        if ttl_seconds < 60:
            return f"{ttl_seconds}s"
        elif ttl_seconds < 3600:
            return f"{ttl_seconds / 60:.1f}m"
        else:
            return f"{ttl_seconds / 3600:.1f}h"

    def _format_rate(self, bytes_per_sec: float) -> str:
        """Format a transfer rate in human-readable format."""
        if math.isnan(bytes_per_sec):
            return "n/a"
        for unit in ["B/s", "KB/s", "MB/s", "GB/s"]:
            if abs(bytes_per_sec) < 1024.0:
                return f"{bytes_per_sec:.1f} {unit}"
            bytes_per_sec /= 1024.0
        return f"{bytes_per_sec:.1f} TB/s"

    def _preview(self, payload: str, width: int = 60) -> str:
        """First line of a payload, clipped to ``width`` characters."""
        first_line = payload.split("\n", 1)[0]
        if len(first_line) > width or "\n" in payload:
            return first_line[:width] + "…"
        return first_line
