# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Per-shard aggregation of connection telemetry.

Raw rows come from the native runtime as lists of strings, one per
connection. Column layout (after an optional leading shard id):

    identityId, targetId, pingMs, inBytesPerSec, outBytesPerSec,
    inPacketsPerSec, pendingReliableBytes, pendingUnreliableBytes,
    sentUnackedReliableBytes, queueTimeUsec, qualityLocal, qualityRemote, state

Rows with fewer than 13 columns are dropped. Numeric columns that fail to
parse become NaN and are kept.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import ConnectionTelemetry, ShardTelemetry
from .provider import TelemetryProvider

logger = logging.getLogger(__name__)

MIN_ROW_COLUMNS = 13
SHARD_ROW_COLUMNS = 14


def to_number(value: Any) -> float:
    """Parse a numeric column, returning NaN for anything unparseable."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def decode_connection_row(row: Sequence[Any]) -> Optional[ConnectionTelemetry]:
    """
    Decode one telemetry row.

    Args:
        row: Row of string columns

    Returns:
        ConnectionTelemetry, or None if the row is too short
    """
    if len(row) < MIN_ROW_COLUMNS:
        return None

    has_shard_id = len(row) >= SHARD_ROW_COLUMNS
    offset = 1 if has_shard_id else 0

    return ConnectionTelemetry(
        shard_id=str(row[0]) if has_shard_id else None,
        identity_id=str(row[offset]),
        target_id=str(row[offset + 1]),
        ping_ms=to_number(row[offset + 2]),
        in_bytes_per_sec=to_number(row[offset + 3]),
        out_bytes_per_sec=to_number(row[offset + 4]),
        in_packets_per_sec=to_number(row[offset + 5]),
        pending_reliable_bytes=to_number(row[offset + 6]),
        pending_unreliable_bytes=to_number(row[offset + 7]),
        sent_unacked_reliable_bytes=to_number(row[offset + 8]),
        queue_time_usec=to_number(row[offset + 9]),
        quality_local=to_number(row[offset + 10]),
        quality_remote=to_number(row[offset + 11]),
        state=str(row[offset + 12]),
    )


def compute_shard_averages(connections: Sequence[ConnectionTelemetry]) -> Tuple[float, float]:
    """
    Mean inbound and outbound rate over a shard's connections.

    Returns:
        (in_avg, out_avg), or (0.0, 0.0) when there are no connections
    """
    if not connections:
        return 0.0, 0.0

    in_sum = sum(c.in_bytes_per_sec for c in connections)
    out_sum = sum(c.out_bytes_per_sec for c in connections)
    return in_sum / len(connections), out_sum / len(connections)


def group_connections(rows: Iterable[Sequence[Any]]) -> Dict[str, List[ConnectionTelemetry]]:
    """Decode rows and group them by shard, dropping malformed rows."""
    grouped: Dict[str, List[ConnectionTelemetry]] = defaultdict(list)
    dropped = 0

    for row in rows:
        decoded = decode_connection_row(row)
        if decoded is None:
            dropped += 1
            continue
        grouped[decoded.shard_key].append(decoded)

    if dropped:
        logger.debug(f"Dropped {dropped} telemetry rows with fewer than {MIN_ROW_COLUMNS} columns")

    return dict(grouped)


class NetworkTelemetryAggregator:
    """Builds per-shard telemetry summaries from a provider."""

    def __init__(self, provider: TelemetryProvider):
        """
        Initialize aggregator.

        Args:
            provider: Source of live identities and connection rows
        """
        self.provider = provider

    def read_network_telemetry(self) -> List[ShardTelemetry]:
        """
        Aggregate the provider's current rows.

        The output holds one entry per live identity, in provider order,
        including identities that currently have no connections.
        """
        identities = self.provider.get_live_identities()
        connections_by_shard = group_connections(self.provider.get_connection_rows())

        shards = []
        for identity in identities:
            connections = connections_by_shard.get(identity.id, [])
            in_avg, out_avg = compute_shard_averages(connections)
            shards.append(
                ShardTelemetry(
                    shard_id=identity.id,
                    download_kbps=in_avg,
                    upload_kbps=out_avg,
                    connections=list(connections),
                )
            )

        logger.debug(f"Aggregated telemetry for {len(shards)} shards")
        return shards
