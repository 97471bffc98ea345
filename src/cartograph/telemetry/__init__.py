# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Network telemetry decoding and per-shard aggregation.
"""

from .models import ConnectionTelemetry, ShardIdentity, ShardTelemetry
from .provider import JsonFileTelemetryProvider, StaticTelemetryProvider, TelemetryProvider
from .aggregator import (
    NetworkTelemetryAggregator,
    compute_shard_averages,
    decode_connection_row,
    group_connections,
)

__all__ = [
    'ConnectionTelemetry',
    'ShardIdentity',
    'ShardTelemetry',
    'TelemetryProvider',
    'StaticTelemetryProvider',
    'JsonFileTelemetryProvider',
    'NetworkTelemetryAggregator',
    'compute_shard_averages',
    'decode_connection_row',
    'group_connections',
]
