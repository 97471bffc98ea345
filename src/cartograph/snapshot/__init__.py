# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Keyspace snapshots of Redis targets.

Provides:
- Liveness probing of configured targets
- Bounded SCAN-based key enumeration
- Batched TYPE/TTL metadata lookup
- Per-type batched payload previews with failure isolation
"""

from .models import (
    DatabaseRecord,
    DatabaseSnapshot,
    KeyMetadata,
    KeyspaceScan,
    ProbeResult,
    SnapshotResponse,
    Target,
)
from .prober import TargetProber
from .scanner import KeyspaceScanner
from .metadata import load_key_metadata
from .materializer import PayloadMaterializer
from .reader import DatabaseSnapshotReader, SnapshotError

__all__ = [
    'DatabaseRecord',
    'DatabaseSnapshot',
    'KeyMetadata',
    'KeyspaceScan',
    'ProbeResult',
    'SnapshotResponse',
    'Target',
    'TargetProber',
    'KeyspaceScanner',
    'load_key_metadata',
    'PayloadMaterializer',
    'DatabaseSnapshotReader',
    'SnapshotError',
]
