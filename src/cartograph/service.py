# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Service facade for Cartograph.

Wires configuration, probing, snapshots and telemetry aggregation together
behind the operations the web layer calls. Every call recomputes from the
live backends; nothing is cached between calls.
"""

import logging
from typing import List, Optional, Sequence

from .shared.config import Config
from .snapshot.connection import ClientFactory, create_redis_client
from .snapshot.materializer import PayloadMaterializer
from .snapshot.models import DatabaseSnapshot, ProbeResult, SnapshotResponse, Target
from .snapshot.prober import TargetProber
from .snapshot.reader import DatabaseSnapshotReader
from .snapshot.scanner import KeyspaceScanner
from .telemetry.aggregator import NetworkTelemetryAggregator
from .telemetry.models import ShardTelemetry
from .telemetry.provider import TelemetryProvider

logger = logging.getLogger(__name__)


def resolve_selected_source(
    running_sources: Sequence[ProbeResult],
    requested_source: Optional[str] = None,
) -> Optional[ProbeResult]:
    """
    Pick the source to snapshot.

    A running source whose id or name matches ``requested_source`` wins;
    otherwise the first running source; otherwise None.
    """
    requested = (requested_source or "").strip()
    if requested:
        for source in running_sources:
            if requested in (source.id, source.name):
                return source

    return running_sources[0] if running_sources else None


class CartographService:
    """
    Keyspace snapshot and telemetry service.

    Manages:
    - Target probing
    - Keyspace snapshots of the selected target
    - Network telemetry aggregation
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        telemetry_provider: Optional[TelemetryProvider] = None,
        client_factory: ClientFactory = create_redis_client,
    ):
        """
        Initialize service.

        Args:
            config: Configuration instance (creates default if not provided)
            telemetry_provider: Source of network telemetry (optional)
            client_factory: Callable building a Redis client for a target
        """
        self.config = config or Config()
        self.telemetry_provider = telemetry_provider

        limits = self.config.snapshot
        self.prober = TargetProber(
            connect_timeout=limits.probe_connect_timeout,
            client_factory=client_factory,
        )
        self.reader = DatabaseSnapshotReader(
            scanner=KeyspaceScanner(max_keys=limits.max_keys_per_db, scan_count=limits.scan_count),
            materializer=PayloadMaterializer(max_payload_chars=limits.max_payload_chars),
            connect_timeout=limits.snapshot_connect_timeout,
            client_factory=client_factory,
        )

    @property
    def targets(self) -> List[Target]:
        return list(self.config.targets)

    async def probe_sources(self) -> List[ProbeResult]:
        """Probe every configured target."""
        return await self.prober.probe_all(self.targets)

    async def read_snapshot(self, target: Target) -> DatabaseSnapshot:
        """Snapshot one target regardless of probe state."""
        return await self.reader.read_snapshot(target)

    async def list_and_snapshot(self, requested_source: Optional[str] = None) -> SnapshotResponse:
        """
        Probe all targets and snapshot the selected running one.

        Args:
            requested_source: Id or name of the target to snapshot (optional)

        Returns:
            SnapshotResponse listing running sources and the selected target's records

        Raises:
            SnapshotError: If the selected target's keyspace cannot be scanned
        """
        probe_results = await self.probe_sources()
        running_sources = [source for source in probe_results if source.running]

        selected = resolve_selected_source(running_sources, requested_source)
        if selected is None:
            logger.info("No running sources; returning empty snapshot")
            return SnapshotResponse(sources=running_sources)

        if requested_source and requested_source.strip() not in (selected.id, selected.name):
            logger.info(f"Requested source {requested_source!r} not running; using {selected.id}")

        snapshot = await self.reader.read_snapshot(selected.to_target())
        return SnapshotResponse(
            sources=running_sources,
            selected_source=selected.id,
            records=snapshot.records,
            truncated=snapshot.truncated,
        )

    def get_network_telemetry(self) -> List[ShardTelemetry]:
        """
        Aggregate live network telemetry per shard.

        Raises:
            RuntimeError: If no telemetry provider is configured
        """
        if self.telemetry_provider is None:
            raise RuntimeError("No telemetry provider configured")

        return NetworkTelemetryAggregator(self.telemetry_provider).read_network_telemetry()


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
