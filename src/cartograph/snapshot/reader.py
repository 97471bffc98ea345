# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Full keyspace snapshot of a single target.

Scan, metadata and payload reads share one connection that is closed when the
snapshot finishes, including on failure. Only a failed scan is raised to the
caller; every later failure is recorded in the affected records.
"""

import asyncio
import logging
import time
from typing import Dict, Optional

from .connection import ClientFactory, close_redis_client, create_redis_client
from .materializer import PayloadMaterializer
from .metadata import load_key_metadata
from .models import DatabaseRecord, DatabaseSnapshot, Target
from .scanner import KeyspaceScanner

logger = logging.getLogger(__name__)


class SnapshotError(RuntimeError):
    """Raised when a target's keyspace cannot be enumerated."""


class DatabaseSnapshotReader:
    """Takes bounded, type-aware snapshots of Redis targets."""

    def __init__(
        self,
        scanner: Optional[KeyspaceScanner] = None,
        materializer: Optional[PayloadMaterializer] = None,
        connect_timeout: float = 3.0,
        client_factory: ClientFactory = create_redis_client,
    ):
        """
        Initialize snapshot reader.

        Args:
            scanner: Keyspace scanner (default limits if not provided)
            materializer: Payload materializer (default budget if not provided)
            connect_timeout: Connect timeout for the snapshot connection, in seconds
            client_factory: Callable building a Redis client for a target
        """
        self.scanner = scanner or KeyspaceScanner()
        self.materializer = materializer or PayloadMaterializer()
        self.connect_timeout = connect_timeout
        self.client_factory = client_factory

    async def read_snapshot(self, target: Target) -> DatabaseSnapshot:
        """
        Snapshot every key of ``target``, up to the scanner's key cap.

        Args:
            target: Target to read

        Returns:
            DatabaseSnapshot with records in sorted key order

        Raises:
            SnapshotError: If the keyspace scan fails
        """
        started_at = time.monotonic()
        logger.info(f"Reading snapshot of {target.name} ({target.host}:{target.port})")

        client = self.client_factory(target, self.connect_timeout, None)
        try:
            try:
                scan = await asyncio.to_thread(self.scanner.scan, client)
            except Exception as e:
                raise SnapshotError(f"Failed to scan keyspace of {target.name}: {e}") from e

            metadata = await asyncio.to_thread(load_key_metadata, client, scan.keys)

            records_by_key: Dict[str, DatabaseRecord] = {
                item.key: DatabaseRecord.from_metadata(target.name, item) for item in metadata
            }

            await self.materializer.materialize(client, metadata, records_by_key)

            records = [records_by_key[item.key] for item in metadata]
        finally:
            close_redis_client(client)

        elapsed_ms = (time.monotonic() - started_at) * 1000.0
        logger.info(f"Snapshot of {target.name}: {len(records)} records in {elapsed_ms:.1f}ms")

        return DatabaseSnapshot(source=target.name, records=records, truncated=scan.truncated)
