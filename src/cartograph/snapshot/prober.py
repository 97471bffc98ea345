# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Liveness probing for configured targets.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List

from .connection import ClientFactory, close_redis_client, create_redis_client
from .models import ProbeResult, Target

logger = logging.getLogger(__name__)


class TargetProber:
    """
    Probes targets with a short-lived connection and a PING.

    Probing never raises: connect timeouts, refused connections and protocol
    errors all fold into an unreachable result.
    """

    def __init__(
        self,
        connect_timeout: float = 0.5,
        client_factory: ClientFactory = create_redis_client,
    ):
        """
        Initialize prober.

        Args:
            connect_timeout: Connect and reply timeout for each probe, in seconds
            client_factory: Callable building a Redis client for a target
        """
        self.connect_timeout = connect_timeout
        self.client_factory = client_factory

    def probe_sync(self, target: Target) -> ProbeResult:
        """Probe one target, blocking the calling thread."""
        started_at = time.monotonic()
        client = None
        try:
            client = self.client_factory(target, self.connect_timeout, self.connect_timeout)
            pong = client.ping()
            latency_ms = (time.monotonic() - started_at) * 1000.0
            if pong is not True:
                logger.debug(f"Target {target.id} answered PING with {pong!r}")
                return ProbeResult.unreachable(target)
            return ProbeResult.reachable(target, round(latency_ms, 3))
        except Exception as e:
            logger.debug(f"Target {target.id} ({target.host}:{target.port}) unreachable: {e}")
            return ProbeResult.unreachable(target)
        finally:
            if client is not None:
                close_redis_client(client)

    async def probe(self, target: Target) -> ProbeResult:
        """Probe one target without blocking the event loop."""
        return await asyncio.to_thread(self.probe_sync, target)

    async def probe_all(self, targets: Iterable[Target]) -> List[ProbeResult]:
        """
        Probe every target concurrently.

        Each target gets its own worker thread, so a slow or unreachable
        target never delays the probes of the others.

        Args:
            targets: Targets to probe

        Returns:
            One result per target, in input order
        """
        targets = list(targets)
        if not targets:
            return []

        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=len(targets), thread_name_prefix="cartograph-probe") as executor:
            results = await asyncio.gather(
                *(loop.run_in_executor(executor, self.probe_sync, target) for target in targets)
            )

        running = sum(1 for result in results if result.running)
        logger.info(f"Probed {len(results)} targets: {running} running")
        return list(results)
