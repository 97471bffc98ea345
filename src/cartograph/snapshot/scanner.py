# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Bounded keyspace enumeration using SCAN.

The scan stops as soon as ``max_keys`` distinct keys have been collected, so
very large keyspaces are sampled rather than read in full. The returned key
list is always sorted so downstream output is deterministic.
"""

import logging
from typing import List, Set

import redis

from .formatting import decode_key
from .models import KeyspaceScan

logger = logging.getLogger(__name__)


class KeyspaceScanner:
    """Enumerates the keys of one Redis database with cursor-based SCAN."""

    def __init__(self, max_keys: int = 5000, scan_count: int = 500):
        """
        Initialize scanner.

        Args:
            max_keys: Maximum number of keys to collect
            scan_count: COUNT hint sent with every SCAN page
        """
        if max_keys <= 0:
            raise ValueError("max_keys must be positive")
        self.max_keys = max_keys
        self.scan_count = scan_count

    def scan(self, client: redis.Redis) -> KeyspaceScan:
        """
        Collect up to ``max_keys`` keys.

        Redis errors propagate: without the cursor position there is no
        meaningful partial result.

        Args:
            client: Redis client

        Returns:
            KeyspaceScan with sorted keys and a truncation flag
        """
        seen: Set[str] = set()
        keys: List[str] = []
        cursor = 0

        while True:
            cursor, page = client.scan(cursor=cursor, count=self.scan_count)
            cursor = int(cursor)

            for position, raw_key in enumerate(page):
                key = decode_key(raw_key)
                if key in seen:
                    # SCAN may return an element more than once
                    continue
                seen.add(key)
                keys.append(key)

                if len(keys) >= self.max_keys:
                    truncated = position < len(page) - 1 or cursor != 0
                    if truncated:
                        logger.warning(
                            f"Keyspace scan stopped at {self.max_keys} keys; "
                            f"remaining keys are not included"
                        )
                    return KeyspaceScan(keys=sorted(keys), truncated=truncated)

            if cursor == 0:
                break

        logger.debug(f"Keyspace scan complete: {len(keys)} keys")
        return KeyspaceScan(keys=sorted(keys), truncated=False)

    def scan_keys(self, client: redis.Redis) -> List[str]:
        """Collect up to ``max_keys`` keys, sorted ascending."""
        return self.scan(client).keys
