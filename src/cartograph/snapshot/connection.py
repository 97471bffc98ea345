# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Redis client construction for probes and snapshots.

Each probe or snapshot gets its own client bound to a single-connection
blocking pool, so concurrent batched requests from one snapshot queue on the
same socket instead of opening new ones. Retries are disabled: a target that
fails once is reported as down rather than retried.
"""

import logging
from typing import Callable, Optional

import redis
from redis.backoff import NoBackoff
from redis.retry import Retry

from .models import Target

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Target, float, Optional[float]], redis.Redis]


def create_redis_client(
    target: Target,
    connect_timeout: float,
    socket_timeout: Optional[float] = None,
) -> redis.Redis:
    """
    Create a Redis client for one target.

    The connection is opened lazily by the first command.

    Args:
        target: Target to connect to
        connect_timeout: Socket connect timeout in seconds
        socket_timeout: Per-command socket timeout in seconds (None = no limit)

    Returns:
        Redis client owning a one-connection pool
    """
    pool = redis.BlockingConnectionPool(
        host=target.host,
        port=target.port,
        max_connections=1,
        timeout=None,
        socket_connect_timeout=connect_timeout,
        socket_timeout=socket_timeout,
        retry=Retry(NoBackoff(), 0),
        decode_responses=False,  # We handle decoding in the formatters
    )
    return redis.Redis(connection_pool=pool)


def close_redis_client(client: redis.Redis) -> None:
    """Close a client and its pool, ignoring errors from an already-broken socket."""
    try:
        client.close()
        client.connection_pool.disconnect()
    except Exception as e:
        logger.debug(f"Ignoring error while closing Redis client: {e}")
