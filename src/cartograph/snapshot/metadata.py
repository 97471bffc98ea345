# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Batched TYPE/TTL lookup for scanned keys.
"""

import logging
import math
from typing import Any, List, Sequence

import redis

from .formatting import encode_key, to_text
from .models import UNKNOWN_TTL, KeyMetadata

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "unknown"


def to_ttl_seconds(value: Any) -> int:
    """Coerce a TTL reply to int; anything non-finite becomes ``UNKNOWN_TTL``."""
    if isinstance(value, Exception) or value is None or isinstance(value, bool):
        return UNKNOWN_TTL
    try:
        number = float(to_text(value))
    except (TypeError, ValueError):
        return UNKNOWN_TTL
    if not math.isfinite(number):
        return UNKNOWN_TTL
    return int(number)


def load_key_metadata(client: redis.Redis, keys: Sequence[str]) -> List[KeyMetadata]:
    """
    Fetch type and remaining TTL for every key in one round trip.

    A failed TYPE or TTL for one key only degrades that key. If the whole
    batch fails every key is reported as ``unknown`` with an unknown TTL.

    Args:
        client: Redis client
        keys: Keys in output order

    Returns:
        One KeyMetadata per key, in input order
    """
    if not keys:
        return []

    pipe = client.pipeline(transaction=False)
    for key in keys:
        pipe.type(encode_key(key))
        pipe.ttl(encode_key(key))

    try:
        results = pipe.execute(raise_on_error=False)
    except Exception as e:
        logger.warning(f"Metadata batch for {len(keys)} keys failed: {e}")
        return [KeyMetadata(key=key, type=UNKNOWN_TYPE, ttl_seconds=UNKNOWN_TTL) for key in keys]

    metadata = []
    for index, key in enumerate(keys):
        type_value = results[index * 2] if index * 2 < len(results) else None
        ttl_value = results[index * 2 + 1] if index * 2 + 1 < len(results) else None

        if isinstance(type_value, Exception) or type_value is None:
            key_type = UNKNOWN_TYPE
        else:
            key_type = to_text(type_value)

        metadata.append(KeyMetadata(key=key, type=key_type, ttl_seconds=to_ttl_seconds(ttl_value)))

    return metadata
