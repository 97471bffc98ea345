# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Payload previews for scanned keys.

Keys are grouped into buckets by type and each bucket is read with a single
batched request (MGET for strings, one pipeline for every other type). The
buckets are dispatched concurrently. Failures never escape: a failed batch
turns every key of its bucket into a read-error placeholder, and a failed
command inside a pipeline only affects its own key.

Types without a handler fall back to a RedisJSON read; keys that are not JSON
documents are reported as unsupported.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

import redis

from .formatting import (
    KEY_EXPIRED,
    UNSUPPORTED_TYPE,
    encode_key,
    format_hash,
    format_json_document,
    format_list,
    format_set,
    format_string,
    format_zset,
    not_implemented_placeholder,
    read_error_placeholder,
    to_text,
    truncate_payload,
)
from .models import DatabaseRecord, KeyMetadata

logger = logging.getLogger(__name__)

JSON_TYPE = "json"

# Types the server reports that we deliberately do not preview
PREVIEW_NOT_IMPLEMENTED = ("stream", "vectorset")


@dataclass(frozen=True)
class TypeHandler:
    """How one bucket of keys is fetched and rendered."""

    bucket: str
    fetch: Callable[[redis.Redis, Sequence[str]], List[Any]]
    format: Callable[[Any], Tuple[str, int]]


def _fetch_strings(client: redis.Redis, keys: Sequence[str]) -> List[Any]:
    return client.mget([encode_key(key) for key in keys])


def _pipelined(command: Callable[[Any, bytes], Any]) -> Callable[[redis.Redis, Sequence[str]], List[Any]]:
    """Build a fetcher queueing ``command`` once per key in a single pipeline."""

    def fetch(client: redis.Redis, keys: Sequence[str]) -> List[Any]:
        pipe = client.pipeline(transaction=False)
        for key in keys:
            command(pipe, encode_key(key))
        return pipe.execute(raise_on_error=False)

    return fetch


TYPE_HANDLERS: Dict[str, TypeHandler] = {
    "string": TypeHandler("string", _fetch_strings, format_string),
    "hash": TypeHandler(
        "hash",
        _pipelined(lambda pipe, key: pipe.hgetall(key)),
        format_hash,
    ),
    "set": TypeHandler(
        "set",
        _pipelined(lambda pipe, key: pipe.smembers(key)),
        format_set,
    ),
    "zset": TypeHandler(
        "zset",
        _pipelined(lambda pipe, key: pipe.zrange(key, 0, -1, withscores=True, score_cast_func=to_text)),
        format_zset,
    ),
    "list": TypeHandler(
        "list",
        _pipelined(lambda pipe, key: pipe.lrange(key, 0, -1)),
        format_list,
    ),
}

JSON_FALLBACK = TypeHandler(
    JSON_TYPE,
    _pipelined(lambda pipe, key: pipe.execute_command("JSON.GET", key, ".")),
    format_json_document,
)


class PayloadMaterializer:
    """Fills in payload and entry count for every record of a snapshot."""

    def __init__(self, max_payload_chars: int = 4096):
        """
        Initialize materializer.

        Args:
            max_payload_chars: Character budget for a single payload preview
        """
        self.max_payload_chars = max_payload_chars

    async def materialize(
        self,
        client: redis.Redis,
        metadata: Sequence[KeyMetadata],
        records_by_key: Dict[str, DatabaseRecord],
    ) -> None:
        """
        Populate ``records_by_key`` in place.

        Args:
            client: Redis client for the snapshot target
            metadata: Key metadata from the metadata loader
            records_by_key: Records to fill, keyed by key name
        """
        buckets: Dict[str, List[str]] = {name: [] for name in TYPE_HANDLERS}
        fallback_keys: List[str] = []

        for item in metadata:
            record = records_by_key.get(item.key)
            if record is None:
                continue

            if item.type == "none":
                # Key expired or was deleted between SCAN and TYPE
                self._set_payload(record, KEY_EXPIRED, 0)
            elif item.type in PREVIEW_NOT_IMPLEMENTED:
                self._set_payload(record, not_implemented_placeholder(item.type), 0)
            elif item.type in buckets:
                buckets[item.type].append(item.key)
            else:
                fallback_keys.append(item.key)

        tasks = [
            self._materialize_bucket(client, TYPE_HANDLERS[name], keys, records_by_key)
            for name, keys in buckets.items()
            if keys
        ]
        if fallback_keys:
            tasks.append(self._materialize_fallback(client, fallback_keys, records_by_key))

        await asyncio.gather(*tasks)

    async def _materialize_bucket(
        self,
        client: redis.Redis,
        handler: TypeHandler,
        keys: List[str],
        records_by_key: Dict[str, DatabaseRecord],
    ) -> None:
        try:
            results = await asyncio.to_thread(handler.fetch, client, keys)
        except Exception as e:
            logger.warning(f"Batched {handler.bucket} read of {len(keys)} keys failed: {e}")
            for key in keys:
                self._set_payload(records_by_key[key], read_error_placeholder(e), 0)
            return

        for index, key in enumerate(keys):
            record = records_by_key[key]
            result = results[index] if index < len(results) else None
            if isinstance(result, Exception):
                self._set_payload(record, read_error_placeholder(result), 0)
                continue
            try:
                payload, entry_count = handler.format(result)
            except Exception as e:
                logger.warning(f"Could not format {handler.bucket} value of {key!r}: {e}")
                self._set_payload(record, read_error_placeholder(e), 0)
                continue
            self._set_payload(record, payload, entry_count)

    async def _materialize_fallback(
        self,
        client: redis.Redis,
        keys: List[str],
        records_by_key: Dict[str, DatabaseRecord],
    ) -> None:
        try:
            results = await asyncio.to_thread(JSON_FALLBACK.fetch, client, keys)
        except Exception as e:
            logger.warning(f"JSON fallback read of {len(keys)} keys failed: {e}")
            results = [e] * len(keys)

        for index, key in enumerate(keys):
            record = records_by_key[key]
            result = results[index] if index < len(results) else None
            if result is None or isinstance(result, Exception):
                self._set_payload(record, UNSUPPORTED_TYPE, 0)
                continue

            payload, entry_count = JSON_FALLBACK.format(result)
            record.type = JSON_TYPE
            self._set_payload(record, payload, entry_count)

    def _set_payload(self, record: DatabaseRecord, payload: str, entry_count: int) -> None:
        record.payload = truncate_payload(payload, self.max_payload_chars)
        record.entry_count = entry_count
