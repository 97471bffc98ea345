# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Shared pytest fixtures for all tests."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pytest
import redis

from cartograph.snapshot.models import Target


def _key(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="surrogateescape")
    return str(value)


def _b(value: Any) -> bytes:
    return str(value).encode("utf-8")


class FakePipeline:
    """Queues commands against a FakeRedis and replays them on execute()."""

    def __init__(self, client: "FakeRedis"):
        self.client = client
        self.commands: List[Tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str) -> Callable[..., "FakePipeline"]:
        def queue(*args, **kwargs):
            self.commands.append((name, args, kwargs))
            return self

        return queue

    def execute(self, raise_on_error: bool = True) -> List[Any]:
        names = [name for name, _, _ in self.commands]
        self.client.calls.append(("pipeline", tuple(names)))

        for name in names:
            if name in self.client.broken_pipelines:
                raise redis.ConnectionError(f"connection lost during {name}")

        results = []
        for name, args, kwargs in self.commands:
            try:
                results.append(getattr(self.client, name)(*args, _record=False, **kwargs))
            except redis.RedisError as e:
                if raise_on_error:
                    raise
                results.append(e)
        return results


class FakeRedis:
    """
    In-memory stand-in for the parts of ``redis.Redis`` Cartograph uses.

    Replies mimic redis-py with ``decode_responses=False``: values are bytes,
    TYPE is a str, TTL is an int.
    """

    def __init__(self, page_size: int = 10):
        self.page_size = page_size
        self.data: Dict[str, Tuple[str, Any]] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_on: Dict[str, Exception] = {}
        self.fail_keys: Dict[Tuple[str, str], Exception] = {}
        self.broken_pipelines: set = set()
        self.calls: List[Tuple[str, Any]] = []
        self.closed = False
        self.connection_pool = MagicMock()

    # Seeding helpers

    def set_value(self, key: str, key_type: str, value: Any, ttl: int = -1) -> "FakeRedis":
        self.data[key] = (key_type, value)
        self.ttls[key] = ttl
        return self

    # Command surface

    def _check(self, name: str, record: bool, detail: Any = None, key: Any = None) -> None:
        if record:
            self.calls.append((name, detail))
        if name in self.fail_on:
            raise self.fail_on[name]
        if key is not None and (name, _key(key)) in self.fail_keys:
            raise self.fail_keys[(name, _key(key))]

    def ping(self, _record: bool = True) -> bool:
        self._check("ping", _record)
        return True

    def scan(self, cursor: int = 0, count: Optional[int] = None, _record: bool = True):
        self._check("scan", _record, cursor)
        keys = list(self.data)
        page = keys[cursor:cursor + self.page_size]
        next_cursor = cursor + self.page_size
        if next_cursor >= len(keys):
            next_cursor = 0
        return next_cursor, [_b(k) for k in page]

    def type(self, key: Any, _record: bool = True) -> str:
        self._check("type", _record, key=key)
        entry = self.data.get(_key(key))
        return entry[0] if entry else "none"

    def ttl(self, key: Any, _record: bool = True) -> int:
        self._check("ttl", _record, key=key)
        return self.ttls.get(_key(key), -2)

    def _typed(self, key: Any, expected: str) -> Any:
        entry = self.data.get(_key(key))
        if entry is None:
            return None
        if entry[0] != expected:
            raise redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return entry[1]

    def mget(self, keys: Sequence[Any], _record: bool = True) -> List[Optional[bytes]]:
        self._check("mget", _record, len(keys))
        values = []
        for key in keys:
            entry = self.data.get(_key(key))
            values.append(_b(entry[1]) if entry and entry[0] == "string" else None)
        return values

    def hgetall(self, key: Any, _record: bool = True) -> Dict[bytes, bytes]:
        self._check("hgetall", _record, key=key)
        fields = self._typed(key, "hash") or {}
        return {_b(k): _b(v) for k, v in fields.items()}

    def smembers(self, key: Any, _record: bool = True) -> set:
        self._check("smembers", _record, key=key)
        return {_b(m) for m in (self._typed(key, "set") or ())}

    def zrange(self, key: Any, start: int, end: int, withscores: bool = False,
               score_cast_func: Callable = float, _record: bool = True) -> list:
        self._check("zrange", _record, key=key)
        pairs = self._typed(key, "zset") or []
        if withscores:
            return [(_b(member), score_cast_func(_b(score))) for member, score in pairs]
        return [_b(member) for member, _ in pairs]

    def lrange(self, key: Any, start: int, end: int, _record: bool = True) -> List[bytes]:
        self._check("lrange", _record, key=key)
        return [_b(v) for v in (self._typed(key, "list") or [])]

    def execute_command(self, *args, _record: bool = True) -> Any:
        command = str(args[0]).upper()
        self._check(command, _record, key=args[1] if len(args) > 1 else None)
        if command != "JSON.GET":
            raise redis.ResponseError(f"unknown command '{command}'")
        entry = self.data.get(_key(args[1]))
        if entry is None:
            return None
        if entry[0] != "ReJSON-RL":
            raise redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return _b(entry[1])

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Empty fake Redis client."""
    return FakeRedis()


@pytest.fixture
def populated_redis() -> FakeRedis:
    """Fake Redis holding one key of every supported type."""
    client = FakeRedis(page_size=3)
    client.set_value("greeting", "string", "hello", ttl=120)
    client.set_value("shard:bounds", "hash", {"b": 2, "a": 1})
    client.set_value("shards:pending", "set", {"z", "a"})
    client.set_value("leaderboard", "zset", [("bob", "2.5"), ("alice", "1")])
    client.set_value("queue", "list", ["x", "y"])
    client.set_value("manifest", "ReJSON-RL", '{"shards":3}')
    client.set_value("events", "stream", None)
    return client


@pytest.fixture
def target() -> Target:
    return Target(id="internal", name="InternalDB", host="localhost", port=6379)


@pytest.fixture
def make_factory():
    """
    Build a client factory from a mapping of target id to client or exception.

    Targets missing from the mapping raise ConnectionRefusedError.
    """

    def build(clients: Dict[str, Any]):
        def factory(target: Target, connect_timeout: float, socket_timeout: Optional[float] = None):
            client = clients.get(target.id)
            if client is None:
                raise redis.ConnectionError(f"Error 111 connecting to {target.host}:{target.port}")
            if isinstance(client, Exception):
                raise client
            return client

        return factory

    return build
