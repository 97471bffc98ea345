# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Data models for keyspace snapshots.

Field names follow Python conventions; ``to_dict()`` produces the camelCase
shape served to the web layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# TTL reported for keys whose remaining lifetime is unknown, expired or unreadable
UNKNOWN_TTL = -2


@dataclass(frozen=True)
class Target:
    """A configured Redis-protocol server."""

    id: str
    name: str
    host: str
    port: int = 6379

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Target":
        """
        Build a target from a config mapping.

        Args:
            data: Mapping with ``id``, ``host`` and optional ``name``/``port``

        Returns:
            Target instance

        Raises:
            ValueError: If ``id`` or ``host`` is missing, or ``port`` is invalid
        """
        target_id = str(data.get("id") or "").strip()
        host = str(data.get("host") or "").strip()
        if not target_id:
            raise ValueError("target is missing an 'id'")
        if not host:
            raise ValueError(f"target '{target_id}' is missing a 'host'")

        port = int(data.get("port", 6379))
        if port <= 0 or port > 65535:
            raise ValueError(f"target '{target_id}' has invalid port {port}")

        return cls(
            id=target_id,
            name=str(data.get("name") or target_id),
            host=host,
            port=port,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "host": self.host, "port": self.port}


@dataclass(frozen=True)
class ProbeResult:
    """Reachability of one target at probe time."""

    id: str
    name: str
    host: str
    port: int
    running: bool
    latency_ms: Optional[float] = None

    @classmethod
    def reachable(cls, target: Target, latency_ms: float) -> "ProbeResult":
        return cls(target.id, target.name, target.host, target.port, True, latency_ms)

    @classmethod
    def unreachable(cls, target: Target) -> "ProbeResult":
        return cls(target.id, target.name, target.host, target.port, False, None)

    def to_target(self) -> Target:
        return Target(id=self.id, name=self.name, host=self.host, port=self.port)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "host": self.host,
            "port": self.port,
            "running": self.running,
            "latencyMs": self.latency_ms,
        }


@dataclass(frozen=True)
class KeyMetadata:
    key: str
    type: str
    ttl_seconds: int = UNKNOWN_TTL


@dataclass
class DatabaseRecord:
    """
    One scanned key with its payload preview.

    Created with empty payload from metadata; the materializer sets
    ``payload`` and ``entry_count`` together exactly once.
    """

    source: str
    key: str
    type: str
    ttl_seconds: int
    entry_count: int = 0
    payload: str = ""

    @classmethod
    def from_metadata(cls, source: str, metadata: KeyMetadata) -> "DatabaseRecord":
        return cls(
            source=source,
            key=metadata.key,
            type=metadata.type,
            ttl_seconds=metadata.ttl_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "key": self.key,
            "type": self.type,
            "entryCount": self.entry_count,
            "ttlSeconds": self.ttl_seconds,
            "payload": self.payload,
        }


@dataclass(frozen=True)
class KeyspaceScan:
    """Sorted keys of one target and whether the key cap cut the scan short."""

    keys: List[str]
    truncated: bool = False


@dataclass
class DatabaseSnapshot:
    source: str
    records: List[DatabaseRecord] = field(default_factory=list)
    truncated: bool = False


@dataclass
class SnapshotResponse:
    """Result of probing all targets and snapshotting the selected one."""

    sources: List[ProbeResult] = field(default_factory=list)
    selected_source: Optional[str] = None
    records: List[DatabaseRecord] = field(default_factory=list)
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": [source.to_dict() for source in self.sources],
            "selectedSource": self.selected_source,
            "records": [record.to_dict() for record in self.records],
            "truncated": self.truncated,
        }
