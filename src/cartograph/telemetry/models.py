# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Data models for network telemetry.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class ShardIdentity:
    """A live identity reported by the telemetry provider."""

    id: str
    health: str = ""

    @classmethod
    def pair(cls, ids: Sequence[Any], health: Sequence[Any]) -> List["ShardIdentity"]:
        """Pair parallel id/health lists, stopping at the shorter one."""
        return [cls(id=str(i), health=str(h)) for i, h in zip(ids, health)]


@dataclass(frozen=True)
class ConnectionTelemetry:
    """One decoded connection row."""

    shard_id: Optional[str]
    identity_id: str
    target_id: str
    ping_ms: float
    in_bytes_per_sec: float
    out_bytes_per_sec: float
    in_packets_per_sec: float
    pending_reliable_bytes: float
    pending_unreliable_bytes: float
    sent_unacked_reliable_bytes: float
    queue_time_usec: float
    quality_local: float
    quality_remote: float
    state: str

    @property
    def shard_key(self) -> str:
        """Shard this connection is grouped under."""
        return self.identity_id if self.shard_id is None else self.shard_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shardId": self.shard_id,
            "identityId": self.identity_id,
            "targetId": self.target_id,
            "pingMs": self.ping_ms,
            "inBytesPerSec": self.in_bytes_per_sec,
            "outBytesPerSec": self.out_bytes_per_sec,
            "inPacketsPerSec": self.in_packets_per_sec,
            "pendingReliableBytes": self.pending_reliable_bytes,
            "pendingUnreliableBytes": self.pending_unreliable_bytes,
            "sentUnackedReliableBytes": self.sent_unacked_reliable_bytes,
            "queueTimeUsec": self.queue_time_usec,
            "qualityLocal": self.quality_local,
            "qualityRemote": self.quality_remote,
            "state": self.state,
        }


@dataclass
class ShardTelemetry:
    """Per-shard throughput summary, rebuilt on every aggregation."""

    shard_id: str
    download_kbps: float = 0.0
    upload_kbps: float = 0.0
    connections: List[ConnectionTelemetry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shardId": self.shard_id,
            "downloadKbps": self.download_kbps,
            "uploadKbps": self.upload_kbps,
            "connections": [connection.to_dict() for connection in self.connections],
        }
