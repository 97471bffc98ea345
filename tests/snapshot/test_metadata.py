# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for batched TYPE/TTL lookup.
"""

import redis

from cartograph.snapshot.metadata import UNKNOWN_TYPE, load_key_metadata, to_ttl_seconds
from cartograph.snapshot.models import UNKNOWN_TTL, KeyMetadata


class TestToTtlSeconds:
    """Test TTL coercion."""

    def test_integers_pass_through(self):
        """Test integer TTLs."""
        assert to_ttl_seconds(120) == 120
        assert to_ttl_seconds(-1) == -1

    def test_bytes_reply(self):
        """Test a TTL reply as bytes."""
        assert to_ttl_seconds(b"30") == 30

    def test_unusable_values_are_unknown(self):
        """Test that unusable TTLs become unknown."""
        assert to_ttl_seconds(None) == UNKNOWN_TTL
        assert to_ttl_seconds(True) == UNKNOWN_TTL
        assert to_ttl_seconds("soon") == UNKNOWN_TTL
        assert to_ttl_seconds(float("inf")) == UNKNOWN_TTL
        assert to_ttl_seconds(redis.ResponseError("nope")) == UNKNOWN_TTL


class TestLoadKeyMetadata:
    """Test metadata pipeline."""

    def test_empty_keys_skip_round_trip(self, fake_redis):
        """Test that no keys means no round trip."""
        assert load_key_metadata(fake_redis, []) == []
        assert fake_redis.calls == []

    def test_types_and_ttls_in_input_order(self, populated_redis):
        """Test types and TTLs in input order."""
        metadata = load_key_metadata(populated_redis, ["queue", "greeting", "missing"])

        assert metadata == [
            KeyMetadata(key="queue", type="list", ttl_seconds=-1),
            KeyMetadata(key="greeting", type="string", ttl_seconds=120),
            KeyMetadata(key="missing", type="none", ttl_seconds=-2),
        ]

    def test_single_round_trip(self, populated_redis):
        """Test that metadata is read in one pipeline."""
        load_key_metadata(populated_redis, ["queue", "greeting"])

        assert populated_redis.calls == [("pipeline", ("type", "ttl", "type", "ttl"))]

    def test_failed_command_only_degrades_its_key(self, populated_redis):
        """Test that a failed TYPE or TTL only degrades its key."""
        populated_redis.fail_keys[("ttl", "greeting")] = redis.ResponseError("busy")
        populated_redis.fail_keys[("type", "queue")] = redis.ResponseError("busy")

        metadata = load_key_metadata(populated_redis, ["greeting", "queue", "leaderboard"])

        assert metadata[0] == KeyMetadata(key="greeting", type="string", ttl_seconds=UNKNOWN_TTL)
        assert metadata[1] == KeyMetadata(key="queue", type=UNKNOWN_TYPE, ttl_seconds=-1)
        assert metadata[2] == KeyMetadata(key="leaderboard", type="zset", ttl_seconds=-1)

    def test_failed_batch_marks_every_key_unknown(self, populated_redis):
        """Test that a failed batch marks every key unknown."""
        populated_redis.broken_pipelines.add("type")

        metadata = load_key_metadata(populated_redis, ["greeting", "queue"])

        assert [m.type for m in metadata] == [UNKNOWN_TYPE, UNKNOWN_TYPE]
        assert [m.ttl_seconds for m in metadata] == [UNKNOWN_TTL, UNKNOWN_TTL]
