# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for CartographService.
"""

import asyncio

import pytest
import redis

from cartograph.service import CartographService, resolve_selected_source
from cartograph.shared.config import Config
from cartograph.snapshot.models import ProbeResult, Target
from cartograph.snapshot.reader import SnapshotError
from cartograph.telemetry.models import ShardIdentity
from cartograph.telemetry.provider import StaticTelemetryProvider

INTERNAL = Target(id="internal", name="InternalDB", host="internal-redis")
CACHE = Target(id="cache", name="Cache", host="cache-redis")


@pytest.fixture
def config(tmp_path, monkeypatch):
    for name in ("CARTOGRAPH_MAX_KEYS", "CARTOGRAPH_MAX_PAYLOAD_CHARS", "CARTOGRAPH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config = Config(config_path=tmp_path / "config.yaml")
    config.targets = [INTERNAL, CACHE]
    return config


class TestResolveSelectedSource:
    """Test source selection."""

    running = [ProbeResult.reachable(INTERNAL, 1.0), ProbeResult.reachable(CACHE, 2.0)]

    def test_match_by_name(self):
        """Test selecting a source by name."""
        assert resolve_selected_source(self.running, "Cache").id == "cache"

    def test_match_by_id_with_whitespace(self):
        """Test selecting a source by id with surrounding whitespace."""
        assert resolve_selected_source(self.running, "  cache ").id == "cache"

    def test_unknown_falls_back_to_first(self):
        """Test that an unknown source falls back to the first running one."""
        assert resolve_selected_source(self.running, "nope").id == "internal"

    def test_blank_falls_back_to_first(self):
        """Test that a blank request falls back to the first running one."""
        assert resolve_selected_source(self.running, "   ").id == "internal"

    def test_nothing_running(self):
        """Test selection with no running sources."""
        assert resolve_selected_source([], "Cache") is None


class TestListAndSnapshot:
    """Test the combined probe-and-snapshot call."""

    def test_snapshots_first_running_source(self, config, populated_redis, make_factory):
        """Test snapshotting the first running source."""
        service = CartographService(config=config, client_factory=make_factory({"cache": populated_redis}))

        response = asyncio.run(service.list_and_snapshot())

        assert [s.id for s in response.sources] == ["cache"]
        assert response.selected_source == "cache"
        assert [r.key for r in response.records] == sorted(populated_redis.data)
        assert all(r.source == "Cache" for r in response.records)

    def test_requested_source_wins(self, config, populated_redis, fake_redis, make_factory):
        """Test that a running requested source is snapshotted."""
        service = CartographService(
            config=config,
            client_factory=make_factory({"internal": fake_redis, "cache": populated_redis}),
        )

        response = asyncio.run(service.list_and_snapshot("Cache"))

        assert response.selected_source == "cache"
        assert len(response.records) == len(populated_redis.data)

    def test_nothing_running(self, config, make_factory):
        """Test an empty response when no source is running."""
        service = CartographService(config=config, client_factory=make_factory({}))

        response = asyncio.run(service.list_and_snapshot("InternalDB"))

        assert response.to_dict() == {
            "sources": [],
            "selectedSource": None,
            "records": [],
            "truncated": False,
        }

    def test_scan_failure_propagates(self, config, fake_redis, make_factory):
        """Test that a failed scan is raised to the caller."""
        fake_redis.fail_on["scan"] = redis.ConnectionError("reset")
        service = CartographService(config=config, client_factory=make_factory({"internal": fake_redis}))

        with pytest.raises(SnapshotError):
            asyncio.run(service.list_and_snapshot())

    def test_limits_from_config(self, config, populated_redis, make_factory):
        """Test that snapshot limits come from the config."""
        config.snapshot.max_keys_per_db = 3
        service = CartographService(config=config, client_factory=make_factory({"internal": populated_redis}))

        response = asyncio.run(service.list_and_snapshot())

        assert len(response.records) == 3
        assert response.truncated is True


class TestNetworkTelemetry:
    """Test telemetry access through the service."""

    def test_requires_provider(self, config):
        """Test telemetry without a provider."""
        with pytest.raises(RuntimeError):
            CartographService(config=config).get_network_telemetry()

    def test_aggregates_provider_rows(self, config):
        """Test aggregating rows from the provider."""
        row = ["shard-1", "identity-1", "target-1", "5", "8", "4", "1", "0", "0", "0", "0", "1", "1", "connected"]
        provider = StaticTelemetryProvider(identities=[ShardIdentity("shard-1", "ok")], rows=[row])

        shards = CartographService(config=config, telemetry_provider=provider).get_network_telemetry()

        assert shards[0].download_kbps == 8.0
        assert shards[0].upload_kbps == 4.0
