# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for telemetry providers.
"""

import json

import pytest

from cartograph.telemetry.models import ShardIdentity
from cartograph.telemetry.provider import JsonFileTelemetryProvider, StaticTelemetryProvider


class TestStaticTelemetryProvider:
    """Test the in-memory provider."""

    def test_columns_stringified(self):
        """Test that row columns are converted to strings."""
        provider = StaticTelemetryProvider(rows=[["a", 1, 2.5]])
        assert provider.get_connection_rows() == [["a", "1", "2.5"]]

    def test_defaults_empty(self):
        """Test an empty provider."""
        provider = StaticTelemetryProvider()
        assert provider.get_live_identities() == []
        assert provider.get_connection_rows() == []


class TestJsonFileTelemetryProvider:
    """Test the JSON dump provider."""

    def test_identity_objects(self, tmp_path):
        """Test reading identity objects and rows."""
        path = tmp_path / "telemetry.json"
        path.write_text(json.dumps({
            "identities": [{"id": "shard-1", "health": "ok"}, {"health": "missing id"}],
            "rows": [["shard-1", "identity-1"], "not a row"],
        }))

        provider = JsonFileTelemetryProvider(path)

        assert provider.get_live_identities() == [ShardIdentity("shard-1", "ok")]
        assert provider.get_connection_rows() == [["shard-1", "identity-1"]]

    def test_parallel_lists_pair_to_shorter(self, tmp_path):
        """Test pairing parallel id and health lists."""
        path = tmp_path / "telemetry.json"
        path.write_text(json.dumps({"ids": ["a", "b", "c"], "health": ["ok", "degraded"]}))

        identities = JsonFileTelemetryProvider(path).get_live_identities()

        assert identities == [ShardIdentity("a", "ok"), ShardIdentity("b", "degraded")]

    def test_file_reread_on_each_query(self, tmp_path):
        """Test that the dump is re-read on every query."""
        path = tmp_path / "telemetry.json"
        path.write_text(json.dumps({"ids": ["a"], "health": ["ok"]}))
        provider = JsonFileTelemetryProvider(path)
        provider.get_live_identities()

        path.write_text(json.dumps({"ids": ["a", "b"], "health": ["ok", "ok"]}))

        assert len(provider.get_live_identities()) == 2

    def test_non_object_rejected(self, tmp_path):
        """Test rejecting a dump that is not an object."""
        path = tmp_path / "telemetry.json"
        path.write_text("[]")

        with pytest.raises(ValueError):
            JsonFileTelemetryProvider(path).get_live_identities()

    def test_missing_file_raises(self, tmp_path):
        """Test reading a missing dump."""
        with pytest.raises(FileNotFoundError):
            JsonFileTelemetryProvider(tmp_path / "absent.json").get_connection_rows()
