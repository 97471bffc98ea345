# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Sources of raw network telemetry.

The live feed is owned by the native runtime; this module only defines the
two queries the aggregator needs and a couple of adapters. Providers are
passed to the aggregator explicitly so tests can substitute their own.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from .models import ShardIdentity

logger = logging.getLogger(__name__)


class TelemetryProvider(ABC):
    """Interface to the live telemetry feed."""

    @abstractmethod
    def get_live_identities(self) -> List[ShardIdentity]:
        """Return the shard identities currently answering pings."""
        raise NotImplementedError

    @abstractmethod
    def get_connection_rows(self) -> List[List[str]]:
        """
        Return one row of string columns per connection.

        Rows carry 13 columns, or 14 with a leading shard id.
        """
        raise NotImplementedError


class StaticTelemetryProvider(TelemetryProvider):
    """Serves a fixed set of identities and rows."""

    def __init__(
        self,
        identities: Optional[Iterable[ShardIdentity]] = None,
        rows: Optional[Iterable[Sequence[Any]]] = None,
    ):
        self.identities = list(identities or [])
        self.rows = [[str(column) for column in row] for row in (rows or [])]

    def get_live_identities(self) -> List[ShardIdentity]:
        return list(self.identities)

    def get_connection_rows(self) -> List[List[str]]:
        return [list(row) for row in self.rows]


class JsonFileTelemetryProvider(TelemetryProvider):
    """
    Reads a telemetry dump written by the native runtime.

    Expected layout::

        {
          "identities": [{"id": "shard-1", "health": "ok"}],
          "rows": [["shard-1", "identity-1", "target-1", "12", ...]]
        }

    ``identities`` may also be given as parallel ``ids`` and ``health`` lists.
    The file is re-read on every query so a refreshed dump is picked up.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize provider.

        Args:
            path: Path to the JSON dump
        """
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        with open(self.path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a JSON object at top level")
        return data

    def get_live_identities(self) -> List[ShardIdentity]:
        data = self._load()

        if "identities" in data:
            identities = []
            for entry in data.get("identities") or []:
                if isinstance(entry, dict) and entry.get("id") is not None:
                    identities.append(ShardIdentity(id=str(entry["id"]), health=str(entry.get("health", ""))))
                else:
                    logger.debug(f"Skipping malformed identity entry: {entry!r}")
            return identities

        return ShardIdentity.pair(data.get("ids") or [], data.get("health") or [])

    def get_connection_rows(self) -> List[List[str]]:
        rows = []
        for row in self._load().get("rows") or []:
            if isinstance(row, list):
                rows.append([str(column) for column in row])
        return rows
