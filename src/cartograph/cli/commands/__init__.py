# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Command modules for the CLI."""

from . import sources
from . import snapshot
from . import telemetry

__all__ = ["sources", "snapshot", "telemetry"]
