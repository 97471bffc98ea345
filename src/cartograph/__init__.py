"""
Cartograph Core

Keyspace snapshots and network telemetry aggregation for AtlasNet deployments.
"""

# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only

__version__ = "0.1.0"
__author__ = "Sierra Labs"
__email__ = "support@blueplane.ai"

__all__ = ["__version__", "__author__", "__email__"]
