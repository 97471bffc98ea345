# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Shared components used by the service and the CLI.
"""

from .config import Config, SnapshotConfig

__all__ = [
    "Config",
    "SnapshotConfig",
]
