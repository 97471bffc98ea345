# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Shared state passed to every CLI command.
"""

from dataclasses import dataclass
from typing import Optional

from ..service import CartographService
from ..shared.config import Config
from ..snapshot.connection import create_redis_client
from ..telemetry.provider import TelemetryProvider
from .formatters import BaseFormatter, get_formatter


@dataclass
class CliContext:
    """Configuration plus display options for one CLI invocation."""

    config: Config
    default_format: str = "table"
    no_color: bool = False
    debug: bool = False

    def formatter(self, format: Optional[str] = None) -> BaseFormatter:
        """Formatter for the requested format, falling back to the default."""
        return get_formatter(format or self.default_format, colored=not self.no_color)

    def build_service(self, telemetry_provider: Optional[TelemetryProvider] = None) -> CartographService:
        return CartographService(
            config=self.config,
            telemetry_provider=telemetry_provider,
            client_factory=create_redis_client,
        )
