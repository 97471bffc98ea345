# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Output formatters for the CLI."""

from .base import BaseFormatter
from .table import TableFormatter
from .json import JSONFormatter

__all__ = ["BaseFormatter", "TableFormatter", "JSONFormatter", "get_formatter"]


def get_formatter(format_type: str, colored: bool = True) -> BaseFormatter:
    """Get formatter instance by type."""
    formatters = {
        "table": TableFormatter(),
        "json": JSONFormatter(colored=colored),
    }

    return formatters.get(format_type, TableFormatter())
