"""CLI output formatters."""

from fountainkit.cli.formatters.base import OutputFormat, OutputFormatter
from fountainkit.cli.formatters.json_formatter import JsonFormatter
from fountainkit.cli.formatters.outline_formatter import (
    OutlineFormatter,
    SummaryFormatter,
)

__all__ = [
    "JsonFormatter",
    "OutlineFormatter",
    "OutputFormat",
    "OutputFormatter",
    "SummaryFormatter",
]
