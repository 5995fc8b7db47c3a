"""Base formatter classes for CLI output."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, TypeVar

from rich.console import Console, RenderableType

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"
    TABLE = "table"


class OutputFormatter(ABC, Generic[T]):
    """Base class for output formatters.

    Formatters return strings and leave printing to the command, so the same
    formatter serves the terminal, files and tests.
    """

    width = 100

    @abstractmethod
    def format(self, data: T, format_type: OutputFormat = OutputFormat.TEXT) -> str:
        """Format data for output.

        Args:
            data: Data to format
            format_type: Output format type

        Returns:
            Formatted string
        """

    def capture(self, renderable: RenderableType) -> str:
        """Render a rich table or tree to plain text at a fixed width."""
        buffer = io.StringIO()
        Console(file=buffer, force_terminal=False, width=self.width).print(renderable)
        return buffer.getvalue()
