"""JSON output formatter for CLI."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from fountainkit.cli.formatters.base import OutputFormat, OutputFormatter


def _default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


class JsonFormatter(OutputFormatter[Any]):
    """Generic JSON formatter for CLI output."""

    def format(self, data: Any, format_type: OutputFormat = OutputFormat.JSON) -> str:  # noqa: ARG002
        """Format data as JSON.

        Args:
            data: Data to format
            format_type: Output format type (ignored, always JSON)

        Returns:
            JSON string
        """
        if hasattr(data, "to_dict"):
            # Parse output
            return json.dumps(data.to_dict(), default=_default, indent=2, ensure_ascii=False)
        if dataclasses.is_dataclass(data) and not isinstance(data, type):
            return json.dumps(
                dataclasses.asdict(data), default=_default, indent=2, ensure_ascii=False
            )
        if isinstance(data, list) and data and dataclasses.is_dataclass(data[0]):
            return json.dumps(
                [dataclasses.asdict(item) for item in data],
                default=_default,
                indent=2,
                ensure_ascii=False,
            )
        if isinstance(data, dict | list | tuple):
            return json.dumps(data, default=_default, indent=2, ensure_ascii=False)
        return json.dumps({"value": data}, default=_default, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        error_msg = str(error) if isinstance(error, Exception) else error
        response: dict[str, Any] = {"success": False, "error": error_msg, "code": code}
        hint = getattr(error, "hint", None)
        if hint:
            response["hint"] = hint
        return json.dumps(response, indent=2)
