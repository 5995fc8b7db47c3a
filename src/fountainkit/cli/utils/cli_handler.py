"""Unified CLI handler for standardized error handling and output."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from fountainkit.cli.formatters.json_formatter import JsonFormatter
from fountainkit.config import get_logger
from fountainkit.exceptions import FountainKitError

logger = get_logger(__name__)


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output
        """
        self.console = console or Console()
        self.json_formatter = JsonFormatter()

    def handle_error(
        self, error: Exception, json_output: bool = False, exit_code: int = 1
    ) -> None:
        """Handle and display errors consistently.

        Args:
            error: Exception to handle
            json_output: Whether to output JSON
            exit_code: Exit code to use

        Raises:
            typer.Exit: Always, with ``exit_code``
        """
        logger.error("Command failed", error=str(error), error_type=type(error).__name__)

        if json_output:
            print(self.json_formatter.format_error_response(error, exit_code))
        elif isinstance(error, FountainKitError):
            self.console.print(f"[red]Error: {escape(error.message)}[/red]")
            if error.hint:
                self.console.print(f"[yellow]Hint: {escape(error.hint)}[/yellow]")
        else:
            self.console.print(f"[red]Error: {escape(str(error))}[/red]")

        raise typer.Exit(exit_code)


def cli_command(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator for CLI commands with standardized error handling.

    Args:
        func: Command function

    Returns:
        Wrapped function
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except (FountainKitError, OSError, ValueError) as e:
            CLIHandler().handle_error(e, kwargs.get("json_output", False))

    return wrapper
