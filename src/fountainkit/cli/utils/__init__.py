"""CLI utilities."""

from fountainkit.cli.utils.cli_handler import CLIHandler, cli_command

__all__ = ["CLIHandler", "cli_command"]
