"""CLI commands."""

from fountainkit.cli.commands.outline import outline_command
from fountainkit.cli.commands.parse import parse_command
from fountainkit.cli.commands.render import render_command

__all__ = ["outline_command", "parse_command", "render_command"]
