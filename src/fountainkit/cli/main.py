"""Main CLI entry point."""

from __future__ import annotations

import os
from typing import Annotated

import typer
from rich.console import Console

from fountainkit import __version__
from fountainkit.cli.commands import outline_command, parse_command, render_command
from fountainkit.cli.formatters import JsonFormatter
from fountainkit.config import (
    clear_settings_cache,
    configure_logging,
    get_logger,
    get_settings,
)

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="fountainkit",
    help="Fountain screenplay lexer with outline, timing and inline styling",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="parse")(parse_command)
app.command(name="outline")(outline_command)
app.command(name="render")(render_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show fountainkit version."""
    version_info = {
        "name": "fountainkit",
        "version": __version__,
        "description": "Fountain screenplay lexer with outline, timing and inline styling",
    }

    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"fountainkit v{version_info['version']}")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="FOUNTAINKIT_DEBUG"),
    ] = False,
) -> None:
    """Configure global options."""
    if not (debug or verbose):
        return

    os.environ["FOUNTAINKIT_LOG_LEVEL"] = "DEBUG" if debug else "INFO"
    if debug:
        os.environ["FOUNTAINKIT_DEBUG"] = "true"

    clear_settings_cache()
    configure_logging(get_settings())
    if debug:
        logger.debug("Debug mode enabled")
    else:
        logger.info("Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
