"""Show the section and scene outline of a Fountain file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from fountainkit import parse_file
from fountainkit.cli.formatters import JsonFormatter, OutlineFormatter
from fountainkit.cli.utils import cli_command
from fountainkit.config import get_settings_for_cli

console = Console()


@cli_command
def outline_command(
    file: Annotated[Path, typer.Argument(help="Fountain file to outline")],
    json_output: Annotated[
        bool, typer.Option("--json", help="Output the outline tree as JSON")
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
        ),
    ] = None,
) -> None:
    """Show sections, scenes, synopses and notes as a tree."""
    output = parse_file(file, settings=get_settings_for_cli(config))
    if json_output:
        print(JsonFormatter().format(output.structure))
        return
    console.print(OutlineFormatter().format(output.structure), markup=False, highlight=False)
