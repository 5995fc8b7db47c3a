"""Render sentinel-encoded text into styled runs."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from fountainkit.cli.formatters import JsonFormatter
from fountainkit.cli.utils import cli_command
from fountainkit.config import get_settings_for_cli
from fountainkit.parser.text_style import TextStyle
from fountainkit.render import RenderOptions, format_text

console = Console()


@cli_command
def render_command(
    text: Annotated[str, typer.Argument(help="Token text to render")],
    json_output: Annotated[
        bool, typer.Option("--json", help="Output the runs as JSON")
    ] = False,
    markup: Annotated[
        bool,
        typer.Option("--markup", help="Convert *emphasis* and _underline_ first"),
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
    """Show the styled runs a renderer would draw for TEXT."""
    if markup:
        text = TextStyle.markup_to_sentinels(text)
    runs = format_text(text, RenderOptions.from_settings(get_settings_for_cli(config)))

    if json_output:
        print(JsonFormatter().format(runs))
        return

    table = Table(title="Styled runs", show_lines=False)
    table.add_column("Text", style="cyan")
    table.add_column("Bold", justify="center")
    table.add_column("Italic", justify="center")
    table.add_column("Underline", justify="center")
    table.add_column("Color")
    table.add_column("Size", justify="right")
    for run in runs:
        table.add_row(
            Text(repr(run.text)),
            "x" if run.bold else "",
            "x" if run.italic else "",
            "x" if run.underline else "",
            run.color,
            f"{run.font_size:g}",
        )
    console.print(table)
