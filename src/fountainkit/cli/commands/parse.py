"""Parse a Fountain file and report its statistics."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from fountainkit import parse_file
from fountainkit.cli.formatters import JsonFormatter, SummaryFormatter
from fountainkit.cli.utils import cli_command
from fountainkit.config import get_logger, get_settings_for_cli

logger = get_logger(__name__)
console = Console()


@cli_command
def parse_command(
    file: Annotated[Path, typer.Argument(help="Fountain file to parse")],
    json_output: Annotated[
        bool, typer.Option("--json", help="Output the full parse result as JSON")
    ] = False,
    html: Annotated[
        Path | None, typer.Option("--html", help="Write the script as HTML to this file")
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
        ),
    ] = None,
    no_notes: Annotated[
        bool, typer.Option("--no-notes", help="Drop [[notes]] from token text")
    ] = False,
) -> None:
    """Parse a Fountain screenplay.

    Prints a summary of scenes, characters, locations and estimated screen
    time, or the complete token stream and indexes with --json.
    """
    settings = get_settings_for_cli(
        config, {"print_notes": False if no_notes else None}
    )
    output = parse_file(file, settings=settings, want_html=html is not None)

    if html is not None:
        parts = [output.title_html or "", output.script_html or ""]
        html.write_text("\n".join(part for part in parts if part), encoding="utf-8")
        logger.info("Wrote HTML export", path=str(html))

    if json_output:
        print(JsonFormatter().format(output))
        return

    console.print(SummaryFormatter().format(output), markup=False, highlight=False)
    if html is not None:
        console.print(f"[green]Wrote HTML to {html}[/green]")
