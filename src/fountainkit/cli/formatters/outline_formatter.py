"""Rich rendering of parse summaries and outline trees."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from fountainkit.cli.formatters.base import OutputFormat, OutputFormatter
from fountainkit.parser import ParseOutput, StructureKind, StructureNode, inline
from fountainkit.parser.text_style import TextStyle

_NODE_STYLES = {
    StructureKind.SECTION: "bold magenta",
    StructureKind.SCENE: "cyan",
    StructureKind.CHARACTER: "green",
    StructureKind.NOTE: "dim",
}


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(round(seconds), 60)
    return f"{minutes}:{secs:02d}"


class SummaryFormatter(OutputFormatter[ParseOutput]):
    """Table of document statistics."""

    def format(
        self, data: ParseOutput, format_type: OutputFormat = OutputFormat.TABLE  # noqa: ARG002
    ) -> str:
        title = next(
            (e.text for e in data.title_page.get("cc", []) if e.key == "title"), ""
        )
        table = Table(title="Screenplay", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Title", inline(TextStyle.strip_sentinels(title)) or "-")
        table.add_row("Scenes", str(len(data.scenes)))
        table.add_row("Characters", ", ".join(data.characters) or "-")
        table.add_row("Locations", ", ".join(data.locations) or "-")
        table.add_row("Action time", format_duration(data.length_action))
        table.add_row("Dialogue time", format_duration(data.length_dialogue))
        table.add_row("Total time", format_duration(data.total_duration_sec))
        table.add_row("Tokens", str(len(data.tokens)))
        table.add_row("Parse time", f"{data.parse_time_ms:.1f} ms")
        return self.capture(table)


class OutlineFormatter(OutputFormatter[list[StructureNode]]):
    """Tree of sections, scenes, character blocks and notes."""

    def format(
        self, data: list[StructureNode], format_type: OutputFormat = OutputFormat.TEXT  # noqa: ARG002
    ) -> str:
        if not data:
            return "No outline entries"
        tree = Tree("Outline")
        for node in data:
            self._add(tree, node)
        return self.capture(tree)

    def _add(self, parent: Tree, node: StructureNode) -> None:
        label = node.text or ", ".join(inline(n.text) for n in node.notes)
        if node.kind is StructureKind.SCENE:
            label = f"{label}  ({format_duration(node.duration_sec)})"
        branch = parent.add(f"[{_NODE_STYLES[node.kind]}]{escape(label)}[/]")
        for synopsis in node.synopses:
            branch.add(f"[italic]{escape(synopsis.text)}[/]")
        for child in node.children:
            self._add(branch, child)
