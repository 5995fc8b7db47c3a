"""HTML rendering of a parsed screenplay."""

from __future__ import annotations

from html import escape

from fountainkit.parser.models import Dual, ParseOutput, Token, TokenKind
from fountainkit.render.relexer import RenderOptions, StyledRun, StyleRelexer

_PARAGRAPH_CLASSES: dict[TokenKind, str] = {
    TokenKind.ACTION: "action",
    TokenKind.CENTERED: "centered",
    TokenKind.TRANSITION: "transition",
    TokenKind.CHARACTER: "character",
    TokenKind.PARENTHETICAL: "parenthetical",
    TokenKind.DIALOGUE: "dialogue-line",
    TokenKind.SYNOPSIS: "synopsis",
    TokenKind.LYRIC: "lyric",
}

_TITLE_POSITIONS = ("tl", "tc", "tr", "cc", "bl", "br")


def runs_to_html(runs: list[StyledRun], default_color: str) -> str:
    """Convert styled runs into inline HTML."""
    parts = []
    for run in runs:
        if run.footnote is not None:
            parts.append(f'<sup class="note-ref">{run.footnote}</sup>')
            continue
        html = escape(run.text)
        if run.underline:
            html = f"<u>{html}</u>"
        if run.italic:
            html = f"<em>{html}</em>"
        if run.bold:
            html = f"<strong>{html}</strong>"
        if run.color != default_color:
            html = f'<span class="note">{html}</span>'
        if run.break_before:
            html = "<br>" + html
        parts.append(html)
    return "".join(parts)


class _HtmlWriter:
    def __init__(self, embolden_character_names: bool) -> None:
        self.embolden = embolden_character_names
        self.options = RenderOptions()
        self.relexer = StyleRelexer(self.options)
        self.lines: list[str] = []
        self._column: Dual | None = None

    def inline(self, text: str) -> str:
        return runs_to_html(self.relexer.format_text(text), self.options.default_color)

    def write(self, token: Token) -> None:
        kind = token.kind
        if kind is TokenKind.SCENE_HEADING:
            self.lines.append(
                f'<h3 class="scene-heading" data-line="{token.line}">'
                f"{self.inline(token.text)}"
                f' <span class="scene-number">{escape(token.number or "")}</span></h3>'
            )
        elif kind is TokenKind.SECTION:
            self.lines.append(
                f'<p class="section" data-depth="{token.level}">{self.inline(token.text)}</p>'
            )
        elif kind is TokenKind.DIALOGUE_BEGIN:
            self.lines.append('<div class="dialogue">')
        elif kind is TokenKind.DUAL_DIALOGUE_BEGIN:
            self.lines.append('<div class="dual-dialogue">')
        elif kind in (TokenKind.DIALOGUE_END, TokenKind.DUAL_DIALOGUE_END):
            self._close_column()
            self.lines.append("</div>")
        elif kind is TokenKind.PAGE_BREAK:
            self.lines.append('<hr class="page-break">')
        elif kind is TokenKind.SEPARATOR:
            if not token.text:
                self.lines.append("<br>")
        else:
            if kind is TokenKind.CHARACTER and token.dual is not None:
                self._open_column(token.dual)
            html = self.inline(token.text)
            if kind is TokenKind.CHARACTER and self.embolden:
                html = f"<strong>{html}</strong>"
            self.lines.append(f'<p class="{_PARAGRAPH_CLASSES[kind]}">{html}</p>')

    def _open_column(self, side: Dual) -> None:
        if self._column is side:
            return
        self._close_column()
        self.lines.append(f'<div class="column-{side.value}">')
        self._column = side

    def _close_column(self) -> None:
        if self._column is not None:
            self.lines.append("</div>")
            self._column = None


def generate_html(tokens: list[Token], embolden_character_names: bool = True) -> str:
    """Render the token stream as an HTML fragment.

    Args:
        tokens: Tokens of a parsed document
        embolden_character_names: Wrap character cues in ``<strong>``

    Returns:
        HTML with one element per token; blank separators become ``<br>``
    """
    writer = _HtmlWriter(embolden_character_names)
    for token in tokens:
        writer.write(token)
    return "\n".join(writer.lines)


def generate_title_html(output: ParseOutput) -> str:
    """Render the visible title page fields, grouped by page position."""
    writer = _HtmlWriter(False)
    blocks = []
    for position in _TITLE_POSITIONS:
        entries = sorted(output.title_page.get(position, []), key=lambda e: e.index)
        if not entries:
            continue
        paragraphs = "".join(
            f'<p class="{escape(entry.key)}">'
            + "<br>".join(writer.inline(line) for line in entry.text.split("\n"))
            + "</p>"
            for entry in entries
        )
        blocks.append(f'<div class="title-page-{position}">{paragraphs}</div>')
    return "\n".join(blocks)
