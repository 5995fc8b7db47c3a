"""Inline style re-lexing of sentinel-encoded token text."""

from fountainkit.render.commands import Column, iter_commands
from fountainkit.render.relexer import (
    FormatState,
    Footnote,
    RenderOptions,
    StyledRun,
    StyleRelexer,
    format_text,
    needs_format_reset,
    render,
    tag_after_broken_note,
)

__all__ = [
    "Column",
    "Footnote",
    "FormatState",
    "RenderOptions",
    "StyleRelexer",
    "StyledRun",
    "format_text",
    "iter_commands",
    "needs_format_reset",
    "render",
    "tag_after_broken_note",
]
