"""Tokenizer for sentinel-encoded text."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from fountainkit.parser.constants import RESERVED_CODEPOINTS, StyleCommand


class Column(str, Enum):
    """Stash slots: the whole page and the two dual dialogue columns."""

    GLOBAL = "global"
    LEFT = "left"
    RIGHT = "right"


STASH_COMMANDS: dict[StyleCommand, Column] = {
    StyleCommand.GLOBAL_STASH: Column.GLOBAL,
    StyleCommand.LEFT_STASH: Column.LEFT,
    StyleCommand.RIGHT_STASH: Column.RIGHT,
}

POP_COMMANDS: dict[StyleCommand, Column] = {
    StyleCommand.GLOBAL_POP: Column.GLOBAL,
    StyleCommand.LEFT_POP: Column.LEFT,
    StyleCommand.RIGHT_POP: Column.RIGHT,
}

# Toggle commands and the format flags each one flips
TOGGLE_COMMANDS: dict[StyleCommand, tuple[str, ...]] = {
    StyleCommand.ITALIC: ("italic",),
    StyleCommand.BOLD: ("bold",),
    StyleCommand.BOLD_ITALIC: ("bold_italic",),
    StyleCommand.UNDERLINE: ("underline",),
    StyleCommand.ITALIC_UNDERLINE: ("italic", "underline"),
    StyleCommand.BOLD_UNDERLINE: ("bold", "underline"),
    StyleCommand.BOLD_ITALIC_UNDERLINE: ("bold_italic", "underline"),
}


def iter_commands(text: str) -> Iterator[StyleCommand | str]:
    """Split text into style commands and runs of plain text.

    Args:
        text: Token text with embedded sentinel characters

    Yields:
        A :class:`StyleCommand` for every sentinel, and the plain text
        between sentinels as strings (never empty)
    """
    start = 0
    for index, char in enumerate(text):
        if char in RESERVED_CODEPOINTS:
            if index > start:
                yield text[start:index]
            yield StyleCommand(char)
            start = index + 1
    if start < len(text):
        yield text[start:]
