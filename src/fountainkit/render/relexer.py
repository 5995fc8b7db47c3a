"""Inline style re-lexer: turns sentinel-encoded token text into styled runs.

Token text produced by the block lexer carries formatting as single reserved
characters (see :class:`fountainkit.parser.constants.StyleCommand`). The
re-lexer replays them against a running format state. The state persists
between calls on one :class:`StyleRelexer`, so an emphasis or a note opened on
one line carries over to the next until it is closed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from fountainkit.config import FountainKitSettings, get_logger, get_settings
from fountainkit.exceptions import RenderError
from fountainkit.parser.constants import (
    ITALIC,
    NOTE_BEGIN,
    NOTE_BEGIN_EXT,
    NOTE_END,
    StyleCommand,
)
from fountainkit.parser.models import TokenKind
from fountainkit.render.commands import (
    POP_COMMANDS,
    STASH_COMMANDS,
    TOGGLE_COMMANDS,
    Column,
    iter_commands,
)

logger = get_logger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

_FORMAT_RESET_KINDS = frozenset(
    {
        TokenKind.CHARACTER,
        TokenKind.SCENE_HEADING,
        TokenKind.SYNOPSIS,
        TokenKind.CENTERED,
        TokenKind.SECTION,
        TokenKind.TRANSITION,
        TokenKind.LYRIC,
    }
)


@dataclass
class RenderOptions:
    """Colors and metrics applied to styled runs."""

    default_color: str = "#000000"
    note_color: str = "#888888"
    note_italic: bool = False
    font_size: float = 12.0
    note_font_size: float = 9.0
    character_spacing: float = 1.0

    def __post_init__(self) -> None:
        for name in ("default_color", "note_color"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _HEX_COLOR.match(value):
                raise RenderError(
                    message=f"Invalid {name.replace('_', ' ')}: {value!r}",
                    hint="Use a hex color such as #000000",
                    details={"option": name, "value": value},
                )
            setattr(self, name, value.upper())
        if self.font_size <= 0 or self.note_font_size <= 0:
            raise RenderError(
                message="Font sizes must be positive",
                details={
                    "font_size": self.font_size,
                    "note_font_size": self.note_font_size,
                },
            )

    @classmethod
    def from_settings(cls, settings: FountainKitSettings | None = None) -> RenderOptions:
        settings = settings or get_settings()
        return cls(
            default_color=settings.default_color,
            note_color=settings.note_color,
            note_italic=settings.note_italic,
            font_size=settings.font_size,
            note_font_size=settings.note_font_size,
            character_spacing=settings.character_spacing,
        )


@dataclass
class FormatState:
    """Running emphasis flags of the re-lexer."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    bold_italic: bool = False
    override_color: str | None = None
    italic_depth: int = 0

    @property
    def effective_bold(self) -> bool:
        return self.bold or self.bold_italic

    @property
    def effective_italic(self) -> bool:
        return self.italic or self.bold_italic or self.italic_depth > 0


@dataclass
class StyledRun:
    """A piece of text drawn with one set of attributes."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: str = "#000000"
    font_size: float = 12.0
    character_spacing: float = 1.0
    break_before: bool = False
    footnote: int | None = None


@dataclass
class Footnote:
    """Note text collected out of the flow, to be printed as a footnote."""

    number: int
    text_lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.text_lines)


class StyleRelexer:
    """Replays style commands into :class:`StyledRun` lists."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions.from_settings()
        self.state = FormatState()
        self.stashes: dict[Column, FormatState | None] = {
            column: None for column in Column
        }
        self.notes_counter = 0
        self._current_note: Footnote | None = None
        self._force_orig = False

    def stash(self, column: Column) -> None:
        """Save the format state in a column slot and start from a clean one."""
        self.stashes[column] = replace(self.state)
        self.state = FormatState()

    def pop(self, column: Column) -> None:
        """Restore the format state saved in a column slot, if any."""
        saved = self.stashes[column]
        if saved is not None:
            self.state = saved
            self.stashes[column] = None

    def render(
        self, text: str, footnotes: list[Footnote] | None = None
    ) -> list[StyledRun]:
        """Turn one token text into styled runs.

        Without a footnote collector, notes are drawn inline in the note color.
        With one, a ``↺`` note is cut out of the flow into a new
        :class:`Footnote` and replaced by a reference run, while a ``இ`` note
        is collected and still drawn inline.

        Args:
            text: Token text with embedded sentinel characters
            footnotes: Optional list receiving notes captured from the text

        Returns:
            Runs in drawing order; a run after a ``\\n`` has ``break_before``
        """
        if self.options.note_italic:
            text = _italicize_notes(text)

        runs: list[StyledRun] = []
        line_started = False
        for item in iter_commands(text):
            if not isinstance(item, StyleCommand):
                if self._current_note is not None:
                    self._capture(item, line_started)
                    line_started = True
                    if not self._force_orig:
                        continue
                runs.extend(self._runs_for(item))
                continue

            if item in TOGGLE_COMMANDS:
                if self._current_note is not None and not self._force_orig:
                    self._capture(item.value, line_started)
                    line_started = True
                    continue
                for flag in TOGGLE_COMMANDS[item]:
                    setattr(self.state, flag, not getattr(self.state, flag))
            elif item in STASH_COMMANDS:
                self.stash(STASH_COMMANDS[item])
            elif item in POP_COMMANDS:
                self.pop(POP_COMMANDS[item])
            elif item is StyleCommand.GLOBAL_CLEAN:
                self.state = FormatState()
            elif item is StyleCommand.ITALIC_GLOBAL_BEGIN:
                self.state.italic_depth += 1
            elif item is StyleCommand.ITALIC_GLOBAL_END:
                self.state.italic_depth = max(0, self.state.italic_depth - 1)
            elif item is StyleCommand.NOTE_BEGIN:
                self.state.override_color = self.options.note_color
                if footnotes is not None:
                    self._open_footnote(footnotes)
                    line_started = True
                    runs.append(self._footnote_reference(self.notes_counter))
            elif item is StyleCommand.NOTE_BEGIN_EXT:
                self.state.override_color = self.options.note_color
                self._force_orig = True
                if footnotes is not None:
                    self._open_footnote(footnotes)
                    line_started = True
            elif item is StyleCommand.NOTE_END:
                self._close_footnote(footnotes)
                self._force_orig = False
                self.state.override_color = None
            # LINK carries no formatting of its own
        return runs

    def format_text(
        self, text: str, footnotes: list[Footnote] | None = None
    ) -> list[StyledRun]:
        """Render text in a clean state, restoring the surrounding one after."""
        self.stash(Column.GLOBAL)
        try:
            return self.render(text, footnotes)
        finally:
            self.pop(Column.GLOBAL)

    def _open_footnote(self, footnotes: list[Footnote]) -> None:
        self.notes_counter += 1
        self._current_note = Footnote(number=self.notes_counter, text_lines=[""])
        footnotes.append(self._current_note)

    def _close_footnote(self, footnotes: list[Footnote] | None) -> None:
        # a note opened on an earlier line ends up in this line's collector too
        note = self._current_note
        self._current_note = None
        if note is None or footnotes is None:
            return
        if not any(collected is note for collected in footnotes):
            footnotes.append(note)

    def _capture(self, text: str, line_started: bool) -> None:
        """Append text to the open note, one ``text_lines`` entry per line."""
        lines = self._current_note.text_lines
        first, *rest = text.split("\n")
        if line_started:
            lines[-1] += first
        else:
            lines.append(first)
        lines.extend(rest)

    def _footnote_reference(self, number: int) -> StyledRun:
        options = self.options
        return StyledRun(
            text=str(number),
            color=options.note_color,
            font_size=options.note_font_size,
            character_spacing=options.character_spacing,
            footnote=number,
        )

    def _runs_for(self, text: str) -> list[StyledRun]:
        options = self.options
        state = self.state
        override = state.override_color
        runs = []
        for index, piece in enumerate(text.split("\n")):
            if not piece and index == 0:
                continue
            runs.append(
                StyledRun(
                    text=piece,
                    bold=state.effective_bold,
                    italic=state.effective_italic,
                    underline=state.underline,
                    color=override or options.default_color,
                    font_size=options.note_font_size if override else options.font_size,
                    character_spacing=options.character_spacing,
                    break_before=index > 0,
                )
            )
        return runs


def _italicize_notes(text: str) -> str:
    text = text.replace(NOTE_BEGIN_EXT, ITALIC + NOTE_BEGIN_EXT)
    text = text.replace(NOTE_BEGIN, ITALIC + NOTE_BEGIN)
    return text.replace(NOTE_END, NOTE_END + ITALIC)


def render(
    text: str,
    options: RenderOptions | None = None,
    footnotes: list[Footnote] | None = None,
) -> list[StyledRun]:
    """Render one text with a fresh re-lexer."""
    return StyleRelexer(options).render(text, footnotes)


def format_text(
    text: str,
    options: RenderOptions | None = None,
    footnotes: list[Footnote] | None = None,
) -> list[StyledRun]:
    """Render one text in an isolated format state with a fresh re-lexer."""
    return StyleRelexer(options).format_text(text, footnotes)


def needs_format_reset(kind: TokenKind | str) -> bool:
    """Check whether a token kind starts from a clean format state."""
    try:
        return TokenKind(kind) in _FORMAT_RESET_KINDS
    except ValueError:
        logger.debug("Unknown token kind", kind=kind)
        return False


def tag_after_broken_note(text: str, tag: str) -> str:
    """Insert a style tag so it applies outside a note continued from above.

    When a line closes a note opened on an earlier line (a ``↻`` with no
    ``↺`` before it), the tag goes right after that ``↻``. Otherwise it is
    prefixed to the text.

    Args:
        text: Token text
        tag: Sentinel characters to insert

    Returns:
        Text with the tag inserted
    """
    end = text.find(NOTE_END)
    begin = text.find(NOTE_BEGIN)
    if end != -1 and (begin == -1 or end < begin):
        return text[: end + 1] + tag + text[end + 1 :]
    return tag + text
