"""Line-oriented block lexer for Fountain screenplays.

The lexer walks the document one line at a time. Every line is first split
into comment and note spans, then classified according to the current mode
(normal, title page, dialogue or dual dialogue). Inline emphasis is turned
into sentinel characters so that :mod:`fountainkit.render` can later replay
it into styled runs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from fountainkit.config import FountainKitSettings, get_logger, get_settings
from fountainkit.parser.constants import (
    ACTION_FORCE,
    ACTION_FORCE_DISPLAY,
    CENTERED,
    CENTERED_DISPLAY,
    CHARACTER_DISPLAY_FORCE_MARKER,
    CHARACTER_EXTENSION,
    CHARACTER_FORCE_MARKER,
    COMMENT_NOTE_SPLIT,
    GLOBAL_CLEAN,
    ITALIC_GLOBAL_BEGIN,
    ITALIC_GLOBAL_END,
    LINE_SPLIT,
    LYRIC,
    LYRIC_DISPLAY,
    NOTE_BEGIN,
    NOTE_BEGIN_EXT,
    NOTE_END,
    PAGE_BREAK,
    PARENTHETICAL,
    PARENTHETICAL_END,
    PARENTHETICAL_START,
    SCENE_FORCE_MARKER,
    SCENE_HEADING,
    SCENE_NUMBER,
    SECTION,
    SECTION_DISPLAY,
    SYNOPSIS,
    SYNOPSIS_DISPLAY,
    TITLE_PAGE,
    TITLE_PAGE_POSITIONS,
    TITLE_PAGE_RAW_FIELD,
    TITLE_PAGE_VALUE,
    TRANSITION,
    TRANSITION_MARKER,
    is_character_cue,
)
from fountainkit.parser.html_export import generate_html, generate_title_html
from fountainkit.parser.models import (
    Dual,
    LexerMode,
    OutlineNote,
    ParseOutput,
    TitlePageEntry,
    Token,
    TokenKind,
)
from fountainkit.parser.structure import StructureBuilder
from fountainkit.parser.text_style import TextStyle

logger = get_logger(__name__)

_GROUP_KINDS = (TokenKind.CHARACTER, TokenKind.DIALOGUE, TokenKind.PARENTHETICAL)
_GROUP_ENDS = (TokenKind.DIALOGUE_END, TokenKind.DUAL_DIALOGUE_END)
_DUAL_MARKER = "^"


@dataclass
class LexerContext:
    """Mutable state of one parse; a new context is created for every call."""

    mode: LexerMode = LexerMode.NORMAL
    comment_depth: int = 0
    note_depth: int = 0
    current_note: OutlineNote | None = None
    parenthetical_open: bool = False
    dual_side: Dual | None = None
    force_not_dual: bool = True
    character: str | None = None
    dialogue_number: int = 0
    block_inner: bool = False
    last_was_separator: bool = False
    title_page_seen: bool = False
    title_entry: TitlePageEntry | None = None
    title_raw_field: bool = False
    last_blank_title: bool = False
    text_display: str = ""
    text_valid: str = ""


class TokenStream:
    """Committed tokens plus the trailing dialogue group still open to pairing.

    A dialogue group (its begin marker, cues, lines, end marker and any
    separators after it) stays pending until some other token arrives, so
    that a following ``^`` cue can still turn it into the left column of a
    dual dialogue without rewriting committed tokens.
    """

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self._pending: list[Token] = []

    @property
    def last(self) -> Token | None:
        if self._pending:
            return self._pending[-1]
        return self.tokens[-1] if self.tokens else None

    def __bool__(self) -> bool:
        return bool(self.tokens or self._pending)

    def emit(self, token: Token) -> None:
        """Append a token outside any dialogue group."""
        if token.kind is TokenKind.SEPARATOR and self._pending:
            self._pending.append(token)
            return
        self.flush()
        self.tokens.append(token)

    def open_group(self, token: Token) -> None:
        """Start a new dialogue group with its begin marker."""
        self.flush()
        self._pending.append(token)

    def add_to_group(self, token: Token) -> None:
        if self._pending:
            self._pending.append(token)
        else:
            self.tokens.append(token)

    def flush(self) -> None:
        self.tokens.extend(self._pending)
        self._pending.clear()

    def pair_dual(self) -> Dual | None:
        """Pair the pending dialogue group with a new ``^`` cue.

        An untagged group becomes the left column: its begin marker turns into
        a dual begin and its end marker and trailing separators are dropped.
        A group already tagged left keeps going with the new cue on the right.
        A completed right column leaves the new cue to start a fresh pair.

        Returns:
            Column of the new cue, or None when there is no group to pair with
        """
        pending = self._pending
        cue_index = next(
            (
                i
                for i in range(len(pending) - 1, -1, -1)
                if pending[i].kind is TokenKind.CHARACTER
            ),
            None,
        )
        if cue_index is None:
            return None

        block = [t for t in pending[cue_index:] if t.kind in _GROUP_KINDS]
        if block[0].dual is Dual.RIGHT:
            self.flush()
            return Dual.LEFT

        if block[0].dual is None:
            for token in block:
                token.dual = Dual.LEFT
            pending[0].kind = TokenKind.DUAL_DIALOGUE_BEGIN

        end_index = next(
            (i for i, t in enumerate(pending) if t.kind in _GROUP_ENDS), None
        )
        if end_index is not None:
            del pending[end_index:]
        return Dual.RIGHT

    def finish(self) -> list[Token]:
        self.flush()
        return self.tokens


class FountainLexer:
    """Block lexer turning Fountain text into tokens and an outline.

    A lexer instance can parse any number of documents one after another:
    every call to :meth:`parse` starts from a fresh :class:`LexerContext`.
    Concurrent calls on one instance are not supported.
    """

    def __init__(self, settings: FountainKitSettings | None = None) -> None:
        """Initialize the lexer.

        Args:
            settings: Parse options. Defaults to the global settings.
        """
        self.settings = settings or get_settings()
        self._reset(ParseOutput())

    def _reset(self, output: ParseOutput) -> None:
        self.ctx = LexerContext()
        self.output = output
        self.stream = TokenStream()
        self.structure = StructureBuilder(self.settings, output)

    def parse(self, source: str, want_html: bool = False) -> ParseOutput:
        """Parse a whole document.

        Never raises on malformed markup: anything unrecognized becomes action.

        Args:
            source: Fountain text; CRLF, CR and LF line endings are accepted
            want_html: Also render ``script_html`` and ``title_html``

        Returns:
            Tokens, outline, title page and indexes of the document
        """
        started = time.perf_counter()
        self._reset(ParseOutput())
        lines = LINE_SPLIT.split(source) if source else []

        for line_number, line in enumerate(lines):
            self._lex_line(line_number, line)

        if self.ctx.mode in (LexerMode.DIALOGUE, LexerMode.DUAL_DIALOGUE):
            last_line = max(len(lines) - 1, 0)
            self._close_dialogue(last_line, last_line)

        output = self.output
        output.tokens = self.stream.finish()
        self.structure.finish(output.tokens)
        for note in self._all_notes():
            note.text = note.text.strip()

        if want_html:
            output.script_html = generate_html(
                output.tokens, self.settings.embolden_character_names
            )
            output.title_html = generate_title_html(output)

        output.parse_time_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "Parsed Fountain document",
            lines=len(lines),
            tokens=len(output.tokens),
            scenes=len(output.scenes),
            characters=len(output.characters),
            parse_time_ms=round(output.parse_time_ms, 3),
        )
        return output

    def _all_notes(self) -> list[OutlineNote]:
        return [
            note
            for root in self.output.structure
            for node in root.walk()
            for note in node.notes
        ]

    # Line dispatch

    def _lex_line(self, line_number: int, line: str) -> None:
        ctx = self.ctx
        ctx.text_display = ""
        ctx.text_valid = ""

        if not line.strip():
            self._lex_blank_line(line_number, line)
            return

        self._split_comments_and_notes(line_number, line)

        block_begin = False
        if not ctx.text_valid.strip():
            if not ctx.text_display.strip() and len(ctx.text_display) <= 1:
                return
        elif not ctx.block_inner:
            ctx.block_inner = True
            block_begin = True

        body_started = self.output.first_token_line is not None
        if block_begin and not body_started and TITLE_PAGE.match(ctx.text_valid):
            ctx.mode = LexerMode.TITLE_PAGE
            ctx.title_page_seen = True

        if ctx.mode is LexerMode.TITLE_PAGE:
            self._lex_title_line(line_number)
        elif ctx.mode in (LexerMode.DIALOGUE, LexerMode.DUAL_DIALOGUE):
            self._lex_dialogue_line(line_number)
        else:
            self._lex_normal_line(line_number, block_begin)

    def _lex_blank_line(self, line_number: int, line: str) -> None:
        ctx = self.ctx
        ctx.text_display = line
        keeps_break = len(line) > 1

        if ctx.comment_depth > 0 or ctx.note_depth > 0:
            if ctx.note_depth > 0 and self.settings.print_notes and keeps_break:
                self._continue_block(line_number)
            return

        if not ctx.block_inner:
            self._blank_between_blocks(line_number)
        elif keeps_break and ctx.mode is not LexerMode.NORMAL:
            self._continue_block(line_number)
        else:
            ctx.block_inner = False
            self._end_block(line_number)

    def _blank_between_blocks(self, line_number: int) -> None:
        if self.output.first_token_line is None:
            return
        if self.settings.merge_empty_lines and self.ctx.last_was_separator:
            return
        self._emit(Token(TokenKind.SEPARATOR, "", line_number))

    def _end_block(self, line_number: int) -> None:
        ctx = self.ctx
        if ctx.mode in (LexerMode.DIALOGUE, LexerMode.DUAL_DIALOGUE):
            self._close_dialogue(line_number, line_number - 1)
        was_title = ctx.mode is LexerMode.TITLE_PAGE
        ctx.mode = LexerMode.NORMAL
        ctx.dual_side = None
        if not was_title and self.output.first_token_line is not None:
            self._emit(Token(TokenKind.SEPARATOR, GLOBAL_CLEAN, line_number))

    def _close_dialogue(self, line_number: int, last_dialogue_line: int) -> None:
        ctx = self.ctx
        kind = (
            TokenKind.DUAL_DIALOGUE_END
            if ctx.mode is LexerMode.DUAL_DIALOGUE
            else TokenKind.DIALOGUE_END
        )
        self.stream.add_to_group(Token(kind, "", line_number))
        self.structure.close_character_block(last_dialogue_line)
        ctx.parenthetical_open = False
        ctx.character = None
        ctx.mode = LexerMode.NORMAL

    def _continue_block(self, line_number: int) -> None:
        """Keep a whitespace-only line as a line break inside the open block."""
        ctx = self.ctx
        if ctx.mode is LexerMode.TITLE_PAGE:
            entry = ctx.title_entry
            if ctx.title_raw_field or entry is None:
                return
            if not (self.settings.merge_empty_lines and entry.text.endswith("\n")):
                entry.text += "\n"
            return

        last = self.stream.last
        if last is None:
            return
        if self.settings.merge_empty_lines and not last.text.strip():
            return
        if last.kind in (TokenKind.CHARACTER, TokenKind.DIALOGUE):
            kind = TokenKind.DIALOGUE
        elif last.kind is TokenKind.PARENTHETICAL:
            kind = TokenKind.PARENTHETICAL
        else:
            kind = TokenKind.ACTION
        token = Token(
            kind,
            ctx.text_display,
            line_number,
            dual=last.dual if kind is not TokenKind.ACTION else None,
            character=ctx.character if kind is not TokenKind.ACTION else None,
        )
        if kind is TokenKind.ACTION:
            self._emit(token)
        else:
            self.stream.add_to_group(token)
            ctx.last_was_separator = False

    def _emit(self, token: Token) -> None:
        self.stream.emit(token)
        self.ctx.last_was_separator = token.kind is TokenKind.SEPARATOR

    def _begin_body(self, line_number: int) -> None:
        """Mark the first body line, padding after a title page."""
        output = self.output
        if output.first_token_line is not None:
            return
        output.first_token_line = line_number
        if self.ctx.title_page_seen:
            for _ in range(3):
                self._emit(Token(TokenKind.SEPARATOR, GLOBAL_CLEAN, line_number))
        self.ctx.mode = LexerMode.NORMAL

    # Comments and notes

    def _split_comments_and_notes(self, line_number: int, line: str) -> None:
        """Fill ``text_valid`` and ``text_display`` for one non-blank line.

        ``text_valid`` keeps only content outside comments and notes and is
        used for classification. ``text_display`` additionally keeps notes,
        wrapped in note sentinels, when notes are printed.
        """
        ctx = self.ctx
        print_notes = self.settings.print_notes
        if ctx.current_note is not None and ctx.current_note.text:
            ctx.current_note.text += "\n"

        for part in COMMENT_NOTE_SPLIT.split(line):
            if not part:
                continue
            if part == "/*":
                if ctx.note_depth == 0:
                    ctx.comment_depth += 1
                else:
                    self._note_text(part, print_notes)
            elif part == "*/":
                if ctx.note_depth > 0:
                    self._note_text(part, print_notes)
                elif ctx.comment_depth > 0:
                    ctx.comment_depth -= 1
                else:
                    self._plain_text(part)
            elif part in ("[[", "[[|"):
                if ctx.comment_depth > 0:
                    continue
                ctx.note_depth += 1
                if ctx.note_depth == 1:
                    ctx.current_note = self.structure.open_note(line_number)
                    if print_notes:
                        begin = NOTE_BEGIN_EXT if part == "[[|" else NOTE_BEGIN
                        ctx.text_display += f"{begin}["
                else:
                    self._note_text(part, print_notes)
            elif part == "]]":
                if ctx.comment_depth > 0:
                    continue
                if ctx.note_depth == 0:
                    self._plain_text(part)
                    continue
                ctx.note_depth -= 1
                if ctx.note_depth == 0:
                    ctx.current_note = None
                    if print_notes:
                        ctx.text_display += f"]{NOTE_END}"
                else:
                    self._note_text(part, print_notes)
            elif ctx.comment_depth > 0:
                continue
            elif ctx.note_depth > 0:
                self._note_text(part, print_notes)
            else:
                self._plain_text(part)

    def _note_text(self, text: str, print_notes: bool) -> None:
        if self.ctx.current_note is not None:
            self.ctx.current_note.text += text
        if print_notes:
            self.ctx.text_display += text

    def _plain_text(self, text: str) -> None:
        self.ctx.text_valid += text
        self.ctx.text_display += text

    # Title page

    def _lex_title_line(self, line_number: int) -> None:
        ctx = self.ctx
        if TITLE_PAGE.match(ctx.text_valid):
            self._add_title_entry(line_number)
            return

        entry = ctx.title_entry
        if entry is None:
            return
        if ctx.title_raw_field:
            text = ctx.text_valid.strip()
            if text:
                entry.text = f"{entry.text} {text}" if entry.text else text
            return

        text = TextStyle.markup_to_sentinels(ctx.text_display.strip())
        if self.settings.merge_empty_lines:
            blank = TextStyle.is_blank_after_style(text)
            merged = blank and ctx.last_blank_title
            ctx.last_blank_title = blank
            if merged:
                entry.text += TextStyle.strip_sentinels(text)
                return
        separator = "" if TextStyle.is_blank_after_style(entry.text) else "\n"
        entry.text += separator + text.strip()

    def _add_title_entry(self, line_number: int) -> None:
        ctx = self.ctx
        valid = ctx.text_valid.strip()
        key = valid[: valid.index(":")].strip().lower().replace(" ", "_")

        raw = TITLE_PAGE_RAW_FIELD.match(valid)
        if raw:
            ctx.title_raw_field = True
            text = raw.group(2).strip()
        else:
            ctx.title_raw_field = False
            ctx.last_blank_title = False
            value = TITLE_PAGE_VALUE.match(ctx.text_display)
            text = TextStyle.markup_to_sentinels(value.group(3).strip()) if value else ""
            text = GLOBAL_CLEAN + text

        position, index = TITLE_PAGE_POSITIONS[key]
        entry = TitlePageEntry(
            key=key, position=position, index=index, text=text, line=line_number
        )
        ctx.title_entry = entry
        self.output.title_page.setdefault(position, []).append(entry)
        if key not in self.output.title_keys:
            self.output.title_keys.append(key)

    def _metadata_entry(self) -> TitlePageEntry | None:
        return next(
            (
                entry
                for entry in self.output.title_page.get("hidden", [])
                if entry.key == "metadata"
            ),
            None,
        )

    # Dialogue

    def _lex_dialogue_line(self, line_number: int) -> None:
        ctx = self.ctx
        valid = ctx.text_valid
        if ctx.parenthetical_open:
            kind = TokenKind.PARENTHETICAL
            if PARENTHETICAL_END.match(valid):
                ctx.parenthetical_open = False
        elif PARENTHETICAL.match(valid):
            kind = TokenKind.PARENTHETICAL
        elif PARENTHETICAL_START.match(valid):
            kind = TokenKind.PARENTHETICAL
            ctx.parenthetical_open = True
        else:
            kind = TokenKind.DIALOGUE

        text = TextStyle.markup_to_sentinels(ctx.text_display)
        token = Token(
            kind,
            f"{ITALIC_GLOBAL_BEGIN}{text}{ITALIC_GLOBAL_END}",
            line_number,
            dual=ctx.dual_side,
            character=ctx.character,
            text_valid=valid,
            ignore=not valid.strip(),
        )
        if kind is TokenKind.DIALOGUE:
            self.structure.add_dialogue_time(token)
        self.stream.add_to_group(token)
        ctx.last_was_separator = False

    def _lex_character(self, line_number: int) -> None:
        ctx = self.ctx
        settings = self.settings
        self._begin_body(line_number)

        cue = CHARACTER_FORCE_MARKER.sub("", ctx.text_valid, count=1).rstrip()
        wants_dual = cue.endswith(_DUAL_MARKER)
        side: Dual | None = None
        if wants_dual and settings.use_dual_dialogue and not ctx.force_not_dual:
            side = self.stream.pair_dual()

        if side is Dual.RIGHT:
            ctx.mode = LexerMode.DUAL_DIALOGUE
        elif side is Dual.LEFT:
            ctx.mode = LexerMode.DUAL_DIALOGUE
            self.stream.open_group(Token(TokenKind.DUAL_DIALOGUE_BEGIN, "", line_number))
        else:
            ctx.mode = LexerMode.DIALOGUE
            self.stream.open_group(Token(TokenKind.DIALOGUE_BEGIN, "", line_number))
        ctx.dual_side = side
        ctx.force_not_dual = False

        if wants_dual:
            cue = cue[: -len(_DUAL_MARKER)]
        name = CHARACTER_EXTENSION.sub("", cue).strip()
        ctx.character = name
        self.structure.add_character(name, line_number, ctx.text_valid.strip())

        display = _strip_dual_marker(ctx.text_display)
        display = CHARACTER_DISPLAY_FORCE_MARKER.sub(
            lambda m: m.group(1) or "", display, count=1
        ).strip()
        token = Token(
            TokenKind.CHARACTER,
            display,
            line_number,
            dual=side,
            character=name,
            text_valid=ctx.text_valid,
        )
        if settings.print_dialogue_numbers:
            ctx.dialogue_number += 1
            token.number = str(ctx.dialogue_number)
        self.stream.add_to_group(token)
        ctx.last_was_separator = False

    # Normal mode

    def _lex_normal_line(self, line_number: int, block_begin: bool) -> None:
        valid = self.ctx.text_valid
        if block_begin:
            if SCENE_HEADING.match(valid):
                self._lex_scene_heading(line_number)
                return
            if not CENTERED.match(valid):
                if TRANSITION.match(valid):
                    self._lex_transition(line_number)
                    return
                if is_character_cue(valid):
                    self._lex_character(line_number)
                    return
                if ACTION_FORCE.match(valid):
                    self._lex_forced_action(line_number)
                    return

        self._begin_body(line_number)
        if CENTERED.match(valid):
            self._lex_centered(line_number)
        elif SECTION.match(valid):
            self._lex_section(line_number)
        elif PAGE_BREAK.match(valid):
            self._emit(Token(TokenKind.PAGE_BREAK, "", line_number))
        elif SYNOPSIS.match(valid):
            self._lex_synopsis(line_number)
        elif LYRIC.match(valid):
            self._lex_lyric(line_number)
        else:
            self._lex_action(line_number, TextStyle.markup_to_sentinels(self.ctx.text_display))

    def _lex_scene_heading(self, line_number: int) -> None:
        ctx = self.ctx
        output = self.output
        self._begin_body(line_number)

        if output.first_scene_line is None:
            output.first_scene_line = line_number
            metadata = self._metadata_entry()
            if metadata is not None:
                self.structure.rates.apply_metadata(metadata.text)

        ctx.force_not_dual = True
        if self.settings.each_scene_on_new_page and output.scenes:
            self._emit(Token(TokenKind.PAGE_BREAK, "", line_number))

        heading = SCENE_FORCE_MARKER.sub("", ctx.text_valid, count=1)
        display = SCENE_FORCE_MARKER.sub("", ctx.text_display, count=1)
        annotation = SCENE_NUMBER.search(heading)
        if annotation:
            heading = SCENE_NUMBER.sub("", heading, count=1)
            display = SCENE_NUMBER.sub("", display, count=1)

        number, duplicate = self.structure.resolve_scene_number(annotation)
        text = _normalize_heading(heading)
        token = Token(
            TokenKind.SCENE_HEADING,
            _normalize_heading(display),
            line_number,
            number=number,
            text_valid=text,
        )
        self.structure.add_scene(number, text, line_number, heading, duplicate)
        self._emit(token)

    def _lex_transition(self, line_number: int) -> None:
        ctx = self.ctx
        self._begin_body(line_number)
        self.structure.handle_shot_cut(
            TRANSITION_MARKER.sub("", ctx.text_valid, count=1)
        )
        text = TRANSITION_MARKER.sub("", ctx.text_display, count=1)
        text = TextStyle.markup_to_sentinels(text).upper().strip()
        self._emit(
            Token(TokenKind.TRANSITION, text, line_number, text_valid=ctx.text_valid)
        )

    def _lex_forced_action(self, line_number: int) -> None:
        self._begin_body(line_number)
        display = self.ctx.text_display
        match = ACTION_FORCE_DISPLAY.match(display)
        if match:
            display = match.group(1) + match.group(3)
        self._lex_action(line_number, TextStyle.markup_to_sentinels(display))

    def _lex_action(self, line_number: int, text: str) -> None:
        valid = self.ctx.text_valid
        token = Token(
            TokenKind.ACTION,
            text,
            line_number,
            text_valid=valid,
            ignore=not valid.strip(),
        )
        self.structure.add_action_time(token)
        self._emit(token)

    def _lex_centered(self, line_number: int) -> None:
        display = self.ctx.text_display
        match = CENTERED_DISPLAY.search(display)
        if match:
            display = "".join(part.strip() for part in match.groups())
        self._emit(
            Token(
                TokenKind.CENTERED,
                TextStyle.markup_to_sentinels(display).strip(),
                line_number,
                text_valid=self.ctx.text_valid,
            )
        )

    def _lex_section(self, line_number: int) -> None:
        ctx = self.ctx
        section = SECTION.match(ctx.text_valid)
        depth = len(section.group(1))
        title = section.group(2).strip()
        display = ctx.text_display
        match = SECTION_DISPLAY.match(display)
        if match:
            display = match.group(1) + match.group(3)
        self.structure.add_section(title, depth, line_number)
        self._emit(
            Token(
                TokenKind.SECTION,
                TextStyle.markup_to_sentinels(display).strip(),
                line_number,
                level=depth,
                text_valid=title,
            )
        )

    def _lex_synopsis(self, line_number: int) -> None:
        ctx = self.ctx
        synopsis = SYNOPSIS.match(ctx.text_valid).group(1).strip()
        display = ctx.text_display
        match = SYNOPSIS_DISPLAY.match(display)
        if match:
            display = match.group(1) + match.group(2)
        self.structure.add_synopsis(synopsis, line_number)
        self._emit(
            Token(
                TokenKind.SYNOPSIS,
                TextStyle.markup_to_sentinels(display).strip(),
                line_number,
                text_valid=synopsis,
            )
        )

    def _lex_lyric(self, line_number: int) -> None:
        display = self.ctx.text_display
        match = LYRIC_DISPLAY.match(display)
        if match:
            display = match.group(1) + match.group(3) + match.group(4)
        self._emit(
            Token(
                TokenKind.LYRIC,
                TextStyle.markup_to_sentinels(display).strip(),
                line_number,
                text_valid=self.ctx.text_valid,
            )
        )


def _normalize_heading(text: str) -> str:
    """Space out the first dash, uppercase and collapse whitespace."""
    dash = text.find("-")
    if dash != -1:
        text = f"{text[:dash]} - {text[dash + 1 :]}"
    return TextStyle.collapse_whitespace(text.upper())


def _strip_dual_marker(display: str) -> str:
    """Drop the trailing ``^`` of a cue, keeping any note that follows it."""
    note_start = min(
        (i for i in (display.find(NOTE_BEGIN), display.find(NOTE_BEGIN_EXT)) if i >= 0),
        default=len(display),
    )
    head, tail = display[:note_start], display[note_start:]
    stripped = head.rstrip()
    if stripped.endswith(_DUAL_MARKER):
        head = stripped[: -len(_DUAL_MARKER)]
    return head + tail


def parse(
    source: str,
    settings: FountainKitSettings | None = None,
    want_html: bool = False,
) -> ParseOutput:
    """Parse Fountain text with a fresh lexer.

    Args:
        source: Fountain text
        settings: Parse options. Defaults to the global settings.
        want_html: Also render ``script_html`` and ``title_html``

    Returns:
        Tokens, outline, title page and indexes of the document
    """
    return FountainLexer(settings).parse(source, want_html=want_html)
