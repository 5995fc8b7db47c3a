"""Sentinel characters, title-page vocabulary and line classification patterns.

The lexer encodes inline formatting as single reserved characters embedded in
token text. Each reserved character maps to one :class:`StyleCommand`; the
re-lexer in :mod:`fountainkit.render` replays them into styled runs. Any of
these characters appearing in author input is indistinguishable from a
command, so callers must treat :data:`RESERVED_CODEPOINTS` as off limits.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum


class StyleCommand(str, Enum):
    """Inline commands, valued by the sentinel character that encodes them."""

    NOTE_BEGIN_EXT = "இ"
    NOTE_BEGIN = "↺"
    NOTE_END = "↻"
    ITALIC = "☈"
    BOLD = "↭"
    BOLD_ITALIC = "↯"
    UNDERLINE = "☄"
    ITALIC_UNDERLINE = "⇀"
    BOLD_UNDERLINE = "☍"
    BOLD_ITALIC_UNDERLINE = "☋"
    LINK = "𓆡"
    LEFT_STASH = "↷"
    LEFT_POP = "↶"
    RIGHT_STASH = "↝"
    RIGHT_POP = "↜"
    GLOBAL_STASH = "↬"
    GLOBAL_POP = "↫"
    GLOBAL_CLEAN = "⇜"
    ITALIC_GLOBAL_BEGIN = "↾"
    ITALIC_GLOBAL_END = "↿"


NOTE_BEGIN_EXT = StyleCommand.NOTE_BEGIN_EXT.value
NOTE_BEGIN = StyleCommand.NOTE_BEGIN.value
NOTE_END = StyleCommand.NOTE_END.value
ITALIC = StyleCommand.ITALIC.value
BOLD = StyleCommand.BOLD.value
BOLD_ITALIC = StyleCommand.BOLD_ITALIC.value
UNDERLINE = StyleCommand.UNDERLINE.value
GLOBAL_STASH = StyleCommand.GLOBAL_STASH.value
GLOBAL_POP = StyleCommand.GLOBAL_POP.value
GLOBAL_CLEAN = StyleCommand.GLOBAL_CLEAN.value
ITALIC_GLOBAL_BEGIN = StyleCommand.ITALIC_GLOBAL_BEGIN.value
ITALIC_GLOBAL_END = StyleCommand.ITALIC_GLOBAL_END.value

# Legacy names, as stored in exported documents
STYLE_CHARS: dict[str, str] = {
    "note_begin_ext": NOTE_BEGIN_EXT,
    "note_begin": NOTE_BEGIN,
    "note_end": NOTE_END,
    "italic": ITALIC,
    "bold": BOLD,
    "bold_italic": BOLD_ITALIC,
    "underline": UNDERLINE,
    "italic_underline": StyleCommand.ITALIC_UNDERLINE.value,
    "bold_underline": StyleCommand.BOLD_UNDERLINE.value,
    "bold_italic_underline": StyleCommand.BOLD_ITALIC_UNDERLINE.value,
    "link": StyleCommand.LINK.value,
    "style_left_stash": StyleCommand.LEFT_STASH.value,
    "style_left_pop": StyleCommand.LEFT_POP.value,
    "style_right_stash": StyleCommand.RIGHT_STASH.value,
    "style_right_pop": StyleCommand.RIGHT_POP.value,
    "style_global_stash": GLOBAL_STASH,
    "style_global_pop": GLOBAL_POP,
    "style_global_clean": GLOBAL_CLEAN,
    "italic_global_begin": ITALIC_GLOBAL_BEGIN,
    "italic_global_end": ITALIC_GLOBAL_END,
}

RESERVED_CODEPOINTS: frozenset[str] = frozenset(cmd.value for cmd in StyleCommand)
SENTINEL_PATTERN = re.compile(
    "|".join(re.escape(cmd.value) for cmd in StyleCommand)
)

# Title page keys, normalized (lowercase, spaces to underscores), mapped to
# their print position and ordering index within that position.
TITLE_PAGE_POSITIONS: dict[str, tuple[str, int]] = {
    "title": ("cc", 0),
    "credit": ("cc", 1),
    "author": ("cc", 2),
    "authors": ("cc", 3),
    "source": ("cc", 4),
    "watermark": ("hidden", -1),
    "font": ("hidden", -1),
    "font_italic": ("hidden", -1),
    "font_bold": ("hidden", -1),
    "font_bold_italic": ("hidden", -1),
    "header": ("hidden", -1),
    "footer": ("hidden", -1),
    "metadata": ("hidden", -1),
    "notes": ("bl", 0),
    "copyright": ("bl", 1),
    "revision": ("br", 0),
    "date": ("br", 1),
    "draft_date": ("br", 2),
    "contact": ("br", 3),
    "contact_info": ("br", 4),
    "br": ("br", -1),
    "bl": ("bl", -1),
    "tr": ("tr", -1),
    "tc": ("tc", -1),
    "tl": ("tl", -1),
    "cc": ("cc", -1),
}

_TITLE_KEYS = (
    r"title|credit|authors?|source|notes|draft date|date|watermark"
    r"|contact(?: info)?|revision|copyright"
    r"|font bold italic|font italic|font bold|font|metadata"
    r"|tl|tc|tr|cc|br|bl|header|footer"
)
_TITLE_TEXT_KEYS = (
    r"title|credit|authors?|source|notes|draft date|date|watermark"
    r"|contact(?: info)?|revision|copyright|tl|tc|tr|cc|br|bl|header|footer"
)

TITLE_PAGE = re.compile(rf"^[ \t]*({_TITLE_KEYS}):.*", re.IGNORECASE)
TITLE_PAGE_VALUE = re.compile(
    rf"^(.*?{NOTE_END})??\s*({_TITLE_TEXT_KEYS}):(.*)", re.IGNORECASE
)
TITLE_PAGE_RAW_FIELD = re.compile(
    r"^\s*(font bold italic|font italic|font bold|font|metadata):(.*)",
    re.IGNORECASE,
)

SCENE_HEADING = re.compile(
    r"^[ \t]*(\.(?=[\w(（])|(?i:int\.?/ext|i\.?/e|int|ext|est)[. ])"
    r"\s*([^#]*)(#\s*\S.*#)?\s*$"
)
SCENE_FORCE_MARKER = re.compile(r"^[ \t]*\.")
SCENE_NUMBER = re.compile(r"#\s*(?:\$\{\s*([^}\s]*)\s*\})?\s*([^#]*?)\s*#")
LOCATION = re.compile(
    r"^[ \t]*((?:int\.?/ext|i\.?/e|int|ext|est)[. ])?\s*([^#]*)", re.IGNORECASE
)
LOCATION_TIME_SPLIT = re.compile(r"(.*?)[-–—−](.*)")

TRANSITION = re.compile(r"^\s*(?:(>)[^\n\r<]*|[A-Z ]+TO:)$")
TRANSITION_MARKER = re.compile(r"^\s*>\s*")

# Character cues need Unicode letter classes that ``re`` lacks, so the shape
# is matched here and the casing is checked by :func:`is_character_cue`.
CHARACTER = re.compile(
    r"^[ \t]*(?:(?P<name>[^\W\d_][^\r\n@]*?)|(?P<forced>@[^\r\n(（^]*))"
    r"(?P<extension>\(.*\)|（.*）)?(?P<dual>\s*\^)?\s*$"
)
CHARACTER_FORCE_MARKER = re.compile(r"^[ \t]*@")
CHARACTER_DISPLAY_FORCE_MARKER = re.compile(rf"^(.*?{NOTE_END})?[ \t]*@")
CHARACTER_EXTENSION = re.compile(r"[ \t]*(\(.*\)|（.*）)[ \t]*([ \t]*\^)?$")

PARENTHETICAL = re.compile(r"^[ \t]*(\(.+\)|（.+）)\s*$")
PARENTHETICAL_START = re.compile(r"^[ \t]*[(（][^)）]*$")
PARENTHETICAL_END = re.compile(r"^.*[)）]\s*$")

CENTERED = re.compile(r"^[ \t]*>\s*(.+)\s*<\s*$")
CENTERED_DISPLAY = re.compile(
    rf"((?:^.*?{NOTE_END})|^)[ \t]*>\s*(.+?)\s*<\s*((?:{NOTE_BEGIN_EXT}.*$)|(?:{NOTE_BEGIN}.*$)|$)"
)
SECTION = re.compile(r"^[ \t]*(#+)\s*(.*)")
SECTION_DISPLAY = re.compile(rf"^((?:.*?{NOTE_END})?\s*)(#+)\s*(.*)")
PAGE_BREAK = re.compile(r"^\s*={3,}\s*$")
SYNOPSIS = re.compile(r"^[ \t]*=(.*)")
SYNOPSIS_DISPLAY = re.compile(rf"^((?:.*?{NOTE_END})?\s*)=(.*)")
LYRIC = re.compile(r"^(\s*)(~)(\s*)(.*)")
LYRIC_DISPLAY = re.compile(rf"^((?:.*?{NOTE_END})?\s*)(~)(\s*)(.*)")
ACTION_FORCE = re.compile(r"^(\s*)(!)(.*)")
ACTION_FORCE_DISPLAY = re.compile(rf"^((?:.*?{NOTE_END})?\s*)(!)(.*)")

COMMENT_NOTE_SPLIT = re.compile(r"(/\*|\*/|\[\[\||\[\[|\]\])")
LINE_SPLIT = re.compile(r"\r\n|\r|\n")

LONG_PUNCTUATION = re.compile(r"[.?!:。？！：]")
SHORT_PUNCTUATION = re.compile(r"[,，;；、]")

# Shot-cut brackets: (opening prefix, closing suffix) -> grouping mode
SHOT_CUT_OPENERS: dict[tuple[str, str], int] = {
    ("{+", "+} ↓"): 1,
    ("{#", "#} ↓"): 2,
    ("{=", "=} ↓"): 3,
}
SHOT_CUT_CLOSER: tuple[str, str] = ("{-", "-} ↑")

DUPLICATE_SCENE_MARK = "↑"


def is_punctuation_or_symbol(char: str) -> bool:
    """Return True for characters in the Unicode P* or S* categories."""
    return unicodedata.category(char)[0] in ("P", "S")


def is_character_cue(text: str) -> bool:
    """Check whether a line is shaped like a character cue.

    A cue starts with an uppercase letter and has no lowercase letters before
    an optional parenthetical extension, or is forced with a leading ``@``.

    Args:
        text: Line content with comments and notes removed

    Returns:
        True if the line introduces a dialogue block
    """
    match = CHARACTER.match(text)
    if not match:
        return False
    if match.group("forced") is not None:
        return True
    name = match.group("name")
    if not name[0].isupper():
        return False
    return not any(ch.islower() for ch in name)
