"""Text utilities shared by the lexer, the outline builder and the renderers."""

from __future__ import annotations

import re

from fountainkit.parser.constants import (
    BOLD,
    BOLD_ITALIC,
    ITALIC,
    LONG_PUNCTUATION,
    SENTINEL_PATTERN,
    SHORT_PUNCTUATION,
    UNDERLINE,
    is_punctuation_or_symbol,
)

_MARKUP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?<!\\)\*\*\*"), BOLD_ITALIC),
    (re.compile(r"(?<!\\)\*\*"), BOLD),
    (re.compile(r"(?<!\\)\*"), ITALIC),
    (re.compile(r"(?<!\\)_"), UNDERLINE),
)
_ESCAPED_MARKUP = re.compile(r"\\([*_])")
_WHITESPACE_RUN = re.compile(r"\s+")

_CLEAR_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\*\*(.+?)\*\*"),
    re.compile(r"\*(.+?)\*"),
    re.compile(r"__(.+?)__"),
    re.compile(r"_(.+?)_"),
    re.compile(r"~~(.+?)~~"),
)


class TextStyle:
    """Utility methods for sentinel-encoded token text."""

    @staticmethod
    def markup_to_sentinels(text: str) -> str:
        """Replace ``*``/``_`` emphasis markup with toggle sentinels.

        ``***`` toggles bold-italic, ``**`` bold, ``*`` italic and ``_``
        underline. Backslash-escaped markers are kept as literal characters.

        Args:
            text: Display text of one line

        Returns:
            Text with markup replaced by sentinel characters
        """
        for pattern, sentinel in _MARKUP_RULES:
            text = pattern.sub(sentinel, text)
        return _ESCAPED_MARKUP.sub(r"\1", text)

    @staticmethod
    def strip_sentinels(text: str) -> str:
        """Remove every reserved sentinel character from text."""
        return SENTINEL_PATTERN.sub("", text)

    @staticmethod
    def is_blank_after_style(text: str) -> bool:
        """Check whether text is blank once sentinel characters are removed."""
        return not TextStyle.strip_sentinels(text).strip()

    @staticmethod
    def count_duration_chars(text: str) -> int:
        """Count characters that take screen time.

        Whitespace, punctuation and symbols (Unicode P* and S*) are not
        counted, and neither are sentinel characters.

        Args:
            text: Line content without notes or comments

        Returns:
            Number of spoken or read characters
        """
        return sum(
            1
            for ch in TextStyle.strip_sentinels(text)
            if not ch.isspace() and not is_punctuation_or_symbol(ch)
        )

    @staticmethod
    def count_long_punctuation(text: str) -> int:
        return len(LONG_PUNCTUATION.findall(text))

    @staticmethod
    def count_short_punctuation(text: str) -> int:
        return len(SHORT_PUNCTUATION.findall(text))

    @staticmethod
    def collapse_whitespace(text: str) -> str:
        """Turn every whitespace run into one space and trim the ends."""
        return _WHITESPACE_RUN.sub(" ", text).strip()


def clear_formatting(text: str) -> str:
    """Strip raw emphasis markup and note/comment brackets from text.

    Args:
        text: Raw Fountain text

    Returns:
        Plain text with ``**bold**``, ``*italic*``, ``_underline_``,
        ``~~strike~~`` wrappers and ``[[ ]]``/``/* */`` brackets removed
    """
    for pattern in _CLEAR_RULES:
        text = pattern.sub(r"\1", text)
    for bracket in ("[[", "]]", "/*", "*/"):
        text = text.replace(bracket, "")
    return text.strip()


def inline(text: str) -> str:
    """Collapse a multi-line text into one line."""
    return TextStyle.collapse_whitespace(text.replace("\n", " "))
