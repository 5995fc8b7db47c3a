"""fountainkit: a Fountain screenplay lexer with outline, timing and inline styling.

The block lexer turns Fountain text into tokens, a section/scene outline, a
title page and character/location indexes. The inline re-lexer turns the
sentinel-encoded token text into styled runs for a renderer.

Token text carries inline formatting as single sentinel characters, listed in
``RESERVED_CODEPOINTS``. These characters are reserved: if one appears in a
screenplay it is read as a formatting command, not as text.
"""

from __future__ import annotations

from pathlib import Path

from fountainkit.config import FountainKitSettings, get_logger, get_settings
from fountainkit.exceptions import (
    ConfigurationError,
    FountainFileNotFoundError,
    FountainKitError,
    ParseError,
    RenderError,
)
from fountainkit.parser import RESERVED_CODEPOINTS, ParseOutput, TokenKind, parse
from fountainkit.render import RenderOptions, StyledRun, format_text, render

__version__ = "0.1.0"

__all__ = [
    "RESERVED_CODEPOINTS",
    "ConfigurationError",
    "FountainFileNotFoundError",
    "FountainKitError",
    "FountainKitSettings",
    "ParseError",
    "ParseOutput",
    "RenderError",
    "RenderOptions",
    "StyledRun",
    "TokenKind",
    "__version__",
    "format_text",
    "get_settings",
    "parse",
    "parse_file",
    "render",
]

logger = get_logger(__name__)


def parse_file(
    path: Path | str,
    settings: FountainKitSettings | None = None,
    want_html: bool = False,
) -> ParseOutput:
    """Read and parse a Fountain file.

    Args:
        path: Path to a UTF-8 Fountain file
        settings: Parse options. Defaults to the global settings.
        want_html: Also render ``script_html`` and ``title_html``

    Returns:
        Parse output of the file

    Raises:
        FountainFileNotFoundError: If the file does not exist
        ParseError: If the file cannot be read as UTF-8 text
    """
    path = Path(path)
    if not path.is_file():
        raise FountainFileNotFoundError(
            message=f"Fountain file not found: {path}",
            hint="Check the path, or pass the screenplay text to parse() directly",
            details={"path": str(path)},
        )
    try:
        source = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(
            message=f"Cannot decode {path.name} as UTF-8",
            hint="Re-save the screenplay with UTF-8 encoding",
            details={"path": str(path), "position": e.start},
        ) from e

    logger.info("Parsing Fountain file", path=str(path), size=len(source))
    return parse(source, settings=settings, want_html=want_html)
