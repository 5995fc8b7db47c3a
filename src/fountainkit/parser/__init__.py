"""Fountain screenplay parser."""

from fountainkit.parser.constants import RESERVED_CODEPOINTS, StyleCommand
from fountainkit.parser.lexer import FountainLexer, parse
from fountainkit.parser.models import (
    Dual,
    LocationAppearance,
    OutlineNote,
    ParseOutput,
    SceneInfo,
    StructureKind,
    StructureNode,
    Synopsis,
    TitlePageEntry,
    Token,
    TokenKind,
)
from fountainkit.parser.text_style import TextStyle, clear_formatting, inline

__all__ = [
    "RESERVED_CODEPOINTS",
    "Dual",
    "FountainLexer",
    "LocationAppearance",
    "OutlineNote",
    "ParseOutput",
    "SceneInfo",
    "StructureKind",
    "StructureNode",
    "StyleCommand",
    "Synopsis",
    "TextStyle",
    "TitlePageEntry",
    "Token",
    "TokenKind",
    "clear_formatting",
    "inline",
    "parse",
]
