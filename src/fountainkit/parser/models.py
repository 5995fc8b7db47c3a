"""Data models for Fountain screenplay parsing."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TokenKind(str, Enum):
    """Kinds of tokens emitted by the block lexer."""

    SCENE_HEADING = "scene_heading"
    ACTION = "action"
    CENTERED = "centered"
    TRANSITION = "transition"
    CHARACTER = "character"
    PARENTHETICAL = "parenthetical"
    DIALOGUE = "dialogue"
    DIALOGUE_BEGIN = "dialogue_begin"
    DIALOGUE_END = "dialogue_end"
    DUAL_DIALOGUE_BEGIN = "dual_dialogue_begin"
    DUAL_DIALOGUE_END = "dual_dialogue_end"
    SECTION = "section"
    SYNOPSIS = "synopsis"
    LYRIC = "lyric"
    PAGE_BREAK = "page_break"
    SEPARATOR = "separator"


class Dual(str, Enum):
    """Column of a dual dialogue block."""

    LEFT = "left"
    RIGHT = "right"


class LexerMode(str, Enum):
    """States of the block lexer."""

    NORMAL = "normal"
    TITLE_PAGE = "title_page"
    DIALOGUE = "dialogue"
    DUAL_DIALOGUE = "dual_dialogue"


class StructureKind(str, Enum):
    """What an outline node stands for."""

    SECTION = "section"
    SCENE = "scene"
    CHARACTER = "character"
    NOTE = "note"


@dataclass
class Token:
    """One classified line (or synthetic marker) of the screenplay."""

    kind: TokenKind
    text: str
    line: int
    end_line: int | None = None
    dual: Dual | None = None
    number: str | None = None
    level: int | None = None
    duration_sec: float | None = None
    cumulative_play_sec: float = 0.0
    character: str | None = None
    ignore: bool = False
    text_valid: str = ""
    characters_action: list[str] = field(default_factory=list)

    @property
    def line_span(self) -> tuple[int, int]:
        return (self.line, self.line if self.end_line is None else self.end_line)


@dataclass
class TitlePageEntry:
    """A title page field merged from one or more source lines."""

    key: str
    position: str
    index: int
    text: str
    line: int


@dataclass
class OutlineNote:
    """Note text attached to an outline node."""

    text: str
    line: int


@dataclass
class Synopsis:
    """Synopsis line attached to an outline node."""

    text: str
    line: int


@dataclass
class StructureNode:
    """A node of the outline tree: section, scene, character block or note."""

    id: str
    kind: StructureKind
    text: str
    line: int
    level: int = 0
    children: list[StructureNode] = field(default_factory=list)
    duration_sec: float = 0.0
    play_sec: float = 0.0
    synopses: list[Synopsis] = field(default_factory=list)
    notes: list[OutlineNote] = field(default_factory=list)
    dialogue_end_line: int | None = None

    def walk(self) -> list[StructureNode]:
        """Return this node and all descendants in document order."""
        nodes = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return nodes


@dataclass
class LocationAppearance:
    """One scene heading that takes place at a location."""

    name: str
    interior: bool
    exterior: bool
    time_of_day: str
    scene_number: str
    line: int
    start_play_sec: float


@dataclass
class SceneInfo:
    """Per-scene record with timing totals."""

    number: str
    text: str
    line: int
    action_length: float = 0.0
    dialogue_length: float = 0.0
    start_play_sec: float = 0.0
    end_play_sec: float = 0.0
    duplicate: bool = False


@dataclass
class ShotCutGroup:
    """Scenes that share one aggregated duration (a crosscut bracket)."""

    mode: int
    duration_sec: float = 0.0
    nodes: list[StructureNode] = field(default_factory=list)


@dataclass
class ParseOutput:
    """Everything produced by one parse of a document."""

    tokens: list[Token] = field(default_factory=list)
    structure: list[StructureNode] = field(default_factory=list)
    title_page: dict[str, list[TitlePageEntry]] = field(default_factory=dict)
    title_keys: list[str] = field(default_factory=list)
    characters: dict[str, list[int]] = field(default_factory=dict)
    character_scene_numbers: dict[str, list[str]] = field(default_factory=dict)
    character_lines: dict[int, str] = field(default_factory=dict)
    character_first_line: dict[str, int] = field(default_factory=dict)
    character_describe: dict[str, str] = field(default_factory=dict)
    locations: dict[str, list[LocationAppearance]] = field(default_factory=dict)
    scenes: list[SceneInfo] = field(default_factory=list)
    scene_number_vars: dict[str, str] = field(default_factory=dict)
    length_action: float = 0.0
    length_dialogue: float = 0.0
    dial_sec_per_char: float = 0.3
    dial_sec_per_punc_short: float = 0.3
    dial_sec_per_punc_long: float = 0.75
    action_sec_per_char: float = 0.4
    first_scene_line: int | None = None
    first_token_line: int | None = None
    parse_time_ms: float = 0.0
    script_html: str | None = None
    title_html: str | None = None

    @property
    def total_duration_sec(self) -> float:
        return self.length_action + self.length_dialogue

    def tokens_of(self, kind: TokenKind) -> list[Token]:
        """Return the tokens of one kind, in document order."""
        return [token for token in self.tokens if token.kind is kind]

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain JSON-compatible data."""
        data = asdict(self)
        data["character_lines"] = {
            str(line): name for line, name in self.character_lines.items()
        }
        data["total_duration_sec"] = self.total_duration_sec
        return data
