"""Outline tree, scene numbering, duration bookkeeping and indexes.

The lexer drives a :class:`StructureBuilder` while it walks the document:
sections, scenes, character cues, synopses and notes open outline nodes, and
action and dialogue lines add screen time. Open sections are kept on an
explicit stack, so attaching a node to the latest section at a given depth
never searches the tree.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

from fountainkit.config import FountainKitSettings, get_logger
from fountainkit.parser.constants import (
    DUPLICATE_SCENE_MARK,
    LOCATION,
    LOCATION_TIME_SPLIT,
    SHOT_CUT_CLOSER,
    SHOT_CUT_OPENERS,
)
from fountainkit.parser.models import (
    LocationAppearance,
    OutlineNote,
    ParseOutput,
    SceneInfo,
    ShotCutGroup,
    StructureKind,
    StructureNode,
    Synopsis,
    Token,
    TokenKind,
)
from fountainkit.parser.text_style import TextStyle

logger = get_logger(__name__)

_DURATION_KEYS = (
    "dial_sec_per_char",
    "dial_sec_per_punc_short",
    "dial_sec_per_punc_long",
    "action_sec_per_char",
)

_CHINESE_LOCATION_PREFIXES: tuple[tuple[tuple[str, ...], bool, bool], ...] = (
    (("(内外景)", "（内外景）"), True, True),
    (("(内景)", "（内景）"), True, False),
    (("(外景)", "（外景）"), False, True),
)


@dataclass
class DurationRates:
    """Seconds of screen time per character and per punctuation mark."""

    dial_sec_per_char: float = 0.3
    dial_sec_per_punc_short: float = 0.3
    dial_sec_per_punc_long: float = 0.75
    action_sec_per_char: float = 0.4

    @classmethod
    def from_settings(cls, settings: FountainKitSettings) -> DurationRates:
        return cls(**{key: getattr(settings, key) for key in _DURATION_KEYS})

    def apply_metadata(self, text: str) -> bool:
        """Override rates from a title page ``Metadata:`` JSON object.

        Invalid JSON keeps the current rates.

        Args:
            text: JSON text from the hidden metadata field

        Returns:
            True if the JSON parsed
        """
        try:
            metadata = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unparsable title page metadata", error=str(e))
            return False
        if not isinstance(metadata, dict):
            return False
        for key in _DURATION_KEYS:
            value = metadata.get(key)
            if isinstance(value, int | float) and not isinstance(value, bool):
                setattr(self, key, float(value))
        return True

    def action_time(self, text: str) -> float:
        return TextStyle.count_duration_chars(text) * self.action_sec_per_char

    def dialogue_time(self, text: str) -> float:
        return (
            TextStyle.count_duration_chars(text) * self.dial_sec_per_char
            + TextStyle.count_long_punctuation(text) * self.dial_sec_per_punc_long
            + TextStyle.count_short_punctuation(text) * self.dial_sec_per_punc_short
        )


def parse_location(heading: str) -> LocationAppearance | None:
    """Derive location, interior/exterior flags and time of day.

    Args:
        heading: Scene heading without the ``.`` force marker or notes

    Returns:
        Location details (scene number, line and play time left blank),
        or None if the heading has no location text
    """
    match = LOCATION.match(heading)
    if not match:
        return None
    prefix = (match.group(1) or "").upper()
    rest = match.group(2)
    interior = "I" in prefix
    exterior = any(mark in prefix for mark in ("EX", "E.", "/E"))

    split = LOCATION_TIME_SPLIT.match(rest)
    name = (split.group(1) if split else rest).strip()
    time_of_day = split.group(2).strip() if split else ""

    for prefixes, is_interior, is_exterior in _CHINESE_LOCATION_PREFIXES:
        matched = next((p for p in prefixes if name.startswith(p)), None)
        if matched:
            name = name[len(matched) :].strip()
            interior = interior or is_interior
            exterior = exterior or is_exterior
            break

    name = re.sub(r"\s", " ", name.upper())
    if not name.strip():
        return None
    return LocationAppearance(
        name=name,
        interior=interior,
        exterior=exterior,
        time_of_day=re.sub(r"\s", " ", time_of_day.upper()),
        scene_number="",
        line=0,
        start_play_sec=0.0,
    )


def slugify_location(name: str) -> str:
    """Normalize a location name into its index key."""
    slug = re.sub(r"\s", " ", name.upper())
    return slug.replace(" -", "-").replace("- ", "-").strip()


@dataclass
class _SceneNumbering:
    counter: int = 1
    aliases: dict[str, str] = field(default_factory=dict)
    seen: set[str] = field(default_factory=set)


class StructureBuilder:
    """Incrementally builds the outline tree and timing metrics of one parse."""

    def __init__(self, settings: FountainKitSettings, output: ParseOutput) -> None:
        """Initialize an empty builder.

        Args:
            settings: Parse options (foldable dialogue, duration rates)
            output: Parse output the builder fills in
        """
        self.settings = settings
        self.output = output
        self.rates = DurationRates.from_settings(settings)
        self.play_sec = 0.0
        self.current_depth = 0
        self._open_sections: list[StructureNode] = []
        self._numbering = _SceneNumbering()
        self.scene_node: StructureNode | None = None
        self.previous_scene_node: StructureNode | None = None
        self.character_node: StructureNode | None = None
        self._last_outline_node: StructureNode | None = None
        self._shot_cut_mode = 0
        self._shot_cuts: list[ShotCutGroup] = []

    @property
    def has_scene(self) -> bool:
        return bool(self.output.scenes)

    @property
    def scene_index(self) -> int | None:
        return len(self.output.scenes) - 1 if self.output.scenes else None

    def _attach(self, node: StructureNode, parent: StructureNode | None) -> None:
        if parent is None:
            node.id = f"/{node.line}"
            self.output.structure.append(node)
        else:
            node.id = f"{parent.id}/{node.line}"
            parent.children.append(node)

    def add_section(self, text: str, depth: int, line: int) -> StructureNode:
        """Open a section of ``depth`` (the number of ``#``)."""
        while self._open_sections and self._open_sections[-1].level >= depth:
            self._open_sections.pop()
        parent = self._open_sections[-1] if self._open_sections else None
        node = StructureNode(
            id="",
            kind=StructureKind.SECTION,
            text=text,
            line=line,
            level=depth,
            play_sec=self.play_sec,
        )
        self._attach(node, parent)
        self._open_sections.append(node)
        self.current_depth = depth
        self._last_outline_node = node
        return node

    def resolve_scene_number(
        self, annotation: re.Match[str] | None
    ) -> tuple[str, bool]:
        """Resolve the number of the next scene heading.

        The default is the running counter. A ``#12A#`` annotation overrides
        it, and ``#${name}#`` shares one number between every heading that
        names the same variable. A number seen before without aliasing is a
        duplicate and comes back with a leading mark.

        Args:
            annotation: Match of the scene number pattern, if any

        Returns:
            Tuple of (resolved number, is duplicate)
        """
        numbering = self._numbering
        number = str(numbering.counter)
        aliased = False
        if annotation is not None:
            explicit = (annotation.group(2) or "").strip()
            if explicit:
                number = explicit
            variable = (annotation.group(1) or "").strip()
            if variable:
                if variable in numbering.aliases:
                    number = numbering.aliases[variable]
                    aliased = True
                else:
                    numbering.aliases[variable] = number

        if aliased:
            return number, False
        if number in numbering.seen:
            return f"{DUPLICATE_SCENE_MARK}{number}", True
        numbering.seen.add(number)
        numbering.counter += 1
        return number, False

    def add_scene(
        self, number: str, text: str, line: int, heading: str, duplicate: bool
    ) -> StructureNode:
        """Open a scene under the latest open section.

        Args:
            number: Resolved scene number
            text: Normalized heading text
            line: Source line of the heading
            heading: Heading used for location parsing
            duplicate: Whether the number repeats an earlier one

        Returns:
            The new scene node
        """
        parent = self._open_sections[-1] if self._open_sections else None
        node = StructureNode(
            id="",
            kind=StructureKind.SCENE,
            text=f"{number} {text}",
            line=line,
            level=parent.level + 1 if parent else 0,
            play_sec=self.play_sec,
        )
        self._attach(node, parent)
        self.previous_scene_node = self.scene_node
        self.scene_node = node
        self.character_node = None
        self._last_outline_node = node

        if self._shot_cut_mode > 0 and self._shot_cuts:
            self._shot_cuts[-1].nodes.append(node)

        if self.output.scenes:
            self.output.scenes[-1].end_play_sec = self.play_sec
        self.output.scenes.append(
            SceneInfo(
                number=number,
                text=text,
                line=line,
                start_play_sec=self.play_sec,
                end_play_sec=self.play_sec,
                duplicate=duplicate,
            )
        )

        location = parse_location(heading)
        if location is not None:
            location.scene_number = number
            location.line = line
            location.start_play_sec = self.play_sec
            appearances = self.output.locations.setdefault(
                slugify_location(location.name), []
            )
            if not any(it.line == line for it in appearances):
                appearances.append(location)
        return node

    def add_synopsis(self, text: str, line: int) -> None:
        """Attach a synopsis to the most recently opened section or scene."""
        if self._last_outline_node is not None:
            self._last_outline_node.synopses.append(Synopsis(text=text, line=line))

    def open_note(self, line: int) -> OutlineNote:
        """Start an outline note; later text is appended to the returned note."""
        note = OutlineNote(text="", line=line)
        if self._last_outline_node is not None:
            self._last_outline_node.notes.append(note)
        else:
            node = StructureNode(
                id=f"/{line}", kind=StructureKind.NOTE, text="", line=line
            )
            node.notes.append(note)
            self.output.structure.append(node)
        return note

    def add_character(self, name: str, line: int, cue: str = "") -> None:
        """Record a character cue in the indexes and, optionally, the outline.

        Cues before the first scene form the cast list: the first one of each
        name also records its line and its full cue text as a description.
        """
        index = self.scene_index
        scenes = self.output.characters.setdefault(name, [])
        if index is not None and index not in scenes:
            scenes.append(index)
        self.output.character_lines[line] = name
        if not self.has_scene and name not in self.output.character_first_line:
            self.output.character_first_line[name] = line
            self.output.character_describe[name] = cue

        if self.settings.dialogue_foldable and self.scene_node is not None:
            node = StructureNode(
                id="",
                kind=StructureKind.CHARACTER,
                text=name,
                line=line,
                level=self.scene_node.level + 1,
                play_sec=self.play_sec,
            )
            self._attach(node, self.scene_node)
            self.character_node = node

    def close_character_block(self, end_line: int) -> None:
        if self.character_node is not None:
            self.character_node.dialogue_end_line = end_line
            self.character_node = None

    def _accumulate(self, seconds: float, dialogue: bool) -> None:
        self.play_sec += seconds
        scene = self.output.scenes[-1]
        if dialogue:
            self.output.length_dialogue += seconds
            scene.dialogue_length += seconds
            if self.character_node is not None:
                self.character_node.duration_sec += seconds
        else:
            self.output.length_action += seconds
            scene.action_length += seconds

        group = self._shot_cuts[-1] if self._shot_cuts else None
        if (
            self._shot_cut_mode > 0
            and group is not None
            and any(node is self.scene_node for node in group.nodes)
        ):
            group.duration_sec += seconds
        elif self.scene_node is not None:
            self.scene_node.duration_sec += seconds

    def add_action_time(self, token: Token) -> None:
        """Add the screen time of an action line; nothing before the first scene."""
        if not self.has_scene:
            return
        seconds = self.rates.action_time(token.text_valid)
        token.duration_sec = seconds
        self._accumulate(seconds, dialogue=False)
        token.cumulative_play_sec = self.play_sec

    def add_dialogue_time(self, token: Token) -> None:
        """Add the screen time of a dialogue line; nothing before the first scene."""
        if not self.has_scene:
            return
        seconds = self.rates.dialogue_time(token.text_valid)
        token.duration_sec = seconds
        self._accumulate(seconds, dialogue=True)
        token.cumulative_play_sec = self.play_sec

    def handle_shot_cut(self, text: str) -> None:
        """Open or close a crosscut bracket from a transition's inner text."""
        text = text.strip()
        for (opener, closer), mode in SHOT_CUT_OPENERS.items():
            if text.startswith(opener) and text.endswith(closer):
                self._shot_cut_mode = mode
                group = ShotCutGroup(mode=mode)
                if mode == 2 and self.previous_scene_node is not None:
                    group.nodes.append(self.previous_scene_node)
                if mode in (1, 2) and self.scene_node is not None:
                    group.nodes.append(self.scene_node)
                self._shot_cuts.append(group)
                return
        opener, closer = SHOT_CUT_CLOSER
        if text.startswith(opener) and text.endswith(closer):
            self._shot_cut_mode = 0

    def finish(self, tokens: list[Token]) -> None:
        """Run the final pass once every line has been lexed.

        Closes the last scene's timing, spreads each crosscut bracket's time
        evenly over its scenes, credits characters named in action prose to
        the scene they appear in, and fills the derived indexes.

        Args:
            tokens: Committed tokens of the document
        """
        output = self.output
        if output.scenes:
            output.scenes[-1].end_play_sec = self.play_sec

        for group in self._shot_cuts:
            if group.duration_sec == 0 or not group.nodes:
                continue
            share = group.duration_sec / len(group.nodes)
            for node in group.nodes:
                node.duration_sec += share

        self._scan_action_characters(tokens)

        for name, indices in output.characters.items():
            numbers: list[str] = []
            for index in sorted(indices):
                number = output.scenes[index].number
                if number not in numbers:
                    numbers.append(number)
            output.character_scene_numbers[name] = numbers

        output.scene_number_vars = dict(self._numbering.aliases)
        for key in _DURATION_KEYS:
            setattr(output, key, getattr(self.rates, key))

    def _scan_action_characters(self, tokens: list[Token]) -> None:
        names = sorted((n for n in self.output.characters if n), key=len, reverse=True)
        if not names:
            return
        scene_index = -1
        for token in tokens:
            if token.kind is TokenKind.SCENE_HEADING:
                scene_index += 1
                continue
            if scene_index < 0 or token.kind is not TokenKind.ACTION:
                continue
            if not token.text:
                continue
            taken: list[tuple[int, int]] = []
            for name in names:
                span = _find_free_span(token.text, name, taken)
                if span is None:
                    continue
                taken.append(span)
                scenes = self.output.characters[name]
                if scene_index not in scenes:
                    scenes.append(scene_index)
                token.characters_action.append(name)


def _find_free_span(
    text: str, name: str, taken: list[tuple[int, int]]
) -> tuple[int, int] | None:
    """Find the first occurrence of ``name`` not overlapping ``taken`` spans."""
    start = text.find(name)
    while start != -1:
        end = start + len(name)
        if not any(s < end and e > start for s, e in taken):
            return start, end
        start = text.find(name, start + 1)
    return None
