"""Tests for the inline style re-lexer."""

import pytest

from fountainkit.exceptions import RenderError
from fountainkit.parser import TokenKind
from fountainkit.render import (
    Column,
    Footnote,
    RenderOptions,
    StyleRelexer,
    format_text,
    iter_commands,
    needs_format_reset,
    render,
    tag_after_broken_note,
)
from fountainkit.parser.constants import StyleCommand


@pytest.fixture
def options():
    return RenderOptions(note_color="#888888", note_font_size=9, font_size=12)


@pytest.fixture
def relexer(options):
    return StyleRelexer(options)


def flags(run):
    return (run.text, run.bold, run.italic, run.underline)


class TestIterCommands:
    """Splitting text into commands and plain runs."""

    def test_split(self):
        """Test that sentinels become commands between text chunks."""
        assert list(iter_commands("a↭b↭")) == [
            "a",
            StyleCommand.BOLD,
            "b",
            StyleCommand.BOLD,
        ]

    def test_plain_text(self):
        """Test text without sentinels."""
        assert list(iter_commands("plain")) == ["plain"]
        assert list(iter_commands("")) == []


class TestToggles:
    """Emphasis toggles and resets."""

    def test_plain_run(self, options):
        """Test that plain text renders with the default attributes."""
        (run,) = render("hello", options)
        assert flags(run) == ("hello", False, False, False)
        assert run.color == "#000000"
        assert run.font_size == 12
        assert not run.break_before

    def test_bold_toggle(self, options):
        """Test that bold switches on and off."""
        runs = render("a↭b↭c", options)
        assert [flags(r) for r in runs] == [
            ("a", False, False, False),
            ("b", True, False, False),
            ("c", False, False, False),
        ]

    def test_bold_italic(self, options):
        """Test the combined bold-italic toggle."""
        (run,) = render("↯x↯", options)
        assert run.bold and run.italic

    def test_combination_toggles(self, options):
        """Test that combination toggles flip each component."""
        runs = render("⇀a⇀☍b☍☋c☋", options)
        assert [flags(r) for r in runs] == [
            ("a", False, True, True),
            ("b", True, False, True),
            ("c", True, True, True),
        ]

    def test_global_clean(self, options):
        """Test that the clean command resets every flag."""
        runs = render("↭☈a⇜b", options)
        assert flags(runs[0]) == ("a", True, True, False)
        assert flags(runs[1]) == ("b", False, False, False)

    def test_italic_depth(self, options):
        """Test nested forced italic."""
        runs = render("↾a↾b↿c↿d", options)
        assert [r.italic for r in runs] == [True, True, True, False]

    def test_italic_depth_never_negative(self, relexer):
        """Test that unbalanced ends do not underflow the depth."""
        relexer.render("↿↿")
        (run,) = relexer.render("↾b")
        assert run.italic
        assert relexer.state.italic_depth == 1

    def test_state_persists_between_calls(self, relexer):
        """Test that an open toggle carries over to the next line."""
        relexer.render("↭start")
        (run,) = relexer.render("next")
        assert run.bold

    def test_line_breaks(self, options):
        """Test that newlines split runs with a break marker."""
        runs = render("one\ntwo", options)
        assert [(r.text, r.break_before) for r in runs] == [
            ("one", False),
            ("two", True),
        ]

    def test_link_is_ignored(self, options):
        """Test that the link marker carries no formatting."""
        runs = render("a𓆡b", options)
        assert [flags(r) for r in runs] == [
            ("a", False, False, False),
            ("b", False, False, False),
        ]


class TestStashes:
    """Saving and restoring format state."""

    def test_format_text_isolates_state(self, relexer):
        """Test that format_text starts clean and restores the outer state."""
        relexer.render("↭")
        (inner,) = relexer.format_text("x")
        assert not inner.bold
        (outer,) = relexer.render("y")
        assert outer.bold

    def test_columns_are_independent(self, relexer):
        """Test left and right column stashes."""
        relexer.render("☈")
        relexer.stash(Column.LEFT)
        relexer.render("↭")
        relexer.stash(Column.RIGHT)
        assert relexer.stashes[Column.LEFT].italic
        assert relexer.stashes[Column.RIGHT].bold
        relexer.pop(Column.LEFT)
        assert relexer.state.italic and not relexer.state.bold
        assert relexer.stashes[Column.LEFT] is None

    def test_stash_commands_in_text(self, options):
        """Test stash and pop sentinels embedded in text."""
        runs = render("↭a↬b↫c", options)
        assert [r.bold for r in runs] == [True, False, True]

    def test_stash_around_bold_span(self, options):
        """Test that a popped stash drops emphasis opened after the stash."""
        runs = render("↬↭bold text↭↫rest", options)
        assert [(r.text, r.bold) for r in runs] == [("bold text", True), ("rest", False)]

    def test_pop_without_stash(self, relexer):
        """Test that popping an empty slot keeps the current state."""
        relexer.render("↭")
        relexer.pop(Column.GLOBAL)
        assert relexer.state.bold

    def test_format_text_function(self, options):
        """Test the module-level helper."""
        (run,) = format_text("↭x↭", options)
        assert run.bold


class TestNotes:
    """Note coloring and footnote capture."""

    def test_inline_note(self, options):
        """Test that without a collector notes are drawn in the note color."""
        runs = render("a↺[n]↻b", options)
        assert [(r.text, r.color, r.font_size) for r in runs] == [
            ("a", "#000000", 12),
            ("[n]", "#888888", 9),
            ("b", "#000000", 12),
        ]

    def test_footnote_capture(self, options):
        """Test that a collector cuts notes out of the flow."""
        footnotes: list[Footnote] = []
        runs = render("a↺[n]↻b", options, footnotes)
        assert [r.text for r in runs] == ["a", "1", "b"]
        assert runs[1].footnote == 1
        assert footnotes[0].number == 1
        assert footnotes[0].text_lines == ["[n]"]

    def test_note_across_lines(self, relexer):
        """Test that a note continued on the next line extends its footnote."""
        footnotes: list[Footnote] = []
        relexer.render("a↺[first", footnotes)
        runs = relexer.render("second]↻ b", footnotes)
        assert [r.text for r in runs] == [" b"]
        assert footnotes[0].text_lines == ["[first", "second]"]
        assert footnotes[0].text == "[first\nsecond]"

    def test_footnotes_are_numbered(self, relexer):
        """Test sequential footnote numbers."""
        footnotes: list[Footnote] = []
        relexer.render("↺[a]↻ ↺[b]↻", footnotes)
        assert [f.number for f in footnotes] == [1, 2]
        assert relexer.notes_counter == 2

    def test_extended_note_is_drawn(self, options):
        """Test that an extended note is collected and still drawn."""
        footnotes: list[Footnote] = []
        runs = render("a இ[x]↻", options, footnotes)
        assert [r.text for r in runs] == ["a ", "[x]"]
        assert runs[1].color == "#888888"
        assert footnotes[0].text_lines == ["[x]"]

    def test_toggles_inside_note_are_captured(self, relexer):
        """Test that emphasis inside a captured note stays in the note text."""
        footnotes: list[Footnote] = []
        relexer.render("↺a↭b↭↻", footnotes)
        assert footnotes[0].text_lines == ["a↭b↭"]
        assert not relexer.state.bold

    def test_note_across_lines_with_fresh_collectors(self, relexer):
        """Test a note continued on a line rendered with a new collector."""
        first_line: list[Footnote] = []
        second_line: list[Footnote] = []
        relexer.render("a↺[first", first_line)
        runs = relexer.render("second]↻ b", second_line)
        assert [r.text for r in runs] == [" b"]
        assert second_line == first_line
        assert second_line[0].text_lines == ["[first", "second]"]

    def test_note_without_collector_on_closing_line(self, relexer):
        """Test that the continuation is captured even without a collector."""
        footnotes: list[Footnote] = []
        relexer.render("↺[first", footnotes)
        runs = relexer.render("second]↻ b")
        assert [r.text for r in runs] == [" b"]
        assert footnotes[0].text_lines == ["[first", "second]"]

    def test_multiline_note_text(self, relexer):
        """Test one text_lines entry per line of note text."""
        footnotes: list[Footnote] = []
        runs = relexer.render("a↺[one\ntwo]↻", footnotes)
        assert [r.text for r in runs] == ["a", "1"]
        assert footnotes[0].text_lines == ["[one", "two]"]

    def test_note_italic(self):
        """Test italic notes."""
        options = RenderOptions(note_italic=True)
        runs = render("a↺[n]↻b", options)
        assert [r.italic for r in runs] == [False, True, False]

    def test_note_end_clears_override(self, relexer):
        """Test that the note color ends with the note."""
        relexer.render("↺x↻")
        assert relexer.state.override_color is None


class TestRenderOptions:
    """Render option validation."""

    def test_colors_are_normalized(self):
        """Test that hex colors are uppercased."""
        options = RenderOptions(default_color="#abcdef")
        assert options.default_color == "#ABCDEF"

    @pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG", ""])
    def test_invalid_color(self, color):
        """Test that malformed colors raise RenderError."""
        with pytest.raises(RenderError) as exc_info:
            RenderOptions(note_color=color)
        assert "Invalid note color" in str(exc_info.value)
        assert exc_info.value.hint

    def test_invalid_font_size(self):
        """Test that font sizes must be positive."""
        with pytest.raises(RenderError):
            RenderOptions(font_size=0)

    def test_from_settings(self, settings_factory):
        """Test building options from settings."""
        settings = settings_factory(note_color="#ff0000", note_italic=False, font_size=14)
        options = RenderOptions.from_settings(settings)
        assert options.note_color == "#FF0000"
        assert options.font_size == 14
        assert not options.note_italic


class TestHelpers:
    """Renderer helper functions."""

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (TokenKind.CHARACTER, True),
            ("scene_heading", True),
            ("lyric", True),
            (TokenKind.ACTION, False),
            ("dialogue", False),
            ("bogus", False),
        ],
    )
    def test_needs_format_reset(self, kind, expected):
        """Test which token kinds start from a clean state."""
        assert needs_format_reset(kind) is expected

    def test_tag_after_broken_note(self):
        """Test tag placement after a note continued from an earlier line."""
        assert tag_after_broken_note("end]↻ text", "☈") == "end]↻☈ text"
        assert tag_after_broken_note("end]↻ ↺[new", "☈") == "end]↻☈ ↺[new"

    def test_tag_prefixed_otherwise(self):
        """Test that the tag is prefixed when no note is broken."""
        assert tag_after_broken_note("text", "☈") == "☈text"
        assert tag_after_broken_note("a ↺[n]↻ b", "☈") == "☈a ↺[n]↻ b"
