"""Property-based tests for the lexer and the style re-lexer.

Documents are assembled from a pool of typical Fountain lines, so the
generated input reaches every lexer mode instead of collapsing to action.
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fountainkit.parser import RESERVED_CODEPOINTS, TokenKind, parse
from fountainkit.render import Footnote, RenderOptions, StyleRelexer

FOUNTAIN_LINES = [
    "",
    "  ",
    "Title: Test",
    "Author: Someone",
    "    Indented continuation",
    "INT. HOUSE - DAY",
    "EXT. PARK - NIGHT #12#",
    ".FORCED HEADING",
    "# Act",
    "## Sequence",
    "= A synopsis.",
    "JOHN",
    "JANE ^",
    "@mcCLANE",
    "BOB (V.O.)",
    "(softly)",
    "(beginning of",
    "a parenthetical)",
    "Some *dialogue* here.",
    "She **walks** in_side_.",
    "CUT TO:",
    "> FADE OUT.",
    "> THE END <",
    "===",
    "~Lyric line",
    "!FORCED ACTION",
    "A note [[about this",
    "and that]] closes.",
    "[[|extended note]]",
    "/* a comment",
    "ends here */ after",
    "> {+A+} ↓",
    "> {-B-} ↑",
    "\\*escaped\\*",
    "Metadata: {\"dial_sec_per_char\": 0.1}",
]

documents = st.lists(st.sampled_from(FOUNTAIN_LINES), max_size=40).map("\n".join)
sentinel_text = st.text(
    alphabet=st.sampled_from(list(RESERVED_CODEPOINTS) + list("ab \n[]")),
    max_size=60,
)


class TestLexerProperties:
    """Invariants that hold for any document."""

    @given(source=st.text(max_size=300))
    @settings(deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_arbitrary_text_never_raises(self, source):
        """Test that arbitrary text always parses."""
        output = parse(source)
        assert isinstance(output.tokens, list)

    @given(source=documents)
    @settings(deadline=None, max_examples=200)
    def test_token_lines_are_ordered(self, source):
        """Test that tokens come out in document order."""
        lines = [token.line for token in parse(source).tokens]
        assert lines == sorted(lines)

    @given(source=documents)
    @settings(deadline=None, max_examples=200)
    def test_dialogue_groups_are_balanced(self, source):
        """Test that every dialogue group that opens also closes."""
        kinds = [token.kind for token in parse(source).tokens]
        assert kinds.count(TokenKind.DIALOGUE_BEGIN) == kinds.count(TokenKind.DIALOGUE_END)
        assert kinds.count(TokenKind.DUAL_DIALOGUE_BEGIN) == kinds.count(
            TokenKind.DUAL_DIALOGUE_END
        )

    @given(source=documents)
    @settings(deadline=None, max_examples=200)
    def test_outline_levels_increase(self, source):
        """Test that every outline child sits deeper than its parent."""
        for root in parse(source).structure:
            for node in root.walk():
                assert all(child.level > node.level for child in node.children)

    @given(source=documents)
    @settings(deadline=None, max_examples=100)
    def test_durations_add_up(self, source):
        """Test that the document total is the sum of its parts."""
        output = parse(source)
        assert output.length_action >= 0
        assert output.length_dialogue >= 0
        assert output.total_duration_sec == output.length_action + output.length_dialogue


class TestRelexerProperties:
    """Invariants of the style re-lexer."""

    @given(lines=st.lists(sentinel_text, max_size=5))
    @settings(deadline=None)
    def test_render_never_raises(self, lines):
        """Test that any sentinel sequence renders and keeps a sane state."""
        relexer = StyleRelexer(RenderOptions())
        footnotes: list[Footnote] = []
        for line in lines:
            for run in relexer.render(line, footnotes):
                assert run.text or run.break_before
                assert not set(run.text) & set(RESERVED_CODEPOINTS)
        assert relexer.state.italic_depth >= 0
        assert [f.number for f in footnotes] == list(range(1, len(footnotes) + 1))
