"""Tests for the outline tree, durations and indexes."""

import pytest

from fountainkit.parser import StructureKind, TokenKind, parse
from fountainkit.parser.structure import (
    DurationRates,
    parse_location,
    slugify_location,
)


class TestOutline:
    """Section and scene nesting."""

    def test_sections_nest_by_depth(self):
        """Test that sections and scenes attach to the latest open section."""
        output = parse(
            "# A\n\n## B\n\nINT. X - DAY\n\n# C\n\nINT. Y - DAY"
        )
        roots = output.structure
        assert [r.text for r in roots] == ["A", "C"]
        section_b = roots[0].children[0]
        assert section_b.text == "B"
        assert section_b.id == "/0/2"
        scene_x = section_b.children[0]
        assert scene_x.kind is StructureKind.SCENE
        assert scene_x.text == "1 INT. X - DAY"
        assert scene_x.id == "/0/2/4"
        assert scene_x.level == 3
        scene_y = roots[1].children[0]
        assert scene_y.level == 2

    def test_skipped_depth_attaches_to_nearest(self):
        """Test that ### under # nests directly under it."""
        output = parse("# A\n\n### C")
        assert output.structure[0].children[0].text == "C"
        assert output.structure[0].children[0].level == 3

    @pytest.mark.parametrize("marks", ["#", "##", "###"])
    def test_same_depth_sections_are_siblings(self, marks):
        """Test that a section closes the open section of the same depth."""
        output = parse(f"{marks} A\n\n{marks} B")
        assert [n.text for n in output.structure] == ["A", "B"]
        assert [n.id for n in output.structure] == ["/0", "/2"]
        assert not output.structure[0].children

    def test_deeper_sections_close_on_shallower(self):
        """Test that ## after ### at root level closes the ### section."""
        output = parse("### A\n\n## B\n\n### C")
        assert [n.text for n in output.structure] == ["A", "B"]
        assert output.structure[1].children[0].text == "C"
        assert output.structure[1].children[0].id == "/2/4"

    def test_scene_without_section_is_root(self):
        """Test that scenes outside any section are top-level nodes."""
        output = parse("INT. A - DAY\n\nEXT. B - DAY")
        assert [n.level for n in output.structure] == [0, 0]
        assert [n.id for n in output.structure] == ["/0", "/2"]

    def test_children_are_deeper_than_parents(self):
        """Test the level ordering of every parent and child."""
        output = parse("# A\n\n## B\n\nINT. X - DAY\n\n### D\n\nINT. Y - DAY")
        for root in output.structure:
            for node in root.walk():
                for child in node.children:
                    assert child.level > node.level

    def test_synopsis_attaches_to_scene(self):
        """Test that a synopsis attaches to the latest outline node."""
        output = parse("# Act\n\n= Act synopsis.\n\nINT. A - DAY\n\n= Scene synopsis.")
        act = output.structure[0]
        assert [s.text for s in act.synopses] == ["Act synopsis."]
        assert [s.text for s in act.children[0].synopses] == ["Scene synopsis."]

    def test_foldable_dialogue(self, settings_factory):
        """Test character nodes under scenes when dialogue is foldable."""
        settings = settings_factory(dialogue_foldable=True)
        output = parse("INT. A - DAY\n\nMAX\nLine one.\nLine two.\n\nDone.", settings=settings)
        scene = output.structure[0]
        character = scene.children[0]
        assert character.kind is StructureKind.CHARACTER
        assert character.text == "MAX"
        assert character.dialogue_end_line == 4
        assert character.duration_sec > 0

    def test_no_character_nodes_by_default(self):
        """Test that character blocks stay out of the outline by default."""
        output = parse("INT. A - DAY\n\nMAX\nHi.")
        assert output.structure[0].children == []


class TestDurations:
    """Screen time estimates."""

    def test_action_rate(self):
        """Test that action time counts letters only."""
        output = parse("EXT. A - DAY\n\nAbc def.")
        token = output.tokens_of(TokenKind.ACTION)[0]
        assert token.duration_sec == pytest.approx(6 * 0.4)
        assert output.length_action == pytest.approx(2.4)

    def test_dialogue_punctuation(self):
        """Test that dialogue adds pauses for punctuation."""
        output = parse("EXT. A - DAY\n\nMAX\nHi, there.")
        token = output.tokens_of(TokenKind.DIALOGUE)[0]
        assert token.duration_sec == pytest.approx(7 * 0.3 + 0.3 + 0.75)

    def test_no_time_before_first_scene(self):
        """Test that lines before the first heading take no screen time."""
        output = parse("A long opening crawl.\n\nINT. A - DAY")
        token = output.tokens_of(TokenKind.ACTION)[0]
        assert token.duration_sec is None
        assert output.total_duration_sec == 0

    def test_cumulative_play_time(self):
        """Test running play time on tokens and scene boundaries."""
        output = parse("EXT. A - DAY\n\nAbc.\n\nEXT. B - DAY\n\nDe.")
        actions = output.tokens_of(TokenKind.ACTION)
        assert actions[0].cumulative_play_sec == pytest.approx(1.2)
        assert actions[1].cumulative_play_sec == pytest.approx(2.0)
        first, second = output.scenes
        assert first.start_play_sec == 0
        assert first.end_play_sec == pytest.approx(1.2)
        assert second.start_play_sec == pytest.approx(1.2)
        assert second.end_play_sec == pytest.approx(2.0)

    def test_scene_totals(self, sample_script):
        """Test per-scene action and dialogue totals of a full script."""
        output = parse(sample_script)
        warehouse, bank = output.scenes
        assert warehouse.action_length == pytest.approx(8 * 0.4)
        assert warehouse.dialogue_length == pytest.approx(13 * 0.3 + 0.75 + 6 * 0.3 + 0.75)
        assert bank.action_length == pytest.approx(16 * 0.4)
        assert output.total_duration_sec == pytest.approx(
            output.length_action + output.length_dialogue
        )
        assert output.structure[0].children[0].duration_sec == pytest.approx(
            warehouse.action_length + warehouse.dialogue_length
        )

    def test_custom_rates(self, settings_factory):
        """Test rates taken from settings."""
        settings = settings_factory(action_sec_per_char=1.0)
        output = parse("EXT. A - DAY\n\nAb.", settings=settings)
        assert output.length_action == pytest.approx(2.0)
        assert output.action_sec_per_char == 1.0


class TestShotCuts:
    """Crosscut brackets that share one duration."""

    def test_time_is_shared(self):
        """Test that time inside a bracket is split evenly over its scenes."""
        output = parse(
            "INT. ONE - DAY\n\nAaaa.\n\n"
            "> {+A+} ↓\n\nBb.\n\n"
            "INT. TWO - DAY\n\nCc.\n\n"
            "INT. THREE - DAY\n\nDd.\n\n"
            "> {-B-} ↑\n\nEe.\n\n"
            "INT. FOUR - DAY\n\nFfff."
        )
        one, two, three, four = output.structure
        share = (2 + 2 + 2) * 0.4 / 3
        assert one.duration_sec == pytest.approx(4 * 0.4 + share)
        assert two.duration_sec == pytest.approx(share)
        assert three.duration_sec == pytest.approx(share + 2 * 0.4)
        assert four.duration_sec == pytest.approx(4 * 0.4)

    def test_transition_without_bracket(self):
        """Test that ordinary transitions leave durations alone."""
        output = parse("INT. ONE - DAY\n\nAa.\n\nCUT TO:\n\nBb.")
        assert output.structure[0].duration_sec == pytest.approx(4 * 0.4)


class TestIndexes:
    """Location and character indexes."""

    def test_location_flags(self):
        """Test interior/exterior flags and time of day."""
        output = parse("INT./EXT. CAR - NIGHT\n\nEXT. PARK - DAY")
        car = output.locations["CAR"][0]
        assert car.interior and car.exterior
        assert car.time_of_day == "NIGHT"
        park = output.locations["PARK"][0]
        assert not park.interior and park.exterior
        assert park.scene_number == "2"

    def test_repeated_location(self):
        """Test that each visit to a location is recorded."""
        output = parse("INT. HOUSE - DAY\n\nEXT. PARK - DAY\n\nINT. HOUSE - NIGHT")
        assert [a.line for a in output.locations["HOUSE"]] == [0, 4]

    def test_forced_heading_location(self):
        """Test that the force marker does not end up in the location name."""
        output = parse(".INT. HOUSE - DAY #1#")
        house = output.locations["HOUSE"][0]
        assert house.interior

    def test_characters_named_in_action(self):
        """Test that a character named in action prose is credited to the scene."""
        output = parse(
            "INT. A - DAY\n\nMAX\nHi.\n\nEXT. B - DAY\n\nMAX runs past."
        )
        assert output.characters["MAX"] == [0, 1]
        action = output.tokens_of(TokenKind.ACTION)[0]
        assert action.characters_action == ["MAX"]

    def test_longest_name_wins(self):
        """Test that overlapping names are matched longest first."""
        output = parse(
            "INT. A - DAY\n\nANNA\nHi.\n\nANNABEL\nHey.\n\nANNABEL waves."
        )
        action = output.tokens_of(TokenKind.ACTION)[0]
        assert action.characters_action == ["ANNABEL"]


class TestHelpers:
    """Location parsing and rate helpers."""

    def test_parse_location(self):
        """Test splitting a heading into location and time."""
        location = parse_location("INT. HOUSE - KITCHEN - DAY")
        assert location.name == "HOUSE"
        assert location.time_of_day == "KITCHEN - DAY"
        assert location.interior and not location.exterior

    def test_parse_chinese_location(self):
        """Test Chinese interior/exterior prefixes."""
        location = parse_location("(内外景)客厅 - 日")
        assert location.name == "客厅"
        assert location.interior and location.exterior

    def test_parse_location_empty(self):
        """Test that a heading without a location yields None."""
        assert parse_location("INT. ") is None

    def test_slugify_location(self):
        """Test index key normalization."""
        assert slugify_location("house - kitchen") == "HOUSE-KITCHEN"

    def test_apply_metadata(self):
        """Test rate overrides from JSON."""
        rates = DurationRates()
        assert rates.apply_metadata('{"dial_sec_per_char": 0.5, "other": 1}')
        assert rates.dial_sec_per_char == 0.5
        assert rates.action_sec_per_char == 0.4

    def test_apply_metadata_rejects_non_objects(self):
        """Test that valid JSON that is not an object is ignored."""
        rates = DurationRates()
        assert rates.apply_metadata("[1, 2]") is False
        assert rates.apply_metadata('{"dial_sec_per_char": "fast"}')
        assert rates.dial_sec_per_char == 0.3
