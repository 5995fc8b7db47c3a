"""Tests for reading Fountain files from disk."""

import pytest

from fountainkit import (
    FountainFileNotFoundError,
    ParseError,
    TokenKind,
    parse_file,
)


class TestParseFile:
    """Test parse_file."""

    def test_reads_file(self, tmp_path, sample_script):
        """Test parsing a file path given as a string."""
        path = tmp_path / "heist.fountain"
        path.write_text(sample_script, encoding="utf-8")
        output = parse_file(str(path))
        assert len(output.scenes) == 2

    def test_byte_order_mark(self, tmp_path):
        """Test that a UTF-8 BOM does not end up in the first token."""
        path = tmp_path / "bom.fountain"
        path.write_bytes("\ufeffINT. HOUSE - DAY\n".encode())
        output = parse_file(path)
        assert output.tokens_of(TokenKind.SCENE_HEADING)[0].text == "INT. HOUSE - DAY"

    def test_windows_line_endings(self, tmp_path):
        """Test CRLF files."""
        path = tmp_path / "crlf.fountain"
        path.write_bytes(b"INT. HOUSE - DAY\r\n\r\nJOHN\r\nHello.\r\n")
        output = parse_file(path)
        assert [t.text for t in output.tokens_of(TokenKind.CHARACTER)] == ["JOHN"]

    def test_missing_file(self, tmp_path):
        """Test the error for a missing file."""
        with pytest.raises(FountainFileNotFoundError) as exc_info:
            parse_file(tmp_path / "missing.fountain")
        assert exc_info.value.details["path"].endswith("missing.fountain")

    def test_directory_is_not_a_file(self, tmp_path):
        """Test that a directory path is reported as missing."""
        with pytest.raises(FountainFileNotFoundError):
            parse_file(tmp_path)

    def test_undecodable_file(self, tmp_path):
        """Test the error for a file that is not UTF-8."""
        path = tmp_path / "latin.fountain"
        path.write_bytes(b"CAF\xc9\n")
        with pytest.raises(ParseError) as exc_info:
            parse_file(path)
        assert exc_info.value.details["position"] == 3

    def test_html(self, tmp_path):
        """Test that HTML can be requested for a file."""
        path = tmp_path / "short.fountain"
        path.write_text("EXT. PARK - DAY\n", encoding="utf-8")
        assert "scene-heading" in parse_file(path, want_html=True).script_html
