"""Tests for status parsing and atom handling."""

import pytest

from dictclient.exceptions import ProtocolError
from dictclient.protocol import (
    Status,
    format_command,
    is_quoted,
    parse_status,
    quote_argument,
    split_atoms,
)


class TestParseStatus:
    """Tests for parse_status function."""

    def test_code_and_detail(self):
        """Should split the code from the detail text."""
        assert parse_status("250 ok") == Status(250, "ok")

    def test_code_only(self):
        """A bare code has an empty detail."""
        assert parse_status("250") == Status(250, "")

    def test_detail_keeps_inner_spacing(self):
        """Only the separator after the code is dropped."""
        status = parse_status('151 "hello"  wn  "WordNet"')
        assert status.detail == '"hello"  wn  "WordNet"'

    def test_trailing_whitespace_ignored(self):
        """Surrounding whitespace is not part of the detail."""
        assert parse_status("  552 no match \r") == Status(552, "no match")

    @pytest.mark.parametrize("line", ["", ".", "hello", "25 ok", "2500 ok", "abc 250"])
    def test_rejects_non_status_lines(self, line):
        """Lines without a leading three-digit code are protocol errors."""
        with pytest.raises(ProtocolError) as exc_info:
            parse_status(line)
        assert exc_info.value.actual is None


class TestStatus:
    """Tests for Status properties."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [(110, True), (151, True), (220, False), (250, False), (552, False)],
    )
    def test_is_preliminary(self, code, expected):
        """Only 1yz codes announce following text."""
        assert Status(code).is_preliminary is expected


class TestSplitAtoms:
    """Tests for split_atoms function."""

    def test_plain_words(self):
        """Whitespace separates atoms."""
        assert split_atoms("2 databases  present") == ["2", "databases", "present"]

    def test_quoted_atom(self):
        """A quoted run is one atom without its quotes."""
        assert split_atoms('wn "WordNet (r) 3.0"') == ["wn", "WordNet (r) 3.0"]

    def test_definition_header(self):
        """The database name is the second atom of a 151 detail."""
        assert split_atoms('"ice cream" eng-lat "English-Latin"') == [
            "ice cream",
            "eng-lat",
            "English-Latin",
        ]

    def test_empty_quotes(self):
        """An empty quoted string is an empty atom."""
        assert split_atoms('name ""') == ["name", ""]

    def test_unterminated_quote(self):
        """An open quote runs to the end of the line."""
        assert split_atoms('wn "WordNet 3') == ["wn", "WordNet 3"]

    def test_inner_quote_in_bare_atom(self):
        """A quote inside a bare word does not start a new atom."""
        assert split_atoms("don\"t stop") == ['don"t', "stop"]

    def test_empty_string(self):
        """No text, no atoms."""
        assert split_atoms("   ") == []


class TestQuoting:
    """Tests for argument quoting."""

    def test_single_word_unchanged(self):
        """Words without whitespace are sent bare."""
        assert quote_argument("hello") == "hello"

    def test_space_is_quoted(self):
        """Words with a space get one pair of quotes."""
        assert quote_argument("ice cream") == '"ice cream"'

    def test_tab_is_quoted(self):
        """Any whitespace triggers quoting."""
        assert quote_argument("ice\tcream") == '"ice\tcream"'

    def test_prequoted_unchanged(self):
        """Already quoted arguments are not quoted twice."""
        assert quote_argument('"ice cream"') == '"ice cream"'

    def test_embedded_quote_not_escaped(self):
        """Inner quotes are left as they are."""
        assert quote_argument('say "hi" now') == '"say "hi" now"'

    @pytest.mark.parametrize(
        ("arg", "expected"),
        [('"a b"', True), ('"a b', True), ('a b"', True), ("a b", False), ("", False)],
    )
    def test_is_quoted(self, arg, expected):
        """A quote at either end counts as quoted."""
        assert is_quoted(arg) is expected

    def test_format_command(self):
        """Keyword and arguments are joined by single spaces."""
        assert format_command("MATCH", "*", "exact", "ice cream") == 'MATCH * exact "ice cream"'

    def test_format_command_without_arguments(self):
        """A bare keyword is sent alone."""
        assert format_command("QUIT") == "QUIT"

    @pytest.mark.parametrize("arg", ["a\r\nQUIT", "a\nb", "a\rb"])
    def test_format_command_rejects_line_breaks(self, arg):
        """Arguments with CR or LF cannot be sent as one line."""
        with pytest.raises(ValueError, match="line break"):
            format_command("MATCH", "*", "exact", arg)
