"""Tests for record validation and parsing."""

import pytest

from src.records import build_record_pattern, is_valid_record, parse_record


class TestIsValidRecord:
    """Test the full-line validity predicate."""

    @pytest.mark.parametrize(
        "line",
        [
            '"1"',
            '""',
            '"123";"456"',
            '"";"";""',
            '"79855053897";"83100000580443402";"200000133000191"',
            '"1";"";"3"',
        ],
    )
    def test_accepts_quoted_digit_fields(self, line: str) -> None:
        assert is_valid_record(line)

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "1;2",
            '"1";2',
            '"1";"2";',
            ';"1"',
            '"1";;"2"',
            '"12a";"3"',
            '"8383"200000741652251"',
            '"1" ;"2"',
            '"1"\n',
            '"١٢";"3"',
        ],
    )
    def test_rejects_malformed_lines(self, line: str) -> None:
        assert not is_valid_record(line)

    def test_custom_token_pattern(self) -> None:
        """Token grammar is configurable."""
        assert is_valid_record('"abc";"";"x1"', token_pattern=r"[a-z0-9]*")
        assert not is_valid_record('"abc";"X"', token_pattern=r"[a-z0-9]*")

    def test_custom_delimiter_is_literal(self) -> None:
        """Delimiters with regex meaning are matched literally."""
        assert is_valid_record('"1"|"2"', delimiter="|")
        assert not is_valid_record('"1";"2"', delimiter="|")

    def test_invalid_token_pattern_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid token pattern"):
            build_record_pattern("[0-9", ";")

    def test_empty_delimiter_raises(self) -> None:
        with pytest.raises(ValueError, match="delimiter"):
            build_record_pattern(r"\d*", "")

    def test_pattern_is_cached(self) -> None:
        assert build_record_pattern(r"\d*", ";") is build_record_pattern(r"\d*", ";")


class TestParseRecord:
    """Test splitting a record into column -> value."""

    def test_keeps_quotes_and_positions(self) -> None:
        assert parse_record('"1";"2";"3"') == {0: '"1"', 1: '"2"', 2: '"3"'}

    def test_skips_empty_marker(self) -> None:
        assert parse_record('"";"5";"";"7"') == {1: '"5"', 3: '"7"'}

    def test_all_empty_gives_empty_mapping(self) -> None:
        assert parse_record('"";"";""') == {}

    def test_keys_ascend(self) -> None:
        assert list(parse_record('"9";"";"8";"7"')) == [0, 2, 3]

    def test_custom_delimiter_and_marker(self) -> None:
        assert parse_record("a|-|c", delimiter="|", empty_marker="-") == {0: "a", 2: "c"}
