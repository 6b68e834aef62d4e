"""Tests for reading unique, valid records from plain and gzip sources."""

import gzip

import pytest

from src.ingest import read_unique_records

LINES = [
    '"1";"5"',
    '"1";"6"',
    "garbage",
    '"1";"5"',
    '"";""',
    '"2";"6";',
    '"2";"6"',
    "",
]


class TestReadUniqueRecords:
    @pytest.mark.parametrize("name", ["input.txt", "input.txt.gz"])
    def test_filters_invalid_and_duplicates(self, write_lines, name) -> None:
        path = write_lines(LINES, name)

        records, stats = read_unique_records(path)

        assert records == ['"1";"5"', '"1";"6"', '"";""', '"2";"6"']
        assert stats.lines_read == 8
        assert stats.invalid_lines == 3
        assert stats.duplicate_lines == 1
        assert stats.unique_records == 4

    def test_handles_crlf_line_endings(self, tmp_path) -> None:
        path = tmp_path / "crlf.txt"
        path.write_bytes(b'"1";"2"\r\n"3"\r\n')

        records, _ = read_unique_records(path)

        assert records == ['"1";"2"', '"3"']

    @pytest.mark.parametrize("name", ["bad_bytes.txt", "bad_bytes.txt.gz"])
    def test_undecodable_line_is_dropped(self, tmp_path, name) -> None:
        path = tmp_path / name
        content = b'"1";"2"\n"\xff\xfe";"3"\n"1";"4"\n'
        if name.endswith(".gz"):
            with gzip.open(path, "wb") as f:
                f.write(content)
        else:
            path.write_bytes(content)

        records, stats = read_unique_records(path)

        assert records == ['"1";"2"', '"1";"4"']
        assert stats.invalid_lines == 1
        assert stats.lines_read == 3

    def test_non_ascii_digits_are_invalid(self, write_lines) -> None:
        path = write_lines(['"١٢";"3"', '"12";"3"'])

        records, stats = read_unique_records(path)

        assert records == ['"12";"3"']
        assert stats.invalid_lines == 1

    def test_custom_token_pattern(self, write_lines) -> None:
        path = write_lines(['"a";"b"', '"1";"2"'])

        records, stats = read_unique_records(path, token_pattern=r"[a-z]*")

        assert records == ['"a";"b"']
        assert stats.invalid_lines == 1

    def test_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            read_unique_records(tmp_path / "nope.txt.gz")

    def test_empty_file(self, write_lines) -> None:
        records, stats = read_unique_records(write_lines([]))
        assert records == []
        assert stats.to_dict() == {
            "lines_read": 0,
            "invalid_lines": 0,
            "duplicate_lines": 0,
            "unique_records": 0,
        }
