"""
Record parsing and validation for semicolon-delimited, quoted-field lines.

A record looks like ``"123";"";"456"``: fields separated by a delimiter,
each field a double-quoted token. The quoted empty field ``""`` carries no
information and never takes part in grouping.
"""

from __future__ import annotations

import functools
import re
from typing import Dict, Pattern

DELIMITER = ";"
EMPTY_FIELD = '""'
DEFAULT_TOKEN_PATTERN = r"\d*"


@functools.lru_cache(maxsize=32)
def build_record_pattern(
    token_pattern: str = DEFAULT_TOKEN_PATTERN, delimiter: str = DELIMITER
) -> Pattern[str]:
    """
    Compile the full-line pattern ``("<token>";)*("<token>")``.

    ``\\d`` and ``\\w`` in the token pattern match ASCII characters only.

    Args:
        token_pattern: Regular expression for the text between the quotes
        delimiter: Field delimiter (matched literally)

    Returns:
        Compiled pattern, to be used with ``fullmatch``

    Raises:
        ValueError: If the delimiter is empty or the token pattern does not compile
    """
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")

    field = f'"(?:{token_pattern})"'
    try:
        return re.compile(f"(?:{field}{re.escape(delimiter)})*{field}", re.ASCII)
    except re.error as e:
        raise ValueError(f"Invalid token pattern {token_pattern!r}: {e}") from e


def is_valid_record(
    record: str, token_pattern: str = DEFAULT_TOKEN_PATTERN, delimiter: str = DELIMITER
) -> bool:
    """Return True if the whole line is a non-empty sequence of quoted fields."""
    return build_record_pattern(token_pattern, delimiter).fullmatch(record) is not None


def parse_record(
    record: str, delimiter: str = DELIMITER, empty_marker: str = EMPTY_FIELD
) -> Dict[int, str]:
    """
    Split a validated record into ``{column_index: field_value}``.

    Field values keep their quotes. Columns holding the empty marker are
    left out, so the mapping only covers fields that can link records.
    Keys come out in ascending column order.
    """
    return {
        column: value
        for column, value in enumerate(record.split(delimiter))
        if value != empty_marker
    }
