"""
Record ingest: read a plain or gzip text source, keep valid lines, drop duplicates.

Unique records keep the order of their first occurrence, which is the
``arrival`` order the grouping stage relies on.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

from src.records import DEFAULT_TOKEN_PATTERN, DELIMITER, build_record_pattern
from src.utils.io_utils import open_text_source
from src.utils.progress import ProgressLogger

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    lines_read: int = 0
    invalid_lines: int = 0
    duplicate_lines: int = 0
    unique_records: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def read_unique_records(
    path: Union[str, Path],
    token_pattern: str = DEFAULT_TOKEN_PATTERN,
    delimiter: str = DELIMITER,
    encoding: str = "utf-8",
    enable_progress: bool = False,
    progress_every: int = 100_000,
) -> Tuple[List[str], IngestStats]:
    """
    Load the unique, valid records of a source file.

    Args:
        path: Input file; ``.gz`` files are decompressed on the fly
        token_pattern: Regular expression for the content of one quoted field
        delimiter: Field delimiter
        encoding: Text encoding
        enable_progress: Show a tqdm bar instead of periodic log lines
        progress_every: Log progress every N lines

    Returns:
        Tuple of (records in first-occurrence order, ingest statistics)

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the record pattern cannot be built
    """
    pattern = build_record_pattern(token_pattern, delimiter)
    stats = IngestStats()
    seen: Dict[str, None] = {}

    logger.info(f"ingest | path={path} | token_pattern={token_pattern} | delimiter={delimiter!r}")
    progress = ProgressLogger(
        total=None,
        label="ingest",
        step_every=progress_every,
        enable_tqdm=enable_progress,
    )

    with open_text_source(path, encoding=encoding) as source:
        for raw_line in progress.wrap(source):
            stats.lines_read += 1
            line = raw_line.rstrip("\r\n")
            if pattern.fullmatch(line) is None:
                stats.invalid_lines += 1
                continue
            if line in seen:
                stats.duplicate_lines += 1
                continue
            seen[line] = None

    records = list(seen)
    stats.unique_records = len(records)
    logger.info(
        f"ingest | lines_read={stats.lines_read} | invalid={stats.invalid_lines} | "
        f"duplicates={stats.duplicate_lines} | unique={stats.unique_records}"
    )
    return records, stats
