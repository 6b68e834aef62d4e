"""
Group reporting for the line grouping pipeline.

Groups are sorted by descending size and numbered by their position in that
sorted list. Singleton groups are not written, but they still use up a
number, so numbering has gaps once singletons start (they sort last).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Sequence, Set, TextIO, Tuple, Union

import pandas as pd

from src.utils.path_utils import ensure_parent_exists

logger = logging.getLogger(__name__)

Group = Set[str]


def sort_groups(groups: Sequence[Group]) -> List[Group]:
    """Sort groups by descending size; equal sizes keep their input order."""
    return sorted(groups, key=len, reverse=True)


def iter_report_entries(groups: Sequence[Group]) -> Iterator[Tuple[int, List[str]]]:
    """
    Yield ``(display_number, sorted_members)`` for every multi-member group.

    The display number is the 1-based position in the size-sorted list of
    all groups, singletons included.
    """
    for position, group in enumerate(sort_groups(groups), start=1):
        if len(group) > 1:
            yield position, sorted(group)


def render_groups(groups: Sequence[Group], stream: TextIO) -> int:
    """
    Write the text report to an open stream.

    Returns:
        Number of groups written (groups with more than one member)
    """
    written = 0
    for number, members in iter_report_entries(groups):
        stream.write(f"Group {number}\n")
        for record in members:
            stream.write(f"{record}\n")
        stream.write("\n")
        written += 1
    return written


def write_groups_report(groups: Sequence[Group], output_path: Union[str, Path]) -> int:
    """Write the text report to ``output_path`` and return the number of groups written."""
    path = ensure_parent_exists(output_path)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        written = render_groups(groups, f)
    logger.info(f"report | path={path} | groups_written={written} | groups_total={len(groups)}")
    return written


def groups_to_frame(groups: Sequence[Group]) -> pd.DataFrame:
    """
    One row per member of every multi-member group.

    Columns: ``group_number``, ``group_size``, ``record``; rows follow the
    report order.
    """
    rows = [
        {"group_number": number, "group_size": len(members), "record": record}
        for number, members in iter_report_entries(groups)
        for record in members
    ]
    df = pd.DataFrame(rows, columns=["group_number", "group_size", "record"])
    return df.astype({"group_number": "int64", "group_size": "int64", "record": "string"})


def write_groups_frame(groups: Sequence[Group], output_path: Union[str, Path]) -> int:
    """Write the report rows as CSV and return the number of rows."""
    path = ensure_parent_exists(output_path)
    df = groups_to_frame(groups)
    df.to_csv(path, index=False)
    logger.info(f"report | csv={path} | rows={len(df)}")
    return len(df)


def compute_group_size_histogram(groups: Sequence[Group]) -> Dict[str, int]:
    """Compute group size histogram with buckets ``1``, ``2``, ``3`` and ``4_plus``."""
    histogram = {"1": 0, "2": 0, "3": 0, "4_plus": 0}
    if not groups:
        return histogram

    size_counts = pd.Series([len(g) for g in groups]).value_counts()
    for size, count in size_counts.items():
        size_int = int(size)
        key = str(size_int) if size_int <= 3 else "4_plus"
        histogram[key] += int(count)

    return histogram


def summarize_groups(groups: Sequence[Group]) -> Dict[str, object]:
    """Counts used by the run summary and the final log line."""
    sizes = [len(g) for g in groups]
    return {
        "count": len(groups),
        "multi_member_count": sum(1 for s in sizes if s > 1),
        "records_in_multi_member_groups": sum(s for s in sizes if s > 1),
        "max_group_size": max(sizes, default=0),
        "size_histogram": compute_group_size_histogram(groups),
    }
