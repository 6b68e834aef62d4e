"""
Grouping logic for the line grouping pipeline.

Records that share a non-empty value at the same column position are put in
the same group. Two strategies are available:

- ``first_match`` (default): records are processed one by one; a record joins
  the group bound to the first of its field keys (ascending column order)
  that is already bound, and then binds all of its field keys to that group.
  Two groups that already exist are never merged, so a record bridging them
  only joins the first one found.
- ``union_find``: full transitive closure of "shares a field key", built on a
  disjoint set. Bridging records merge their groups.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from src.records import DELIMITER, EMPTY_FIELD, parse_record
from src.utils.io_utils import GROUPING_STRATEGIES, RECORD_ORDERS
from src.utils.progress import ProgressLogger
from src.utils.union_find import DisjointSet

logger = logging.getLogger(__name__)

FieldKey = Tuple[int, str]


# -------------------------------
# Column index
# -------------------------------


class SlotState(Enum):
    ABSENT = "absent"
    UNASSIGNED = "unassigned"
    BOUND = "bound"


@dataclass(frozen=True)
class Slot:
    """State of one field key in the column index."""

    state: SlotState
    group_id: Optional[int] = None

    @classmethod
    def bound(cls, group_id: int) -> "Slot":
        return cls(SlotState.BOUND, group_id)


ABSENT = Slot(SlotState.ABSENT)
UNASSIGNED = Slot(SlotState.UNASSIGNED)

# Stored in place of a group id for keys that were seen but not bound yet
_SEEN = object()


class ColumnIndex:
    """Mapping column -> field value -> group id, or seen-but-unassigned."""

    def __init__(self) -> None:
        self._columns: Dict[int, Dict[str, object]] = {}
        self._size = 0

    def lookup(self, column: int, value: str) -> Slot:
        entry = self._columns.get(column, {}).get(value, ABSENT)
        if entry is ABSENT:
            return ABSENT
        if entry is _SEEN:
            return UNASSIGNED
        return Slot.bound(entry)  # type: ignore[arg-type]

    def mark_seen(self, column: int, value: str) -> None:
        """Record a key as seen without a group; bound keys are left alone."""
        values = self._columns.setdefault(column, {})
        if value not in values:
            values[value] = _SEEN
            self._size += 1

    def bind(self, column: int, value: str, group_id: int) -> None:
        values = self._columns.setdefault(column, {})
        if value not in values:
            self._size += 1
        values[value] = group_id

    def columns(self) -> List[int]:
        return sorted(self._columns)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: FieldKey) -> bool:
        column, value = key
        return value in self._columns.get(column, {})


# -------------------------------
# Grouping engine
# -------------------------------


@dataclass
class GroupingStats:
    strategy: str = "first_match"
    records: int = 0
    groups: int = 0
    joined_existing: int = 0
    empty_records: int = 0
    field_keys: int = 0
    duration_sec: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class GroupingEngine:
    """Single-pass, first-match grouping of unique records.

    One engine holds the column index and group membership for exactly one
    pass; build a new engine for every input set.
    """

    def __init__(self, delimiter: str = DELIMITER, empty_marker: str = EMPTY_FIELD) -> None:
        self.delimiter = delimiter
        self.empty_marker = empty_marker
        self.column_index = ColumnIndex()
        self.groups: Dict[int, Set[str]] = {}
        self.next_group_id = 1
        self.stats = GroupingStats(strategy="first_match")

    def find_target_group(self, fields: Dict[int, str]) -> Optional[int]:
        """Return the group bound to the first already-bound field key.

        Keys scanned before the match that were never seen are recorded as
        seen-but-unassigned.
        """
        for column, value in fields.items():
            slot = self.column_index.lookup(column, value)
            if slot.state is SlotState.BOUND:
                return slot.group_id
            if slot.state is SlotState.ABSENT:
                self.column_index.mark_seen(column, value)
        return None

    def add(self, record: str) -> int:
        """Assign one record to a group and return the group id."""
        fields = parse_record(record, self.delimiter, self.empty_marker)
        self.stats.records += 1

        group_id = self.find_target_group(fields) if fields else None
        if not fields:
            self.stats.empty_records += 1

        if group_id is not None:
            self.groups[group_id].add(record)
            self.stats.joined_existing += 1
        else:
            group_id = self.next_group_id
            self.groups[group_id] = {record}
            self.next_group_id += 1

        # Write-through: every key of this record now leads to its group
        for column, value in fields.items():
            self.column_index.bind(column, value, group_id)

        return group_id

    def run(self, records: Iterable[str]) -> List[Set[str]]:
        for record in records:
            self.add(record)
        return self.result()

    def result(self) -> List[Set[str]]:
        """Groups in allocation order."""
        self.stats.groups = len(self.groups)
        self.stats.field_keys = len(self.column_index)
        return list(self.groups.values())


def group_records_union_find(
    records: Iterable[str], delimiter: str = DELIMITER, empty_marker: str = EMPTY_FIELD
) -> Tuple[List[Set[str]], GroupingStats]:
    """Group records by the transitive closure of shared field keys."""
    uf = DisjointSet()
    key_owner: Dict[FieldKey, str] = {}
    stats = GroupingStats(strategy="union_find")

    for record in records:
        stats.records += 1
        uf.make_set(record)
        fields = parse_record(record, delimiter, empty_marker)
        if not fields:
            stats.empty_records += 1

        joined = False
        for key in fields.items():
            owner = key_owner.setdefault(key, record)
            if owner != record and uf.union(owner, record):
                joined = True
        if joined:
            stats.joined_existing += 1

    groups = [set(members) for members in uf.iter_sets()]  # type: ignore[arg-type]
    stats.groups = uf.get_set_count()
    stats.field_keys = len(key_owner)
    return groups, stats


# -------------------------------
# Entry points
# -------------------------------


def order_records(records: Iterable[str], record_order: str = "arrival") -> List[str]:
    """Put records in the processing order and drop repeated strings.

    ``arrival`` keeps the iteration order of ``records`` (first occurrence
    wins); ``sorted`` orders them lexicographically.
    """
    if record_order not in RECORD_ORDERS:
        raise ValueError(f"Unknown record order {record_order!r}, expected one of {RECORD_ORDERS}")

    unique = list(dict.fromkeys(records))
    if record_order == "sorted":
        unique.sort()
    return unique


def run_grouping(
    records: Iterable[str],
    strategy: str = "first_match",
    record_order: str = "arrival",
    delimiter: str = DELIMITER,
    empty_marker: str = EMPTY_FIELD,
    enable_progress: bool = False,
    progress_every: int = 100_000,
) -> Tuple[List[Set[str]], GroupingStats]:
    """
    Group unique, valid records and return the groups with run statistics.

    Args:
        records: Validated record strings
        strategy: ``first_match`` or ``union_find``
        record_order: ``arrival`` or ``sorted``
        delimiter: Field delimiter
        empty_marker: Field value that never links records
        enable_progress: Show a tqdm bar instead of periodic log lines
        progress_every: Log progress every N records

    Returns:
        Tuple of (groups, stats); groups are unsorted and include singletons
    """
    if strategy not in GROUPING_STRATEGIES:
        raise ValueError(f"Unknown grouping strategy {strategy!r}, expected one of {GROUPING_STRATEGIES}")

    ordered = order_records(records, record_order)
    logger.info(
        f"grouping | strategy={strategy} | record_order={record_order} | records={len(ordered)}"
    )

    progress = ProgressLogger(
        total=len(ordered),
        label="grouping",
        step_every=progress_every,
        enable_tqdm=enable_progress,
        unit="records",
    )
    stream: Iterator[str] = progress.wrap(ordered)

    start = time.perf_counter()
    if strategy == "union_find":
        groups, stats = group_records_union_find(stream, delimiter, empty_marker)
    else:
        engine = GroupingEngine(delimiter, empty_marker)
        groups = engine.run(stream)
        stats = engine.stats
    stats.duration_sec = time.perf_counter() - start

    rate = stats.records / stats.duration_sec if stats.duration_sec > 0 else 0.0
    logger.info(
        f"grouping | strategy={stats.strategy} | records={stats.records} | groups={stats.groups} | "
        f"joined_existing={stats.joined_existing} | empty_records={stats.empty_records} | "
        f"field_keys={stats.field_keys} | throughput={rate:.1f}records/sec | "
        f"duration={stats.duration_sec:.1f}s"
    )
    return groups, stats


def group_records(
    records: Iterable[str],
    strategy: str = "first_match",
    record_order: str = "arrival",
    delimiter: str = DELIMITER,
    empty_marker: str = EMPTY_FIELD,
) -> List[Set[str]]:
    """Partition unique, valid records into groups (unsorted, singletons included)."""
    groups, _ = run_grouping(records, strategy, record_order, delimiter, empty_marker)
    return groups
