"""Property-based tests for grouping using Hypothesis."""

from collections import defaultdict

import pytest
from hypothesis import given, settings, strategies as st

from src.grouping import group_records
from src.records import parse_record

FIELD = st.sampled_from(['""', '"1"', '"2"', '"3"', '"4"'])
RECORD = st.lists(FIELD, min_size=1, max_size=4).map(";".join)
RECORDS = st.lists(RECORD, max_size=40, unique=True)


def keys_of(record):
    return set(parse_record(record).items())


def is_linked(members):
    """True if members form one component under 'shares a field key'."""
    members = list(members)
    by_key = defaultdict(list)
    for record in members:
        for key in keys_of(record):
            by_key[key].append(record)

    reached = {members[0]}
    stack = [members[0]]
    while stack:
        record = stack.pop()
        for key in keys_of(record):
            for other in by_key[key]:
                if other not in reached:
                    reached.add(other)
                    stack.append(other)
    return len(reached) == len(members)


class TestGroupingPropertyBased:
    """Property-based tests for grouping invariants."""

    @pytest.mark.hypothesis
    @given(records=RECORDS, strategy=st.sampled_from(["first_match", "union_find"]))
    @settings(max_examples=200, deadline=None)
    def test_partition(self, records, strategy):
        """Every record lands in exactly one non-empty group."""
        groups = group_records(records, strategy=strategy)

        assert all(groups)
        assert sum(len(g) for g in groups) == len(records)
        assert set().union(*groups) == set(records)

    @pytest.mark.hypothesis
    @given(records=RECORDS)
    @settings(max_examples=200, deadline=None)
    def test_groups_are_linked_by_positional_matches(self, records):
        """Members of a first-match group are chained by shared field keys."""
        for group in group_records(records):
            assert is_linked(group)

    @pytest.mark.hypothesis
    @given(records=RECORDS)
    @settings(max_examples=200, deadline=None)
    def test_first_match_refines_union_find(self, records):
        """Each first-match group sits inside one transitive-closure group."""
        closure = group_records(records, strategy="union_find")
        component = {record: i for i, group in enumerate(closure) for record in group}

        for group in group_records(records):
            assert len({component[r] for r in group}) == 1

    @pytest.mark.hypothesis
    @given(records=RECORDS)
    @settings(max_examples=100, deadline=None)
    def test_union_find_groups_are_closed(self, records):
        """No field key is shared across two union_find groups."""
        owner = {}
        for i, group in enumerate(group_records(records, strategy="union_find")):
            for record in group:
                for key in keys_of(record):
                    assert owner.setdefault(key, i) == i

    @pytest.mark.hypothesis
    @given(records=RECORDS, order=st.sampled_from(["arrival", "sorted"]))
    @settings(max_examples=100, deadline=None)
    def test_deterministic(self, records, order):
        first = group_records(records, record_order=order)
        second = group_records(list(records), record_order=order)
        assert first == second

    @pytest.mark.hypothesis
    @given(records=RECORDS)
    @settings(max_examples=100, deadline=None)
    def test_sorted_order_ignores_input_order(self, records):
        forward = group_records(records, record_order="sorted")
        backward = group_records(list(reversed(records)), record_order="sorted")
        assert forward == backward

    @pytest.mark.hypothesis
    @given(n=st.integers(min_value=0, max_value=30))
    @settings(max_examples=30, deadline=None)
    def test_no_shared_values_gives_singletons(self, n):
        records = [f'"{i}";"{i + 1000}"' for i in range(n)]
        groups = group_records(records)
        assert sorted(len(g) for g in groups) == [1] * n
