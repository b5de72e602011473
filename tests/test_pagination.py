import random

import pytest

from imapbridge.imap.pagination import (
    SearchPage,
    UidRange,
    slice_uids_from_descending_ranges,
    total_from_ranges,
    uids_to_descending_ranges,
)


def test_empty_input():
    assert uids_to_descending_ranges([]) == []
    assert slice_uids_from_descending_ranges([], 0, 10) == []


def test_compresses_unsorted_input_with_duplicates():
    assert uids_to_descending_ranges([9, 8, 7, 3, 2, 10, 8]) == [
        UidRange(high=10, low=7),
        UidRange(high=3, low=2),
    ]


def test_single_values_become_single_ranges():
    assert uids_to_descending_ranges([1, 5, 3]) == [
        UidRange(5, 5),
        UidRange(3, 3),
        UidRange(1, 1),
    ]


def test_ranges_are_descending_disjoint_and_coalesced():
    rng = random.Random(1234)
    uids = rng.sample(range(1, 5000), 800)
    ranges = uids_to_descending_ranges(uids)

    for r in ranges:
        assert r.high >= r.low
    for prev, nxt in zip(ranges, ranges[1:]):
        # at least one missing number between neighbours
        assert prev.low > nxt.high + 1

    assert total_from_ranges(ranges) == len(set(uids))
    total = total_from_ranges(ranges)
    assert slice_uids_from_descending_ranges(ranges, 0, total) == sorted(set(uids), reverse=True)


def test_slice_spans_ranges():
    ranges = [UidRange(10, 7), UidRange(3, 2)]
    assert slice_uids_from_descending_ranges(ranges, 2, 3) == [8, 7, 3]


def test_slice_skips_whole_ranges():
    ranges = [UidRange(10, 7), UidRange(3, 2), UidRange(1, 1)]
    assert slice_uids_from_descending_ranges(ranges, 5, 10) == [2, 1]


@pytest.mark.parametrize("offset,limit", [(6, 5), (100, 1), (0, 0), (0, -1), (-1, 5)])
def test_slice_out_of_bounds_is_empty(offset, limit):
    ranges = [UidRange(10, 7), UidRange(3, 2)]
    assert slice_uids_from_descending_ranges(ranges, offset, limit) == []


def test_slice_matches_materialized_list():
    rng = random.Random(99)
    uids = rng.sample(range(1, 300), 120)
    ranges = uids_to_descending_ranges(uids)
    expanded = sorted(set(uids), reverse=True)

    for offset in range(0, len(expanded) + 3, 7):
        for limit in (1, 5, 13, 50):
            assert slice_uids_from_descending_ranges(ranges, offset, limit) == expanded[offset:offset + limit]


def test_search_page_has_next():
    assert not SearchPage().has_next
    assert SearchPage(next_page_token="abc").has_next
