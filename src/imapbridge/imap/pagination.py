# imapbridge/imap/pagination.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from imapbridge.models import MessageSummary


@dataclass(frozen=True)
class UidRange:
    high: int  # inclusive
    low: int   # inclusive

    @property
    def count(self) -> int:
        return self.high - self.low + 1


@dataclass
class SearchPage:
    """
    One page of search results as handed back to callers.

    total is the full match count for the search, not the page size.
    """
    messages: List[MessageSummary] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    next_page_token: Optional[str] = None
    pagination_disabled: bool = False
    # the cursor vanished between reading it and advancing it
    page_token_expired: bool = False

    @property
    def has_next(self) -> bool:
        return self.next_page_token is not None


def uids_to_descending_ranges(uids: Iterable[int]) -> List[UidRange]:
    """
    Compress UIDs into strictly descending, disjoint, fully coalesced ranges.

        [9, 8, 7, 3, 2, 10] -> [UidRange(10, 7), UidRange(3, 2)]
    """
    ordered = sorted(set(uids), reverse=True)
    if not ordered:
        return []

    ranges: List[UidRange] = []
    high = low = ordered[0]
    for uid in ordered[1:]:
        if uid == low - 1:
            low = uid
            continue
        ranges.append(UidRange(high=high, low=low))
        high = low = uid

    ranges.append(UidRange(high=high, low=low))
    return ranges


def total_from_ranges(ranges: Sequence[UidRange]) -> int:
    return sum(r.count for r in ranges)


def slice_uids_from_descending_ranges(
    ranges: Sequence[UidRange],
    offset: int,
    limit: int,
) -> List[int]:
    """
    Same result as expanding the ranges and taking [offset:offset+limit],
    without building the expanded list.
    """
    if limit <= 0 or offset < 0:
        return []

    remaining_skip = offset
    uids: List[int] = []

    for r in ranges:
        if remaining_skip >= r.count:
            remaining_skip -= r.count
            continue

        uid = r.high - remaining_skip
        remaining_skip = 0
        while uid >= r.low and len(uids) < limit:
            uids.append(uid)
            uid -= 1

        if len(uids) >= limit:
            break

    return uids
