# imapbridge/imap/cursor_store.py
from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Sequence, Tuple

from loguru import logger

from imapbridge.errors import ConfigError
from imapbridge.imap.pagination import UidRange

SEARCH_MESSAGES_TOOL = "imap_search_messages"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_cursor_id() -> str:
    # Cursor ids are bearer tokens for someone's paginated browse: never guessable.
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class SearchCursor:
    id: str
    tool: str
    account_id: str
    mailbox: str
    uidvalidity: int
    uid_ranges: Tuple[UidRange, ...]
    offset: int
    total: int
    include_snippet: bool
    snippet_max_chars: int
    created_at_ms: int
    expires_at_ms: int

    @property
    def exhausted(self) -> bool:
        return self.offset >= self.total


class CursorStore:
    """
    In-memory store of resumable search cursors.

    - TTL is a fixed window from creation; reads and updates never extend it.
    - Expired entries are swept lazily on create() and get(); no background thread.
    - Over capacity, the oldest-created entries are evicted (no LRU promotion).
    """

    def __init__(
        self,
        *,
        ttl_ms: int,
        max_entries: int,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_cursor_id,
    ):
        if ttl_ms <= 0:
            raise ConfigError("CursorStore ttl_ms must be positive")
        if max_entries < 1:
            raise ConfigError("CursorStore max_entries must be >= 1")
        self._ttl_ms = ttl_ms
        self._max_entries = max_entries
        self._clock = clock
        self._id_factory = id_factory
        self._entries: Dict[str, SearchCursor] = {}
        self._lock = threading.Lock()

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def create(
        self,
        *,
        account_id: str,
        mailbox: str,
        uidvalidity: int,
        uid_ranges: Sequence[UidRange],
        offset: int,
        total: int,
        include_snippet: bool = False,
        snippet_max_chars: int = 200,
        tool: str = SEARCH_MESSAGES_TOOL,
    ) -> SearchCursor:
        now = self._clock()
        with self._lock:
            cursor_id = self._id_factory()
            while cursor_id in self._entries:
                cursor_id = self._id_factory()

            cursor = SearchCursor(
                id=cursor_id,
                tool=tool,
                account_id=account_id,
                mailbox=mailbox,
                uidvalidity=uidvalidity,
                uid_ranges=tuple(uid_ranges),
                offset=offset,
                total=total,
                include_snippet=include_snippet,
                snippet_max_chars=snippet_max_chars,
                created_at_ms=now,
                expires_at_ms=now + self._ttl_ms,
            )
            self._entries[cursor.id] = cursor
            self._sweep_expired(now)
            self._enforce_limit()

        logger.debug(
            f"Created search cursor for {account_id}/{mailbox} "
            f"(total={total}, ranges={len(cursor.uid_ranges)})"
        )
        return cursor

    def get(self, cursor_id: str) -> Optional[SearchCursor]:
        now = self._clock()
        with self._lock:
            return self._get_locked(cursor_id, now)

    def update(self, cursor_id: str, offset: int) -> Optional[SearchCursor]:
        """
        Replace the offset only. expires_at_ms stays as set at creation.
        """
        now = self._clock()
        with self._lock:
            cursor = self._get_locked(cursor_id, now)
            if cursor is None:
                return None
            updated = replace(cursor, offset=offset)
            self._entries[cursor_id] = updated
            return updated

    def delete(self, cursor_id: str) -> None:
        with self._lock:
            self._entries.pop(cursor_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # -----------------------
    # internals (caller holds self._lock)
    # -----------------------

    def _get_locked(self, cursor_id: str, now: int) -> Optional[SearchCursor]:
        self._sweep_expired(now)
        cursor = self._entries.get(cursor_id)
        if cursor is None:
            return None
        if cursor.expires_at_ms <= now:
            self._entries.pop(cursor_id, None)
            return None
        return cursor

    def _sweep_expired(self, now: int) -> None:
        expired = [k for k, v in self._entries.items() if v.expires_at_ms <= now]
        for k in expired:
            del self._entries[k]

    def _enforce_limit(self) -> None:
        excess = len(self._entries) - self._max_entries
        if excess <= 0:
            return
        # sorted() is stable, so equal timestamps fall back to insertion order
        oldest = sorted(self._entries.values(), key=lambda c: c.created_at_ms)[:excess]
        for cursor in oldest:
            del self._entries[cursor.id]
        logger.debug(f"Evicted {excess} search cursor(s) over capacity {self._max_entries}")
