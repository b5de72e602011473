import threading

import pytest

from imapbridge.errors import ConfigError
from imapbridge.imap.cursor_store import SEARCH_MESSAGES_TOOL, CursorStore
from imapbridge.imap.pagination import UidRange


def _create(store, **overrides):
    fields = dict(
        account_id="default",
        mailbox="INBOX",
        uidvalidity=1000,
        uid_ranges=[UidRange(10, 1)],
        offset=3,
        total=10,
    )
    fields.update(overrides)
    return store.create(**fields)


@pytest.mark.parametrize("ttl_ms,max_entries", [(0, 10), (-5, 10), (1000, 0)])
def test_rejects_bad_configuration(ttl_ms, max_entries):
    with pytest.raises(ConfigError):
        CursorStore(ttl_ms=ttl_ms, max_entries=max_entries)


def test_create_sets_fixed_expiry(store, clock):
    cursor = _create(store)
    assert cursor.tool == SEARCH_MESSAGES_TOOL
    assert cursor.created_at_ms == clock.now
    assert cursor.expires_at_ms == clock.now + store.ttl_ms
    assert cursor.uid_ranges == (UidRange(10, 1),)
    assert store.get(cursor.id) == cursor


def test_default_ids_are_unguessable():
    store = CursorStore(ttl_ms=1000, max_entries=10)
    a = _create(store)
    b = _create(store)
    assert a.id != b.id
    assert len(a.id) >= 32


def test_expiry_boundary(clock, cursor_ids):
    store = CursorStore(ttl_ms=1000, max_entries=10, clock=clock, id_factory=cursor_ids)
    cursor = _create(store)

    clock.advance(999)
    assert store.get(cursor.id) is not None

    clock.advance(1)
    assert store.get(cursor.id) is None
    assert len(store) == 0


def test_update_does_not_extend_ttl(clock, cursor_ids):
    store = CursorStore(ttl_ms=1000, max_entries=10, clock=clock, id_factory=cursor_ids)
    cursor = _create(store)

    clock.advance(900)
    updated = store.update(cursor.id, 6)
    assert updated is not None
    assert updated.offset == 6
    assert updated.expires_at_ms == cursor.expires_at_ms

    clock.advance(100)
    assert store.get(cursor.id) is None
    assert store.update(cursor.id, 9) is None


def test_update_only_changes_offset(store):
    cursor = _create(store, offset=3)
    updated = store.update(cursor.id, 6)
    assert updated.offset == 6
    assert updated.uid_ranges == cursor.uid_ranges
    assert updated.total == cursor.total
    assert updated.created_at_ms == cursor.created_at_ms
    assert store.get(cursor.id).offset == 6


def test_update_unknown_id(store):
    assert store.update("missing", 3) is None


def test_eviction_removes_oldest_created(clock, cursor_ids):
    store = CursorStore(ttl_ms=60_000, max_entries=2, clock=clock, id_factory=cursor_ids)
    first = _create(store)
    clock.advance(1)
    second = _create(store)
    clock.advance(1)

    # reads do not promote
    assert store.get(first.id) is not None

    third = _create(store)
    assert store.get(first.id) is None
    assert store.get(second.id) is not None
    assert store.get(third.id) is not None
    assert len(store) == 2


def test_eviction_ties_use_insertion_order(clock, cursor_ids):
    store = CursorStore(ttl_ms=60_000, max_entries=2, clock=clock, id_factory=cursor_ids)
    a = _create(store)
    b = _create(store)
    c = _create(store)
    assert store.get(a.id) is None
    assert store.get(b.id) is not None
    assert store.get(c.id) is not None


def test_create_sweeps_expired(clock, cursor_ids):
    store = CursorStore(ttl_ms=1000, max_entries=10, clock=clock, id_factory=cursor_ids)
    _create(store)
    _create(store)
    clock.advance(1000)
    _create(store)
    assert len(store) == 1


def test_delete_is_idempotent(store):
    cursor = _create(store)
    store.delete(cursor.id)
    store.delete(cursor.id)
    store.delete("never-existed")
    assert store.get(cursor.id) is None


def test_clear(store):
    _create(store)
    _create(store)
    store.clear()
    assert len(store) == 0


def test_concurrent_creates_respect_capacity():
    store = CursorStore(ttl_ms=60_000, max_entries=50)

    def worker():
        for _ in range(100):
            _create(store)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 50


def test_cursor_at_end_of_results_keeps_offset(store):
    cursor = _create(store, offset=3, total=3)
    assert store.get(cursor.id).offset == 3

    updated = store.update(cursor.id, 6)
    assert updated.offset == 6
    assert store.get(cursor.id).offset == 6
