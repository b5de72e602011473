# tests/conftest.py
from __future__ import annotations

from itertools import count

import pytest

from fake_imap_client import FakeIMAPClient
from imapbridge.config import BridgeSettings
from imapbridge.imap.cursor_store import CursorStore
from imapbridge.mail_tools import MailTools


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cursor_ids():
    seq = count(1)
    return lambda: f"cursor-{next(seq)}"


@pytest.fixture
def store(clock, cursor_ids) -> CursorStore:
    return CursorStore(ttl_ms=10 * 60 * 1000, max_entries=200, clock=clock, id_factory=cursor_ids)


@pytest.fixture
def imap() -> FakeIMAPClient:
    client = FakeIMAPClient()
    client.create_mailbox("INBOX")
    client.create_mailbox("Archive")
    return client


@pytest.fixture
def work_imap() -> FakeIMAPClient:
    client = FakeIMAPClient()
    client.create_mailbox("INBOX")
    return client


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings(write_enabled=True)


@pytest.fixture
def tools(imap, work_imap, store, settings) -> MailTools:
    return MailTools({"default": imap, "work": work_imap}, store, settings)


@pytest.fixture
def readonly_tools(imap, work_imap, store) -> MailTools:
    return MailTools({"default": imap, "work": work_imap}, store, BridgeSettings())
