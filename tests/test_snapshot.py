import pytest

from imapbridge.errors import MailboxOpenFailure, StaleMailboxSnapshot
from imapbridge.imap.snapshot import open_mailbox


def test_yields_observed_uidvalidity(imap):
    expected = imap.uidvalidity("INBOX")
    with open_mailbox(imap, "INBOX") as snap:
        assert snap.uidvalidity == expected
        assert snap.mailbox == "INBOX"
        assert snap.readonly is True
        assert imap.open_locks == 1
    assert imap.locks_acquired == 1
    assert imap.locks_released == 1


def test_matching_expected_uidvalidity(imap):
    expected = imap.uidvalidity("INBOX")
    with open_mailbox(imap, "INBOX", readonly=False, expected_uidvalidity=expected) as snap:
        assert snap.readonly is False
    assert imap.open_locks == 0


def test_stale_snapshot_releases_lock(imap):
    old = imap.uidvalidity("INBOX")
    new = imap.recreate_mailbox("INBOX")

    with pytest.raises(StaleMailboxSnapshot) as excinfo:
        with open_mailbox(imap, "INBOX", expected_uidvalidity=old):
            pytest.fail("body must not run")

    assert excinfo.value.expected == old
    assert excinfo.value.observed == new
    assert imap.locks_acquired == 1
    assert imap.locks_released == 1


def test_missing_uidvalidity_is_open_failure(imap):
    imap.report_uidvalidity = False
    with pytest.raises(MailboxOpenFailure):
        with open_mailbox(imap, "INBOX"):
            pytest.fail("body must not run")
    assert imap.locks_released == imap.locks_acquired == 1


def test_lock_failure_is_open_failure(imap):
    imap.fail_next = True
    with pytest.raises(MailboxOpenFailure) as excinfo:
        with open_mailbox(imap, "INBOX"):
            pass
    assert excinfo.value.mailbox == "INBOX"
    assert imap.locks_acquired == 0
    assert imap.locks_released == 0


def test_unknown_mailbox_is_open_failure(imap):
    with pytest.raises(MailboxOpenFailure):
        with open_mailbox(imap, "Nope"):
            pass


def test_body_exception_releases_once(imap):
    class Boom(Exception):
        pass

    with pytest.raises(Boom):
        with open_mailbox(imap, "INBOX"):
            raise Boom()
    assert imap.locks_acquired == 1
    assert imap.locks_released == 1
