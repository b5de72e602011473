# imapbridge/imap/snapshot.py
"""
Mailbox snapshot guard.

IMAP offers no multi-step atomicity, so any operation acting on a UID that was
handed out earlier must re-check, under a mailbox lock, that the mailbox still
has the UIDVALIDITY the UID was issued under.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

from loguru import logger

from imapbridge.errors import IMAPError, MailboxOpenFailure, StaleMailboxSnapshot


class MailboxLock(Protocol):
    mailbox: str
    readonly: bool
    uidvalidity: Optional[int]

    def release(self) -> None: ...


class MailboxLockProvider(Protocol):
    def lock_mailbox(self, mailbox: str, *, readonly: bool = True, description: str = "") -> MailboxLock: ...


@dataclass(frozen=True)
class MailboxSnapshot:
    mailbox: str
    uidvalidity: int
    readonly: bool
    lock: MailboxLock


@contextmanager
def open_mailbox(
    client: MailboxLockProvider,
    mailbox: str,
    *,
    readonly: bool = True,
    expected_uidvalidity: Optional[int] = None,
    description: str = "",
) -> Iterator[MailboxSnapshot]:
    """
    Lock `mailbox` and yield the UIDVALIDITY observed at lock time.

    - lock could not be acquired          -> MailboxOpenFailure
    - server reported no UIDVALIDITY      -> MailboxOpenFailure
    - expected_uidvalidity given, differs -> StaleMailboxSnapshot

    The lock is released exactly once on every exit path, including errors
    raised by the body of the with-block.
    """
    try:
        lock = client.lock_mailbox(mailbox, readonly=readonly, description=description)
    except IMAPError as e:
        logger.warning(f"Could not open mailbox {mailbox!r} ({description or 'unnamed'}): {e}")
        raise MailboxOpenFailure(mailbox, str(e)) from e

    try:
        observed = lock.uidvalidity
        if observed is None:
            raise MailboxOpenFailure(mailbox, "server did not report UIDVALIDITY")

        if expected_uidvalidity is not None and observed != expected_uidvalidity:
            logger.warning(
                f"Stale snapshot for {mailbox!r}: expected uidvalidity "
                f"{expected_uidvalidity}, mailbox has {observed}"
            )
            raise StaleMailboxSnapshot(mailbox, expected_uidvalidity, observed)

        yield MailboxSnapshot(
            mailbox=mailbox,
            uidvalidity=observed,
            readonly=readonly,
            lock=lock,
        )
    finally:
        lock.release()
