from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageLocator:
    """
    One message as of a specific mailbox UIDVALIDITY.

    The UID is only meaningful while the mailbox keeps the same UIDVALIDITY;
    callers re-check it under a mailbox lock before acting on the UID.
    """
    account_id: str
    mailbox: str
    uidvalidity: int
    uid: int
