"""
Stable message identifiers.

Format: ``imap:<account_id>:<mailbox>:<uidvalidity>:<uid>``

The mailbox is not escaped. Mailbox names may contain the delimiter, so the
decoder takes the account from the second segment, the two numbers from the
last two segments and rejoins everything in between as the mailbox.
"""
from __future__ import annotations

from typing import Optional

from imapbridge.errors import AccountMismatch, InvalidMessageId
from imapbridge.types import MessageLocator

MESSAGE_ID_PREFIX = "imap"
DELIMITER = ":"


def encode_message_id(locator: MessageLocator) -> str:
    return DELIMITER.join(
        [
            MESSAGE_ID_PREFIX,
            locator.account_id,
            locator.mailbox,
            str(locator.uidvalidity),
            str(locator.uid),
        ]
    )


def _parse_non_negative_int(raw: str) -> Optional[int]:
    # str.isdigit() alone accepts things like superscripts
    if not raw or not raw.isascii() or not raw.isdigit():
        return None
    return int(raw)


def decode_message_id(value: object) -> Optional[MessageLocator]:
    """
    Decode a message identifier. Returns None for anything malformed; never raises.
    """
    if not isinstance(value, str):
        return None

    segments = value.split(DELIMITER)
    if len(segments) < 5:
        return None
    if segments[0] != MESSAGE_ID_PREFIX:
        return None

    account_id = segments[1]
    mailbox = DELIMITER.join(segments[2:-2])
    if not account_id or not mailbox:
        return None

    uidvalidity = _parse_non_negative_int(segments[-2])
    uid = _parse_non_negative_int(segments[-1])
    if uidvalidity is None or uid is None:
        return None

    return MessageLocator(
        account_id=account_id,
        mailbox=mailbox,
        uidvalidity=uidvalidity,
        uid=uid,
    )


def decode_message_id_for_account(value: str, account_id: str) -> MessageLocator:
    """
    Decode a message_id and ensure it belongs to the requested account.

    Raises InvalidMessageId / AccountMismatch. Both are detected without
    talking to the IMAP server.
    """
    decoded = decode_message_id(value)
    if decoded is None:
        raise InvalidMessageId()
    if decoded.account_id != account_id:
        raise AccountMismatch()
    return decoded
