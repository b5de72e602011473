from imapbridge.imap.query import IMAPQuery
from imapbridge.imap.client import IMAPClient, IMAPMailboxLock
from imapbridge.imap.cursor_store import CursorStore, SearchCursor
from imapbridge.imap.pagination import SearchPage, UidRange
from imapbridge.imap.snapshot import MailboxSnapshot, open_mailbox

__all__ = [
    "IMAPQuery",
    "IMAPClient",
    "IMAPMailboxLock",
    "CursorStore",
    "SearchCursor",
    "SearchPage",
    "UidRange",
    "MailboxSnapshot",
    "open_mailbox",
]
