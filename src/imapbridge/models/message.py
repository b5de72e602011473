from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class MessageOverview:
    """Header-level view of one message, as returned by the IMAP collaborator."""
    uid: int
    flags: List[str] = field(default_factory=list)
    date: Optional[str] = None  # ISO 8601 when parseable
    from_: Optional[str] = None
    to: Optional[str] = None
    cc: Optional[str] = None
    subject: Optional[str] = None
    message_id_header: Optional[str] = None


@dataclass
class MessageSummary:
    message_id: str
    mailbox: str
    uidvalidity: int
    uid: int
    date: str
    from_: Optional[str] = None
    to: Optional[str] = None
    cc: Optional[str] = None
    subject: Optional[str] = None
    flags: List[str] = field(default_factory=list)
    snippet: Optional[str] = None

    @classmethod
    def from_overview(
        cls,
        overview: MessageOverview,
        *,
        message_id: str,
        mailbox: str,
        uidvalidity: int,
    ) -> "MessageSummary":
        return cls(
            message_id=message_id,
            mailbox=mailbox,
            uidvalidity=uidvalidity,
            uid=overview.uid,
            date=overview.date or "unknown date",
            from_=overview.from_,
            to=overview.to,
            cc=overview.cc,
            subject=overview.subject,
            flags=list(overview.flags),
        )

    def to_dict(self) -> dict:
        d = {
            "message_id": self.message_id,
            "mailbox": self.mailbox,
            "uidvalidity": self.uidvalidity,
            "uid": self.uid,
            "date": self.date,
            "from": self.from_,
            "subject": self.subject,
            "flags": list(self.flags),
        }
        if self.to is not None:
            d["to"] = self.to
        if self.cc is not None:
            d["cc"] = self.cc
        if self.snippet is not None:
            d["snippet"] = self.snippet
        return d


@dataclass(frozen=True)
class AttachmentSummary:
    part_id: str  # IMAP body part number, e.g. "2" or "1.2"
    content_type: str
    size_bytes: int
    filename: Optional[str] = None

    def to_dict(self) -> dict:
        d = {
            "part_id": self.part_id,
            "content_type": self.content_type,
            "size_bytes": self.size_bytes,
        }
        if self.filename:
            d["filename"] = self.filename
        return d
