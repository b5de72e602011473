# imapbridge/imap/parser.py
from __future__ import annotations

import html
import re
from email.message import EmailMessage as PyEmailMessage
from email.parser import BytesHeaderParser, BytesParser
from email.policy import default as default_policy
from email.utils import parsedate_to_datetime
from typing import Iterator, List, Optional, Sequence, Tuple

from imapbridge.models import AttachmentSummary, MessageOverview

OVERVIEW_HEADER_FIELDS = ("From", "To", "Cc", "Subject", "Date", "Message-ID")
MAX_ATTACHMENTS = 50

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def _header(msg, name: str) -> Optional[str]:
    value = msg.get(name)
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def format_date(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    try:
        return parsedate_to_datetime(raw).isoformat()
    except (TypeError, ValueError, IndexError):
        return raw


def parse_overview(uid: int, flags: Sequence[str], header_bytes: bytes) -> MessageOverview:
    msg = BytesHeaderParser(policy=default_policy).parsebytes(header_bytes or b"")
    return MessageOverview(
        uid=uid,
        flags=list(flags),
        date=format_date(_header(msg, "Date")),
        from_=_header(msg, "From"),
        to=_header(msg, "To"),
        cc=_header(msg, "Cc"),
        subject=_header(msg, "Subject"),
        message_id_header=_header(msg, "Message-ID"),
    )


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    if max_chars <= 1:
        return text[:max_chars]
    return text[: max_chars - 1].rstrip() + "…"


def _body_text(msg: PyEmailMessage) -> str:
    part = msg.get_body(preferencelist=("plain", "html"))
    if part is None:
        return ""
    content = part.get_content()
    if not isinstance(content, str):
        return ""
    if part.get_content_subtype() == "html":
        # plain-text fallback only; this is not an HTML sanitizer
        content = html.unescape(_TAG_RE.sub(" ", content))
    return content


def extract_text_preview(raw: bytes, max_chars: int) -> Optional[str]:
    """
    Plain-text preview of a (possibly truncated) RFC822 message.
    Returns None when no readable text part exists.
    """
    if not raw:
        return None
    try:
        msg = BytesParser(policy=default_policy).parsebytes(raw)
        text = _body_text(msg)
    except (LookupError, ValueError, AttributeError):
        return None
    normalized = normalize_whitespace(text)
    return truncate_text(normalized, max_chars) if normalized else None


def _leaf_parts(part: PyEmailMessage, part_id: str) -> Iterator[Tuple[str, PyEmailMessage]]:
    # IMAP numbering: children of a multipart are 1..n under the parent's id;
    # a single-part message has one part, "1". message/rfc822 is not descended.
    if part.get_content_maintype() == "multipart":
        for i, child in enumerate(part.iter_parts(), start=1):
            yield from _leaf_parts(child, f"{part_id}.{i}" if part_id else str(i))
    else:
        yield part_id or "1", part


def _part_size(part: PyEmailMessage) -> int:
    if part.get_content_maintype() == "message":
        return sum(len(inner.as_bytes()) for inner in part.get_payload())
    payload = part.get_payload(decode=True)
    return len(payload) if payload else 0


def summarize_attachments(raw: bytes, limit: int = MAX_ATTACHMENTS) -> List[AttachmentSummary]:
    """
    Parts with an attachment or inline disposition and a non-empty payload,
    in MIME order. The text body normally carries no disposition and is skipped.
    """
    if not raw:
        return []
    try:
        msg = BytesParser(policy=default_policy).parsebytes(raw)
        out: List[AttachmentSummary] = []
        for part_id, part in _leaf_parts(msg, ""):
            if part.get_content_disposition() not in ("attachment", "inline"):
                continue
            size = _part_size(part)
            if not size:
                continue
            out.append(
                AttachmentSummary(
                    part_id=part_id,
                    content_type=part.get_content_type(),
                    size_bytes=size,
                    filename=part.get_filename(),
                )
            )
            if len(out) >= limit:
                break
        return out
    except (LookupError, ValueError, AttributeError):
        return []
