# imapbridge/imap/fetch_response.py
"""
Helpers for the shapes imaplib hands back from UID FETCH / COPY / MOVE.

imaplib returns a flat list mixing (meta, literal) tuples and bare bytes
continuation pieces, e.g.

    [(b'1 (UID 5 FLAGS (\\Seen) BODY[HEADER.FIELDS (FROM)] {20}', b'From: a@b.c\\r\\n\\r\\n'),
     b')']
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

_UID_RE = re.compile(r"\bUID\s+(\d+)", re.IGNORECASE)
_FLAGS_RE = re.compile(r"\bFLAGS\s+\(([^)]*)\)", re.IGNORECASE)
_COPYUID_RE = re.compile(r"\[COPYUID\s+(\d+)\s+([\d:,]+)\s+([\d:,]+)\]", re.IGNORECASE)


@dataclass(frozen=True)
class FetchPiece:
    meta: str
    payload: Optional[bytes]


def _as_text(raw: object) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def iter_fetch_pieces(data: Iterable[object]) -> Iterator[FetchPiece]:
    for item in data:
        if item is None:
            continue
        if isinstance(item, tuple):
            meta = _as_text(item[0]) if item else ""
            payload = item[1] if len(item) > 1 and isinstance(item[1], bytes) else None
            yield FetchPiece(meta=meta, payload=payload)
        else:
            yield FetchPiece(meta=_as_text(item), payload=None)


def parse_uid(meta: str) -> Optional[int]:
    m = _UID_RE.search(meta)
    return int(m.group(1)) if m else None


def parse_flags(meta: str) -> Optional[List[str]]:
    m = _FLAGS_RE.search(meta)
    if not m:
        return None
    return [f for f in m.group(1).split() if f]


def expand_uid_set(uid_set: str) -> List[int]:
    """
    "304,319:320" -> [304, 319, 320]
    """
    out: List[int] = []
    for chunk in uid_set.split(","):
        if not chunk:
            continue
        if ":" in chunk:
            a, b = chunk.split(":", 1)
            lo, hi = sorted((int(a), int(b)))
            out.extend(range(lo, hi + 1))
        else:
            out.append(int(chunk))
    return out


def parse_copyuid(responses: Iterable[object]) -> Optional[Tuple[int, Dict[int, int]]]:
    """
    Find a UIDPLUS COPYUID response code.
    Returns (destination uidvalidity, {source uid: destination uid}).
    """
    for raw in responses:
        if raw is None:
            continue
        m = _COPYUID_RE.search(_as_text(raw))
        if not m:
            continue
        src = expand_uid_set(m.group(2))
        dst = expand_uid_set(m.group(3))
        if len(src) != len(dst):
            continue
        return int(m.group(1)), dict(zip(src, dst))
    return None
