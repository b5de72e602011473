# imapbridge/imap/query.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

DateLike = Union[str, date]


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def _imap_date(value: DateLike) -> str:
    # IMAP wants 01-Jan-2024; %b is locale dependent, so spell months out
    d = _to_date(value)
    months = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
    return f"{d.day:02d}-{months[d.month - 1]}-{d.year:04d}"


def _q(s: str) -> str:
    """
    Quote/escape a string for IMAP SEARCH.
    IMAP uses double quotes for string literals; backslash can escape quotes.
    """
    s = s.replace("\\", "\\\\").replace('"', r"\"")
    return f'"{s}"'


def _is_ascii(s: str) -> bool:
    try:
        s.encode("ascii")
    except UnicodeEncodeError:
        return False
    return True


@dataclass
class IMAPQuery:
    """
    SEARCH criteria. ASCII terms go into `parts`; string terms with non-ASCII
    text are kept apart in `literals` as (key, text) and sent as UTF-8
    literals under CHARSET UTF-8.
    """
    parts: List[str] = field(default_factory=list)
    literals: List[Tuple[str, str]] = field(default_factory=list)

    def _string_term(self, key: str, s: str) -> "IMAPQuery":
        if _is_ascii(s):
            self.parts += [key, _q(s)]
        else:
            self.literals.append((key, s))
        return self

    # --- basic fields ---
    def from_(self, s: str) -> "IMAPQuery":
        return self._string_term("FROM", s)

    def to(self, s: str) -> "IMAPQuery":
        return self._string_term("TO", s)

    def subject(self, s: str) -> "IMAPQuery":
        return self._string_term("SUBJECT", s)

    def text(self, s: str) -> "IMAPQuery":
        """
        Match in headers OR body text.
        """
        return self._string_term("TEXT", s)

    # --- date filters ---
    def since(self, d: DateLike) -> "IMAPQuery":
        self.parts += ["SINCE", _imap_date(d)]
        return self

    def before(self, d: DateLike) -> "IMAPQuery":
        self.parts += ["BEFORE", _imap_date(d)]
        return self

    # --- flags/status ---
    def unseen(self) -> "IMAPQuery":
        self.parts += ["UNSEEN"]
        return self

    def build(self) -> str:
        """ASCII criteria only; `literals` are not included."""
        return " ".join(self.parts) if self.parts else "ALL"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def last_days_since_utc(last_days: int, *, today: Optional[date] = None) -> date:
    """
    First day of an inclusive N-day window ending today (UTC).
    last_days=1 is today only; last_days=7 covers today and the six days before.
    """
    base = today or today_utc()
    return base - timedelta(days=last_days - 1)


def build_search_query(
    *,
    query: Optional[str] = None,
    from_: Optional[str] = None,
    to: Optional[str] = None,
    subject: Optional[str] = None,
    unread_only: Optional[bool] = None,
    last_days: Optional[int] = None,
    start_date: Optional[DateLike] = None,
    end_date: Optional[DateLike] = None,
    today: Optional[date] = None,
) -> IMAPQuery:
    """
    Map caller filters to IMAP SEARCH keys. No filters means ALL.
    end_date is inclusive, so it becomes BEFORE end_date + 1 day.
    """
    q = IMAPQuery()

    if last_days is not None and start_date is None:
        q.since(last_days_since_utc(last_days, today=today))
    if query:
        q.text(query)
    if from_:
        q.from_(from_)
    if to:
        q.to(to)
    if subject:
        q.subject(subject)
    if unread_only:
        q.unseen()
    if start_date is not None:
        q.since(start_date)
    if end_date is not None:
        q.before(_to_date(end_date) + timedelta(days=1))

    return q
