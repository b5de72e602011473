# imapbridge/imap/client.py
from __future__ import annotations

import base64
import imaplib
import re
import ssl
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, TypeVar

from loguru import logger

from imapbridge.config import IMAPConfig
from imapbridge.errors import ConfigError, IMAPError, InvalidRequest
from imapbridge.imap.fetch_response import (
    iter_fetch_pieces,
    parse_copyuid,
    parse_flags,
    parse_uid,
)
from imapbridge.imap.parser import OVERVIEW_HEADER_FIELDS, parse_overview
from imapbridge.imap.query import IMAPQuery
from imapbridge.models import MessageOverview

REPLACE_ON = (imaplib.IMAP4.abort, TimeoutError, OSError, ssl.SSLError)

T = TypeVar("T")


@dataclass
class _ConnState:
    conn: imaplib.IMAP4
    broken: bool = False


@dataclass(frozen=True)
class CopyResult:
    """Destination UID data, present only when the server supports UIDPLUS."""
    uidvalidity: Optional[int] = None
    uid_map: Dict[int, int] = field(default_factory=dict)


def encode_mailbox_name(name: str) -> str:
    """
    IMAP modified UTF-7 (RFC 3501 5.1.3).

        "Entwürfe" -> "Entw&APw-rfe",  "R&D" -> "R&-D"
    """
    out: List[str] = []
    pending: List[str] = []

    def _flush() -> None:
        if pending:
            b64 = base64.b64encode("".join(pending).encode("utf-16-be")).decode("ascii")
            out.append("&" + b64.rstrip("=").replace("/", ",") + "-")
            del pending[:]

    for ch in name:
        if 0x20 <= ord(ch) <= 0x7E:
            _flush()
            out.append("&-" if ch == "&" else ch)
        else:
            pending.append(ch)
    _flush()
    return "".join(out)


def decode_mailbox_name(name: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(name):
        if name[i] != "&":
            out.append(name[i])
            i += 1
            continue
        end = name.find("-", i + 1)
        if end == -1:
            # unterminated shift, keep verbatim
            out.append(name[i:])
            break
        chunk = name[i + 1 : end]
        if not chunk:
            out.append("&")
        else:
            padded = chunk.replace(",", "/") + "=" * (-len(chunk) % 4)
            try:
                out.append(base64.b64decode(padded).decode("utf-16-be"))
            except ValueError:
                out.append(name[i : end + 1])
        i = end + 1
    return "".join(out)


def _format_mailbox_arg(mailbox: str) -> str:
    if mailbox.upper() == "INBOX":
        return "INBOX"
    escaped = encode_mailbox_name(mailbox).replace("\\", "\\\\").replace('"', r"\"")
    return f'"{escaped}"'


def _parse_list_mailbox_name(raw: bytes) -> Optional[str]:
    s = raw.decode(errors="ignore") if isinstance(raw, bytes) else str(raw)
    m = re.match(r'^\((?P<flags>[^)]*)\)\s+(?P<delim>"[^"]*"|NIL)\s+(?P<name>.+)$', s)
    if not m:
        return None
    name = m.group("name").strip()
    if name.startswith('"') and name.endswith('"'):
        name = name[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return decode_mailbox_name(name) or None


def _parse_list_flags(raw: bytes) -> Set[str]:
    s = raw.decode(errors="ignore") if isinstance(raw, bytes) else str(raw)
    start = s.find("(")
    end = s.find(")", start + 1)
    if start == -1 or end == -1 or end <= start + 1:
        return set()
    return {f.upper() for f in s[start + 1 : end].split() if f.strip()}


class IMAPMailboxLock:
    """
    Exclusive use of one pooled connection with `mailbox` selected.

    Every UID operation here runs against the selection made at lock time.
    release() returns the connection to the pool; calling it twice is a no-op.
    """

    def __init__(
        self,
        client: "IMAPClient",
        state: _ConnState,
        *,
        mailbox: str,
        readonly: bool,
        uidvalidity: Optional[int],
        description: str = "",
    ):
        self._client = client
        self._state = state
        self.mailbox = mailbox
        self.readonly = readonly
        self.uidvalidity = uidvalidity
        self.description = description
        self._released = False
        self._release_lock = threading.Lock()

    def release(self) -> None:
        with self._release_lock:
            if self._released:
                return
            self._released = True
        self._client._checkin(self._state)

    def __enter__(self) -> "IMAPMailboxLock":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    # -----------------------
    # plumbing
    # -----------------------

    @property
    def _conn(self) -> imaplib.IMAP4:
        if self._released:
            raise IMAPError(f"Mailbox lock for {self.mailbox!r} was already released")
        return self._state.conn

    def _call(self, op: Callable[[imaplib.IMAP4], T]) -> T:
        try:
            return op(self._conn)
        except REPLACE_ON as e:
            self._state.broken = True
            raise IMAPError(f"IMAP connection lost: {e}") from e
        except imaplib.IMAP4.error as e:
            raise IMAPError(f"IMAP operation failed: {e}") from e
        except UnicodeEncodeError as e:
            # imaplib sends str arguments as ASCII
            raise InvalidRequest(f"IMAP command arguments must be ASCII: {e}") from e

    def _require_writable(self, op_name: str) -> None:
        if self.readonly:
            raise IMAPError(f"{op_name} requires a read-write mailbox lock on {self.mailbox!r}")

    def has_capability(self, name: str) -> bool:
        caps = getattr(self._conn, "capabilities", ()) or ()
        return name.upper() in {str(c).upper() for c in caps}

    # -----------------------
    # SEARCH / FETCH
    # -----------------------

    def search(self, query: IMAPQuery) -> List[int]:
        """
        UID SEARCH, ascending UIDs.

        imaplib sends at most one literal per command, so each non-ASCII term
        is searched on its own (together with the ASCII criteria) under
        CHARSET UTF-8, and the UID sets are intersected.
        """
        criteria = query.build()

        def _uids(data) -> Set[int]:
            raw = (data[0] if data else b"") or b""
            return {int(x) for x in raw.split() if x}

        if not query.literals:
            def _impl(conn: imaplib.IMAP4) -> List[int]:
                typ, data = conn.uid("SEARCH", None, criteria)
                if typ != "OK":
                    raise IMAPError(f"SEARCH failed: {data}")
                return sorted(_uids(data))

            return self._call(_impl)

        matched: Optional[Set[int]] = None
        for key, text in query.literals:
            def _impl_literal(conn: imaplib.IMAP4, key: str = key, text: str = text) -> Set[int]:
                conn.literal = text.encode("utf-8")
                typ, data = conn.uid("SEARCH", "CHARSET", "UTF-8", *query.parts, key)
                if typ != "OK":
                    raise IMAPError(f"SEARCH {key} (UTF-8) failed: {data}")
                return _uids(data)

            found = self._call(_impl_literal)
            matched = found if matched is None else matched & found
            if not matched:
                break
        return sorted(matched or ())

    def fetch_overview(self, uids: Sequence[int]) -> List[MessageOverview]:
        """
        Header overview for `uids`, returned in the order of `uids`.
        UIDs the server no longer has are skipped.
        """
        if not uids:
            return []
        uid_str = ",".join(str(u) for u in uids)
        attrs = f"(UID FLAGS BODY.PEEK[HEADER.FIELDS ({' '.join(OVERVIEW_HEADER_FIELDS)})])"

        def _impl(conn: imaplib.IMAP4) -> List[MessageOverview]:
            typ, data = conn.uid("FETCH", uid_str, attrs)
            if typ != "OK":
                raise IMAPError(f"FETCH overview failed: {data}")

            partial: Dict[int, Dict[str, object]] = {}
            current_uid: Optional[int] = None
            for piece in iter_fetch_pieces(data or []):
                uid = parse_uid(piece.meta)
                if uid is not None:
                    current_uid = uid
                if current_uid is None:
                    continue
                bucket = partial.setdefault(current_uid, {"flags": [], "headers": b""})
                flags = parse_flags(piece.meta)
                if flags is not None:
                    bucket["flags"] = flags
                if piece.payload is not None:
                    bucket["headers"] = piece.payload

            out: List[MessageOverview] = []
            for uid in uids:
                info = partial.get(uid)
                if info is None:
                    continue
                out.append(parse_overview(uid, info["flags"], info["headers"]))  # type: ignore[arg-type]
            return out

        return self._call(_impl)

    def fetch_flags(self, uid: int) -> Optional[List[str]]:
        def _impl(conn: imaplib.IMAP4) -> Optional[List[str]]:
            typ, data = conn.uid("FETCH", str(uid), "(UID FLAGS)")
            if typ != "OK":
                raise IMAPError(f"FETCH flags failed uid={uid}: {data}")
            for piece in iter_fetch_pieces(data or []):
                if parse_uid(piece.meta) == uid:
                    return parse_flags(piece.meta) or []
            return None

        return self._call(_impl)

    def fetch_raw(self, uid: int, *, max_bytes: Optional[int] = None) -> Optional[bytes]:
        section = f"BODY.PEEK[]<0.{max_bytes}>" if max_bytes else "BODY.PEEK[]"

        def _impl(conn: imaplib.IMAP4) -> Optional[bytes]:
            typ, data = conn.uid("FETCH", str(uid), f"(UID {section})")
            if typ != "OK":
                raise IMAPError(f"FETCH body failed uid={uid}: {data}")
            for piece in iter_fetch_pieces(data or []):
                if piece.payload is not None:
                    return piece.payload
            return None

        return self._call(_impl)

    # -----------------------
    # Mutations
    # -----------------------

    def add_flags(self, uid: int, flags: Sequence[str]) -> None:
        self._store(uid, "+FLAGS", flags)

    def remove_flags(self, uid: int, flags: Sequence[str]) -> None:
        self._store(uid, "-FLAGS", flags)

    def _store(self, uid: int, mode: str, flags: Sequence[str]) -> None:
        self._require_writable("STORE")
        flag_list = "(" + " ".join(sorted(set(flags))) + ")"

        def _impl(conn: imaplib.IMAP4) -> None:
            typ, data = conn.uid("STORE", str(uid), mode, flag_list)
            if typ != "OK":
                raise IMAPError(f"STORE failed: {data}")

        self._call(_impl)

    def copy(self, uid: int, destination: str) -> CopyResult:
        dst_arg = _format_mailbox_arg(destination)

        def _impl(conn: imaplib.IMAP4) -> CopyResult:
            typ, data = conn.uid("COPY", str(uid), dst_arg)
            if typ != "OK":
                raise IMAPError(f"COPY to {destination!r} failed: {data}")
            parsed = parse_copyuid(data or [])
            if parsed is None:
                return CopyResult()
            return CopyResult(uidvalidity=parsed[0], uid_map=parsed[1])

        return self._call(_impl)

    def move(self, uid: int, destination: str) -> CopyResult:
        """
        MOVE when advertised, otherwise COPY + \\Deleted + EXPUNGE.
        """
        self._require_writable("MOVE")
        if not self.has_capability("MOVE"):
            result = self.copy(uid, destination)
            self.expunge_uid(uid)
            return result

        dst_arg = _format_mailbox_arg(destination)
        uid_str = str(uid)

        def _impl(conn: imaplib.IMAP4) -> CopyResult:
            typ, data = conn.uid("MOVE", uid_str, dst_arg)
            if typ != "OK":
                raise IMAPError(f"MOVE to {destination!r} failed: {data}")
            # COPYUID for MOVE arrives as an untagged OK response
            _typ, ok_data = conn.response("OK")
            parsed = parse_copyuid(list(data or []) + list(ok_data or []))
            if parsed is None:
                return CopyResult()
            return CopyResult(uidvalidity=parsed[0], uid_map=parsed[1])

        return self._call(_impl)

    def expunge_uid(self, uid: int) -> None:
        """
        Flag `uid` \\Deleted and expunge it. With UIDPLUS only that UID goes.
        """
        self._require_writable("EXPUNGE")
        self.add_flags(uid, [r"\Deleted"])

        def _impl(conn: imaplib.IMAP4) -> None:
            if self.has_capability("UIDPLUS"):
                typ, data = conn.uid("EXPUNGE", str(uid))
            else:
                typ, data = conn.expunge()
            if typ != "OK":
                raise IMAPError(f"EXPUNGE failed: {data}")

        self._call(_impl)


@dataclass
class IMAPClient:
    config: IMAPConfig

    pool_size: int = 2
    max_retries: int = 1
    backoff_seconds: float = 0.2
    pool_acquire_timeout: float = 5.0

    _pool: "Queue[_ConnState]" = field(default_factory=Queue, init=False, repr=False)
    _pool_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _opened: int = field(default=0, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_config(cls, config: IMAPConfig, **kwargs) -> "IMAPClient":
        if not config.host:
            raise ConfigError("IMAP host required")
        if not config.port:
            raise ConfigError("IMAP port required")
        return cls(config, **kwargs)

    # -----------------------
    # Connection management
    # -----------------------

    def _open_new_connection(self) -> imaplib.IMAP4:
        cfg = self.config
        try:
            conn = (
                imaplib.IMAP4_SSL(cfg.host, cfg.port, timeout=cfg.timeout)
                if cfg.use_ssl
                else imaplib.IMAP4(cfg.host, cfg.port, timeout=cfg.timeout)
            )
            conn.login(cfg.username, cfg.password)
            return conn
        except imaplib.IMAP4.error as e:
            raise IMAPError(f"IMAP connection/auth failed: {e}") from e
        except OSError as e:
            raise IMAPError(f"IMAP network error: {e}") from e

    def _logout_quietly(self, state: _ConnState) -> None:
        try:
            state.conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"Ignoring logout failure for {self.config.host}: {e}")

    def _checkout(self) -> _ConnState:
        """
        Take a connection out of the pool, opening one lazily while under pool_size.
        """
        with self._pool_lock:
            if self._closed:
                raise IMAPError("IMAP client is closed")
            try:
                return self._pool.get_nowait()
            except Empty:
                if self._opened < max(1, self.pool_size):
                    self._opened += 1
                    open_new = True
                else:
                    open_new = False

        if open_new:
            try:
                return _ConnState(self._open_new_connection())
            except IMAPError:
                with self._pool_lock:
                    self._opened -= 1
                raise

        try:
            return self._pool.get(timeout=self.pool_acquire_timeout)
        except Empty as e:
            # pool exhausted / deadlock upstream
            raise IMAPError("IMAP connection pool exhausted") from e

    def _checkin(self, state: _ConnState) -> None:
        if state.broken or self._closed:
            self._logout_quietly(state)
            with self._pool_lock:
                self._opened -= 1
            return
        self._pool.put(state)

    @contextmanager
    def _acquire(self):
        state = self._checkout()
        try:
            yield state
        except REPLACE_ON:
            state.broken = True
            raise
        finally:
            self._checkin(state)

    def _run(self, op: Callable[[_ConnState], T]) -> T:
        """
        Run an operation with retries. Broken connections are dropped from the pool.
        """
        last_exc: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            try:
                with self._acquire() as state:
                    return op(state)
            except REPLACE_ON as e:
                last_exc = e
                logger.warning(f"IMAP {self.config.host} attempt {attempt + 1} failed: {e}")
                if attempt < self.max_retries and self.backoff_seconds > 0:
                    time.sleep(self.backoff_seconds)
                continue
            except imaplib.IMAP4.error as e:
                raise IMAPError(f"IMAP operation failed: {e}") from e
            except UnicodeEncodeError as e:
                raise InvalidRequest(f"IMAP command arguments must be ASCII: {e}") from e

        raise IMAPError(f"IMAP operation failed after retries: {last_exc}") from last_exc

    # -----------------------
    # Mailbox locks
    # -----------------------

    def lock_mailbox(
        self,
        mailbox: str,
        *,
        readonly: bool = True,
        description: str = "",
    ) -> IMAPMailboxLock:
        """
        SELECT (or EXAMINE when readonly) `mailbox` on a connection reserved for
        the caller, and capture the UIDVALIDITY reported by the server.
        """
        imap_mailbox = _format_mailbox_arg(mailbox)
        last_exc: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            state = self._checkout()
            # every path below either hands `state` to the lock or checks it in
            try:
                typ, data = state.conn.select(imap_mailbox, readonly=readonly)
                _typ, raw = state.conn.response("UIDVALIDITY")
            except REPLACE_ON as e:
                state.broken = True
                self._checkin(state)
                last_exc = e
                logger.warning(f"Locking {mailbox!r} on {self.config.host} failed: {e}")
                if attempt < self.max_retries and self.backoff_seconds > 0:
                    time.sleep(self.backoff_seconds)
                continue
            except (imaplib.IMAP4.error, ValueError) as e:
                self._checkin(state)
                raise IMAPError(f"select({mailbox!r}) failed: {e}") from e
            except BaseException:
                self._checkin(state)
                raise

            if typ != "OK":
                self._checkin(state)
                raise IMAPError(f"select({mailbox!r}, readonly={readonly}) failed: {data}")

            uidvalidity: Optional[int] = None
            value = raw[-1] if raw else None
            if value is not None:
                try:
                    uidvalidity = int(value)
                except (TypeError, ValueError):
                    uidvalidity = None

            return IMAPMailboxLock(
                self,
                state,
                mailbox=mailbox,
                readonly=readonly,
                uidvalidity=uidvalidity,
                description=description,
            )

        raise IMAPError(f"Could not lock mailbox {mailbox!r}: {last_exc}") from last_exc

    # -----------------------
    # Unlocked operations
    # -----------------------

    @property
    def server_info(self) -> Dict[str, object]:
        return {"host": self.config.host, "port": self.config.port, "secure": self.config.use_ssl}

    def verify(self) -> List[str]:
        """
        NOOP round trip on a pooled connection. Returns the advertised
        capabilities, sorted and capped at 256 names.
        """
        def _impl(state: _ConnState) -> List[str]:
            typ, data = state.conn.noop()
            if typ != "OK":
                raise IMAPError(f"NOOP failed: {data}")
            caps = getattr(state.conn, "capabilities", ()) or ()
            return sorted({str(c) for c in caps})[:256]

        return self._run(_impl)

    def list_mailboxes(self) -> List[str]:
        def _impl(state: _ConnState) -> List[str]:
            typ, data = state.conn.list()
            if typ != "OK":
                raise IMAPError(f"LIST failed: {data}")

            mailboxes: List[str] = []
            for raw in data or []:
                if not raw:
                    continue
                if r"\NOSELECT" in _parse_list_flags(raw):
                    continue
                name = _parse_list_mailbox_name(raw)
                if name is not None:
                    mailboxes.append(name)
            return mailboxes

        return self._run(_impl)

    def append(
        self,
        mailbox: str,
        raw_message: bytes,
        *,
        flags: Optional[Sequence[str]] = None,
    ) -> Optional[Tuple[int, int]]:
        """
        APPEND a message. Returns (uidvalidity, uid) when the server reports APPENDUID.
        """
        def _impl(state: _ConnState) -> Optional[Tuple[int, int]]:
            flags_arg = "(" + " ".join(sorted(set(flags))) + ")" if flags else None
            date_time = imaplib.Time2Internaldate(time.time())
            typ, data = state.conn.append(_format_mailbox_arg(mailbox), flags_arg, date_time, raw_message)
            if typ != "OK":
                raise IMAPError(f"APPEND to {mailbox!r} failed: {data}")
            if data and data[0]:
                resp = data[0].decode(errors="ignore") if isinstance(data[0], bytes) else str(data[0])
                m = re.search(r"APPENDUID\s+(\d+)\s+(\d+)", resp)
                if m:
                    return int(m.group(1)), int(m.group(2))
            return None

        return self._run(_impl)

    def close(self) -> None:
        # drain and close idle conns; checked-out ones are closed on checkin
        with self._pool_lock:
            self._closed = True
            while not self._pool.empty():
                state = self._pool.get_nowait()
                self._logout_quietly(state)
                self._opened -= 1

    def __enter__(self) -> "IMAPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
