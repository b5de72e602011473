# imapbridge/config.py
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional

from imapbridge.errors import ConfigError

ENV_PREFIX = "MAIL_IMAP_"
_HOST_KEY_RE = re.compile(r"^MAIL_IMAP_(.+)_HOST$")
_ACCOUNT_ID_RE = re.compile(r"^[^:\s]{1,64}$")

_TRUE = ("1", "true", "yes", "y", "on")
_FALSE = ("0", "false", "no", "n", "off")


def parse_bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return default


def parse_int_env(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def normalize_env_segment(value: str) -> str:
    """
    'my-account' -> 'MY_ACCOUNT'
    """
    s = re.sub(r"[^A-Z0-9]+", "_", value.strip().upper())
    return s.strip("_")


def account_env_prefix(account_id: str) -> str:
    return f"{ENV_PREFIX}{normalize_env_segment(account_id)}_"


def validate_account_id(account_id: str) -> str:
    """
    Account ids end up inside message identifiers, so they may not contain ':'.
    """
    if not _ACCOUNT_ID_RE.match(account_id or ""):
        raise ConfigError(
            f"Invalid account id {account_id!r}: use 1-64 characters without ':' or whitespace"
        )
    return account_id


@dataclass(frozen=True)
class IMAPConfig:
    host: str
    username: str
    password: str
    port: int = 993
    use_ssl: bool = True
    timeout: float = 30.0

    def __repr__(self) -> str:
        return (
            f"IMAPConfig(host={self.host!r}, port={self.port}, use_ssl={self.use_ssl}, "
            f"username={self.username!r}, password='[REDACTED]')"
        )

    @classmethod
    def from_env(
        cls,
        account_id: str,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Optional["IMAPConfig"]:
        """
        Read MAIL_IMAP_<ID>_{HOST,USER,PASS,PORT,SECURE,TIMEOUT}.
        Returns None when a required variable is missing.
        """
        env = os.environ if environ is None else environ
        prefix = account_env_prefix(account_id)

        host = env.get(f"{prefix}HOST")
        user = env.get(f"{prefix}USER")
        password = env.get(f"{prefix}PASS")
        if not host or not user or not password:
            return None

        return cls(
            host=host,
            username=user,
            password=password,
            port=parse_int_env(env.get(f"{prefix}PORT"), 993),
            use_ssl=parse_bool_env(env.get(f"{prefix}SECURE"), True),
            timeout=float(parse_int_env(env.get(f"{prefix}TIMEOUT"), 30)),
        )


@dataclass(frozen=True)
class BridgeSettings:
    write_enabled: bool = False
    cursor_ttl_ms: int = 10 * 60 * 1000
    cursor_max_entries: int = 200
    # Above this many matches, only the first page is returned and no cursor is kept.
    max_search_matches_for_pagination: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeSettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            write_enabled=parse_bool_env(env.get("MAIL_IMAP_WRITE_ENABLED"), defaults.write_enabled),
            cursor_ttl_ms=parse_int_env(env.get("MAIL_IMAP_CURSOR_TTL_MS"), defaults.cursor_ttl_ms),
            cursor_max_entries=parse_int_env(
                env.get("MAIL_IMAP_CURSOR_MAX_ENTRIES"), defaults.cursor_max_entries
            ),
            max_search_matches_for_pagination=parse_int_env(
                env.get("MAIL_IMAP_MAX_SEARCH_MATCHES"),
                defaults.max_search_matches_for_pagination,
            ),
            log_level=(env.get("LOG_LEVEL") or defaults.log_level).upper(),
        )


def discover_account_ids(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Account ids with a MAIL_IMAP_<ID>_HOST variable, lower-cased.
    """
    env = os.environ if environ is None else environ
    ids: List[str] = []
    for key in sorted(env.keys()):
        m = _HOST_KEY_RE.match(key)
        if m and m.group(1):
            ids.append(m.group(1).lower())
    return ids


def validate_environment(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Human readable problems with the account configuration; empty when fine.
    Falls back to checking the 'default' account when none are configured.
    """
    env = os.environ if environ is None else environ
    account_ids = discover_account_ids(env) or ["default"]

    errors: List[str] = []
    for account_id in account_ids:
        prefix = account_env_prefix(account_id)
        missing = [f"{prefix}{k}" for k in ("HOST", "USER", "PASS") if not env.get(f"{prefix}{k}")]
        if missing:
            errors.append(
                f"Account '{account_id}' is missing required env vars: {', '.join(missing)}"
            )
    return errors
