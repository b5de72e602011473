# imapbridge/webapp/context.py
from __future__ import annotations

import os
import threading
from dataclasses import asdict
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from dotenv import load_dotenv
from loguru import logger

from imapbridge.config import (
    BridgeSettings,
    IMAPConfig,
    discover_account_ids,
    validate_account_id,
    validate_environment,
)
from imapbridge.errors import ConfigError
from imapbridge.imap.client import IMAPClient
from imapbridge.imap.cursor_store import CursorStore
from imapbridge.log import configure_logging, scrub_secrets
from imapbridge.mail_tools import MailTools


class AccountRegistry(Mapping[str, IMAPClient]):
    """
    Account id -> IMAPClient, built lazily from MAIL_IMAP_<ID>_* variables.
    A missing or incomplete account behaves like a missing key.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        client_factory: Callable[[IMAPConfig], IMAPClient] = IMAPClient.from_config,
    ):
        self._environ = os.environ if environ is None else environ
        self._client_factory = client_factory
        self._clients: Dict[str, IMAPClient] = {}
        self._lock = threading.Lock()

    def _account_ids(self) -> List[str]:
        ids: List[str] = []
        for account_id in discover_account_ids(self._environ):
            try:
                ids.append(validate_account_id(account_id))
            except ConfigError as e:
                logger.warning(f"Skipping account: {e}")
        return ids

    def __getitem__(self, account_id: str) -> IMAPClient:
        with self._lock:
            client = self._clients.get(account_id)
            if client is not None:
                return client

            try:
                validate_account_id(account_id)
            except ConfigError:
                raise KeyError(account_id) from None

            config = IMAPConfig.from_env(account_id, self._environ)
            if config is None:
                raise KeyError(account_id)

            logger.info(f"Opening IMAP account {account_id}: {scrub_secrets(asdict(config))}")
            client = self._client_factory(config)
            self._clients[account_id] = client
            return client

    def __iter__(self) -> Iterator[str]:
        return iter(self._account_ids())

    def __len__(self) -> int:
        return len(self._account_ids())

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()


def build_tools(environ: Optional[Mapping[str, str]] = None) -> MailTools:
    """
    Wire settings, accounts and the cursor store from the environment.
    A .env file in the working directory is loaded when no environ is given.
    """
    if environ is None:
        load_dotenv(override=True)
        environ = os.environ

    settings = BridgeSettings.from_env(environ)
    configure_logging(settings.log_level)

    for problem in validate_environment(environ):
        logger.warning(problem)

    store = CursorStore(
        ttl_ms=settings.cursor_ttl_ms,
        max_entries=settings.cursor_max_entries,
    )
    logger.info(
        f"imapbridge ready (write_enabled={settings.write_enabled}, "
        f"cursor_ttl_ms={settings.cursor_ttl_ms}, cursor_max_entries={settings.cursor_max_entries})"
    )
    return MailTools(AccountRegistry(environ), store, settings)
