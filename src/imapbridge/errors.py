from __future__ import annotations

from typing import Optional

# Remediation classes surfaced to callers. They map to materially different
# next steps, so they are never collapsed into one generic message.
MALFORMED_REQUEST = "fix_request"
SESSION_EXPIRED = "restart_search"
MAILBOX_CHANGED = "search_again"
CONFIGURATION = "fix_configuration"
SERVER_FAILURE = "retry_later"


class MailBridgeError(Exception):
    """Base class for every error raised by imapbridge."""

    code: str = "error"
    status_code: int = 500
    remediation: str = SERVER_FAILURE

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message())

    @property
    def message(self) -> str:
        return str(self)

    def default_message(self) -> str:
        return "The operation failed."

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "remediation": self.remediation,
        }


class ConfigError(MailBridgeError):
    code = "config_error"
    status_code = 500
    remediation = CONFIGURATION


class UnknownAccount(ConfigError):
    code = "unknown_account"
    status_code = 404

    def __init__(self, account_id: str, env_prefix: str) -> None:
        self.account_id = account_id
        super().__init__(
            "\n".join(
                [
                    f"Account '{account_id}' is not configured.",
                    "Set env vars:",
                    f"- {env_prefix}HOST",
                    f"- {env_prefix}USER",
                    f"- {env_prefix}PASS",
                    f"Optional: {env_prefix}PORT (default 993), {env_prefix}SECURE (default true)",
                ]
            )
        )


class WriteDisabled(MailBridgeError):
    code = "write_disabled"
    status_code = 403
    remediation = CONFIGURATION

    def default_message(self) -> str:
        return "Write operations are disabled. Set MAIL_IMAP_WRITE_ENABLED=true to enable updates."


class IMAPError(MailBridgeError):
    code = "imap_error"
    status_code = 502
    remediation = SERVER_FAILURE


class InvalidRequest(MailBridgeError):
    code = "invalid_request"
    status_code = 400
    remediation = MALFORMED_REQUEST


class InvalidMessageId(InvalidRequest):
    code = "invalid_message_id"

    def default_message(self) -> str:
        return "Invalid message_id. Expected 'imap:{account_id}:{mailbox}:{uidvalidity}:{uid}'."


class AccountMismatch(InvalidRequest):
    code = "account_mismatch"

    def default_message(self) -> str:
        return "message_id does not match the requested account_id."


class CursorNotFoundOrExpired(MailBridgeError):
    code = "cursor_not_found"
    status_code = 410
    remediation = SESSION_EXPIRED

    def default_message(self) -> str:
        return "page_token is invalid or expired. Run the search again."


class CursorAccountMismatch(MailBridgeError):
    code = "cursor_account_mismatch"
    status_code = 403
    remediation = MALFORMED_REQUEST

    def default_message(self) -> str:
        return "page_token does not match the requested mailbox or account."


class StaleMailboxSnapshot(MailBridgeError):
    code = "stale_mailbox_snapshot"
    status_code = 409
    remediation = MAILBOX_CHANGED

    def __init__(self, mailbox: str, expected: int, observed: int) -> None:
        self.mailbox = mailbox
        self.expected = expected
        self.observed = observed
        super().__init__(
            f"Mailbox {mailbox!r} has changed since this identifier was issued "
            f"(uidvalidity expected {expected}, mailbox {observed}). "
            "Run the search again to refresh."
        )


class MailboxOpenFailure(MailBridgeError):
    code = "mailbox_open_failed"
    status_code = 502
    remediation = SERVER_FAILURE

    def __init__(self, mailbox: str, reason: Optional[str] = None) -> None:
        self.mailbox = mailbox
        self.reason = reason
        detail = f": {reason}" if reason else "."
        super().__init__(f"Mailbox {mailbox!r} could not be opened{detail}")


class MessageNotFound(MailBridgeError):
    code = "message_not_found"
    status_code = 404
    remediation = MAILBOX_CHANGED

    def default_message(self) -> str:
        return "Message not found. It may have been moved or deleted; run the search again."
