from imapbridge.config import BridgeSettings, IMAPConfig
from imapbridge.errors import MailBridgeError
from imapbridge.locator import decode_message_id, encode_message_id
from imapbridge.mail_tools import MailTools, ToolHint, ToolResult
from imapbridge.types import MessageLocator

__all__ = [
    "BridgeSettings",
    "IMAPConfig",
    "MailBridgeError",
    "MailTools",
    "ToolHint",
    "ToolResult",
    "MessageLocator",
    "encode_message_id",
    "decode_message_id",
]
