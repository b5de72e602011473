from imapbridge.models.message import AttachmentSummary, MessageOverview, MessageSummary

__all__ = ["AttachmentSummary", "MessageOverview", "MessageSummary"]
