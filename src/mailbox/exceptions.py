"""Exception hierarchy for the mailbox adapter."""

from __future__ import annotations


class MailboxError(Exception):
    """Base exception for all mailbox errors."""


class SourceUnavailableError(MailboxError):
    """The message listing could not be retrieved; the whole fetch fails."""


class MessageUnreadableError(MailboxError):
    """A single message body could not be resolved; that message is skipped."""

    def __init__(self, message_id: str, reason: str) -> None:
        super().__init__(f"message {message_id} unreadable: {reason}")
        self.message_id = message_id
        self.reason = reason
