"""Mailbox adapter — reads raw alert emails for a time window."""

from src.mailbox.base import MessageSource
from src.mailbox.exceptions import MailboxError, MessageUnreadableError, SourceUnavailableError
from src.mailbox.mailpit import MailpitSource
from src.mailbox.window import (
    TimeWindow,
    day_window,
    range_window,
    recent_window,
    today_window,
    yesterday_window,
)

__all__ = [
    "MailboxError",
    "MailpitSource",
    "MessageSource",
    "MessageUnreadableError",
    "SourceUnavailableError",
    "TimeWindow",
    "day_window",
    "range_window",
    "recent_window",
    "today_window",
    "yesterday_window",
]
