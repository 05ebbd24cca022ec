"""Picker session lifecycle."""

from .media_items import list_picked_items
from .session import (
    CallbackObserver,
    Deadline,
    LoggingObserver,
    PollObserver,
    create_session,
    poll,
)

__all__ = [
    "CallbackObserver",
    "Deadline",
    "LoggingObserver",
    "PollObserver",
    "create_session",
    "list_picked_items",
    "poll",
]
