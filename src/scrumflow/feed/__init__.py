"""ScrumFlow notification feed - the backend's view of the user's notifications."""

from .client import (
    FeedAuthError,
    FeedClient,
    FeedError,
    FeedFormatError,
    FeedUnavailableError,
)
from .models import FeedSnapshot, NotificationRecord, parse_created_at
from .session import StoredSession, clear_session, cookie_for, load_session, save_session

__all__ = [
    # Types
    "FeedSnapshot",
    "NotificationRecord",
    "StoredSession",
    # Client
    "FeedClient",
    "FeedError",
    "FeedAuthError",
    "FeedFormatError",
    "FeedUnavailableError",
    # Session storage
    "clear_session",
    "cookie_for",
    "load_session",
    "save_session",
    "parse_created_at",
]
