"""Polling sync between the ScrumFlow feed and desktop alerts."""

from .engine import (
    DEFAULT_AUTO_DISMISS,
    DEFAULT_POLL_INTERVAL,
    FeedSource,
    NotificationSyncEngine,
    SnapshotListener,
)

__all__ = [
    "DEFAULT_AUTO_DISMISS",
    "DEFAULT_POLL_INTERVAL",
    "FeedSource",
    "NotificationSyncEngine",
    "SnapshotListener",
]
