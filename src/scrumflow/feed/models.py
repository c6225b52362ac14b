"""Notification records as served by the ScrumFlow backend."""

from __future__ import annotations

import json
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

_EPOCH = datetime.fromtimestamp(0, tz=UTC)

CATEGORY_ICONS = {
    "task_assigned": "📋",
    "task_created": "✨",
    "task_completed": "✅",
    "task_deleted": "🗑️",
    "task_updated": "✏️",
    "status_changed": "🔄",
    "project_invite": "📨",
    "project_removed": "👋",
    "project_completed": "🎉",
    "new_member_joined": "👥",
    "mention": "💬",
}
DEFAULT_ICON = "🔔"


def parse_created_at(value: Any) -> datetime:
    """Parse the server's createdAt into an aware datetime.

    Missing or unparseable timestamps map to the epoch so they sort last.
    """
    if not value or not isinstance(value, str):
        return _EPOCH
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _parse_metadata(raw: Any) -> dict[str, Any]:
    # The server stores metadata as a JSON string and usually decodes it,
    # but older rows come through still encoded.
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw:
        with suppress(json.JSONDecodeError):
            decoded = json.loads(raw)
            if isinstance(decoded, dict):
                return decoded
    return {}


@dataclass(frozen=True)
class NotificationRecord:
    """A notification in the user's ScrumFlow feed."""

    id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: datetime = _EPOCH
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> NotificationRecord:
        """Create a record from one entry of GET /api/notifications.

        Raises:
            ValueError: if the entry has no usable id.
        """
        raw_id = data.get("id")
        if raw_id is None or raw_id == "":
            raise ValueError(f"notification without id: {data!r}")

        return cls(
            id=str(raw_id),
            type=str(data.get("type") or ""),
            title=str(data.get("title") or ""),
            message=str(data.get("message") or ""),
            read=bool(data.get("read")),
            created_at=parse_created_at(data.get("createdAt")),
            metadata=_parse_metadata(data.get("metadata")),
        )

    @property
    def project_id(self) -> str | None:
        project_id = self.metadata.get("projectId")
        if project_id is None or project_id == "":
            return None
        return str(project_id)

    @property
    def is_unread(self) -> bool:
        return not self.read

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS.get(self.type, DEFAULT_ICON)


@dataclass(frozen=True)
class FeedSnapshot:
    """One fetch of the notification feed."""

    notifications: tuple[NotificationRecord, ...] = ()
    unread_count: int = 0

    @classmethod
    def from_json(cls, data: Any) -> FeedSnapshot:
        """Build a snapshot from the GET /api/notifications body.

        Raises:
            ValueError: if the body doesn't have the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")

        items = data.get("notifications", [])
        if not isinstance(items, list):
            raise ValueError("'notifications' is not a list")

        records = []
        for item in items:
            if not isinstance(item, dict):
                raise ValueError(f"notification entry is not an object: {item!r}")
            records.append(NotificationRecord.from_json(item))

        unread = data.get("unreadCount")
        if not isinstance(unread, int) or isinstance(unread, bool):
            unread = sum(1 for r in records if r.is_unread)

        return cls(notifications=tuple(records), unread_count=unread)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(r.id for r in self.notifications)

    def __len__(self) -> int:
        return len(self.notifications)
