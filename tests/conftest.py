"""Shared fakes for the sync engine tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from scrumflow.alerts import AlertError, AuthorizationState
from scrumflow.feed import FeedError, FeedSnapshot, NotificationRecord

_BASE = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def make_record(
    id: str,
    minutes: int = 0,
    project_id: str | None = None,
    type: str = "task_assigned",
    read: bool = False,
) -> NotificationRecord:
    metadata = {"projectId": project_id} if project_id is not None else {}
    return NotificationRecord(
        id=id,
        type=type,
        title=f"Title {id}",
        message=f"Message {id}",
        read=read,
        created_at=_BASE + timedelta(minutes=minutes),
        metadata=metadata,
    )


def make_snapshot(*records: NotificationRecord) -> FeedSnapshot:
    return FeedSnapshot(
        notifications=tuple(records),
        unread_count=sum(1 for r in records if r.is_unread),
    )


class FakeFeed:
    """Feed that serves whatever the test queued up."""

    def __init__(self, *snapshots: FeedSnapshot | Exception) -> None:
        self.queue: list[FeedSnapshot | Exception] = list(snapshots)
        self.current: FeedSnapshot | Exception = make_snapshot()
        self.calls = 0

    def set(self, *records: NotificationRecord) -> None:
        self.current = make_snapshot(*records)

    def fail(self, error: Exception | None = None) -> None:
        self.current = error or FeedError("backend down")

    def fetch(self) -> FeedSnapshot:
        self.calls += 1
        item = self.queue.pop(0) if self.queue else self.current
        if isinstance(item, Exception):
            raise item
        return item


class FakeHandle:
    def __init__(self) -> None:
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def close(self) -> None:
        self.close_count += 1


class FakeAlerter:
    """Records every alert it's asked to show."""

    def __init__(
        self,
        supported: bool = True,
        state: AuthorizationState = AuthorizationState.GRANTED,
        answer: AuthorizationState = AuthorizationState.GRANTED,
    ) -> None:
        self.supported = supported
        self.state = state
        self.answer = answer
        self.requests = 0
        self.shown: list[tuple[str, str, str]] = []
        self.handles: list[FakeHandle] = []
        self.activators: list[Callable[[], None] | None] = []
        self.fail_with: Exception | None = None

    def is_supported(self) -> bool:
        return self.supported

    def authorization_state(self) -> AuthorizationState:
        return self.state

    def request_authorization(self) -> AuthorizationState:
        self.requests += 1
        self.state = self.answer
        return self.state

    def show(self, title, body, tag, on_activate=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.shown.append((title, body, tag))
        self.activators.append(on_activate)
        handle = FakeHandle()
        self.handles.append(handle)
        return handle

    @property
    def tags(self) -> list[str]:
        return [tag for _, _, tag in self.shown]


class FailingAlerter(FakeAlerter):
    def __init__(self) -> None:
        super().__init__()
        self.fail_with = AlertError("notification server went away")


class FakeNavigator:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.opened: list[str] = []

    def open_project(self, project_id: str) -> bool:
        self.opened.append(project_id)
        return self.result


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def alerter() -> FakeAlerter:
    return FakeAlerter()


@pytest.fixture
def navigator() -> FakeNavigator:
    return FakeNavigator()
