"""Tests for scrumflow.inbox.tui.utils."""

from datetime import UTC, datetime, timedelta

from scrumflow.inbox.tui.utils import format_timestamp, styled_cell


def test_format_timestamp_recent_shows_time():
    now = datetime(2025, 3, 1, 18, 0, tzinfo=UTC)
    dt = now - timedelta(hours=2)
    assert format_timestamp(dt, now=now) == dt.astimezone().strftime("%H:%M:%S")


def test_format_timestamp_old_shows_date():
    now = datetime(2025, 3, 10, 18, 0, tzinfo=UTC)
    dt = now - timedelta(days=3)
    assert format_timestamp(dt, now=now) == dt.astimezone().strftime("%Y-%m-%d")


def test_styled_cell():
    assert styled_cell("x", True).style == "bold cyan"
    assert styled_cell("x", False).style == "dim"
