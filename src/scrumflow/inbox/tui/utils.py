"""TUI utilities and helpers."""

import sys
from datetime import datetime

from rich.text import Text

_DAY_SECONDS = 86400


def set_terminal_title(title: str) -> None:
    """Set the terminal/pane title via OSC escape sequence."""
    # OSC 0 sets both icon name and window title
    sys.stdout.write(f"\033]0;{title}\007")
    sys.stdout.flush()


def styled_cell(value: str, is_unread: bool) -> Text:
    """Style a cell value based on read/unread status."""
    if is_unread:
        return Text(value, style="bold cyan")

    return Text(value, style="dim")


def format_timestamp(dt: datetime, now: datetime | None = None) -> str:
    """Time of day for the last 24h, the date for anything older."""
    local = dt.astimezone()
    now = now or datetime.now().astimezone()
    if (now - local).total_seconds() < _DAY_SECONDS:
        return local.strftime("%H:%M:%S")
    return local.strftime("%Y-%m-%d")
