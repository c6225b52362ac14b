"""Alerts rendered in the terminal, for headless sessions."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .base import AlertHandle, AuthorizationState, ClosedHandle


class TerminalAlerter:
    """Prints each alert as a panel on the console.

    Always supported and always granted: the user asked for it by running us
    in a terminal. Terminal alerts can't be clicked.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._lock = threading.Lock()

    def is_supported(self) -> bool:
        return True

    def authorization_state(self) -> AuthorizationState:
        return AuthorizationState.GRANTED

    def request_authorization(self) -> AuthorizationState:
        return AuthorizationState.GRANTED

    def show(
        self,
        title: str,
        body: str,
        tag: str,
        on_activate: Callable[[], None] | None = None,
    ) -> AlertHandle:
        panel = Panel(
            Text(body),
            title=Text(title, style="bold cyan"),
            title_align="left",
            subtitle=Text(datetime.now().strftime("%H:%M:%S"), style="dim"),
            subtitle_align="right",
            border_style="cyan",
        )
        # poll thread and the test command can both print
        with self._lock:
            self.console.print(panel)
        return ClosedHandle()
