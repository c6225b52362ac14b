"""Main ScrumFlow inbox TUI application."""

from __future__ import annotations

import contextlib
from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer, Header, Static

from ...alerts import AlertHandle, AuthorizationState, ClosedHandle
from ...config import Config, load_config
from ...feed import FeedClient, FeedError, FeedSnapshot, NotificationRecord
from ...log import get_logger
from ...navigation import BrowserNavigator
from ...runtime import build_client, build_engine
from ...sync import NotificationSyncEngine
from .screens import ConfirmScreen
from .utils import format_timestamp, set_terminal_title, styled_cell

_log = get_logger("tui")


def _build_bindings(keys: str, action: str, label: str, show: bool = True) -> list[Binding]:
    """Build Binding objects for all keys mapped to an action.

    Args:
        keys: String of characters, each is a key binding
        action: The action name (without 'action_' prefix)
        label: Human-readable label for the action
        show: Whether to show in footer (only first key will be shown)

    Returns:
        List of Binding objects
    """
    if not keys:
        return []

    bindings = []
    # First key gets the visible binding
    bindings.append(Binding(keys[0], action, label, show=show))

    # Additional keys get hidden bindings
    for key in keys[1:]:
        bindings.append(Binding(key, action, label, show=False))

    return bindings


class ToastAlerter:
    """Shows alerts as Textual toasts inside the running app.

    Used instead of the terminal alerter, which would print over the TUI.
    """

    def __init__(self, app: App, timeout: float = 5.0) -> None:
        self.app = app
        self.timeout = timeout

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
        # notify is thread-safe; the engine calls this from its poll thread
        self.app.notify(body, title=title, timeout=self.timeout)
        return ClosedHandle()


class ScrumflowApp(App):
    """ScrumFlow TUI - your project notifications in a terminal."""

    CSS = """
    #main_table {
        height: 1fr;
    }

    #status {
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        config: Config | None = None,
        client: FeedClient | None = None,
        engine: NotificationSyncEngine | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.client = client or build_client(self.config)
        if engine is None:
            toast = None
            if self.config.sync.alerter == "terminal":
                toast = ToastAlerter(self, timeout=self.config.sync.auto_dismiss)
            engine = build_engine(self.config, self.client, alerter=toast)
        self.engine = engine
        self.navigator = BrowserNavigator(self.config.server.url)
        self._records: dict[str, NotificationRecord] = {}
        self._error: str | None = None
        self._setup_keybindings()
        # Enable ANSI colors for terminal transparency support
        if self.config.tui.transparent:
            self.ansi_color = True

    def _setup_keybindings(self) -> None:
        """Build keybindings from config."""
        kb = self.config.tui.keybindings

        for b in _build_bindings(kb.quit, "quit", "Quit"):
            self.bind(b.key, b.action, description=b.description, show=b.show)
        self.bind("escape", "quit", description="Quit", show=False)

        for b in _build_bindings(kb.refresh, "refresh", "Refresh"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.mark_read, "mark_read", "Mark Read"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.mark_all_read, "mark_all_read", "All Read"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.delete, "delete", "Delete"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.delete_all, "delete_all", "Delete All", show=False):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        # Arrow key alternatives (if configured)
        if len(kb.up_down) == 2:
            up, down = kb.up_down
            self.bind(up, "cursor_up", description="Up", show=False)
            self.bind(down, "cursor_down", description="Down", show=False)

    def compose(self) -> ComposeResult:
        yield Header()
        yield DataTable(id="main_table")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "scrumflow"
        self.sub_title = self.config.server.url

        table = self.query_one("#main_table", DataTable)
        if self.config.tui.transparent:
            self.screen.styles.background = "transparent"
            table.styles.background = "transparent"

        table.cursor_type = "row"
        table.add_column("Time", width=10)
        table.add_column("", width=1)  # Unread indicator
        table.add_column("", width=3)  # Category icon
        table.add_column("Title", width=28)
        table.add_column("Message")

        if self.client.session_cookie is None:
            self._error = "Not logged in - run 'scrumflow login' first"

        self.engine.add_listener(self._on_snapshot)
        if self.engine.last_snapshot is not None:
            self._render_snapshot(self.engine.last_snapshot)
        if not self.engine.running and not self.engine.stopped:
            self.engine.start()
        self._update_status()

    def on_unmount(self) -> None:
        self.engine.remove_listener(self._on_snapshot)
        self.engine.stop()

    # --- rendering ---

    def _on_snapshot(self, snapshot: FeedSnapshot) -> None:
        # Called on the engine's poll thread
        self._error = None
        self.call_from_thread(self._render_snapshot, snapshot)

    def _get_current_row_key(self) -> str | None:
        table = self.query_one("#main_table", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
            return row_key.value if row_key else None
        except Exception:
            return None

    def _render_snapshot(self, snapshot: FeedSnapshot) -> None:
        table = self.query_one("#main_table", DataTable)
        current_key = self._get_current_row_key()
        current_index = table.cursor_coordinate.row

        table.clear()
        self._records = {}

        for record in snapshot.notifications:
            self._records[record.id] = record
            unread = record.is_unread
            table.add_row(
                styled_cell(format_timestamp(record.created_at), unread),
                styled_cell("●" if unread else "", unread),
                record.icon,
                styled_cell(record.title, unread),
                styled_cell(record.message, unread),
                key=record.id,
            )

        # Restore cursor position
        if table.row_count > 0:
            target_index = None
            if current_key:
                with contextlib.suppress(Exception):
                    target_index = table.get_row_index(current_key)
            if target_index is None:
                target_index = min(current_index, table.row_count - 1)
            table.move_cursor(row=target_index)

        self._update_status()

    def _update_status(self) -> None:
        status = self.query_one("#status", Static)
        if self._error:
            status.update(f"[bold red]{self._error}[/]")
            return

        records = list(self._records.values())
        unread = sum(1 for r in records if r.is_unread)
        read = len(records) - unread
        if not self.engine.is_supported():
            alerts = "unsupported"
        else:
            alerts = self.engine.authorization.value
        status.update(f"{unread} unread, {read} read  |  desktop alerts: {alerts}")

    def _show_error(self, message: str) -> None:
        self._error = message
        self._update_status()
        self.notify(message, severity="error")

    # --- feed mutations ---

    def _run_and_reload(self, label: str, fn: Callable[[], object]) -> None:
        """Run a feed mutation off the UI thread, then reload the table.

        The reload goes straight to the client, not through the engine, so it
        never changes what the engine has seen.
        """

        def work() -> None:
            try:
                fn()
                snapshot = self.client.fetch()
            except FeedError as e:
                _log.warning("%s failed: %s", label, e)
                self.call_from_thread(self._show_error, f"{label} failed: {e}")
                return
            _log.info("%s", label)
            self.call_from_thread(self._render_snapshot, snapshot)

        self.run_worker(work, thread=True, exclusive=False, group="feed")

    def _selected_record(self) -> NotificationRecord | None:
        key = self._get_current_row_key()
        return self._records.get(key) if key else None

    def action_refresh(self) -> None:
        self._run_and_reload("refresh", lambda: None)

    def action_mark_read(self) -> None:
        record = self._selected_record()
        if record is None or record.read:
            return
        self._run_and_reload("mark read", lambda: self.client.mark_read(record.id))

    def action_mark_all_read(self) -> None:
        if not any(r.is_unread for r in self._records.values()):
            return
        self._run_and_reload("mark all read", self.client.mark_all_read)

    def action_delete(self) -> None:
        record = self._selected_record()
        if record is None:
            return
        self._run_and_reload("delete", lambda: self.client.delete(record.id))

    def action_delete_all(self) -> None:
        if not self._records:
            return

        def handle_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._run_and_reload("delete all", self.client.delete_all)

        self.push_screen(
            ConfirmScreen(f"Delete all {len(self._records)} notifications?"),
            handle_confirm,
        )

    def action_cursor_up(self) -> None:
        self.query_one("#main_table", DataTable).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#main_table", DataTable).action_cursor_down()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a row: mark it read and open its project, if it has one."""
        if event.row_key is None:
            return

        record = self._records.get(event.row_key.value)
        if record is None:
            return

        if record.project_id:
            if not self.navigator.open_project(record.project_id):
                self.notify("Couldn't open a browser", severity="warning")
        else:
            self.notify("This notification isn't about a project", severity="information")

        if record.is_unread:
            self._run_and_reload("mark read", lambda: self.client.mark_read(record.id))


def main() -> None:
    set_terminal_title("scrumflow")
    app = ScrumflowApp()
    app.run()
