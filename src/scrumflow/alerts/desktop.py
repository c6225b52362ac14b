"""Native desktop alerts on Linux and macOS.

Linux goes through notify-send (libnotify), macOS through osascript. Both
are plain subprocess calls so nothing extra needs installing.
"""

from __future__ import annotations

import os
import shutil
import signal
import subprocess
import threading
from collections.abc import Callable

from ..log import get_logger
from .base import AlertError, AlertHandle, AuthorizationState, ClosedHandle

_log = get_logger("alerts")

APP_NAME = "ScrumFlow"


class ProcessAlertHandle:
    """Handle for an alert backed by a waiting notify-send process."""

    def __init__(self, proc: subprocess.Popen) -> None:
        self._proc = proc
        self._lock = threading.Lock()
        self.closed = False

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
        # notify-send --wait closes its notification when interrupted
        if self._proc.poll() is None:
            try:
                self._proc.send_signal(signal.SIGINT)
            except OSError:
                pass


class LinuxAlerter:
    """Desktop alerts via notify-send.

    There's no permission prompt on Linux; what decides whether an alert can
    reach the user is whether there's a session bus to deliver it on.
    """

    def __init__(self, app_name: str = APP_NAME, expire_after: float | None = None) -> None:
        self.app_name = app_name
        # seconds; None leaves it to the notification server
        self.expire_after = expire_after
        self._state = AuthorizationState.PENDING

    def is_supported(self) -> bool:
        return shutil.which("notify-send") is not None

    def authorization_state(self) -> AuthorizationState:
        if not self.is_supported():
            return AuthorizationState.DENIED
        return self._state

    def request_authorization(self) -> AuthorizationState:
        if not self.is_supported():
            return AuthorizationState.DENIED
        if self._state is AuthorizationState.PENDING:
            if os.environ.get("DBUS_SESSION_BUS_ADDRESS"):
                self._state = AuthorizationState.GRANTED
            else:
                _log.info("no DBUS_SESSION_BUS_ADDRESS, desktop alerts denied")
                self._state = AuthorizationState.DENIED
        return self._state

    def show(
        self,
        title: str,
        body: str,
        tag: str,
        on_activate: Callable[[], None] | None = None,
    ) -> AlertHandle:
        cmd = [
            "notify-send",
            "--app-name",
            self.app_name,
            # servers that honor this replace an alert with the same tag
            "--hint",
            f"string:x-canonical-private-synchronous:{tag}",
        ]
        if self.expire_after is not None and self.expire_after > 0:
            cmd += ["--expire-time", str(int(self.expire_after * 1000))]
        if on_activate is not None:
            cmd += ["--action", "default=Open", "--wait"]
        cmd += [title, body]

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
            )
        except OSError as e:
            raise AlertError(f"notify-send failed: {e}") from e

        handle = ProcessAlertHandle(proc)
        if on_activate is not None:
            threading.Thread(
                target=_wait_for_action,
                args=(proc, handle, on_activate),
                daemon=True,
            ).start()
        return handle


def _wait_for_action(
    proc: subprocess.Popen,
    handle: ProcessAlertHandle,
    on_activate: Callable[[], None],
) -> None:
    """Block until notify-send exits and run on_activate if it was clicked."""
    try:
        out, _ = proc.communicate()
    except (OSError, ValueError) as e:
        _log.warning("lost track of notify-send: %s", e)
        return

    if handle.closed or (out or "").strip() != "default":
        return

    try:
        on_activate()
    except Exception as e:
        _log.error("alert activation failed: %s", e, exc_info=True)


def _applescript_quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class MacOSAlerter:
    """Desktop alerts via AppleScript's display notification.

    AppleScript notifications can't report clicks, so on_activate never runs.
    """

    def __init__(self) -> None:
        self._state = AuthorizationState.PENDING

    def is_supported(self) -> bool:
        return shutil.which("osascript") is not None

    def authorization_state(self) -> AuthorizationState:
        if not self.is_supported():
            return AuthorizationState.DENIED
        return self._state

    def request_authorization(self) -> AuthorizationState:
        if not self.is_supported():
            return AuthorizationState.DENIED
        if self._state is AuthorizationState.PENDING:
            self._state = AuthorizationState.GRANTED
        return self._state

    def show(
        self,
        title: str,
        body: str,
        tag: str,
        on_activate: Callable[[], None] | None = None,
    ) -> AlertHandle:
        script = (
            f"display notification {_applescript_quote(body)} "
            f"with title {_applescript_quote(APP_NAME)} "
            f"subtitle {_applescript_quote(title)}"
        )
        try:
            subprocess.run(
                ["osascript", "-e", script],
                check=True,
                capture_output=True,
                timeout=5,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            raise AlertError(f"osascript failed: {e}") from e
        return ClosedHandle()
