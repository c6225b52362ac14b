"""Desktop alert backends.

build_alerter() picks the right one for this machine.
"""

from __future__ import annotations

import platform

from rich.console import Console

from ..log import get_logger
from .base import (
    AlertError,
    Alerter,
    AlertHandle,
    AuthorizationState,
    ClosedHandle,
    NullAlerter,
)
from .desktop import LinuxAlerter, MacOSAlerter
from .terminal import TerminalAlerter

_log = get_logger("alerts")

TEST_ALERT_TITLE = "🎉 Test Notification"
TEST_ALERT_BODY = "Desktop notifications are working! You'll receive updates like this."
TEST_ALERT_TAG = "scrumflow-test"


def _desktop_alerter(expire_after: float | None) -> Alerter | None:
    system = platform.system()
    if system == "Linux":
        return LinuxAlerter(expire_after=expire_after)
    if system == "Darwin":
        return MacOSAlerter()
    return None


def build_alerter(
    kind: str = "auto",
    console: Console | None = None,
    expire_after: float | None = None,
) -> Alerter:
    """Build the alerter for a configured kind.

    Args:
        kind: "auto" (desktop if this platform has one, else nothing),
            "desktop", "terminal" or "none"
        console: Console for the terminal alerter
        expire_after: Seconds before desktop alerts expire, where the
            platform lets us set it

    Returns:
        An alerter. Unsupported setups get a NullAlerter rather than an error.
    """
    if kind == "terminal":
        return TerminalAlerter(console)
    if kind == "none":
        return NullAlerter()

    alerter = _desktop_alerter(expire_after)
    if alerter is None or not alerter.is_supported():
        _log.info("no desktop alerting on %s", platform.system())
        return NullAlerter()
    return alerter


def send_test_alert(alerter: Alerter) -> bool:
    """Show a test alert. Returns False if alerts can't be shown here."""
    if not alerter.is_supported():
        return False
    if alerter.request_authorization() is not AuthorizationState.GRANTED:
        return False
    try:
        alerter.show(TEST_ALERT_TITLE, TEST_ALERT_BODY, TEST_ALERT_TAG)
    except AlertError as e:
        _log.warning("test alert failed: %s", e)
        return False
    return True


__all__ = [
    "AlertError",
    "AlertHandle",
    "Alerter",
    "AuthorizationState",
    "ClosedHandle",
    "LinuxAlerter",
    "MacOSAlerter",
    "NullAlerter",
    "TerminalAlerter",
    "build_alerter",
    "send_test_alert",
]
