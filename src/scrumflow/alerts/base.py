"""Platform alerting facility shared types."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Protocol


class AuthorizationState(Enum):
    """Whether the platform lets us show alerts."""

    GRANTED = "granted"
    DENIED = "denied"
    PENDING = "pending"  # not decided yet


class AlertError(Exception):
    """The platform refused or failed to show an alert."""


class AlertHandle(Protocol):
    """A shown alert that can be closed early."""

    def close(self) -> None:
        """Close the alert. Safe to call more than once; never raises."""
        ...


class Alerter(Protocol):
    """Protocol for platform-specific desktop alert backends."""

    def is_supported(self) -> bool:
        """Whether this platform can show alerts at all."""
        ...

    def authorization_state(self) -> AuthorizationState:
        """Last known authorization, without prompting."""
        ...

    def request_authorization(self) -> AuthorizationState:
        """Ask the platform for permission (only meaningful while pending)."""
        ...

    def show(
        self,
        title: str,
        body: str,
        tag: str,
        on_activate: Callable[[], None] | None = None,
    ) -> AlertHandle:
        """Show one alert.

        The tag lets platforms that dedupe by tag collapse repeats. on_activate
        runs (on some thread) when the user clicks the alert, if the platform
        reports clicks at all.

        Raises:
            AlertError: if the alert could not be shown.
        """
        ...


class ClosedHandle:
    """Handle for alerts the platform dismisses on its own."""

    def close(self) -> None:
        pass


class NullAlerter:
    """Alerter for platforms without any alerting facility."""

    def is_supported(self) -> bool:
        return False

    def authorization_state(self) -> AuthorizationState:
        return AuthorizationState.DENIED

    def request_authorization(self) -> AuthorizationState:
        return AuthorizationState.DENIED

    def show(
        self,
        title: str,
        body: str,
        tag: str,
        on_activate: Callable[[], None] | None = None,
    ) -> AlertHandle:
        return ClosedHandle()
