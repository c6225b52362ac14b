"""Build clients and engines from configuration."""

from __future__ import annotations

from rich.console import Console

from .alerts import Alerter, build_alerter
from .config import Config
from .feed import FeedClient, cookie_for
from .navigation import BrowserNavigator
from .sync import NotificationSyncEngine


def build_client(config: Config) -> FeedClient:
    """Feed client for the configured server.

    An explicit session cookie (config or SCRUMFLOW_SESSION) wins over the one
    stored by `scrumflow login`.
    """
    cookie = config.server.session_cookie or cookie_for(config.server.url)
    return FeedClient(config.server.url, session_cookie=cookie, timeout=config.server.timeout)


def build_engine(
    config: Config,
    client: FeedClient,
    alerter: Alerter | None = None,
    alerter_kind: str | None = None,
    poll_interval: float | None = None,
    console: Console | None = None,
) -> NotificationSyncEngine:
    """Engine wired to an alerter and a browser navigator.

    Without an explicit alerter, one is built from alerter_kind, falling back
    to the configured kind.
    """
    if alerter is None:
        alerter = build_alerter(
            alerter_kind or config.sync.alerter,
            console=console,
            expire_after=config.sync.auto_dismiss,
        )
    return NotificationSyncEngine(
        feed=client,
        alerter=alerter,
        navigator=BrowserNavigator(config.server.url),
        poll_interval=poll_interval if poll_interval is not None else config.sync.poll_interval,
        auto_dismiss=config.sync.auto_dismiss,
    )
