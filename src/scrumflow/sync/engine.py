"""Desktop alerts for new ScrumFlow notifications.

The engine polls the notification feed on a fixed interval and raises one
desktop alert per notification it hasn't seen before. Two sets carry the
state between polls:

- seen: every id we've alerted (or deliberately skipped). Only grows.
- previous: the ids in the last successful fetch. Replaced every poll.

A record is new when it's in neither. The first successful fetch is a
baseline: whatever is already in the feed when we start is not news.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol

from ..alerts import AlertError, Alerter, AlertHandle, AuthorizationState
from ..feed import FeedError, FeedSnapshot, NotificationRecord
from ..log import get_logger
from ..navigation import Navigator

_log = get_logger("sync")

DEFAULT_POLL_INTERVAL = 15.0
DEFAULT_AUTO_DISMISS = 5.0


class FeedSource(Protocol):
    """Where the engine gets the current notifications from."""

    def fetch(self) -> FeedSnapshot:
        """Return the current feed for the authenticated user.

        Raises:
            FeedError: if the feed can't be fetched right now.
        """
        ...


SnapshotListener = Callable[[FeedSnapshot], None]


class NotificationSyncEngine:
    """Polls a feed and alerts each new notification at most once."""

    def __init__(
        self,
        feed: FeedSource,
        alerter: Alerter,
        navigator: Navigator | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        auto_dismiss: float = DEFAULT_AUTO_DISMISS,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        self.feed = feed
        self.alerter = alerter
        self.navigator = navigator
        self.poll_interval = poll_interval
        self.auto_dismiss = auto_dismiss

        self._seen: set[str] = set()
        self._previous: set[str] = set()
        self._baselined = False
        self.last_snapshot: FeedSnapshot | None = None

        self._supported = alerter.is_supported()
        self._authorization = (
            alerter.authorization_state() if self._supported else AuthorizationState.DENIED
        )

        # only one poll may touch the sets at a time
        self._poll_lock = threading.Lock()
        # guards _timers, _thread and _stopped; held around each alerter.show()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._stopped = False
        self._timers: set[threading.Timer] = set()
        self._thread: threading.Thread | None = None
        self._listeners: list[SnapshotListener] = []

    # --- authorization ---

    def is_supported(self) -> bool:
        return self._supported

    def is_authorized(self) -> bool:
        return self._authorization is AuthorizationState.GRANTED

    @property
    def authorization(self) -> AuthorizationState:
        return self._authorization

    def request_authorization(self) -> AuthorizationState:
        """Ask the platform for permission to alert.

        Only asks while the answer is still pending, so a user who said no is
        never asked again by us.
        """
        if not self._supported:
            self._authorization = AuthorizationState.DENIED
        elif self._authorization is AuthorizationState.PENDING:
            self._authorization = self.alerter.request_authorization()
            _log.info("alert authorization: %s", self._authorization.value)
        return self._authorization

    def _refresh_authorization(self) -> None:
        # Picks up changes the user made in system settings; never prompts.
        if self._supported and self._authorization is not AuthorizationState.PENDING:
            self._authorization = self.alerter.authorization_state()

    # --- state ---

    @property
    def seen_ids(self) -> frozenset[str]:
        return frozenset(self._seen)

    @property
    def previous_ids(self) -> frozenset[str]:
        return frozenset(self._previous)

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def add_listener(self, listener: SnapshotListener) -> None:
        """Call listener with every successfully fetched snapshot."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- polling ---

    def poll(self) -> list[str]:
        """Run one poll cycle.

        Returns the ids alerted this cycle, newest first. A cycle that finds
        another poll still in flight does nothing and returns [].
        """
        if not self._poll_lock.acquire(blocking=False):
            _log.info("poll still in flight, dropping tick")
            return []
        try:
            return self._poll_once()
        finally:
            self._poll_lock.release()

    def _poll_once(self) -> list[str]:
        if self._stop_event.is_set():
            return []

        try:
            snapshot = self.feed.fetch()
        except FeedError as e:
            _log.warning("feed fetch failed, skipping cycle: %s", e)
            return []
        except Exception as e:
            _log.error("feed fetch crashed, skipping cycle: %s", e, exc_info=True)
            return []

        current_ids = set(snapshot.ids)

        if not self._baselined:
            self._seen |= current_ids
            self._previous = current_ids
            self._baselined = True
            self._publish(snapshot)
            _log.info("baseline: %d notifications, %d unread", len(current_ids), snapshot.unread_count)
            return []

        new_records = [
            r
            for r in snapshot.notifications
            if r.id not in self._previous and r.id not in self._seen
        ]
        # newest first; sort is stable for equal timestamps
        new_records.sort(key=lambda r: r.created_at, reverse=True)

        self._refresh_authorization()
        can_alert = self._supported and self.is_authorized()
        if new_records and not can_alert:
            _log.info(
                "%d new notifications, alerts off (%s)",
                len(new_records),
                self._authorization.value,
            )

        alerted: list[str] = []
        for record in new_records:
            if record.id in self._seen:
                continue  # same id twice in one feed
            self._seen.add(record.id)
            if not can_alert or self._stop_event.is_set():
                continue
            if self._emit(record):
                alerted.append(record.id)

        self._previous = current_ids
        self._publish(snapshot)

        if alerted:
            _log.info("alerted %d: %s", len(alerted), ", ".join(alerted))
        return alerted

    def _publish(self, snapshot: FeedSnapshot) -> None:
        self.last_snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                _log.error("snapshot listener failed: %s", e, exc_info=True)

    # --- alerts ---

    def _emit(self, record: NotificationRecord) -> bool:
        handle: AlertHandle | None = None

        def on_activate() -> None:
            self._activate(record, handle)

        # stop() waits on this lock, so nothing is shown once it returns
        with self._state_lock:
            if self._stop_event.is_set():
                return False
            try:
                handle = self.alerter.show(record.title, record.message, record.id, on_activate)
            except AlertError as e:
                _log.warning("could not alert %s: %s", record.id, e)
                return False
            except Exception as e:
                _log.error("alerter crashed on %s: %s", record.id, e, exc_info=True)
                return False

        self._schedule_dismiss(handle)
        return True

    def _activate(self, record: NotificationRecord, handle: AlertHandle | None) -> None:
        """The user clicked an alert: close it and jump to its project."""
        if handle is not None:
            handle.close()
        project_id = record.project_id
        if project_id and self.navigator is not None:
            _log.info("opening project %s for %s", project_id, record.id)
            self.navigator.open_project(project_id)

    def _schedule_dismiss(self, handle: AlertHandle) -> None:
        if self.auto_dismiss <= 0:
            return

        with self._state_lock:
            if self._stopped or self._stop_event.is_set():
                return
            timer = threading.Timer(self.auto_dismiss, lambda: self._dismiss(handle, timer))
            timer.daemon = True
            self._timers.add(timer)
            timer.start()

    def _dismiss(self, handle: AlertHandle, timer: threading.Timer) -> None:
        with self._state_lock:
            self._timers.discard(timer)
        try:
            handle.close()
        except Exception as e:
            _log.warning("closing alert failed: %s", e)

    @property
    def pending_dismissals(self) -> int:
        with self._state_lock:
            return len(self._timers)

    # --- lifecycle ---

    def start(self) -> None:
        """Start polling on a daemon thread. Does nothing if already running.

        Raises:
            RuntimeError: if the engine was stopped. Stopped engines stay stopped;
                make a new one to start over.
        """
        with self._state_lock:
            if self._stopped:
                raise RuntimeError("engine was stopped")
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._run, name="scrumflow-sync", daemon=True
            )
            self._thread.start()

    def _run(self) -> None:
        _log.info("sync started, polling every %ss", self.poll_interval)
        self.request_authorization()
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception as e:
                _log.error("poll failed: %s", e, exc_info=True)
            if self._stop_event.wait(self.poll_interval):
                break
        _log.info("sync stopped")

    def stop(self) -> None:
        """Stop polling and cancel pending auto-dismiss timers.

        Doesn't wait for an in-flight fetch; that poll won't alert anything.
        An alert already being shown finishes first. Safe to call any number
        of times.
        """
        # set before taking the lock so a poll between alerts sees it first
        self._stop_event.set()
        with self._state_lock:
            if self._stopped:
                return
            self._stopped = True
            timers = list(self._timers)
            self._timers.clear()

        for timer in timers:
            timer.cancel()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the poll thread to exit. Returns True if it did."""
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop() is called. Returns True if it was."""
        return self._stop_event.wait(timeout)
