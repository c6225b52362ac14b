"""HTTP client for the ScrumFlow notification endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from ..log import get_logger
from .models import FeedSnapshot

_log = get_logger("feed")

# express-session's default cookie name
SESSION_COOKIE_NAME = "connect.sid"
USER_AGENT = "scrumflow-notify"


class FeedError(Exception):
    """A request to the ScrumFlow backend failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedAuthError(FeedError):
    """The session is missing, expired or not allowed to do this."""


class FeedUnavailableError(FeedError):
    """The backend could not be reached or answered with a server error."""


class FeedFormatError(FeedError):
    """The backend answered with something that isn't the expected JSON."""


class FeedClient:
    """Talks to /api/notifications and the session endpoints.

    The login session is carried in the express-session cookie. The server
    rolls the cookie on every request, so whatever it sends back replaces
    the one we hold.
    """

    def __init__(
        self,
        base_url: str,
        session_cookie: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._session_cookie = session_cookie
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    @property
    def session_cookie(self) -> str | None:
        return self._session_cookie

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> FeedClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- transport ---

    def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        headers = {}
        if self._session_cookie:
            headers["Cookie"] = f"{SESSION_COOKIE_NAME}={self._session_cookie}"

        try:
            response = self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise FeedUnavailableError(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise FeedUnavailableError(f"{method} {path} failed: {e}") from e

        rolled = response.cookies.get(SESSION_COOKIE_NAME)
        if rolled:
            self._session_cookie = rolled

        status = response.status_code
        if status in (401, 403):
            raise FeedAuthError(
                f"{method} {path}: not logged in or session expired ({status})",
                status_code=status,
            )
        if status >= 500:
            raise FeedUnavailableError(f"{method} {path}: server error {status}", status)
        if status >= 400:
            raise FeedError(f"{method} {path}: {status} {response.reason_phrase}", status)

        _log.debug("%s %s -> %d", method, path, status)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise FeedFormatError(
                f"expected JSON from {response.request.url.path}", response.status_code
            ) from e

    # --- notifications ---

    def fetch(self) -> FeedSnapshot:
        """Get the current notifications for the logged-in user."""
        response = self._request("GET", "/api/notifications")
        try:
            return FeedSnapshot.from_json(self._json(response))
        except ValueError as e:
            raise FeedFormatError(f"malformed notification feed: {e}") from e

    def mark_read(self, notification_id: str) -> None:
        self._request("PUT", f"/api/notifications/{notification_id}/read")

    def mark_all_read(self) -> None:
        self._request("PUT", "/api/notifications/read-all")

    def delete(self, notification_id: str) -> None:
        self._request("DELETE", f"/api/notifications/{notification_id}")

    def delete_all(self) -> int:
        """Delete every notification. Returns how many the server removed."""
        data = self._json(self._request("DELETE", "/api/notifications"))
        count = data.get("deletedCount", 0) if isinstance(data, dict) else 0
        return count if isinstance(count, int) else 0

    # --- session ---

    def login(self, username: str, password: str, remember: bool = False) -> dict[str, Any]:
        """Log in and keep the session cookie the server hands back.

        Raises:
            FeedAuthError: on bad credentials.
        """
        response = self._request(
            "POST",
            "/api/login",
            json={"username": username, "password": password, "remember": remember},
        )
        data = self._json(response)
        if not self._session_cookie:
            raise FeedAuthError("login succeeded but no session cookie was set")
        return data if isinstance(data, dict) else {}

    def logout(self) -> None:
        self._request("POST", "/api/logout")
        self._session_cookie = None

    def current_user(self) -> dict[str, Any] | None:
        """Return the logged-in user, or None if the session is anonymous."""
        data = self._json(self._request("GET", "/api/session"))
        if not isinstance(data, dict):
            raise FeedFormatError("malformed session response")
        user = data.get("user")
        return user if isinstance(user, dict) else None
