"""Stored login session for the CLI.

The engine itself keeps nothing on disk. This only remembers which server
we logged into and the express-session cookie it gave us, so `scrumflow
watch` works without logging in every time.

File structure:
{
  "url": "http://localhost:5000",
  "cookie": "s%3A...",
  "username": "tekpro"
}
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from ..paths import get_session_path


@dataclass
class StoredSession:
    """A login session remembered between runs."""

    url: str
    cookie: str
    username: str | None = None


def _resolve_path(path: Path | str | None) -> Path:
    return get_session_path() if path is None else Path(path).expanduser()


def load_session(path: Path | str | None = None) -> StoredSession | None:
    """Load the stored session, or None if there isn't a usable one."""
    resolved = _resolve_path(path)

    if not resolved.exists():
        return None

    try:
        with open(resolved) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return None

    if not isinstance(data, dict) or not data.get("url") or not data.get("cookie"):
        return None
    return StoredSession(url=data["url"], cookie=data["cookie"], username=data.get("username"))


def save_session(session: StoredSession, path: Path | str | None = None) -> Path:
    """Write the session file, readable only by the current user."""
    resolved = _resolve_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(json.dumps(asdict(session), indent=2))
    os.chmod(resolved, 0o600)
    return resolved


def clear_session(path: Path | str | None = None) -> bool:
    """Remove the session file. Returns True if there was one."""
    resolved = _resolve_path(path)
    try:
        resolved.unlink()
    except FileNotFoundError:
        return False
    return True


def cookie_for(url: str, path: Path | str | None = None) -> str | None:
    """Return the stored cookie if it was issued by this server."""
    session = load_session(path)
    if session is None or session.url.rstrip("/") != url.rstrip("/"):
        return None
    return session.cookie
