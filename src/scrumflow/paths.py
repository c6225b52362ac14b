"""Path utilities for scrumflow."""

from pathlib import Path


def get_state_dir() -> Path:
    """Get the directory for scrumflow state.

    Uses XDG state directory: ~/.local/state/scrumflow/
    """
    state_dir = Path.home() / ".local" / "state" / "scrumflow"
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir


def get_session_path() -> Path:
    """Get the path to the stored login session.

    Returns:
        Path to ~/.local/state/scrumflow/session.json
    """
    return get_state_dir() / "session.json"
