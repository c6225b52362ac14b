"""Shared logging for scrumflow.

Everything logs to one file, scrumflow.log in the system temp dir, under the
"scrumflow" logger. Set SCRUMFLOW_LOG_FILE to log somewhere else and
SCRUMFLOW_LOG_LEVEL (e.g. INFO) to quiet it down. To follow one component:

    grep 'scrumflow.sync' /tmp/scrumflow.log
"""

import logging
import os
import tempfile
from pathlib import Path

_DEFAULT_LEVEL = logging.DEBUG


def _resolve_path(env: dict[str, str]) -> Path:
    override = env.get("SCRUMFLOW_LOG_FILE")
    if override:
        return Path(override).expanduser()
    return Path(tempfile.gettempdir()) / "scrumflow.log"


def _resolve_level(env: dict[str, str]) -> int:
    name = env.get("SCRUMFLOW_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else _DEFAULT_LEVEL
    # getLevelName hands back a string for names it doesn't know
    return level if isinstance(level, int) else _DEFAULT_LEVEL


_LOG_PATH = _resolve_path(dict(os.environ))

_scrumflow_logger = logging.getLogger("scrumflow")
_scrumflow_logger.setLevel(_resolve_level(dict(os.environ)))
# the CLI and TUI own the terminal, so nothing reaches the root logger
_scrumflow_logger.propagate = False

if not _scrumflow_logger.handlers:
    _file_handler = logging.FileHandler(_LOG_PATH, encoding="utf-8")
    _file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    _scrumflow_logger.addHandler(_file_handler)


def get_log_path() -> Path:
    """Where the log file is."""
    return _LOG_PATH


def get_logger(name: str) -> logging.Logger:
    """Logger for one component, e.g. get_logger("sync") -> scrumflow.sync."""
    return _scrumflow_logger.getChild(name)
