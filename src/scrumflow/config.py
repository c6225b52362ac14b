"""Configuration management for scrumflow."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "http://localhost:5000"
ALERTER_KINDS = ("auto", "desktop", "terminal", "none")


def get_config_path() -> Path:
    """Get the path to the scrumflow config file."""
    xdg_config = Path.home() / ".config"
    return xdg_config / "scrumflow" / "config.toml"


def get_default_config() -> str:
    """Return the default config file contents."""
    return """\
# ScrumFlow desktop notifications configuration

[server]
# Base URL of the ScrumFlow web app (no trailing slash)
url = "http://localhost:5000"
# Request timeout in seconds
timeout = 10.0

[sync]
# How often to poll the notification feed (seconds)
poll_interval = 15.0
# Desktop alerts close themselves after this many seconds
auto_dismiss = 5.0
# Options: "auto", "desktop", "terminal", "none"
alerter = "auto"
"""


@dataclass
class ServerConfig:
    """Where the ScrumFlow backend lives and how to reach it."""

    url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    session_cookie: str | None = None  # Overrides the stored login session


@dataclass
class SyncConfig:
    """Configuration for the notification sync engine."""

    poll_interval: float = 15.0
    auto_dismiss: float = 5.0
    alerter: str = "auto"  # one of ALERTER_KINDS


@dataclass
class KeybindingsConfig:
    """Configuration for TUI keybindings.

    Each command field is a string where each character is a valid key binding.
    For example, quit="qQ" means both 'q' and 'Q' will quit.

    The up_down field is a 2-character string: up, down.
    For vim: "kj". Empty string means use default arrow keys only.
    """

    quit: str = "q"
    refresh: str = "g"
    mark_read: str = "m"
    mark_all_read: str = "M"
    delete: str = "d"
    delete_all: str = "D"
    up_down: str = ""  # 2-char string: up, down (e.g., "kj" for vim)


@dataclass
class TuiConfig:
    """Configuration for the TUI."""

    transparent: bool = False  # Use ANSI colors for terminal transparency
    keybindings: KeybindingsConfig = field(default_factory=KeybindingsConfig)


@dataclass
class Config:
    """ScrumFlow client configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    tui: TuiConfig = field(default_factory=TuiConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file, or return defaults.

    SCRUMFLOW_URL and SCRUMFLOW_SESSION override the file when set.
    """
    if config_path is None:
        config_path = get_config_path()

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            # Log warning but return defaults
            print(f"Warning: Could not load config from {config_path}: {e}")
            data = {}

    config = _parse_config(data)
    _apply_env(config)
    return config


def _apply_env(config: Config) -> None:
    url = os.environ.get("SCRUMFLOW_URL")
    if url:
        config.server.url = url.rstrip("/")
    session = os.environ.get("SCRUMFLOW_SESSION")
    if session:
        config.server.session_cookie = session


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse config dict into Config object."""
    server_data = data.get("server", {})
    server = ServerConfig(
        url=str(server_data.get("url", DEFAULT_BASE_URL)).rstrip("/"),
        timeout=float(server_data.get("timeout", 10.0)),
        session_cookie=server_data.get("session_cookie"),
    )

    sync_data = data.get("sync", {})
    alerter = sync_data.get("alerter", "auto")
    if alerter not in ALERTER_KINDS:
        print(f"Warning: unknown alerter {alerter!r}, using 'auto'")
        alerter = "auto"
    poll_interval = float(sync_data.get("poll_interval", 15.0))
    if poll_interval <= 0:
        print(f"Warning: poll_interval must be positive, got {poll_interval}, using 15.0")
        poll_interval = 15.0
    sync = SyncConfig(
        poll_interval=poll_interval,
        auto_dismiss=float(sync_data.get("auto_dismiss", 5.0)),
        alerter=alerter,
    )

    tui_data = data.get("tui", {})
    keybindings_data = tui_data.get("keybindings", {})
    # Use dataclass defaults for any unspecified keybindings
    defaults = KeybindingsConfig()
    keybindings = KeybindingsConfig(
        **{
            field: keybindings_data.get(field, getattr(defaults, field))
            for field in defaults.__dataclass_fields__
        }
    )
    tui = TuiConfig(
        transparent=tui_data.get("transparent", False),
        keybindings=keybindings,
    )

    return Config(server=server, sync=sync, tui=tui)


def ensure_config_exists() -> Path:
    """Ensure the config file exists, creating with defaults if needed."""
    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(get_default_config())

    return config_path
