"""Tests for configuration parsing."""

from scrumflow.config import (
    DEFAULT_BASE_URL,
    KeybindingsConfig,
    _parse_config,
    get_default_config,
    load_config,
)
from scrumflow.inbox.tui.app import _build_bindings


def test_keybindings_defaults():
    """KeybindingsConfig has expected defaults."""
    kb = KeybindingsConfig()
    assert kb.quit == "q"
    assert kb.refresh == "g"
    assert kb.mark_read == "m"
    assert kb.mark_all_read == "M"
    assert kb.delete == "d"
    assert kb.delete_all == "D"
    assert kb.up_down == ""


def test_parse_keybindings_partial_override():
    """Parsing config with partial keybindings uses defaults for unspecified."""
    data = {
        "tui": {
            "keybindings": {
                "quit": "qQ",
                "up_down": "kj",
            }
        }
    }
    config = _parse_config(data)
    kb = config.tui.keybindings

    # Overridden
    assert kb.quit == "qQ"
    assert kb.up_down == "kj"

    # Defaults preserved
    assert kb.refresh == "g"
    assert kb.mark_read == "m"
    assert kb.delete == "d"


def test_parse_keybindings_missing_section():
    """Parsing config without keybindings section uses all defaults."""
    config = _parse_config({"tui": {}})
    kb = config.tui.keybindings

    assert kb.quit == "q"
    assert kb.up_down == ""


def test_parse_empty_config():
    """An empty file gives the defaults."""
    config = _parse_config({})
    assert config.server.url == DEFAULT_BASE_URL
    assert config.server.session_cookie is None
    assert config.sync.poll_interval == 15.0
    assert config.sync.auto_dismiss == 5.0
    assert config.sync.alerter == "auto"
    assert config.tui.transparent is False


def test_parse_server_and_sync():
    data = {
        "server": {"url": "https://scrum.example.com/", "timeout": 3},
        "sync": {"poll_interval": 30, "auto_dismiss": 0, "alerter": "terminal"},
    }
    config = _parse_config(data)
    assert config.server.url == "https://scrum.example.com"
    assert config.server.timeout == 3.0
    assert config.sync.poll_interval == 30.0
    assert config.sync.auto_dismiss == 0.0
    assert config.sync.alerter == "terminal"


def test_unknown_alerter_falls_back_to_auto(capsys):
    config = _parse_config({"sync": {"alerter": "carrier-pigeon"}})
    assert config.sync.alerter == "auto"
    assert "carrier-pigeon" in capsys.readouterr().out


def test_load_config_missing_file(tmp_path, monkeypatch):
    monkeypatch.delenv("SCRUMFLOW_URL", raising=False)
    monkeypatch.delenv("SCRUMFLOW_SESSION", raising=False)
    config = load_config(tmp_path / "nope.toml")
    assert config.server.url == DEFAULT_BASE_URL


def test_load_config_invalid_toml_warns(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("SCRUMFLOW_URL", raising=False)
    path = tmp_path / "config.toml"
    path.write_text("[server\nurl = ")

    config = load_config(path)

    assert config.server.url == DEFAULT_BASE_URL
    assert "Warning" in capsys.readouterr().out


def test_default_config_round_trips(tmp_path, monkeypatch):
    monkeypatch.delenv("SCRUMFLOW_URL", raising=False)
    monkeypatch.delenv("SCRUMFLOW_SESSION", raising=False)
    path = tmp_path / "config.toml"
    path.write_text(get_default_config())

    config = load_config(path)
    assert config.server.url == DEFAULT_BASE_URL
    assert config.sync.alerter == "auto"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("SCRUMFLOW_URL", "http://other:8080/")
    monkeypatch.setenv("SCRUMFLOW_SESSION", "s%3Aenv")
    path = tmp_path / "config.toml"
    path.write_text('[server]\nurl = "http://file:5000"\n')

    config = load_config(path)
    assert config.server.url == "http://other:8080"
    assert config.server.session_cookie == "s%3Aenv"


def test_build_bindings_single_key():
    """Single key creates one visible binding."""
    bindings = _build_bindings("q", "quit", "Quit")
    assert len(bindings) == 1
    assert bindings[0].key == "q"
    assert bindings[0].action == "quit"
    assert bindings[0].description == "Quit"
    assert bindings[0].show is True


def test_build_bindings_multiple_keys():
    """Multiple keys create one visible + hidden bindings."""
    bindings = _build_bindings("dx", "delete", "Delete")
    assert [b.key for b in bindings] == ["d", "x"]
    assert [b.show for b in bindings] == [True, False]


def test_build_bindings_empty():
    """Empty string creates no bindings."""
    assert _build_bindings("", "quit", "Quit") == []


def test_non_positive_poll_interval_falls_back(capsys):
    """A zero or negative interval would poll in a tight loop; use the default."""
    for bad in (0, -5):
        config = _parse_config({"sync": {"poll_interval": bad}})
        assert config.sync.poll_interval == 15.0
    assert "poll_interval" in capsys.readouterr().out
