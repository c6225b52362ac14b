"""Tests for the stored login session."""

import os
import stat

from scrumflow.feed import StoredSession, clear_session, cookie_for, load_session, save_session


def test_save_and_load(tmp_path):
    path = tmp_path / "state" / "session.json"
    save_session(StoredSession(url="http://localhost:5000", cookie="s%3Aabc", username="tekpro"), path)

    session = load_session(path)
    assert session == StoredSession(url="http://localhost:5000", cookie="s%3Aabc", username="tekpro")
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_load_missing(tmp_path):
    assert load_session(tmp_path / "session.json") is None


def test_load_corrupt(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    assert load_session(path) is None


def test_load_incomplete(tmp_path):
    path = tmp_path / "session.json"
    path.write_text('{"url": "http://localhost:5000"}')
    assert load_session(path) is None


def test_clear(tmp_path):
    path = tmp_path / "session.json"
    save_session(StoredSession(url="http://localhost:5000", cookie="c"), path)

    assert clear_session(path) is True
    assert clear_session(path) is False
    assert not path.exists()


def test_cookie_only_for_matching_server(tmp_path):
    path = tmp_path / "session.json"
    save_session(StoredSession(url="http://localhost:5000/", cookie="c"), path)

    assert cookie_for("http://localhost:5000", path) == "c"
    assert cookie_for("https://scrum.example.com", path) is None
    assert cookie_for("http://localhost:5000", tmp_path / "other.json") is None
