"""Tests for the scrumflow CLI commands."""

from unittest.mock import patch

import httpx
import pytest

from scrumflow import cli
from scrumflow.config import Config
from scrumflow.feed import FeedClient

FEED_BODY = {
    "notifications": [
        {
            "id": 2,
            "type": "mention",
            "title": "Mentioned",
            "message": "@tekpro have a look",
            "read": False,
            "metadata": {"projectId": 5},
            "createdAt": "2025-03-01T12:00:00Z",
        },
        {
            "id": 1,
            "type": "task_completed",
            "title": "Done",
            "message": "Task finished",
            "read": True,
            "createdAt": "2025-03-01T11:00:00Z",
        },
    ],
    "unreadCount": 1,
}


def _client(handler, cookie="s%3Aabc"):
    return FeedClient(
        "http://scrum.test", session_cookie=cookie, transport=httpx.MockTransport(handler)
    )


def _feed_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/notifications" and request.method == "GET":
        return httpx.Response(200, json=FEED_BODY)
    return httpx.Response(200, json={"success": True, "deletedCount": 2})


def test_parser_defaults_to_tui():
    args = cli.build_parser().parse_args([])
    assert getattr(args, "func", None) is None


def test_parser_watch_options():
    args = cli.build_parser().parse_args(["watch", "-i", "5", "--alerter", "terminal", "--once"])
    assert args.func is cli.cmd_watch
    assert args.interval == 5.0
    assert args.alerter == "terminal"
    assert args.once is True


def test_parser_rejects_unknown_alerter():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["watch", "--alerter", "pager"])


def test_notifications_list(capsys):
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(_feed_handler)),
    ):
        cli.main(["notifications", "list", "-v"])

    out = capsys.readouterr().out
    assert "[2]" in out
    assert "Mentioned" in out
    assert "project: 5" in out
    assert "1 unread" in out


def test_notifications_list_unread_only(capsys):
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(_feed_handler)),
    ):
        cli.main(["n", "ls", "--unread"])

    out = capsys.readouterr().out
    assert "[2]" in out
    assert "[1]" not in out


def test_notifications_clear_with_yes(capsys):
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(_feed_handler)),
    ):
        cli.main(["notifications", "clear", "-y"])

    assert "Deleted 2 notifications" in capsys.readouterr().out


def test_not_logged_in_exits(capsys):
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(_feed_handler, cookie=None)),
        pytest.raises(SystemExit) as exc_info,
    ):
        cli.main(["notifications", "list"])

    assert exc_info.value.code == 1
    assert "Not logged in" in capsys.readouterr().err


def test_feed_error_exits_with_message(capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401)

    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(handler)),
        pytest.raises(SystemExit) as exc_info,
    ):
        cli.main(["notifications", "read-all"])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("Error:")
    assert "scrumflow login" in err


def test_login_saves_session(tmp_path, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"user": {"id": 1, "username": "tekpro"}},
            headers={"Set-Cookie": "connect.sid=s%3Afresh; Path=/"},
        )

    session_path = tmp_path / "session.json"
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.FeedClient", return_value=_client(handler, cookie=None)),
        patch("scrumflow.feed.session.get_session_path", return_value=session_path),
    ):
        cli.main(["login", "tekpro", "--password", "hunter2"])

    assert "Logged in as tekpro" in capsys.readouterr().out
    assert "s%3Afresh" in session_path.read_text()


def test_watch_once(capsys):
    with (
        patch("scrumflow.cli.load_config", return_value=Config()),
        patch("scrumflow.cli.build_client", return_value=_client(_feed_handler)),
    ):
        cli.main(["watch", "--once", "--alerter", "none"])

    assert "2 notifications, 1 unread" in capsys.readouterr().out


def test_config_path(capsys):
    cli.main(["config", "path"])
    assert capsys.readouterr().out.strip().endswith("config.toml")


@pytest.mark.parametrize("interval", ["0", "-3"])
def test_parser_rejects_non_positive_interval(interval):
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["watch", "-i", interval])
