"""CLI entry point for scrumflow.

Desktop companion for the ScrumFlow project manager. Current features:
- watch: poll your notification feed and raise a desktop alert for each new one
- notifications: list, read and delete notifications from the terminal
- inbox: TUI over the notification feed
"""

import argparse
import getpass
import sys

from rich.console import Console

from .alerts import AuthorizationState, build_alerter, send_test_alert
from .config import ALERTER_KINDS, ensure_config_exists, get_config_path, load_config
from .feed import (
    FeedAuthError,
    FeedClient,
    FeedError,
    StoredSession,
    clear_session,
    save_session,
)
from .inbox.tui.utils import format_timestamp
from .log import get_log_path, get_logger
from .runtime import build_client, build_engine

_log = get_logger("cli")


def _require_login(client: FeedClient) -> None:
    """Exit with a helpful message if there's no session to use."""
    if client.session_cookie is None:
        print("Not logged in.", file=sys.stderr)
        print("Run 'scrumflow login <username>' first.", file=sys.stderr)
        sys.exit(1)


# --- watch ---


def cmd_watch(args: argparse.Namespace) -> None:
    """Poll the feed and raise desktop alerts until interrupted."""
    config = load_config()
    client = build_client(config)
    _require_login(client)

    engine = build_engine(
        config,
        client,
        alerter_kind=args.alerter,
        poll_interval=args.interval,
        console=Console(stderr=True),
    )

    if args.once:
        engine.request_authorization()
        engine.poll()
        client.close()
        snapshot = engine.last_snapshot
        if snapshot is None:
            print(f"Could not fetch notifications (see {get_log_path()})", file=sys.stderr)
            sys.exit(1)
        print(
            f"{len(snapshot)} notifications, {snapshot.unread_count} unread "
            f"(alerts: {engine.authorization.value})"
        )
        return

    print(f"Watching {config.server.url} for notifications...")
    print(f"  Interval: {engine.poll_interval:g}s")
    if not engine.is_supported():
        print("  Desktop alerts are not supported here; try --alerter terminal")
    print("  Press Ctrl+C to stop")

    engine.start()
    try:
        while not engine.wait(1.0):
            pass
    except KeyboardInterrupt:
        print()
        print("Stopped")
    finally:
        engine.stop()
        engine.join(timeout=2.0)
        client.close()


# --- session ---


def cmd_login(args: argparse.Namespace) -> None:
    """Log in and remember the session."""
    config = load_config()
    password = args.password if args.password is not None else getpass.getpass("Password: ")

    with FeedClient(config.server.url, timeout=config.server.timeout) as client:
        data = client.login(args.username, password, remember=args.remember)
        cookie = client.session_cookie

    user = data.get("user") if isinstance(data.get("user"), dict) else {}
    username = user.get("username") or args.username
    path = save_session(StoredSession(url=config.server.url, cookie=cookie, username=username))
    _log.info("logged in as %s", username)
    print(f"Logged in as {username}")
    print(f"Session saved to {path}")


def cmd_logout(args: argparse.Namespace) -> None:
    """Log out and forget the stored session."""
    config = load_config()
    with build_client(config) as client:
        if client.session_cookie is not None:
            try:
                client.logout()
            except FeedError as e:
                # The local session goes either way
                _log.warning("server logout failed: %s", e)

    if clear_session():
        print("Logged out")
    else:
        print("Not logged in")


def cmd_whoami(args: argparse.Namespace) -> None:
    """Show who the stored session belongs to."""
    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        user = client.current_user()

    if user is None:
        print("Session expired. Run 'scrumflow login' again.")
        sys.exit(1)
    print(user.get("username") or user.get("id") or "unknown")


# --- notifications ---


def cmd_notifications_list(args: argparse.Namespace) -> None:
    """List notifications, newest first."""
    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        snapshot = client.fetch()

    records = [r for r in snapshot.notifications if r.is_unread or not args.unread]
    if not records:
        print("No unread notifications." if args.unread else "No notifications.")
        return

    for r in records:
        marker = "●" if r.is_unread else " "
        print(f"{marker} [{r.id}] {format_timestamp(r.created_at)} | {r.icon} {r.title}")
        if args.verbose:
            if r.message:
                print(f"    {r.message}")
            if r.project_id:
                print(f"    project: {r.project_id}")
    print(f"{snapshot.unread_count} unread")


def cmd_notifications_read(args: argparse.Namespace) -> None:
    """Mark a notification as read."""
    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        client.mark_read(args.id)
    print(f"Marked notification {args.id} as read")


def cmd_notifications_read_all(args: argparse.Namespace) -> None:
    """Mark every notification as read."""
    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        client.mark_all_read()
    print("Marked all notifications as read")


def cmd_notifications_delete(args: argparse.Namespace) -> None:
    """Delete one notification."""
    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        client.delete(args.id)
    print(f"Deleted notification {args.id}")


def cmd_notifications_clear(args: argparse.Namespace) -> None:
    """Delete every notification."""
    if not args.yes:
        answer = input("Delete all notifications? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Cancelled")
            return

    config = load_config()
    with build_client(config) as client:
        _require_login(client)
        count = client.delete_all()
    print(f"Deleted {count} notifications")


def cmd_notifications_test(args: argparse.Namespace) -> None:
    """Show a test alert."""
    config = load_config()
    alerter = build_alerter(
        args.alerter or config.sync.alerter,
        console=Console(stderr=True),
        expire_after=config.sync.auto_dismiss,
    )
    if send_test_alert(alerter):
        print("Test notification sent!")
    else:
        print("Desktop notifications are not available here.", file=sys.stderr)
        sys.exit(1)


# --- alerts ---


def cmd_alerts_status(args: argparse.Namespace) -> None:
    """Show whether alerts can be shown here."""
    config = load_config()
    kind = args.alerter or config.sync.alerter
    alerter = build_alerter(kind)

    supported = alerter.is_supported()
    state = alerter.request_authorization() if args.request else alerter.authorization_state()
    print(f"alerter:       {type(alerter).__name__} ({kind})")
    print(f"supported:     {'yes' if supported else 'no'}")
    print(f"authorization: {state.value}")
    if state is AuthorizationState.PENDING:
        print("Run 'scrumflow alerts status --request' to ask for permission.")


# --- config ---


def cmd_config_init(args: argparse.Namespace) -> None:
    """Initialize config file with defaults."""
    config_path = ensure_config_exists()
    print(f"Config file at: {config_path}")


def cmd_config_path(args: argparse.Namespace) -> None:
    """Print config file path."""
    print(get_config_path())


def cmd_config_show(args: argparse.Namespace) -> None:
    """Show current config."""
    config_path = get_config_path()
    if config_path.exists():
        print(config_path.read_text())
    else:
        print(f"No config file at {config_path}")
        print("Run 'scrumflow config init' to create one.")


def cmd_inbox_tui(args: argparse.Namespace) -> None:
    """Launch the inbox TUI."""
    from .inbox.tui import main as tui_main

    tui_main()


# --- parsers ---


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def _add_alerter_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--alerter",
        choices=ALERTER_KINDS,
        default=None,
        help="Where alerts go (default: from config)",
    )


def setup_watch_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the watch subcommand."""
    watch_parser = subparsers.add_parser(
        "watch",
        help="Raise desktop alerts for new notifications",
    )
    watch_parser.add_argument(
        "-i",
        "--interval",
        type=_positive_float,
        default=None,
        help="Poll interval in seconds (default: from config, 15)",
    )
    _add_alerter_argument(watch_parser)
    watch_parser.add_argument(
        "--once",
        action="store_true",
        help="Poll once and print the feed summary",
    )
    watch_parser.set_defaults(func=cmd_watch)


def setup_session_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Set up login, logout and whoami."""
    login_parser = subparsers.add_parser("login", help="Log in to ScrumFlow")
    login_parser.add_argument("username", help="ScrumFlow username")
    login_parser.add_argument("-p", "--password", help="Password (prompted if omitted)")
    login_parser.add_argument(
        "--remember",
        action="store_true",
        help="Ask the server for a long-lived session",
    )
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout", help="Log out and forget the session")
    logout_parser.set_defaults(func=cmd_logout)

    whoami_parser = subparsers.add_parser("whoami", help="Show the logged-in user")
    whoami_parser.set_defaults(func=cmd_whoami)


def setup_notifications_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the notifications subcommand and its sub-subcommands."""
    notifications_parser = subparsers.add_parser(
        "notifications",
        aliases=["n"],
        help="List and manage your notifications",
    )
    notifications_subparsers = notifications_parser.add_subparsers(dest="notifications_command")

    # notifications list
    list_parser = notifications_subparsers.add_parser("list", aliases=["ls"], help="List")
    list_parser.add_argument("-v", "--verbose", action="store_true", help="Show full messages")
    list_parser.add_argument("-u", "--unread", action="store_true", help="Only unread")
    list_parser.set_defaults(func=cmd_notifications_list)

    # notifications read
    read_parser = notifications_subparsers.add_parser("read", help="Mark one as read")
    read_parser.add_argument("id", help="Notification ID")
    read_parser.set_defaults(func=cmd_notifications_read)

    # notifications read-all
    read_all_parser = notifications_subparsers.add_parser("read-all", help="Mark all as read")
    read_all_parser.set_defaults(func=cmd_notifications_read_all)

    # notifications delete
    delete_parser = notifications_subparsers.add_parser("delete", aliases=["rm"], help="Delete one")
    delete_parser.add_argument("id", help="Notification ID")
    delete_parser.set_defaults(func=cmd_notifications_delete)

    # notifications clear
    clear_parser = notifications_subparsers.add_parser("clear", help="Delete all")
    clear_parser.add_argument("-y", "--yes", action="store_true", help="Don't ask")
    clear_parser.set_defaults(func=cmd_notifications_clear)

    # notifications test
    test_parser = notifications_subparsers.add_parser("test", help="Show a test alert")
    _add_alerter_argument(test_parser)
    test_parser.set_defaults(func=cmd_notifications_test)

    notifications_parser.set_defaults(func=cmd_notifications_list, verbose=False, unread=False)


def setup_alerts_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the alerts subcommand."""
    alerts_parser = subparsers.add_parser("alerts", help="Desktop alert support")
    alerts_subparsers = alerts_parser.add_subparsers(dest="alerts_command")

    status_parser = alerts_subparsers.add_parser("status", help="Show alert support")
    _add_alerter_argument(status_parser)
    status_parser.add_argument(
        "--request",
        action="store_true",
        help="Ask for permission if it hasn't been decided",
    )
    status_parser.set_defaults(func=cmd_alerts_status)

    alerts_parser.set_defaults(func=lambda a: alerts_parser.print_help())


def setup_config_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the config subcommand."""
    config_parser = subparsers.add_parser(
        "config",
        help="Manage scrumflow configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    # config init
    init_parser = config_subparsers.add_parser("init", help="Create default config file")
    init_parser.set_defaults(func=cmd_config_init)

    # config path
    path_parser = config_subparsers.add_parser("path", help="Print config file path")
    path_parser.set_defaults(func=cmd_config_path)

    # config show
    show_parser = config_subparsers.add_parser("show", help="Show current config")
    show_parser.set_defaults(func=cmd_config_show)

    config_parser.set_defaults(func=cmd_config_show, config_command=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scrumflow",
        description="Desktop notifications for ScrumFlow",
    )
    subparsers = parser.add_subparsers(dest="command")

    setup_watch_parser(subparsers)
    setup_session_parsers(subparsers)
    setup_notifications_parser(subparsers)
    setup_alerts_parser(subparsers)
    setup_config_parser(subparsers)

    inbox_parser = subparsers.add_parser("inbox", help="Notification inbox TUI")
    inbox_parser.set_defaults(func=cmd_inbox_tui)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Bare "scrumflow" opens the TUI
    func = getattr(args, "func", None) or cmd_inbox_tui

    try:
        func(args)
    except FeedAuthError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Run 'scrumflow login <username>' to log in again.", file=sys.stderr)
        sys.exit(1)
    except FeedError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
