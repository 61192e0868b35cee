"""CLI command routing for lexterm.

This module provides the command-line interface with support for:
- TUI mode (default, with fallback to plain if unavailable)
- Plain terminal mode
- Account commands (login, register, logout, whoami)
- Dictionary listing and word-list upload
- Review mode for one dictionary
"""

from __future__ import annotations

import argparse
import getpass
import sys

from . import __version__
from .client import Client, build_client
from .config import resolve_log_dir
from .config_store import load_config
from .errors import LextermError, Unauthenticated, ValidationError
from .importer import ImportState, ImportTracker
from .log import setup_logging
from .render import render_failed_items, render_job_line, render_word_back, render_word_front


def _check_tui_available() -> bool:
    """Check if TUI dependencies are available."""
    try:
        import textual  # noqa: F401

        return True
    except ImportError:
        return False


def _open_client() -> Client:
    return build_client(load_config())


def _require_login(client: Client) -> bool:
    if client.store.is_authenticated:
        return True
    print("Error: Not logged in. Run 'lexterm login' first.", file=sys.stderr)
    return False


def _print_session_error(exc: Unauthenticated) -> None:
    print(f"Error: {exc}", file=sys.stderr)
    print("Run 'lexterm login' to sign in again.", file=sys.stderr)


def _cmd_login(args: argparse.Namespace) -> int:
    """Handle login and register commands."""
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        username = args.username or input("Username: ")
        password = getpass.getpass("Password: ")
        if args.command == "register":
            user = client.auth.register(username, password)
            print(f"Registered and logged in as {user.display_name}")
        else:
            user = client.auth.login(username, password)
            print(f"Logged in as {user.display_name}")
        return 0
    except (EOFError, KeyboardInterrupt):
        print()
        return 1
    except LextermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()


def _cmd_logout(args: argparse.Namespace) -> int:
    """Handle logout command."""
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        client.auth.logout()
        print("Logged out")
        return 0
    finally:
        client.close()


def _cmd_whoami(args: argparse.Namespace) -> int:
    """Handle whoami command."""
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if not _require_login(client):
            return 1
        user = client.auth.me()
        print(f"{user.display_name} (id {user.id})")
        return 0
    except Unauthenticated as exc:
        _print_session_error(exc)
        return 1
    except LextermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()


def _print_dictionaries(client: Client) -> None:
    dictionaries = client.dictionaries.list_dictionaries()
    print("\nDictionaries:")
    print("-" * 40)
    if not dictionaries:
        print("No dictionaries yet. Run 'lexterm upload words.txt' to add one.")
        return
    for dictionary in dictionaries:
        print(
            f"{dictionary.id:>4}  {dictionary.name}  "
            f"({dictionary.format_counts()} learned, {dictionary.progress:.0f}%)"
        )
    print()
    print("Run 'lexterm review <id>' to start reviewing.")


def _cmd_dicts(args: argparse.Namespace) -> int:
    """Handle dicts command."""
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if not _require_login(client):
            return 1
        _print_dictionaries(client)
        return 0
    except Unauthenticated as exc:
        _print_session_error(exc)
        return 1
    except LextermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()


def _cmd_upload(args: argparse.Namespace) -> int:
    """Handle upload command (plain progress output)."""
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    def on_update(tracker: ImportTracker) -> None:
        if tracker.error is not None and tracker.state is ImportState.POLLING:
            print(f"  (status check failed: {tracker.error})")
            return
        job = tracker.job
        if job is not None:
            print(render_job_line(job))

    tracker = client.import_tracker(on_update=on_update)
    try:
        if not _require_login(client):
            return 1
        print(f"Uploading {args.file}")
        tracker.submit(args.file, name=args.name)
        tracker.wait()

        job = tracker.job
        summary = tracker.summary
        if summary:
            print(summary)
        if job is not None and job.failed_items and args.verbose:
            print(render_failed_items(job))

        if tracker.state is ImportState.DONE:
            return 0
        if tracker.error is not None:
            print(f"Error: {tracker.error}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Unauthenticated as exc:
        _print_session_error(exc)
        return 1
    except LextermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nStopped following the import; it continues on the server.")
        return 1
    finally:
        tracker.cancel()
        client.close()


def _plain_review(client: Client, dictionary_id: int, limit: int | None) -> int:
    session = client.review_session(dictionary_id, limit=limit)
    session.load()

    print(f"\nReviewing dictionary {dictionary_id}")
    print(f"Due: {session.new_count} new, {session.review_count} review")
    print()

    if session.is_finished:
        print("No words due for review.")
        return 0

    while True:
        word = session.current_word()
        if word is None:
            break

        print("-" * 40)
        print(f"Word {session.cursor + 1}/{session.total}")
        print("-" * 40)
        print(f"\n{render_word_front(word)}\n")

        try:
            input("Press Enter to show the meaning...")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting review.")
            return 0

        session.reveal()
        print(f"\n{render_word_back(word)}\n")

        print("Rate 0 (no idea) .. 5 (instant)  (q) Quit")
        while True:
            try:
                choice = input("> ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                print("\nExiting review.")
                return 0

            if choice == "q":
                print("Exiting review.")
                return 0

            if choice in {"0", "1", "2", "3", "4", "5"}:
                try:
                    session.submit(int(choice))
                except Unauthenticated:
                    raise
                except LextermError as exc:
                    print(f"Could not save your answer: {exc}. Try again.")
                    continue
                break

            print("Invalid choice. Use 0-5 or q.")

        print()

    print("-" * 40)
    print(f"Session complete. Reviewed {session.completed_count} words.")
    return 0


def _cmd_review(args: argparse.Namespace) -> int:
    """Handle review command."""
    use_plain = args.plain

    # Use TUI if available and not explicitly disabled
    if not use_plain and _check_tui_available():
        try:
            from .tui import run_tui

            run_tui(load_config(), initial_dictionary=args.dictionary_id, limit=args.limit)
            return 0
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    # Plain mode fallback
    try:
        client = _open_client()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if not _require_login(client):
            return 1
        return _plain_review(client, args.dictionary_id, args.limit)
    except Unauthenticated as exc:
        _print_session_error(exc)
        return 1
    except LextermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()


def _cmd_default(args: argparse.Namespace) -> int:
    """Handle default command (TUI or plain mode)."""
    use_plain = args.plain

    if not use_plain and _check_tui_available():
        try:
            from .tui import run_tui

            run_tui(load_config())
            return 0
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    # Plain mode: show dictionary list
    return _cmd_dicts(args)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entrypoint.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="lexterm",
        description="Terminal client for vocabulary review",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Force plain terminal mode (no TUI)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug-level messages to the log file",
    )

    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (("login", "Log in to the server"), ("register", "Create an account")):
        auth_parser = subparsers.add_parser(name, help=help_text)
        auth_parser.add_argument("username", nargs="?", help="Account name (prompted if omitted)")
        auth_parser.set_defaults(func=_cmd_login)

    logout_parser = subparsers.add_parser("logout", help="Log out and forget the session")
    logout_parser.set_defaults(func=_cmd_logout)

    whoami_parser = subparsers.add_parser("whoami", help="Show the logged-in user")
    whoami_parser.set_defaults(func=_cmd_whoami)

    dicts_parser = subparsers.add_parser("dicts", help="List your dictionaries")
    dicts_parser.set_defaults(func=_cmd_dicts)

    upload_parser = subparsers.add_parser("upload", help="Upload a .txt word list")
    upload_parser.add_argument("file", help="Word list, one word per line")
    upload_parser.add_argument("--name", help="Dictionary name (defaults to the file name)")
    upload_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="List every word that failed to import",
    )
    upload_parser.set_defaults(func=_cmd_upload)

    review_parser = subparsers.add_parser(
        "review",
        help="Start a review session for a dictionary",
    )
    review_parser.add_argument("dictionary_id", type=int, help="Dictionary id (see 'dicts')")
    review_parser.add_argument("--limit", type=int, help="Maximum words in this session")
    review_parser.add_argument(
        "--plain",
        action="store_true",
        help="Force plain terminal mode (no TUI)",
    )
    review_parser.set_defaults(func=_cmd_review)

    args = parser.parse_args(argv)

    setup_logging(resolve_log_dir(), debug=args.debug)

    # Route to appropriate handler
    if args.command is None:
        return _cmd_default(args)

    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
