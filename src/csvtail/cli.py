"""CLI interface for csvtail."""

from __future__ import annotations

import argparse
import asyncio
import csv
import signal
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from . import __version__
from .config import check_format, load_settings
from .errors import ConfigError, WatchTargetNotFound
from .logsetup import setup_logging
from .render import ConsoleSink, render_search
from .search import search_file
from .session import TailWatchSession
from .types import WatchState

console = Console()
err_console = Console(stderr=True)


# ─── Commands ─────────────────────────────────────────────────────────────────

def cmd_search(args):
    try:
        with console.status("Searching CSV file..."):
            result = search_file(args.path, args.term, delimiter=args.delimiter, encoding=args.encoding)
    except FileNotFoundError:
        err_console.print(f"[red]File not found: {escape(str(args.path))}[/]")
        sys.exit(1)
    except (ValueError, csv.Error) as e:
        err_console.print(f"[red]Search failed: {escape(str(e))}[/]")
        sys.exit(1)

    console.print("[green]Search complete.[/]")
    render_search(console, result)


async def _run_until_signalled(session: TailWatchSession) -> WatchState:
    """Run the session, turning SIGINT/SIGTERM into a clean stop.

    Whatever handled those signals before is back in place once this returns.
    """
    loop = asyncio.get_running_loop()
    installed = []
    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, session.stop)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no add_signal_handler
            previous[sig] = signal.signal(sig, lambda *_: loop.call_soon_threadsafe(session.stop))
    try:
        return await session.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def cmd_watch(args):
    path = Path(args.path)
    session = TailWatchSession(
        path,
        ConsoleSink(console),
        delimiter=args.delimiter,
        encoding=args.encoding,
        debounce_ms=args.debounce_ms,
    )
    try:
        session.start()
    except WatchTargetNotFound as e:
        err_console.print(f"[red]{escape(str(e))}[/]")
        sys.exit(1)

    shown = escape(str(path))
    console.print(f"[blue]i[/] Watching [yellow]{shown}[/] for changes...")
    console.print("  Try adding a new line to the file in another terminal:")
    console.print(f"  [dim]echo \"106,Frank Moses,HR,Active,Paris\" >> {shown}[/]")
    console.print("  Press [yellow]Ctrl+C[/] to stop watching.")

    state = asyncio.run(_run_until_signalled(session))
    if state is WatchState.STOPPED:
        console.print("[yellow]Stopped watching file.[/]")


# ─── Interactive menu ─────────────────────────────────────────────────────────

def _ask_path(message: str) -> str:
    while True:
        value = Prompt.ask(message, default="./data.csv", console=console)
        if Path(value).exists():
            return value
        console.print("[red]File not found![/]")


def _ask_term() -> str:
    while True:
        value = Prompt.ask("What do you want to search for?", console=console)
        if value:
            return value
        console.print("[red]Search term cannot be empty![/]")


def interactive(args):
    console.rule("[black on cyan] CSV Utility [/]")
    try:
        while True:
            action = Prompt.ask(
                "What would you like to do?",
                choices=["search", "stream", "exit"],
                default="search",
                console=console,
            )
            if action == "exit":
                break
            if action == "search":
                args.path = _ask_path("Enter the path to your CSV file")
                args.term = _ask_term()
                cmd_search(args)
            elif action == "stream":
                args.path = _ask_path("Enter the path to the CSV file to watch")
                cmd_watch(args)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[red]Operation cancelled.[/]")
        return
    console.print("Have a great day!")


# ─── Parser ───────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csvtail",
        description="Search a CSV file, or watch it and print rows as they are appended",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--delimiter", "-d", help="Field delimiter (default: CSVTAIL_DELIMITER or ',')")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")
    sub = parser.add_subparsers(dest="command")

    # search
    p_search = sub.add_parser("search", help="Find rows containing a term (case-insensitive)")
    p_search.add_argument("path", help="CSV file to search")
    p_search.add_argument("term", help="Text to look for in any column")

    # watch
    p_watch = sub.add_parser("watch", help="Print rows as they are appended to a CSV file")
    p_watch.add_argument("path", help="CSV file to watch (must exist)")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        err_console.print(f"[red]{escape(str(e))}[/]")
        sys.exit(2)

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    if args.delimiter is None:
        args.delimiter = settings.delimiter
    try:
        check_format(args.delimiter, settings.encoding)
    except ConfigError as e:
        parser.error(f"--delimiter: {e}")
    args.encoding = settings.encoding
    args.debounce_ms = settings.debounce_ms

    if not args.command:
        interactive(args)
        return

    commands = {
        "search": cmd_search,
        "watch": cmd_watch,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
