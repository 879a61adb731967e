"""Terminal rendering for search results and watched rows."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import MalformedRecord
from .search import SearchResult
from .types import HeaderResolved, InfoEvent, ParsedRow, Removed, Shrink

COLUMN_WIDTH = 20


def _table(headers: list[str], width: int | None = None) -> Table:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(escape(h), header_style="cyan", width=width, overflow="fold")
    return table


def render_search(console: Console, result: SearchResult) -> None:
    if not result.rows:
        console.print("[blue]i[/] No matching rows found.")
        return

    table = _table(result.headers, width=COLUMN_WIDTH)
    for row in result.rows:
        table.add_row(*(escape(row.get(h, "")) for h in result.headers))
    console.print(table)
    console.print(f"\n{len(result.rows)} matching rows found.")


class ConsoleSink:
    """Sink that prints each new row as it arrives."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.header: list[str] | None = None
        self.rows = 0

    def on_record(self, row: ParsedRow) -> None:
        self.rows += 1
        if isinstance(row, dict):
            table = _table(list(row.keys()))
            table.add_row(*(escape(v) for v in row.values()))
            self.console.print("\n[green]New row detected![/]")
            self.console.print(table)
        else:
            self.console.print(f"[blue]i[/] {escape(', '.join(row))}")

    def on_info(self, event: InfoEvent) -> None:
        if isinstance(event, HeaderResolved):
            self.header = event.fields
            self.console.print(f"[dim]Columns: {escape(', '.join(event.fields))}[/]")
        elif isinstance(event, Shrink):
            self.header = None
            what = "was replaced" if event.replaced else "was truncated"
            self.console.print(f"[yellow]File {what}; reading from the start.[/]")
        elif isinstance(event, Removed):
            self.console.print(f"[yellow]{escape(str(event.path))} was removed. Stopped watching.[/]")

    def on_error(self, error: Exception) -> None:
        if isinstance(error, MalformedRecord):
            self.console.print(f"[red]Skipped malformed row ({escape(error.reason)}):[/] {escape(repr(error.raw))}")
        else:
            self.console.print(f"[red]Error:[/] {escape(str(error))}")
