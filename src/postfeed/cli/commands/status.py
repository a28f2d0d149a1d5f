"""Status command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_status(shell: FeedShell, args: list[str]) -> None:
    feed = shell.feed
    editing = feed.editing_id
    table = Table(title="Feed Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("State", feed.state.value)
    table.add_row("Posts", str(len(feed)))
    table.add_row("Editing", str(editing) if editing is not None else "-")
    table.add_row("Last Load Error", feed.load_error or "-")
    shell._console.print(table)
