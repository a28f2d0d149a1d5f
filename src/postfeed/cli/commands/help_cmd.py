"""Help command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_help(shell: FeedShell, args: list[str]) -> None:
    registry = shell._command_registry
    if not registry:
        shell._console.print("[red]No commands registered[/red]")
        return

    table = Table(title="Feed commands", show_header=False, box=None, padding=(0, 2))
    table.add_column("Command", style="cyan")
    table.add_column("Description")
    for name, desc in sorted(registry.commands.items()):
        table.add_row(f"/{name}", desc)
    shell._console.print(table)
    shell._console.print("[dim]Post ids are the numbers shown after # on each post.[/dim]")
