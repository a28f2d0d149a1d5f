"""Delete command."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_delete(shell: FeedShell, args: list[str]) -> None:
    if not args:
        shell._console.print("[red]Usage: /delete <id>[/red]")
        return
    await shell.delete_post(args[0])
