"""Edit, save and cancel commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_edit(shell: FeedShell, args: list[str]) -> None:
    if not args:
        shell._console.print("[red]Usage: /edit <id>[/red]")
        return
    await shell.toggle_edit(args[0])


async def handle_save(shell: FeedShell, args: list[str]) -> None:
    await shell.save_edit()


async def handle_cancel(shell: FeedShell, args: list[str]) -> None:
    shell.cancel_edit()
