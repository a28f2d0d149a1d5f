"""List and reload commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_list(shell: FeedShell, args: list[str]) -> None:
    shell.show_feed()


async def handle_reload(shell: FeedShell, args: list[str]) -> None:
    await shell.reload()
