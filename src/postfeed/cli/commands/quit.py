"""Quit command."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_quit(shell: FeedShell, args: list[str]) -> None:
    shell.stop()
