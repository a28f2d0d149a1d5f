"""Command registry and dispatch for slash commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell

CommandHandler = Callable[["FeedShell", list[str]], Awaitable[None]]


class CommandRegistry:
    """Registry for slash commands."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}
        self._descriptions: dict[str, str] = {}
        self._register_defaults()

    def register(
        self, name: str, handler: CommandHandler, description: str = ""
    ) -> None:
        self._commands[name] = handler
        self._descriptions[name] = description

    def _register_defaults(self) -> None:
        from postfeed.cli.commands.config_cmd import handle_config
        from postfeed.cli.commands.delete import handle_delete
        from postfeed.cli.commands.edit import handle_cancel, handle_edit, handle_save
        from postfeed.cli.commands.help_cmd import handle_help
        from postfeed.cli.commands.list_cmd import handle_list, handle_reload
        from postfeed.cli.commands.new import handle_new
        from postfeed.cli.commands.quit import handle_quit
        from postfeed.cli.commands.status import handle_status

        self.register("help", handle_help, "Show available commands")
        self.register("list", handle_list, "Show the feed")
        self.register("reload", handle_reload, "Fetch all posts again")
        self.register("new", handle_new, "Create a post")
        self.register("edit", handle_edit, "Edit a post (again to stop editing): /edit <id>")
        self.register("save", handle_save, "Retry saving the post being edited")
        self.register("cancel", handle_cancel, "Discard the edit in progress")
        self.register("delete", handle_delete, "Delete a post: /delete <id>")
        self.register("status", handle_status, "Show feed status")
        self.register("config", handle_config, "View current configuration")
        self.register("quit", handle_quit, "Leave the feed")

    async def dispatch(self, raw_input: str, shell: FeedShell) -> None:
        parts = raw_input.strip().split(maxsplit=1)
        cmd_name = parts[0].lstrip("/").lower()
        args = parts[1].split() if len(parts) > 1 else []

        handler = self._commands.get(cmd_name)
        if handler:
            await handler(shell, args)
        else:
            shell._console.print(
                f"[red]Unknown command: /{cmd_name}[/red]. Type /help for available commands."
            )

    @property
    def commands(self) -> dict[str, str]:
        return dict(self._descriptions)
