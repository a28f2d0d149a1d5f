"""Config command — display current configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from postfeed.cli.shell import FeedShell


async def handle_config(shell: FeedShell, args: list[str]) -> None:
    s = shell._settings
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("API URL", s.api_url)
    table.add_row("Request Timeout", f"{s.request_timeout:g}s")
    table.add_row("Author", s.author or "(server default)")
    table.add_row("Data Dir", str(s.data_dir))
    table.add_row("Log Level", s.log_level)
    table.add_row("Placeholder Image", s.placeholder_image_url)
    shell._console.print(table)
