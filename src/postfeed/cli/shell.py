"""Interactive feed shell with Rich rendering and prompt_toolkit input."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markup import escape

from postfeed.api.client import PostsClient
from postfeed.cli.rendering import render_feed, render_post
from postfeed.core.config import Settings
from postfeed.core.logging import AuditLogger
from postfeed.core.notifications import NotificationDispatcher
from postfeed.feed.controller import FeedController
from postfeed.feed.forms import CreatePostForm, DraftForm, EditPostForm

logger = logging.getLogger(__name__)


class FeedShell:
    """Interactive CLI over one feed controller."""

    def __init__(
        self,
        settings: Settings,
        client: PostsClient | None = None,
        console: Console | None = None,
    ) -> None:
        self._settings = settings
        self._console = console or Console()

        self._dispatcher = NotificationDispatcher()
        self._dispatcher.register(self._console_sink)

        if client is None:
            client = PostsClient(
                settings.api_url,
                timeout=settings.request_timeout,
                audit=AuditLogger(settings.audit_log_path),
            )
        self._client = client
        self._feed = FeedController(
            client, self._dispatcher, confirm=lambda message: self.confirm(message)
        )

        # The one open edit form, if any
        self._edit_form: EditPostForm | None = None

        # Command registry (set up later to avoid circular imports)
        self._command_registry: Any = None

        self._prompt_session: PromptSession | None = None
        self._running = False

    @property
    def feed(self) -> FeedController:
        return self._feed

    @property
    def edit_form(self) -> EditPostForm | None:
        return self._edit_form

    def set_command_registry(self, registry: Any) -> None:
        self._command_registry = registry

    def stop(self) -> None:
        self._running = False

    async def _console_sink(self, message: str) -> None:
        self._console.print(f"[bold yellow]![/bold yellow] {escape(message)}")

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    async def ask(self, label: str, default: str = "") -> str | None:
        """Prompt for one line of input. Returns None if the user aborts."""
        session = self._prompt_session
        try:
            if session is not None:
                return await asyncio.get_event_loop().run_in_executor(
                    None, lambda: session.prompt(label, default=default)
                )
            answer = await asyncio.get_event_loop().run_in_executor(
                None, lambda: input(label)
            )
            return answer or default
        except (EOFError, KeyboardInterrupt):
            return None

    async def confirm(self, message: str) -> bool:
        """Blocking yes/no prompt."""
        self._console.print(f"[bold red]{message}[/bold red]")
        try:
            response = await asyncio.get_event_loop().run_in_executor(
                None, lambda: input("Confirm? [y/N] ").strip().lower()
            )
            return response in ("y", "yes")
        except (EOFError, KeyboardInterrupt):
            return False

    # ------------------------------------------------------------------
    # Feed actions used by slash commands
    # ------------------------------------------------------------------

    def show_feed(self) -> None:
        self._console.print(
            render_feed(self._feed, placeholder_image_url=self._settings.placeholder_image_url)
        )

    async def reload(self) -> None:
        with self._console.status("Loading Posts..."):
            await self._feed.load_all()
        self._drop_stale_edit_form()
        self.show_feed()

    def _drop_stale_edit_form(self) -> None:
        form = self._edit_form
        if form is not None and not self._feed.is_editing(form.post.id):
            self._edit_form = None

    async def fill_and_submit(self, form: DraftForm) -> bool:
        """Prompt for the draft fields, then submit the form."""
        content = await self.ask("Content: ", default=form.content)
        if content is None:
            return False
        image_url = await self.ask("Image URL (optional): ", default=form.image_url)
        if image_url is None:
            return False
        form.update_field("content", content)
        form.update_field("image_url", image_url.strip())
        return await form.submit()

    async def create_post(self) -> None:
        form = CreatePostForm(self._feed, author=self._settings.author)
        if await self.fill_and_submit(form) and form.created is not None:
            self._console.print("[green]Post created.[/green]")
            self._console.print(
                render_post(form.created, placeholder_image_url=self._settings.placeholder_image_url)
            )

    async def toggle_edit(self, post_id: str) -> None:
        if self._feed.get(post_id) is None:
            self._console.print(f"[red]No post with id {escape(post_id)}[/red]")
            return

        self._feed.toggle_editing(post_id)
        if not self._feed.is_editing(post_id):
            self._edit_form = None
            self._console.print(f"[yellow]Stopped editing post {escape(post_id)}.[/yellow]")
            return

        post = self._feed.get(post_id)
        self._edit_form = EditPostForm(post, self._feed)
        self._console.print(f"[bold]Editing post by {escape(post.author or 'unknown')}[/bold]")
        await self.save_edit()

    async def save_edit(self) -> None:
        form = self._edit_form
        if form is None:
            self._console.print("[red]No post is being edited. Use /edit <id> first.[/red]")
            return
        if await self.fill_and_submit(form):
            self._edit_form = None
            updated = self._feed.get(form.post.id)
            if updated is not None:
                self._console.print("[green]Post updated.[/green]")
                self._console.print(
                    render_post(updated, placeholder_image_url=self._settings.placeholder_image_url)
                )
        else:
            self._console.print("[dim]Still editing. /save to retry or /cancel to discard.[/dim]")

    def cancel_edit(self) -> None:
        form = self._edit_form
        if form is None:
            self._console.print("[dim]Nothing to cancel.[/dim]")
            return
        if not form.cancel():
            self._console.print("[red]Cannot cancel while saving.[/red]")
            return
        self._edit_form = None
        self._console.print(f"[yellow]Discarded changes to post {form.post.id}.[/yellow]")

    async def delete_post(self, post_id: str) -> None:
        post = self._feed.get(post_id)
        await self._feed.remove_by_id(post.id if post is not None else post_id)
        self._drop_stale_edit_form()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Main interactive loop."""
        self._console.print(
            f"[bold blue]Facebook-Style Feed[/bold blue] - {self._client.base_url}\n"
            "[dim]Type /help for commands, Ctrl+C to exit[/dim]\n"
        )

        history_path = self._settings.history_path
        history_path.parent.mkdir(parents=True, exist_ok=True)
        self._prompt_session = PromptSession(history=FileHistory(str(history_path)))

        await self.reload()

        self._running = True
        while self._running:
            try:
                user_input = await asyncio.get_event_loop().run_in_executor(
                    None,
                    lambda: self._prompt_session.prompt("feed> "),
                )
            except (EOFError, KeyboardInterrupt):
                break

            user_input = user_input.strip()
            if not user_input:
                continue

            if not user_input.startswith("/"):
                self._console.print("[dim]Commands start with /. Type /help.[/dim]")
                continue

            if not self._command_registry:
                self._console.print("[red]Commands not available[/red]")
                continue

            try:
                await self._command_registry.dispatch(user_input, self)
            except Exception as e:
                logger.exception("Error handling command")
                self._console.print(f"[red]Error: {escape(str(e))}[/red]")

        self._console.print("\n[dim]Goodbye![/dim]")

    async def aclose(self) -> None:
        await self._client.aclose()
