"""Click CLI group: interactive feed plus one-shot list/post/edit/delete."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.markup import escape

from postfeed.api.client import PostsClient
from postfeed.cli.rendering import render_feed, render_post
from postfeed.core.config import Settings, get_settings
from postfeed.core.logging import AuditLogger, setup_logging
from postfeed.core.notifications import NotificationDispatcher
from postfeed.feed.controller import ConfirmCallback, FeedController
from postfeed.feed.forms import CreatePostForm, EditPostForm

console = Console()


def build_client(settings: Settings) -> PostsClient:
    return PostsClient(
        settings.api_url,
        timeout=settings.request_timeout,
        audit=AuditLogger(settings.audit_log_path),
    )


def _build_feed(settings: Settings, confirm: ConfirmCallback | None = None) -> FeedController:
    dispatcher = NotificationDispatcher()

    async def console_sink(msg: str) -> None:
        console.print(f"[bold yellow]![/bold yellow] {escape(msg)}")

    dispatcher.register(console_sink)
    return FeedController(build_client(settings), dispatcher, confirm=confirm)


@click.group(invoke_without_command=True)
@click.option("--api-url", default=None, help="Base URL of the posts API")
@click.pass_context
def cli(ctx: click.Context, api_url: str | None) -> None:
    """Facebook-style post feed client."""
    settings = get_settings()
    if api_url:
        settings = settings.model_copy(update={"api_url": api_url})
    setup_logging(settings.log_level, settings.app_log_path)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


@cli.command()
@click.pass_obj
def browse(settings: Settings) -> None:
    """Browse and edit the feed interactively."""
    from postfeed.cli.commands import CommandRegistry
    from postfeed.cli.shell import FeedShell

    shell = FeedShell(settings, client=build_client(settings))
    shell.set_command_registry(CommandRegistry())
    asyncio.run(_run_shell(shell))


async def _run_shell(shell) -> None:
    try:
        await shell.run()
    finally:
        await shell.aclose()


@cli.command("list")
@click.pass_obj
def list_posts(settings: Settings) -> None:
    """Print every post in the feed."""
    if not asyncio.run(_list(settings)):
        raise SystemExit(1)


async def _list(settings: Settings) -> bool:
    feed = _build_feed(settings)
    try:
        await feed.load_all()
    finally:
        await feed.client.aclose()
    console.print(render_feed(feed, placeholder_image_url=settings.placeholder_image_url))
    return feed.load_error is None


@cli.command()
@click.argument("content")
@click.option("--image", "image_url", default="", help="Image URL for the post")
@click.pass_obj
def post(settings: Settings, content: str, image_url: str) -> None:
    """Create a post."""
    if not asyncio.run(_post(settings, content, image_url)):
        raise SystemExit(1)


async def _post(settings: Settings, content: str, image_url: str) -> bool:
    feed = _build_feed(settings)
    form = CreatePostForm(feed, author=settings.author)
    form.update_field("content", content)
    form.update_field("image_url", image_url)
    try:
        ok = await form.submit()
    finally:
        await feed.client.aclose()
    if not ok or form.created is None:
        return False
    console.print(render_post(form.created, placeholder_image_url=settings.placeholder_image_url))
    return True


@cli.command()
@click.argument("post_id")
@click.option("--content", default=None, help="New post content")
@click.option("--image", "image_url", default=None, help="New image URL (empty string clears it)")
@click.pass_obj
def edit(settings: Settings, post_id: str, content: str | None, image_url: str | None) -> None:
    """Edit an existing post."""
    if content is None and image_url is None:
        raise click.UsageError("Nothing to change: pass --content and/or --image.")
    if not asyncio.run(_edit(settings, post_id, content, image_url)):
        raise SystemExit(1)


async def _edit(
    settings: Settings, post_id: str, content: str | None, image_url: str | None
) -> bool:
    feed = _build_feed(settings)
    try:
        await feed.load_all()
        if feed.load_error:
            return False
        target = feed.get(post_id)
        if target is None:
            console.print(f"[red]No post with id {escape(post_id)}[/red]")
            return False

        feed.toggle_editing(target.id)
        form = EditPostForm(target, feed)
        if content is not None:
            form.update_field("content", content)
        if image_url is not None:
            form.update_field("image_url", image_url)
        if not await form.submit():
            return False
    finally:
        await feed.client.aclose()

    updated = feed.get(post_id)
    if updated is not None:
        console.print(render_post(updated, placeholder_image_url=settings.placeholder_image_url))
    return True


@cli.command()
@click.argument("post_id")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_obj
def delete(settings: Settings, post_id: str, yes: bool) -> None:
    """Delete a post."""
    if not yes and not click.confirm("Are you sure you want to delete this post?", default=False):
        return

    async def confirmed(message: str) -> bool:
        return True

    if not asyncio.run(_delete(settings, post_id, confirmed)):
        raise SystemExit(1)


async def _delete(settings: Settings, post_id: str, confirm: ConfirmCallback) -> bool:
    feed = _build_feed(settings, confirm=confirm)
    try:
        return await feed.remove_by_id(post_id)
    finally:
        await feed.client.aclose()
