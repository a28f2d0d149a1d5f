"""Feed rendering helpers using Rich."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlsplit

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from postfeed.feed.controller import FeedController, FeedState
from postfeed.feed.models import Post

EMPTY_FEED_MESSAGE = "No posts found. Be the first to post!"
LOADING_MESSAGE = "Loading Posts..."


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "Unknown"
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%Y-%m-%d %H:%M:%S")


def display_image_url(url: str | None, placeholder: str) -> str | None:
    """URL to show for a post image, or the placeholder if it is unusable."""
    if not url:
        return None
    parts = urlsplit(url.strip())
    if parts.scheme in ("http", "https") and parts.netloc:
        return url.strip()
    return placeholder


def render_post(post: Post, *, editing: bool = False, placeholder_image_url: str = "") -> Panel:
    """Render a post as a Rich panel."""
    body = Text()
    body.append(post.content, style="bold")
    body.append("\n")

    image = display_image_url(post.image_url, placeholder_image_url)
    if image:
        body.append(f"\n[image] {image}\n", style="blue")

    body.append("\n— Posted by: ")
    body.append(post.author or "unknown", style="bold")
    body.append(f"\nCreated: {format_timestamp(post.resolved_created_at)}", style="dim")
    if post.was_edited:
        body.append(f"\nEdited: {format_timestamp(post.modified_at)}", style="dim italic")

    title = f"[cyan]#{escape(str(post.id))}[/cyan]"
    if editing:
        title += " [yellow](editing)[/yellow]"
    return Panel(
        body,
        title=title,
        title_align="left",
        border_style="yellow" if editing else "blue",
        expand=False,
    )


def render_feed(feed: FeedController, *, placeholder_image_url: str = "") -> RenderableType:
    """Render the whole feed, or its loading/empty state."""
    if feed.state is FeedState.LOADING:
        return Text(LOADING_MESSAGE, style="bold")
    posts = feed.posts
    if not posts:
        return Text(EMPTY_FEED_MESSAGE, style="dim")
    return Group(
        *(
            render_post(
                p,
                editing=feed.is_editing(p.id),
                placeholder_image_url=placeholder_image_url,
            )
            for p in posts
        )
    )
