"""Feed controller: the authoritative in-memory list of posts."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from postfeed.api.client import PostId, PostsClient
from postfeed.api.errors import MalformedResponseError, PostsAPIError
from postfeed.core.notifications import NotificationDispatcher
from postfeed.feed.models import Post, merge_post, normalize_post, post_key

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], Awaitable[bool]]


class FeedState(str, Enum):
    LOADING = "loading"
    READY = "ready"


class FeedController:
    """Owns the post list and applies confirmed server outcomes to it.

    Only this class mutates the list. Forms report results through
    :meth:`apply_created` and :meth:`apply_updated`; nothing is changed
    optimistically before the server confirms.

    At most one post is being edited at a time. That state is held as a
    single identifier rather than a flag on every post.
    """

    def __init__(
        self,
        client: PostsClient,
        dispatcher: NotificationDispatcher | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        self._client = client
        self._dispatcher = dispatcher or NotificationDispatcher()
        self._confirm = confirm
        self._posts: list[Post] = []
        self._state = FeedState.LOADING
        self._load_error: str | None = None
        self._editing_key: str | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def posts(self) -> list[Post]:
        return list(self._posts)

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def load_error(self) -> str | None:
        return self._load_error

    @property
    def editing_id(self) -> PostId | None:
        post = self.get(self._editing_key) if self._editing_key is not None else None
        return post.id if post else None

    @property
    def client(self) -> PostsClient:
        return self._client

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    def __len__(self) -> int:
        return len(self._posts)

    def get(self, post_id: Any) -> Post | None:
        key = post_key(post_id)
        for post in self._posts:
            if post.key == key:
                return post
        return None

    def is_editing(self, post_id: Any) -> bool:
        return self._editing_key is not None and self._editing_key == post_key(post_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_all(self) -> None:
        """Fetch every post and replace the list.

        Never raises: on failure the previous list is kept, the error is
        logged and reported, and the feed still leaves the loading state.
        Records that cannot be posts are logged and left out.
        """
        self._state = FeedState.LOADING
        try:
            raw_posts = await self._client.list_posts()
        except PostsAPIError as exc:
            self._load_error = exc.describe()
            logger.error("Error fetching posts: %s", self._load_error)
            await self._dispatcher.send(f"Error fetching posts: {self._load_error}")
        else:
            self._posts = _dedupe(_normalize_listing(raw_posts))
            self._editing_key = None
            self._load_error = None
            logger.info("Loaded %d posts", len(self._posts))
        finally:
            self._state = FeedState.READY

    # ------------------------------------------------------------------
    # Applying server outcomes
    # ------------------------------------------------------------------

    def apply_created(self, raw: Mapping[str, Any]) -> Post:
        """Prepend a newly created post."""
        post = normalize_post(raw)
        remaining = [p for p in self._posts if p.key != post.key]
        if len(remaining) != len(self._posts):
            logger.warning("Created post %s was already listed; replacing it", post.id)
        self._posts = [post, *remaining]
        return post

    def apply_updated(self, raw: Mapping[str, Any]) -> Post | None:
        """Merge an updated post into the matching entry and stop editing it.

        A response for a post that is no longer listed is ignored.
        """
        if "id" not in raw:
            logger.warning("Update response without id ignored: %s", raw)
            return None
        key = post_key(raw["id"])
        for index, existing in enumerate(self._posts):
            if existing.key == key:
                merged = merge_post(existing, raw)
                self._posts[index] = merged
                if self._editing_key == key:
                    self._editing_key = None
                return merged
        logger.debug("Update for unlisted post %s ignored", raw["id"])
        return None

    # ------------------------------------------------------------------
    # Editing state
    # ------------------------------------------------------------------

    def toggle_editing(self, post_id: Any) -> None:
        """Start editing ``post_id`` and stop editing everything else.

        Toggling the post already being edited cancels the edit.
        """
        key = post_key(post_id)
        if self._editing_key == key or self.get(post_id) is None:
            self._editing_key = None
        else:
            self._editing_key = key

    def clear_editing(self, post_id: Any) -> None:
        if self.is_editing(post_id):
            self._editing_key = None

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def remove_by_id(self, post_id: PostId) -> bool:
        """Delete a post after the user confirms.

        Returns True only when the server confirmed the delete.
        """
        if self._confirm is None:
            logger.debug("No confirmation handler; delete of %s skipped", post_id)
            return False
        if not await self._confirm("Are you sure you want to delete this post?"):
            logger.debug("Delete of post %s declined", post_id)
            return False

        try:
            await self._client.delete_post(post_id)
        except PostsAPIError as exc:
            logger.error("Error deleting post %s: %s", post_id, exc.describe())
            await self._dispatcher.send(f"Failed to delete post. {exc.describe()}")
            return False

        key = post_key(post_id)
        self._posts = [p for p in self._posts if p.key != key]
        if self._editing_key == key:
            self._editing_key = None
        await self._dispatcher.send(f"Post {post_id} deleted successfully.")
        return True


def _normalize_listing(raw_posts: list[dict[str, Any]]) -> list[Post]:
    """Normalize each record, skipping the ones that cannot be posts."""
    received_at = datetime.now(timezone.utc)
    posts = []
    for raw in raw_posts:
        try:
            posts.append(normalize_post(raw, received_at=received_at))
        except MalformedResponseError as exc:
            logger.warning("Skipping post record %s: %s", raw.get("id"), exc)
    return posts


def _dedupe(posts: list[Post]) -> list[Post]:
    """Keep the first occurrence of each identifier."""
    seen: set[str] = set()
    result = []
    for post in posts:
        if post.key in seen:
            logger.warning("Duplicate post id %s in listing dropped", post.id)
            continue
        seen.add(post.key)
        result.append(post)
    return result
