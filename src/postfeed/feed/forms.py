"""Draft forms for creating and editing posts."""

from __future__ import annotations

import logging
from typing import Any

from postfeed.api.errors import PostsAPIError
from postfeed.core.notifications import NotificationDispatcher
from postfeed.feed.controller import FeedController
from postfeed.feed.models import Post

logger = logging.getLogger(__name__)

EMPTY_CONTENT_MESSAGE = "Post content cannot be empty!"

_FIELD_ALIASES = {
    "content": "content",
    "image_url": "image_url",
    "imageUrl": "image_url",
    "image": "image_url",
}


class DraftForm:
    """Local draft of a post's editable fields.

    Subclasses decide which endpoint receives the draft and how the
    server's answer is reported to the feed controller.
    """

    action = "save"

    def __init__(
        self,
        feed: FeedController,
        *,
        content: str = "",
        image_url: str = "",
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._feed = feed
        self._dispatcher = dispatcher or feed.dispatcher
        self.content = content
        self.image_url = image_url
        self._saving = False

    @property
    def saving(self) -> bool:
        return self._saving

    def update_field(self, name: str, value: str) -> None:
        try:
            attr = _FIELD_ALIASES[name]
        except KeyError:
            raise KeyError(f"Unknown form field: {name}") from None
        setattr(self, attr, value)

    def is_valid(self) -> bool:
        return bool(self.content and self.content.strip())

    async def submit(self) -> bool:
        """Send the draft. Returns True when the server accepted it."""
        if self._saving:
            logger.debug("Submit ignored: already saving")
            return False
        if not self.is_valid():
            await self._dispatcher.send(EMPTY_CONTENT_MESSAGE)
            return False

        self._saving = True
        try:
            data = await self._send()
            self._apply(data)
        except PostsAPIError as exc:
            logger.error("Failed to %s post: %s", self.action, exc.describe())
            await self._dispatcher.send(
                f"Failed to {self.action} post. Server returned: {exc.describe()}"
            )
            return False
        finally:
            self._saving = False
        return True

    async def _send(self) -> dict[str, Any]:
        raise NotImplementedError

    def _apply(self, data: dict[str, Any]) -> None:
        raise NotImplementedError


class EditPostForm(DraftForm):
    """Draft editor for one existing post."""

    action = "update"

    def __init__(
        self,
        post: Post,
        feed: FeedController,
        *,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        super().__init__(
            feed,
            content=post.content,
            image_url=post.image_url or "",
            dispatcher=dispatcher,
        )
        self._post = post

    @property
    def post(self) -> Post:
        return self._post

    def payload(self) -> dict[str, Any]:
        """Full post record with the two editable fields overlaid."""
        record = self._post.to_record()
        record["content"] = self.content
        record["imageUrl"] = self.image_url
        return record

    async def _send(self) -> dict[str, Any]:
        payload = self.payload()
        logger.info("PUT payload for post id %s: %s", self._post.id, payload)
        return await self._feed.client.update_post(self._post.id, payload)

    def _apply(self, data: dict[str, Any]) -> None:
        logger.debug("Update response: %s", data)
        self._feed.apply_updated(data)

    def cancel(self) -> bool:
        """Drop the draft and stop editing. Refused while saving."""
        if self._saving:
            return False
        self.content = self._post.content
        self.image_url = self._post.image_url or ""
        self._feed.clear_editing(self._post.id)
        return True


class CreatePostForm(DraftForm):
    """Draft for a new post. The draft is cleared after a successful create."""

    action = "create"

    def __init__(
        self,
        feed: FeedController,
        *,
        author: str = "",
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        super().__init__(feed, dispatcher=dispatcher)
        self._author = author
        self.created: Post | None = None

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"content": self.content}
        if self.image_url:
            body["imageUrl"] = self.image_url
        if self._author:
            body["author"] = self._author
        return body

    async def _send(self) -> dict[str, Any]:
        return await self._feed.client.create_post(self.payload())

    def _apply(self, data: dict[str, Any]) -> None:
        self.created = self._feed.apply_created(data)
        self.content = ""
        self.image_url = ""
