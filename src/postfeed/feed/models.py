"""Post record as held by the client, plus normalization of server payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from postfeed.api.errors import MalformedResponseError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Post(BaseModel):
    """One feed entry.

    Field aliases match the wire names used by the API. The record exactly as
    the server sent it is kept alongside the parsed fields, so an update can
    send back everything it did not edit unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | str
    content: str = ""
    image_url: str | None = Field(default=None, alias="imageUrl")
    author: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdDateTime")
    modified_at: datetime | None = Field(default=None, alias="modifiedDateTime")

    # Client-only: when this record was received. Never serialized.
    received_at: datetime = Field(default_factory=_now, exclude=True)

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at", "modified_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: Any) -> Any:
        # An empty timestamp means the server did not set one.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def key(self) -> str:
        return post_key(self.id)

    @property
    def resolved_created_at(self) -> datetime:
        """Server creation time, falling back to local receipt time."""
        return self.created_at or self.received_at

    @property
    def was_edited(self) -> bool:
        return self.modified_at is not None and self.modified_at != self.created_at

    def to_record(self) -> dict[str, Any]:
        """Wire representation, without client-only state.

        Returns a copy of the server's record when there is one; a post built
        locally is serialized from its fields.
        """
        if self._raw:
            return dict(self._raw)
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def post_key(post_id: Any) -> str:
    """Identifiers are compared by their string form."""
    return str(post_id)


def normalize_post(raw: Mapping[str, Any], *, received_at: datetime | None = None) -> Post:
    """Build a :class:`Post` from a raw server record.

    Raises :class:`MalformedResponseError` when the record cannot be a post
    (for instance, no identifier).
    """
    data = dict(raw)
    data.pop("received_at", None)
    try:
        post = Post.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(f"Invalid post record: {exc}") from exc
    post._raw = data
    if received_at is not None:
        post.received_at = received_at
    return post


def merge_post(existing: Post, raw: Mapping[str, Any]) -> Post:
    """Overlay server-returned fields onto an existing post.

    Fields missing from ``raw`` keep their current values; the receipt time
    of ``existing`` is carried over.
    """
    merged = {**existing.to_record(), **dict(raw)}
    return normalize_post(merged, received_at=existing.received_at)
