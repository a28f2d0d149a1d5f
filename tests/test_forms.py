"""Tests for the create and edit forms."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from postfeed.core.notifications import NotificationDispatcher
from postfeed.feed.controller import FeedController
from postfeed.feed.forms import EMPTY_CONTENT_MESSAGE, CreatePostForm, EditPostForm

POSTS = [
    {"id": 1, "content": "hi", "author": "A", "imageUrl": "https://img.test/1.png", "likes": 4},
    {"id": 2, "content": "other", "author": "B"},
]


class FakeAPI:
    """Records requests and answers from a queue of canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=POSTS)
        return self._responses.pop(0)

    @property
    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method != "GET"]


async def _feed(make_client, api: FakeAPI) -> FeedController:
    feed = FeedController(make_client(api), NotificationDispatcher())
    await feed.load_all()
    return feed


async def _editing(make_client, api: FakeAPI, post_id=1) -> tuple[FeedController, EditPostForm]:
    feed = await _feed(make_client, api)
    feed.toggle_editing(post_id)
    return feed, EditPostForm(feed.get(post_id), feed)


# ---------------------------------------------------------------------------
# Edit form
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_edit_form_starts_from_post(make_client):
    _, form = await _editing(make_client, FakeAPI())
    assert form.content == "hi"
    assert form.image_url == "https://img.test/1.png"


@pytest.mark.asyncio
async def test_edit_form_without_image_starts_empty(make_client):
    _, form = await _editing(make_client, FakeAPI(), post_id=2)
    assert form.image_url == ""


@pytest.mark.asyncio
async def test_update_field_is_local(make_client):
    api = FakeAPI()
    feed, form = await _editing(make_client, api)
    form.update_field("content", "draft")
    form.update_field("imageUrl", "https://img.test/new.png")
    assert form.content == "draft"
    assert form.image_url == "https://img.test/new.png"
    assert feed.get(1).content == "hi"
    assert api.writes == []


@pytest.mark.asyncio
async def test_update_unknown_field_raises(make_client):
    _, form = await _editing(make_client, FakeAPI())
    with pytest.raises(KeyError):
        form.update_field("author", "someone")


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   "])
async def test_empty_content_never_hits_network(make_client, content):
    api = FakeAPI()
    feed, form = await _editing(make_client, api)
    form.update_field("content", content)

    assert await form.submit() is False

    assert api.writes == []
    assert feed.is_editing(1)
    assert feed.dispatcher.history[-1] == EMPTY_CONTENT_MESSAGE


@pytest.mark.asyncio
async def test_submit_sends_full_record_and_merges(make_client):
    api = FakeAPI(httpx.Response(200, json={"id": 1, "content": "bye", "author": "A"}))
    feed, form = await _editing(make_client, api)
    form.update_field("content", "bye")

    assert await form.submit() is True

    (request,) = api.writes
    assert request.method == "PUT"
    assert request.url.path == "/api/facebook/posts/1"
    body = json.loads(request.content)
    assert body == {
        "id": 1,
        "content": "bye",
        "author": "A",
        "imageUrl": "https://img.test/1.png",
        "likes": 4,
    }

    updated = feed.get(1)
    assert updated.content == "bye"
    assert updated.image_url == "https://img.test/1.png"
    assert not feed.is_editing(1)


@pytest.mark.asyncio
async def test_submit_sends_unedited_fields_as_received(make_client):
    server_post = {
        "id": 7,
        "content": "before",
        "author": "Bea",
        "imageUrl": None,
        "createdDateTime": "2024-05-02T09:30:00.000+00:00",
        "modifiedDateTime": None,
    }
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=[server_post])
        return httpx.Response(200, json=json.loads(request.content))

    feed = FeedController(make_client(handler), NotificationDispatcher())
    await feed.load_all()
    feed.toggle_editing(7)
    form = EditPostForm(feed.get(7), feed)
    form.update_field("content", "after")

    assert await form.submit() is True

    body = json.loads(requests[-1].content)
    assert body == {**server_post, "content": "after", "imageUrl": ""}
    assert body["createdDateTime"] == "2024-05-02T09:30:00.000+00:00"
    assert "modifiedDateTime" in body and body["modifiedDateTime"] is None


@pytest.mark.asyncio
async def test_submit_failure_reports_server_body_and_keeps_editing(make_client):
    api = FakeAPI(httpx.Response(500, json={"error": "db down"}))
    feed, form = await _editing(make_client, api)
    form.update_field("content", "bye")

    assert await form.submit() is False

    assert feed.is_editing(1)
    assert feed.get(1).content == "hi"
    assert feed.dispatcher.history[-1] == (
        'Failed to update post. Server returned: {"error": "db down"}'
    )
    assert form.saving is False


@pytest.mark.asyncio
async def test_submit_transport_failure_uses_error_message(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=POSTS)
        raise httpx.ConnectError("Network Error", request=request)

    feed = FeedController(make_client(handler), NotificationDispatcher())
    await feed.load_all()
    feed.toggle_editing(1)
    form = EditPostForm(feed.get(1), feed)

    assert await form.submit() is False
    assert feed.dispatcher.history[-1] == "Failed to update post. Server returned: Network Error"
    assert feed.is_editing(1)


@pytest.mark.asyncio
async def test_double_submit_is_refused(make_client):
    release = asyncio.Event()
    started = asyncio.Event()
    writes = []

    async def slow_put(post_id, record):
        writes.append(record)
        started.set()
        await release.wait()
        return {"id": 1, "content": record["content"]}

    api = FakeAPI()
    feed, form = await _editing(make_client, api)
    feed.client.update_post = slow_put
    form.update_field("content", "once")

    first = asyncio.create_task(form.submit())
    await started.wait()
    assert form.saving is True
    assert await form.submit() is False
    assert form.cancel() is False
    release.set()
    assert await first is True

    assert len(writes) == 1
    assert form.saving is False


@pytest.mark.asyncio
async def test_cancel_clears_editing_without_network(make_client):
    api = FakeAPI()
    feed, form = await _editing(make_client, api)
    form.update_field("content", "never saved")

    assert form.cancel() is True

    assert not feed.is_editing(1)
    assert form.content == "hi"
    assert api.writes == []


# ---------------------------------------------------------------------------
# Create form
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_prepends_and_resets_draft(make_client):
    api = FakeAPI(httpx.Response(201, json={"id": 3, "content": "fresh", "author": "Me"}))
    feed = await _feed(make_client, api)
    form = CreatePostForm(feed)
    form.update_field("content", "fresh")

    assert await form.submit() is True

    (request,) = api.writes
    assert request.method == "POST"
    assert json.loads(request.content) == {"content": "fresh"}
    assert feed.posts[0].id == 3
    assert feed.posts[0].resolved_created_at is not None
    assert len(feed) == 3
    assert form.created is feed.posts[0]
    assert form.content == ""
    assert form.image_url == ""


@pytest.mark.asyncio
async def test_create_sends_image_and_configured_author(make_client):
    api = FakeAPI(httpx.Response(201, json={"id": 3, "content": "pic"}))
    feed = await _feed(make_client, api)
    form = CreatePostForm(feed, author="Ada")
    form.update_field("content", "pic")
    form.update_field("image_url", "https://img.test/3.png")

    await form.submit()

    assert json.loads(api.writes[0].content) == {
        "content": "pic",
        "imageUrl": "https://img.test/3.png",
        "author": "Ada",
    }


@pytest.mark.asyncio
async def test_create_rejects_blank_content(make_client):
    api = FakeAPI()
    feed = await _feed(make_client, api)
    form = CreatePostForm(feed)
    form.update_field("content", " \n ")

    assert await form.submit() is False
    assert api.writes == []
    assert len(feed) == 2


@pytest.mark.asyncio
async def test_create_failure_leaves_list_and_draft(make_client):
    api = FakeAPI(httpx.Response(400, json={"message": "too long"}))
    feed = await _feed(make_client, api)
    form = CreatePostForm(feed)
    form.update_field("content", "x" * 10)

    assert await form.submit() is False
    assert len(feed) == 2
    assert form.content == "x" * 10
    assert feed.dispatcher.history[-1] == (
        'Failed to create post. Server returned: {"message": "too long"}'
    )


@pytest.mark.asyncio
async def test_create_with_malformed_response_is_reported(make_client):
    api = FakeAPI(httpx.Response(201, json={"content": "no id"}))
    feed = await _feed(make_client, api)
    form = CreatePostForm(feed)
    form.update_field("content", "hello")

    assert await form.submit() is False
    assert len(feed) == 2
    assert feed.dispatcher.history[-1].startswith("Failed to create post.")
