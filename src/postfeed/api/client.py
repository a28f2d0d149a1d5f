"""Async client for the remote post collection."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from postfeed.api.errors import (
    ApplicationError,
    MalformedResponseError,
    TransportError,
)
from postfeed.core.http import make_httpx_client
from postfeed.core.logging import AuditLogger

logger = logging.getLogger(__name__)

PostId = int | str


class PostsClient:
    """Four REST operations against one base resource URL.

    ``GET <base>``, ``POST <base>``, ``PUT <base>/<id>`` and
    ``DELETE <base>/<id>``. Every failure surfaces as a
    :class:`~postfeed.api.errors.PostsAPIError` subclass so callers can tell
    transport problems from server-side rejections.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or make_httpx_client(timeout=timeout)
        self._audit = audit

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> PostsClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _post_url(self, post_id: PostId) -> str:
        return f"{self._base_url}/{quote(str(post_id), safe='')}"

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_posts(self) -> list[dict[str, Any]]:
        """Return the raw post records in server order."""
        response = await self._request("GET", self._base_url)
        data = _json_body(response)
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"Expected a list of posts, got {type(data).__name__}"
            )
        for item in data:
            if not isinstance(item, dict):
                raise MalformedResponseError(
                    f"Expected post objects, got {type(item).__name__}"
                )
        return data

    async def create_post(self, draft: Mapping[str, Any]) -> dict[str, Any]:
        """Create a post and return the server's canonical record."""
        response = await self._request("POST", self._base_url, json=dict(draft))
        return _post_body(response)

    async def update_post(self, post_id: PostId, record: Mapping[str, Any]) -> dict[str, Any]:
        """Replace a post and return the server's canonical record."""
        response = await self._request("PUT", self._post_url(post_id), json=dict(record))
        return _post_body(response)

    async def delete_post(self, post_id: PostId) -> None:
        await self._request("DELETE", self._post_url(post_id))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self, method: str, url: str, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        logger.debug("%s %s payload=%s", method, url, json)
        start = time.monotonic()
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.RequestError as exc:
            message = str(exc) or exc.__class__.__name__
            logger.error("%s %s failed: %s", method, url, message)
            self._record(method, url, json, start, error=message)
            raise TransportError(message) from exc

        if not response.is_success:
            payload = _error_payload(response)
            logger.error(
                "%s %s returned %d: %s", method, url, response.status_code, payload
            )
            self._record(
                method, url, json, start,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )
            raise ApplicationError(response.status_code, payload)

        self._record(method, url, json, start, status_code=response.status_code)
        return response

    def _record(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None,
        start: float,
        *,
        status_code: int = 0,
        error: str = "",
    ) -> None:
        if self._audit is None:
            return
        self._audit.log(
            "api_request",
            method=method,
            url=url,
            status_code=status_code,
            request_body=body,
            duration_ms=int((time.monotonic() - start) * 1000),
            error=error,
        )


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Response is not valid JSON: {exc}") from exc


def _post_body(response: httpx.Response) -> dict[str, Any]:
    data = _json_body(response)
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a post object, got {type(data).__name__}")
    return data


def _error_payload(response: httpx.Response) -> Any:
    """Best-effort structured error body: JSON if possible, else text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text.strip() or None
