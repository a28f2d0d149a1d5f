"""Failures raised by the posts API client."""

from __future__ import annotations

import json
from typing import Any


class PostsAPIError(Exception):
    """Base class for every failure talking to the posts API."""

    def describe(self) -> str:
        """Human-readable detail suitable for showing to the user."""
        return str(self)


class TransportError(PostsAPIError):
    """The request never produced an HTTP response (unreachable, timeout)."""


class ApplicationError(PostsAPIError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, payload: Any = None, message: str = "") -> None:
        self.status_code = status_code
        self.payload = payload
        super().__init__(message or f"Request failed with status code {status_code}")

    def describe(self) -> str:
        if self.payload in (None, "", {}, []):
            return str(self)
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, default=str)


class MalformedResponseError(PostsAPIError):
    """A 2xx response whose body is not the expected post JSON."""
