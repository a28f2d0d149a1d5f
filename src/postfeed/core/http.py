"""Shared httpx client factory.

Some Python builds fail SSL verification with httpx's default context.
Passing an explicit ``ssl.create_default_context()`` loads the system
certificate store instead.
"""

from __future__ import annotations

import ssl
from typing import Any

import httpx

DEFAULT_USER_AGENT = "postfeed/0.1.0"


def _ssl_context() -> ssl.SSLContext:
    return ssl.create_default_context()


def make_httpx_client(**kwargs: Any) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` for talking to the posts API.

    Accepts the same keyword arguments as ``httpx.AsyncClient``.
    If ``verify`` is not explicitly provided, uses the system SSL context.
    JSON is requested by default and a postfeed User-Agent is set.
    """
    kwargs.setdefault("verify", _ssl_context())
    headers = dict(kwargs.pop("headers", None) or {})
    headers.setdefault("User-Agent", DEFAULT_USER_AGENT)
    headers.setdefault("Accept", "application/json")
    kwargs["headers"] = headers
    return httpx.AsyncClient(**kwargs)
