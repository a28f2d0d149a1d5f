"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from postfeed.api.client import PostsClient
from postfeed.core.config import Settings

API_URL = "https://api.test/api/facebook/posts"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory structure."""
    (tmp_path / "logs").mkdir()
    return tmp_path


@pytest.fixture
def settings(tmp_data_dir: Path) -> Settings:
    """Create Settings pointing at temp directories."""
    return Settings(
        api_url=API_URL,
        data_dir=tmp_data_dir,
        log_level="DEBUG",
        _env_file=None,
    )


@pytest.fixture
def make_client() -> Callable[[Handler], PostsClient]:
    """Factory for a PostsClient whose HTTP traffic goes to ``handler``."""

    def factory(handler: Handler, **kwargs) -> PostsClient:
        transport = httpx.MockTransport(handler)
        return PostsClient(API_URL, client=httpx.AsyncClient(transport=transport), **kwargs)

    return factory


@pytest.fixture
def sample_posts() -> list[dict]:
    return [
        {
            "id": 2,
            "content": "second post",
            "imageUrl": "https://img.test/2.png",
            "author": "Bea",
            "createdDateTime": "2024-05-02T09:30:00Z",
            "modifiedDateTime": "2024-05-03T10:00:00Z",
        },
        {
            "id": 1,
            "content": "hi",
            "author": "A",
        },
    ]
