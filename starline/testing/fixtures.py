"""
Pytest fixtures for Starline testing.

Provides a fake stargazers API, caches and a client factory wired to them.
"""

from collections.abc import Callable
from typing import Any

import pytest

from starline.client import AsyncStarlineClient
from starline.testing.mock import FakeStargazersAPI, RecordingCache
from starline.transport import RetryConfig


# ============================================================================
# Fake API Fixtures
# ============================================================================


@pytest.fixture
def fake_api() -> FakeStargazersAPI:
    """
    Provide a fake endpoint with 3 full pages and one partial page (350 stars).

    Example:
        ```python
        def test_my_feature(fake_api, make_client):
            client = make_client(fake_api)
            ...
        ```
    """
    return FakeStargazersAPI(total_stars=350)


@pytest.fixture
def memory_cache() -> RecordingCache:
    """Provide an empty cache that records reads and writes."""
    return RecordingCache()


# ============================================================================
# Client Fixtures
# ============================================================================


def build_client(api: FakeStargazersAPI, **kwargs: Any) -> AsyncStarlineClient:
    """
    Create a client whose requests are answered by `api`.

    Retries are disabled unless a retry_config is passed.
    """
    kwargs.setdefault("retry_config", RetryConfig(max_retries=0))
    kwargs.setdefault("cache", RecordingCache())
    return AsyncStarlineClient(http_transport=api.transport(), **kwargs)


@pytest.fixture
def make_client() -> Callable[..., AsyncStarlineClient]:
    """Provide `build_client` as a factory fixture."""
    return build_client
