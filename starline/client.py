"""
Starline async client.

Provides the query interface for retrieving a repository's star history.
"""

import os
import re
from typing import Any

import httpx

from starline.aggregator import generate_time_series
from starline.cache import FileCache, MemoryCache, RedisCache, StarCache
from starline.exceptions import ConfigurationError, InvalidRepositoryError
from starline.fetcher import DEFAULT_CONCURRENCY, StarFetcher
from starline.transport import AsyncHTTPTransport, RetryConfig
from starline.types.series import Granularity, StarHistory
from starline.types.stars import StarsResult

_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")

MAX_CONCURRENCY = 100


def validate_repo(repo: str) -> str:
    """
    Check that a repository identifier is in owner/name form.

    Returns:
        The identifier with surrounding whitespace removed

    Raises:
        InvalidRepositoryError: If the identifier is malformed
    """
    if not isinstance(repo, str):
        raise InvalidRepositoryError(repo)
    repo = repo.strip()
    if not _REPO_PATTERN.match(repo) or ".." in repo:
        raise InvalidRepositoryError(repo)
    return repo


class AsyncStarlineClient:
    """
    Async client for repository star histories.

    Example:
        ```python
        import asyncio
        from starline import AsyncStarlineClient

        async def main():
            async with AsyncStarlineClient.from_env() as client:
                history = await client.get_star_time_series("pydantic/pydantic-ai", "week")
                for bucket in history.buckets:
                    print(bucket.date, bucket.count)

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        cache: StarCache | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the async Starline client.

        Args:
            token: GitHub token (optional; requests are unauthenticated without it)
            base_url: Base URL for API requests (default: https://api.github.com)
            cache: Page cache (default: a process-local MemoryCache)
            concurrency: Number of concurrent page workers (default: 20)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            http_transport: Alternative httpx transport, mainly for tests (optional)
        """
        if not 1 <= concurrency <= MAX_CONCURRENCY:
            raise ConfigurationError(
                f"concurrency must be between 1 and {MAX_CONCURRENCY}, got {concurrency}"
            )

        self.base_url = base_url
        self.timeout = timeout
        self.cache = cache if cache is not None else MemoryCache()

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
            http_transport=http_transport,
        )
        self._fetcher = StarFetcher(self._transport, cache=self.cache, concurrency=concurrency)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        **overrides: Any,
    ) -> "AsyncStarlineClient":
        """
        Create a client from environment variables.

        Environment variables:
            GITHUB_TOKEN: GitHub token (optional)
            STARLINE_BASE_URL: Base URL for API (optional, default: https://api.github.com)
            STARLINE_CONCURRENCY: Worker pool size (optional, default: 20)
            STARLINE_CACHE_DIR: Directory for a persistent file cache (optional)
            STARLINE_REDIS_URL: Redis URL for a shared cache (optional, wins over STARLINE_CACHE_DIR)

        Args:
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            **overrides: Constructor arguments that take precedence over the environment

        Returns:
            Configured AsyncStarlineClient instance

        Raises:
            ConfigurationError: If an environment variable has an invalid value
        """
        token = os.environ.get("GITHUB_TOKEN") or None
        base_url = os.environ.get("STARLINE_BASE_URL", cls.DEFAULT_BASE_URL)

        concurrency_str = os.environ.get("STARLINE_CONCURRENCY")
        concurrency = DEFAULT_CONCURRENCY
        if concurrency_str:
            try:
                concurrency = int(concurrency_str)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid STARLINE_CONCURRENCY: {concurrency_str}. Must be an integer"
                ) from None

        cache: StarCache | None = None
        redis_url = os.environ.get("STARLINE_REDIS_URL")
        cache_dir = os.environ.get("STARLINE_CACHE_DIR")
        if redis_url:
            cache = RedisCache.from_url(redis_url)
        elif cache_dir:
            cache = FileCache(cache_dir)

        kwargs: dict[str, Any] = {
            "token": token,
            "base_url": base_url,
            "cache": cache,
            "concurrency": concurrency,
            "timeout": timeout,
            "retry_config": retry_config,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    @property
    def concurrency(self) -> int:
        return self._fetcher.concurrency

    async def fetch_stars(self, repo: str) -> StarsResult:
        """
        Retrieve the unordered star timestamps of a repository.

        Args:
            repo: Repository in "owner/name" form

        Returns:
            StarsResult with timestamps and fetch statistics
        """
        return await self._fetcher.fetch_stars(validate_repo(repo))

    async def get_star_time_series(
        self, repo: str, granularity: Granularity | str = Granularity.DAY
    ) -> StarHistory:
        """
        Retrieve a repository's stars grouped into day, week or month buckets.

        The final (most recent) bucket is dropped; `total_stars` still counts
        every retrieved star.

        Args:
            repo: Repository in "owner/name" form
            granularity: "day", "week" or "month"

        Returns:
            StarHistory with the trimmed buckets, total and fetch statistics

        Raises:
            InvalidRepositoryError: If repo is not owner/name
            InvalidGranularityError: If granularity is unknown
            RemoteFailure: If the retrieval fails
            MalformedTimestamp: If the API returns an unparseable timestamp
        """
        repo = validate_repo(repo)
        granularity = Granularity.parse(granularity)

        result = await self._fetcher.fetch_stars(repo)
        return StarHistory(
            repo=repo,
            granularity=granularity,
            buckets=generate_time_series(result.stars, granularity),
            total_stars=len(result.stars),
            stats=result.stats,
        )

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()
        if isinstance(self.cache, RedisCache):
            await self.cache.close()

    async def __aenter__(self) -> "AsyncStarlineClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
