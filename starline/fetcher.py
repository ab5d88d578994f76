"""
Concurrent paginated retrieval of stargazer timestamps.

A fixed pool of asyncio workers claims page numbers from a shared counter,
resolves each page through the cache or the API, and collects the parsed
timestamps. Order of the collected timestamps is not defined.
"""

import asyncio
import itertools
import time
from datetime import datetime

from starline.aggregator import parse_timestamp
from starline.cache import CACHE_TTL_SECONDS, NullCache, StarCache
from starline.exceptions import PaginationLimitReached, RemoteFailure
from starline.logging import get_logger, log_cache_event
from starline.transport import AsyncHTTPTransport
from starline.types.stars import FetchStats, Page, StarsResult

logger = get_logger()
cache_logger = get_logger("cache")

DEFAULT_CONCURRENCY = 20


class _Crawl:
    """State shared by the workers of one retrieval.

    Page claims and stop updates never await, so each is atomic on the event loop.
    """

    def __init__(self, repo: str, concurrency: int) -> None:
        self._pages = itertools.count(1)
        self.stop_at: int | None = None
        self.stars: list[datetime] = []
        self.stats = FetchStats(repo=repo, concurrency=concurrency)

    @property
    def ongoing(self) -> bool:
        return self.stop_at is None

    def claim(self) -> int:
        return next(self._pages)

    def stop(self, page: int) -> None:
        """Mark `page` as terminal; no page at or past it will be requested."""
        if self.stop_at is None or page < self.stop_at:
            self.stop_at = page

    def wanted(self, page: int) -> bool:
        return self.stop_at is None or page < self.stop_at

    def log(self, message: str) -> None:
        self.stats.log.append(message)


class StarFetcher:
    """
    Fetches every star timestamp of a repository.

    Example:
        ```python
        async with AsyncHTTPTransport("https://api.github.com", token) as transport:
            fetcher = StarFetcher(transport, cache=MemoryCache(), concurrency=20)
            result = await fetcher.fetch_stars("pydantic/pydantic-ai")
            print(len(result.stars), result.stats.cached_pages)
        ```
    """

    def __init__(
        self,
        transport: AsyncHTTPTransport,
        cache: StarCache | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        cache_ttl: int = CACHE_TTL_SECONDS,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            transport: Async HTTP transport for page requests
            cache: Page cache (default: no caching)
            concurrency: Number of concurrent workers
            cache_ttl: Lifetime of cached pages in seconds
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.transport = transport
        self.cache = cache if cache is not None else NullCache()
        self.concurrency = concurrency
        self.cache_ttl = cache_ttl

    async def fetch_stars(self, repo: str) -> StarsResult:
        """
        Retrieve all star timestamps for a repository.

        Args:
            repo: Repository in "owner/name" form

        Returns:
            StarsResult with the unordered timestamps and fetch statistics

        Raises:
            RemoteFailure: If any page request fails (other than the pagination limit)
            MalformedTimestamp: If any starred_at value cannot be parsed
        """
        crawl = _Crawl(repo, self.concurrency)

        self._log(crawl, f"Fetching stars for {repo} with concurrency={self.concurrency}...")
        started = time.monotonic()

        tasks = [asyncio.create_task(self._worker(repo, crawl)) for _ in range(self.concurrency)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            crawl.stop(0)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        crawl.stats.elapsed_seconds = time.monotonic() - started
        crawl.stats.star_count = len(crawl.stars)
        self._log(
            crawl,
            f"Fetched {crawl.stats.star_count} stars in {crawl.stats.elapsed_seconds:.2f} seconds",
        )
        self._log(
            crawl,
            f"pages cached {crawl.stats.cached_pages}, pages downloaded {crawl.stats.downloaded_pages}",
        )
        return StarsResult(stars=crawl.stars, stats=crawl.stats)

    async def _worker(self, repo: str, crawl: _Crawl) -> None:
        try:
            while crawl.ongoing:
                page = await self._resolve(repo, crawl.claim(), crawl)
                if page is None:
                    continue
                crawl.stars.extend(page.stars)
        except Exception:
            crawl.stop(0)
            raise

    async def _resolve(self, repo: str, number: int, crawl: _Crawl) -> Page | None:
        """Return the page, or None when it is past the end of the listing."""
        url = self.transport.stargazers_url(repo, number)

        cached = await self._cache_get(url)
        if cached is not None:
            if not crawl.wanted(number):
                return None
            page = _parse_page(number, cached, from_cache=True)
            crawl.stats.cached_pages += 1
            return page

        if not crawl.wanted(number):
            return None

        try:
            data = await self.transport.get_json_list(url)
        except PaginationLimitReached as e:
            crawl.stats.hit_pagination_limit = True
            crawl.stop(number)
            self._log(crawl, f"WARNING: {e.message}", warning=True)
            return None

        if not data:
            crawl.stop(number)
            return None

        crawl.stats.downloaded_pages += 1
        # Parsed before caching so a malformed page is never stored
        page = _parse_page(number, [_starred_at(url, item) for item in data])
        if page.is_full:
            await self._cache_put(url, page.raw_stars)
        return page

    async def _cache_get(self, url: str) -> list[str] | None:
        try:
            value = await self.cache.get(url)
        except Exception as e:
            cache_logger.warning("Cache read failed for %s, treating as miss: %s", url, e)
            return None
        log_cache_event("hit" if value is not None else "miss", url)
        return value

    async def _cache_put(self, url: str, raw_stars: list[str]) -> None:
        try:
            await self.cache.put(url, raw_stars, ttl=self.cache_ttl)
        except Exception as e:
            cache_logger.warning("Cache write failed for %s, skipping: %s", url, e)
            return
        log_cache_event("put", url, f"items={len(raw_stars)}")

    def _log(self, crawl: _Crawl, message: str, warning: bool = False) -> None:
        crawl.log(message)
        if warning:
            logger.warning(message)
        else:
            logger.info(message)


def _parse_page(number: int, raw_stars: list[str], from_cache: bool = False) -> Page:
    return Page(
        number=number,
        raw_stars=raw_stars,
        stars=[parse_timestamp(raw) for raw in raw_stars],
        from_cache=from_cache,
    )


def _starred_at(url: str, item: object) -> str:
    """Extract the starred_at field of one stargazer record."""
    if not isinstance(item, dict) or "starred_at" not in item:
        raise RemoteFailure(url, 200, f"stargazer record without starred_at: {item!r}")
    return item["starred_at"]
