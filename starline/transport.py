"""
Async HTTP Transport for Starline.

Handles async HTTP communication with the GitHub stargazers endpoint, with
automatic retry logic and error classification using httpx async client.
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from starline.exceptions import PaginationLimitReached, RemoteFailure
from starline.logging import log_http_request, log_http_response, mask_sensitive_data
from starline.types.stars import PAGE_SIZE

# Status GitHub returns once a listing is paged past its hard ceiling.
PAGINATION_LIMIT_STATUS = 422

# Keep error bodies in exception messages readable.
_MAX_ERROR_BODY = 2000


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 502, 503, 504])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class AsyncHTTPTransport:
    """
    Async HTTP transport for paginated stargazer requests.

    Handles:
    - Star-timestamp media type and optional token authentication
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Classification of responses into pages, the pagination limit and failures
    """

    DEFAULT_HEADERS = {
        "Accept": "application/vnd.github.v3.star+json",
        "User-Agent": "starline",
    }

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: GitHub token; requests are unauthenticated when omitted
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Alternative httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        headers = dict(self.DEFAULT_HEADERS)
        if token:
            headers["Authorization"] = f"token {token}"
        self.authenticated = bool(token)

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            follow_redirects=True,
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def stargazers_url(self, repo: str, page: int) -> str:
        """Build the exact page URL; it doubles as the cache key."""
        return f"{self.base_url}/repos/{repo}/stargazers?page={page}&per_page={PAGE_SIZE}"

    async def get_json_list(self, url: str) -> list[Any]:
        """
        GET a page and return its JSON list payload.

        Args:
            url: Full page URL

        Returns:
            Parsed JSON list (empty when the listing is exhausted)

        Raises:
            PaginationLimitReached: On HTTP 422
            RemoteFailure: On any other non-2xx status, after retries, or on a non-list payload
        """
        started = time.monotonic()
        response = await self._execute_with_retry(url)

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteFailure(url, response.status_code, "response is not valid JSON") from e

        if not isinstance(data, list):
            raise RemoteFailure(url, response.status_code, "expected a JSON list")

        log_http_response(
            response.status_code,
            url,
            items=len(data),
            elapsed_ms=(time.monotonic() - started) * 1000,
        )
        return data

    async def _execute_with_retry(self, url: str) -> httpx.Response:
        """
        Execute a GET with automatic retry on retryable errors.

        Args:
            url: Full page URL

        Returns:
            The successful (2xx) response

        Raises:
            PaginationLimitReached: On HTTP 422
            RemoteFailure: On non-retryable errors or after max retries
        """
        for attempt in range(self.retry_config.max_retries + 1):
            try:
                log_http_request("GET", url, dict(self._client.headers))
                response = await self._client.get(url)
            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise RemoteFailure(url, None, mask_sensitive_data(str(e))) from e

                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue

            if response.is_success:
                return response

            if response.status_code == PAGINATION_LIMIT_STATUS:
                raise PaginationLimitReached(url)

            if not self._should_retry(response.status_code, attempt):
                raise RemoteFailure(
                    url,
                    response.status_code,
                    mask_sensitive_data(response.text[:_MAX_ERROR_BODY]),
                )

            retry_after = response.headers.get("Retry-After") or self._rate_limit_reset_wait(response)
            await asyncio.sleep(self._get_backoff_time(attempt, retry_after))

        # Only reachable with a negative max_retries
        raise RemoteFailure(url, None, "request was never attempted")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _rate_limit_reset_wait(self, response: httpx.Response) -> str | None:
        """Seconds until X-RateLimit-Reset when the quota is used up, else None."""
        if response.headers.get("X-RateLimit-Remaining") != "0":
            return None
        reset = response.headers.get("X-RateLimit-Reset")
        if reset is None:
            return None
        try:
            return str(max(0.0, float(reset) - time.time()))
        except ValueError:
            return None

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return min(float(retry_after), self.retry_config.max_backoff)
            except ValueError:
                pass  # Fall through to exponential backoff

        # Exponential backoff: backoff_factor ^ attempt
        base_wait = self.retry_config.backoff_factor ** attempt

        # Apply jitter (±jitter%)
        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        # Cap at max_backoff
        return min(wait_time, self.retry_config.max_backoff)
