"""Starline - GitHub star history as a time series."""

from starline.aggregator import (
    bucket_stars,
    cumulative_counts,
    generate_time_series,
    parse_timestamp,
    truncate,
)
from starline.cache import (
    CACHE_TTL_SECONDS,
    FileCache,
    MemoryCache,
    NullCache,
    RedisCache,
    StarCache,
)
from starline.client import AsyncStarlineClient
from starline.exceptions import (
    CacheError,
    ConfigurationError,
    InvalidGranularityError,
    InvalidRepositoryError,
    MalformedTimestamp,
    PaginationLimitReached,
    RemoteFailure,
    StarlineError,
)
from starline.fetcher import StarFetcher
from starline.logging import configure_logging, get_logger
from starline.transport import AsyncHTTPTransport, RetryConfig
from starline.types import Bucket, FetchStats, Granularity, Page, StarHistory, StarsResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Client
    "AsyncStarlineClient",
    # Retrieval
    "StarFetcher",
    "AsyncHTTPTransport",
    "RetryConfig",
    # Caches
    "StarCache",
    "MemoryCache",
    "FileCache",
    "RedisCache",
    "NullCache",
    "CACHE_TTL_SECONDS",
    # Aggregation
    "parse_timestamp",
    "truncate",
    "bucket_stars",
    "generate_time_series",
    "cumulative_counts",
    # Types
    "Granularity",
    "Bucket",
    "Page",
    "FetchStats",
    "StarsResult",
    "StarHistory",
    # Exceptions
    "StarlineError",
    "PaginationLimitReached",
    "RemoteFailure",
    "MalformedTimestamp",
    "InvalidGranularityError",
    "InvalidRepositoryError",
    "ConfigurationError",
    "CacheError",
    # Logging
    "configure_logging",
    "get_logger",
]
