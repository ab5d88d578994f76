"""Stargazer fetch data models."""

from dataclasses import dataclass, field
from datetime import datetime

# Items per page; GitHub's maximum for the stargazers endpoint.
PAGE_SIZE = 100


@dataclass
class Page:
    """One page of raw starred_at values and the instants parsed from them."""

    number: int
    raw_stars: list[str]
    stars: list[datetime] = field(default_factory=list)
    from_cache: bool = False

    @property
    def is_full(self) -> bool:
        """Only full pages may be cached; a short page marks the current end of the list."""
        return len(self.raw_stars) == PAGE_SIZE


@dataclass
class FetchStats:
    """Counters and event log for a single retrieval."""

    repo: str
    concurrency: int
    cached_pages: int = 0
    downloaded_pages: int = 0
    star_count: int = 0
    elapsed_seconds: float = 0.0
    hit_pagination_limit: bool = False
    log: list[str] = field(default_factory=list)


@dataclass
class StarsResult:
    """Unordered star timestamps (UTC) plus fetch statistics."""

    stars: list[datetime]
    stats: FetchStats
