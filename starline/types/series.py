"""Time series data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from starline.exceptions import InvalidGranularityError
from starline.types.stars import FetchStats


class Granularity(str, Enum):
    """Width of a time bucket."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: "Granularity | str") -> "Granularity":
        """
        Coerce a user-supplied value into a Granularity.

        Raises:
            InvalidGranularityError: If the value is not day, week or month
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidGranularityError(value)


@dataclass(frozen=True)
class Bucket:
    """Number of stars whose truncated date is `date` (YYYY-MM-DD)."""

    date: str
    count: int


@dataclass
class StarHistory:
    """Trimmed time series for a repository.

    `total_stars` counts every retrieved star, including those in the
    dropped final bucket.
    """

    repo: str
    granularity: Granularity
    buckets: list[Bucket]
    total_stars: int
    stats: FetchStats

    def cumulative(self) -> list[int]:
        """Running star totals over the trimmed buckets."""
        from starline.aggregator import cumulative_counts

        return cumulative_counts(self.buckets)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "group": self.granularity.value,
            "totalStars": self.total_stars,
            "points": [
                {"date": bucket.date, "count": bucket.count, "cumulative": total}
                for bucket, total in zip(self.buckets, self.cumulative())
            ],
            "stats": {
                "concurrency": self.stats.concurrency,
                "cachedPages": self.stats.cached_pages,
                "downloadedPages": self.stats.downloaded_pages,
                "elapsedSeconds": round(self.stats.elapsed_seconds, 2),
                "hitPaginationLimit": self.stats.hit_pagination_limit,
            },
        }
