"""
Temporal aggregation of star timestamps.

Turns an unordered collection of star instants into an ascending series of
(date, count) buckets at day, week or month granularity.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from itertools import accumulate

from starline.exceptions import MalformedTimestamp
from starline.types.series import Bucket, Granularity


def parse_timestamp(value: str) -> datetime:
    """
    Parse a starred_at string into an aware UTC datetime.

    Accepts ISO-8601 with a trailing "Z" or an explicit offset; values
    without an offset are taken to be UTC.

    Raises:
        MalformedTimestamp: If the value is not a valid instant
    """
    if not isinstance(value, str):
        raise MalformedTimestamp(value)

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedTimestamp(value) from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Convert to an aware UTC datetime; naive values are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def truncate(instant: datetime, granularity: Granularity | str) -> datetime:
    """
    Truncate an instant to the start of its bucket, in UTC.

    day: midnight. week: midnight on the Monday of that week (a Sunday rolls
    back six days). month: midnight on the first of the month.
    """
    granularity = Granularity.parse(granularity)

    day = as_utc(instant).replace(hour=0, minute=0, second=0, microsecond=0)

    if granularity is Granularity.WEEK:
        # weekday(): Monday == 0 ... Sunday == 6
        return day - timedelta(days=day.weekday())
    if granularity is Granularity.MONTH:
        return day.replace(day=1)
    return day


def bucket_stars(stars: Iterable[datetime], granularity: Granularity | str) -> list[Bucket]:
    """
    Count stars per bucket, oldest bucket first.

    Only buckets that contain at least one star are produced.
    """
    granularity = Granularity.parse(granularity)

    counts: dict[str, int] = {}
    for star in sorted(stars, key=as_utc):
        key = truncate(star, granularity).date().isoformat()
        counts[key] = counts.get(key, 0) + 1

    return [Bucket(date=date, count=count) for date, count in counts.items()]


def generate_time_series(stars: Iterable[datetime], granularity: Granularity | str) -> list[Bucket]:
    """
    Bucket stars and drop the most recent bucket.

    The last bucket is always removed since the current period is usually
    still accumulating stars.
    """
    buckets = bucket_stars(stars, granularity)
    # remove the last entry
    return buckets[:-1]


def cumulative_counts(buckets: Iterable[Bucket]) -> list[int]:
    """Running totals of bucket counts."""
    return list(accumulate(bucket.count for bucket in buckets))
