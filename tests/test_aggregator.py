"""
Property-based tests for temporal aggregation.

Feature: starline
"""

import random
from datetime import date, datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from starline.aggregator import (
    bucket_stars,
    cumulative_counts,
    generate_time_series,
    parse_timestamp,
    truncate,
)
from starline.exceptions import InvalidGranularityError, MalformedTimestamp
from starline.types.series import Bucket, Granularity

UTC = timezone.utc

instant_strategy = st.datetimes(
    min_value=datetime(2008, 1, 1),
    max_value=datetime(2035, 1, 1),
    timezones=st.just(UTC),
)
granularity_strategy = st.sampled_from(list(Granularity))


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def test_day_buckets_example() -> None:
    """Two stars on Jan 1 and one on Jan 2; the Jan 2 bucket is dropped."""
    stars = [
        parse_timestamp("2022-01-01T10:00:00Z"),
        parse_timestamp("2022-01-01T12:00:00Z"),
        parse_timestamp("2022-01-02T15:00:00Z"),
    ]

    assert bucket_stars(stars, "day") == [
        Bucket("2022-01-01", 2),
        Bucket("2022-01-02", 1),
    ]
    assert generate_time_series(stars, "day") == [Bucket("2022-01-01", 2)]


def test_empty_input_yields_empty_series() -> None:
    assert bucket_stars([], Granularity.DAY) == []
    assert generate_time_series([], Granularity.DAY) == []


def test_single_star_yields_empty_series() -> None:
    stars = [utc(2023, 5, 17, 8, 30)]

    assert bucket_stars(stars, "week") == [Bucket("2023-05-15", 1)]
    assert generate_time_series(stars, "week") == []


def test_no_gap_filling() -> None:
    stars = [utc(2022, 1, 1), utc(2022, 1, 5), utc(2022, 1, 9)]

    assert [b.date for b in bucket_stars(stars, "day")] == [
        "2022-01-01",
        "2022-01-05",
        "2022-01-09",
    ]


def test_wednesday_truncates_to_monday() -> None:
    # 2024-03-13 is a Wednesday
    assert truncate(utc(2024, 3, 13, 17, 45, 12), "week") == utc(2024, 3, 11)


def test_sunday_truncates_to_previous_monday() -> None:
    # 2024-03-17 is a Sunday
    assert truncate(utc(2024, 3, 17, 23, 59, 59), "week") == utc(2024, 3, 11)


def test_monday_truncates_to_itself() -> None:
    assert truncate(utc(2024, 3, 11, 0, 0, 1), "week") == utc(2024, 3, 11)


def test_week_truncation_crosses_month_and_year() -> None:
    # 2023-01-01 is a Sunday
    assert truncate(utc(2023, 1, 1, 12), Granularity.WEEK) == utc(2022, 12, 26)


def test_month_truncation() -> None:
    assert truncate(utc(2024, 2, 29, 13, 1), Granularity.MONTH) == utc(2024, 2, 1)


def test_truncation_happens_in_utc() -> None:
    # 01:30 on Jan 2 at UTC+03:00 is still Jan 1 in UTC
    instant = datetime(2022, 1, 2, 1, 30, tzinfo=timezone(timedelta(hours=3)))
    assert truncate(instant, "day") == utc(2022, 1, 1)


def test_naive_and_aware_instants_can_be_mixed() -> None:
    stars = [
        datetime(2022, 1, 2, 12),  # naive, taken as UTC
        utc(2022, 1, 1, 9),
        datetime(2022, 1, 2, 1, 30, tzinfo=timezone(timedelta(hours=3))),  # Jan 1 in UTC
        datetime(2022, 1, 3),
    ]

    assert bucket_stars(stars, "day") == [
        Bucket("2022-01-01", 2),
        Bucket("2022-01-02", 1),
        Bucket("2022-01-03", 1),
    ]


def test_month_buckets_count_per_month() -> None:
    stars = [utc(2022, 1, 31, 23), utc(2022, 2, 1), utc(2022, 2, 14), utc(2022, 3, 1)]

    assert bucket_stars(stars, "month") == [
        Bucket("2022-01-01", 1),
        Bucket("2022-02-01", 2),
        Bucket("2022-03-01", 1),
    ]


def test_unknown_granularity_rejected() -> None:
    with pytest.raises(InvalidGranularityError):
        bucket_stars([utc(2022, 1, 1)], "year")


def test_cumulative_counts() -> None:
    buckets = [Bucket("2022-01-01", 2), Bucket("2022-01-02", 5), Bucket("2022-01-03", 1)]
    assert cumulative_counts(buckets) == [2, 7, 8]
    assert cumulative_counts([]) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2022-01-01T10:00:00Z", utc(2022, 1, 1, 10)),
        ("2022-01-01T10:00:00+02:00", utc(2022, 1, 1, 8)),
        ("2022-01-01T10:00:00", utc(2022, 1, 1, 10)),
        ("2022-01-01T10:00:00.250Z", utc(2022, 1, 1, 10, 0, 0, 250000)),
    ],
)
def test_parse_timestamp(value: str, expected: datetime) -> None:
    parsed = parse_timestamp(value)
    assert parsed == expected
    assert parsed.utcoffset() == timedelta(0)


@pytest.mark.parametrize("value", ["", "not-a-date", "2022-13-01T00:00:00Z", None, 1640995200])
def test_parse_timestamp_rejects_malformed(value: object) -> None:
    with pytest.raises(MalformedTimestamp) as exc_info:
        parse_timestamp(value)  # type: ignore[arg-type]

    assert exc_info.value.value == value
    assert exc_info.value.code == "MALFORMED_TIMESTAMP"


@given(
    stars=st.lists(instant_strategy, max_size=200),
    granularity=granularity_strategy,
    seed=st.integers(min_value=0, max_value=2**32 - 1),
)
@settings(max_examples=100)
def test_property_sort_independence(
    stars: list[datetime], granularity: Granularity, seed: int
) -> None:
    """
    Any permutation of the same stars yields the same trimmed series.
    """
    shuffled = list(stars)
    random.Random(seed).shuffle(shuffled)

    assert generate_time_series(shuffled, granularity) == generate_time_series(
        sorted(stars), granularity
    )


@given(stars=st.lists(instant_strategy, max_size=200), granularity=granularity_strategy)
@settings(max_examples=100)
def test_property_buckets_ascending_and_complete(
    stars: list[datetime], granularity: Granularity
) -> None:
    """
    Buckets are strictly ascending, cover every star exactly once, and the
    trimmed series is the untrimmed one minus its last entry.
    """
    buckets = bucket_stars(stars, granularity)
    dates = [b.date for b in buckets]

    assert dates == sorted(set(dates))
    assert sum(b.count for b in buckets) == len(stars)
    assert all(b.count > 0 for b in buckets)
    assert generate_time_series(stars, granularity) == buckets[:-1]


@given(instant=instant_strategy, granularity=granularity_strategy)
@settings(max_examples=200)
def test_property_truncation_is_bucket_start(instant: datetime, granularity: Granularity) -> None:
    """
    The truncated instant is midnight, not after the instant, idempotent,
    and on a Monday / first of month as the granularity requires.
    """
    start = truncate(instant, granularity)

    assert start <= instant
    assert (start.hour, start.minute, start.second, start.microsecond) == (0, 0, 0, 0)
    assert truncate(start, granularity) == start

    if granularity is Granularity.DAY:
        assert start.date() == instant.date()
    elif granularity is Granularity.WEEK:
        assert start.weekday() == 0
        assert instant - start < timedelta(days=7)
    else:
        assert start.day == 1
        assert (start.year, start.month) == (instant.year, instant.month)


@given(day=st.dates(min_value=date(2010, 1, 1), max_value=date(2030, 12, 31)))
@settings(max_examples=100)
def test_property_week_rollback_rule(day: date) -> None:
    """
    Sunday rolls back six days; any other day rolls back to Monday.
    """
    instant = datetime(day.year, day.month, day.day, 12, tzinfo=UTC)
    start = truncate(instant, "week")

    # isoweekday(): Monday == 1 ... Sunday == 7
    expected_back = 6 if day.isoweekday() == 7 else day.isoweekday() - 1
    assert (instant.date() - start.date()).days == expected_back
