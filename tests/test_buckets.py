"""
Unit tests for bucket key derivation.

Tests verify:
- Hour buckets switch on the 4-hour boundaries (lower bound inclusive).
- Week-of-month folds days 22-31 into week4.
- Day and month buckets are lowercase English abbreviations.
- derive_buckets is deterministic and always hits one value per domain.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-003)

TODO:
- None
"""

from datetime import datetime, timedelta

import pytest

from load_meter.services.buckets import (
    DAY_BUCKETS,
    HOUR_BUCKETS,
    MONTH_BUCKETS,
    WEEK_BUCKETS,
    BucketKeys,
    derive_buckets,
    hour_bucket,
    week_bucket,
)

# ---------------------------------------------------------------------------
# Hour-of-day
# ---------------------------------------------------------------------------


class TestHourBucket:
    """Hour buckets: <4 h4, <8 h8, <12 h12, <16 h16, <20 h20, else h24."""

    @pytest.mark.parametrize(
        ("hour", "expected"),
        [
            (0, "h4"),
            (3, "h4"),
            (4, "h8"),
            (7, "h8"),
            (8, "h12"),
            (11, "h12"),
            (12, "h16"),
            (15, "h16"),
            (16, "h20"),
            (19, "h20"),
            (20, "h24"),
            (23, "h24"),
        ],
    )
    def test_hour_boundaries(self, hour: int, expected: str) -> None:
        assert hour_bucket(hour) == expected

    def test_every_hour_maps_into_domain(self) -> None:
        assert {hour_bucket(h) for h in range(24)} == set(HOUR_BUCKETS)


# ---------------------------------------------------------------------------
# Week-of-month
# ---------------------------------------------------------------------------


class TestWeekBucket:
    """Week buckets use 7-day slices and week4 absorbs the tail of the month."""

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (1, "week1"),
            (7, "week1"),
            (8, "week2"),
            (14, "week2"),
            (15, "week3"),
            (21, "week3"),
            (22, "week4"),
            (29, "week4"),
            (31, "week4"),
        ],
    )
    def test_week_boundaries(self, day: int, expected: str) -> None:
        assert week_bucket(day) == expected

    def test_no_fifth_week(self) -> None:
        assert {week_bucket(d) for d in range(1, 32)} == set(WEEK_BUCKETS)


# ---------------------------------------------------------------------------
# derive_buckets
# ---------------------------------------------------------------------------


class TestDeriveBuckets:
    def test_friday_morning_in_march(self) -> None:
        """2024-03-15 09:30 is a Friday in the third week."""
        keys = derive_buckets(datetime(2024, 3, 15, 9, 30))
        assert keys == BucketKeys(hour="h12", day="fri", week="week3", month="mar")
        assert keys.columns() == ("h12", "fri", "week3", "mar")

    def test_last_minute_of_year(self) -> None:
        keys = derive_buckets(datetime(2023, 12, 31, 23, 59, 59))
        assert keys == BucketKeys(hour="h24", day="sun", week="week4", month="dec")

    def test_first_instant_of_year(self) -> None:
        keys = derive_buckets(datetime(2024, 1, 1, 0, 0))
        assert keys == BucketKeys(hour="h4", day="mon", week="week1", month="jan")

    def test_leap_day(self) -> None:
        keys = derive_buckets(datetime(2024, 2, 29, 12, 0))
        assert keys.week == "week4"
        assert keys.month == "feb"
        assert keys.day == "thu"

    def test_same_instant_same_result(self) -> None:
        instant = datetime(2024, 7, 4, 16, 0)
        assert derive_buckets(instant) == derive_buckets(instant)

    def test_one_value_per_domain_over_a_year(self) -> None:
        """Every hour of 2024 maps to exactly one bucket in each domain."""
        seen_days: set[str] = set()
        seen_months: set[str] = set()
        instant = datetime(2024, 1, 1)
        while instant.year == 2024:
            keys = derive_buckets(instant)
            assert keys.hour in HOUR_BUCKETS
            assert keys.day in DAY_BUCKETS
            assert keys.week in WEEK_BUCKETS
            assert keys.month in MONTH_BUCKETS
            seen_days.add(keys.day)
            seen_months.add(keys.month)
            instant += timedelta(hours=1)
        assert seen_days == set(DAY_BUCKETS)
        assert seen_months == set(MONTH_BUCKETS)
