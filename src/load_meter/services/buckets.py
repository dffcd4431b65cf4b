"""
Bucket key derivation.

Maps a tenant-local wall-clock instant onto the four bucket columns that
are active for writes at that instant: one hour-of-day slot, one
day-of-week slot, one week-of-month slot and one month-of-year slot.

Week-of-month uses fixed 7-day slices from the 1st; week4 absorbs days
22-31, so it spans 9-10 days in longer months. There is no fifth week.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-003)

TODO:
- None
"""

from dataclasses import dataclass
from datetime import datetime

HOUR_BUCKETS: tuple[str, ...] = ("h4", "h8", "h12", "h16", "h20", "h24")
DAY_BUCKETS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
WEEK_BUCKETS: tuple[str, ...] = ("week1", "week2", "week3", "week4")
MONTH_BUCKETS: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)  # fmt: skip


@dataclass(frozen=True)
class BucketKeys:
    """The four bucket columns active at one instant.

    Attributes:
        hour: One of HOUR_BUCKETS.
        day: One of DAY_BUCKETS.
        week: One of WEEK_BUCKETS.
        month: One of MONTH_BUCKETS.
    """

    hour: str
    day: str
    week: str
    month: str

    def columns(self) -> tuple[str, str, str, str]:
        return (self.hour, self.day, self.week, self.month)


def hour_bucket(hour: int) -> str:
    """Return the 4-hour slot for an hour in 0-23 (lower bound inclusive)."""
    return HOUR_BUCKETS[min(hour // 4, 5)]


def day_bucket(at: datetime) -> str:
    # weekday() is locale independent, unlike strftime("%a")
    return DAY_BUCKETS[at.weekday()]


def week_bucket(day_of_month: int) -> str:
    """Return the week-of-month slot; days 22-31 all land in week4."""
    if day_of_month <= 7:
        return "week1"
    if day_of_month <= 14:
        return "week2"
    if day_of_month <= 21:
        return "week3"
    return "week4"


def month_bucket(at: datetime) -> str:
    return MONTH_BUCKETS[at.month - 1]


def derive_buckets(at: datetime) -> BucketKeys:
    """Derive the active bucket columns for a wall-clock instant.

    The instant is used as given; converting to the tenant's timezone is
    the caller's job.

    Args:
        at: Tenant-local wall-clock instant.

    Returns:
        BucketKeys: Active hour, day, week and month buckets.
    """
    return BucketKeys(
        hour=hour_bucket(at.hour),
        day=day_bucket(at),
        week=week_bucket(at.day),
        month=month_bucket(at),
    )
