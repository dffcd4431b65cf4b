"""
Rollup queries over the live bucket columns for chart rendering.

Read-only projection: sums the bucket columns selected by an interval
across all sockets of each load class. INTERVAL_CONFIG maps each interval
to its ordered bucket columns, chart labels and period-total column.

Unknown selectors fall back to the daily interval instead of failing.

CHANGELOG:
- 2026-10-14: Add consumption_summary over period totals (STORY-010)
- 2026-10-12: Initial creation (STORY-009)

TODO:
- None
"""

import enum
import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.db.models import LOAD_TABLES, LoadClass
from load_meter.errors import InvalidInterval
from load_meter.services.buckets import (
    DAY_BUCKETS,
    HOUR_BUCKETS,
    MONTH_BUCKETS,
    WEEK_BUCKETS,
)

logger = logging.getLogger(__name__)


class Interval(enum.StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


DEFAULT_INTERVAL = Interval.DAILY

_ALIASES: dict[str, Interval] = {
    "1d": Interval.DAILY,
    "1w": Interval.WEEKLY,
    "1m": Interval.MONTHLY,
    "1y": Interval.YEARLY,
}


@dataclass(frozen=True)
class IntervalConfig:
    """Bucket layout of one chart interval.

    Attributes:
        columns: Bucket columns in chart order.
        labels: Chart label per column.
        total_column: Period-total column used by the summary view.
    """

    columns: tuple[str, ...]
    labels: tuple[str, ...]
    total_column: str


INTERVAL_CONFIG: dict[Interval, IntervalConfig] = {
    Interval.DAILY: IntervalConfig(
        columns=HOUR_BUCKETS,
        labels=("0h", "4h", "8h", "12h", "16h", "20h"),
        total_column="eu_daily",
    ),
    Interval.WEEKLY: IntervalConfig(
        columns=DAY_BUCKETS,
        labels=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        total_column="eu_monthly",
    ),
    Interval.MONTHLY: IntervalConfig(
        columns=WEEK_BUCKETS,
        labels=("Week 1", "Week 2", "Week 3", "Week 4"),
        total_column="eu_monthly",
    ),
    Interval.YEARLY: IntervalConfig(
        columns=MONTH_BUCKETS,
        labels=(
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ),  # fmt: skip
        total_column="eu_monthly",
    ),
}


def resolve_interval(selector: str | None, *, strict: bool = False) -> Interval:
    """Resolve an interval selector (``daily`` or chart alias ``1D``).

    Args:
        selector: Requested interval, case-insensitive. None means default.
        strict: Raise instead of falling back on unknown selectors.

    Returns:
        Interval: Resolved interval, DEFAULT_INTERVAL on fallback.

    Raises:
        InvalidInterval: If ``strict`` and the selector is unknown.
    """
    if selector is None:
        return DEFAULT_INTERVAL
    key = selector.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Interval(key)
    except ValueError:
        if strict:
            raise InvalidInterval(selector) from None
        logger.warning(
            "Unsupported interval '%s', falling back to '%s'",
            selector,
            DEFAULT_INTERVAL.value,
        )
        return DEFAULT_INTERVAL


async def _sum_columns(
    db: AsyncSession,
    load_class: LoadClass,
    columns: tuple[str, ...],
) -> dict[str, int]:
    """SUM each column over all sockets of one load table."""
    table = LOAD_TABLES[load_class].__table__
    stmt = select(
        *(func.coalesce(func.sum(table.c[col]), 0).label(col) for col in columns)
    )
    row = (await db.execute(stmt)).mappings().one()
    return {col: int(row[col]) for col in columns}


async def consumption_history(db: AsyncSession, interval: Interval) -> dict:
    """Return chart series for an interval.

    Args:
        db: Session bound to the tenant's database.
        interval: Resolved interval.

    Returns:
        dict: ``labels`` in chart order, ``series`` mapping each load class
        to its values per label, and ``total`` summed across load classes.
        All values are milli-watt-hours.
    """
    config = INTERVAL_CONFIG[interval]
    series: dict[str, list[int]] = {}
    for load_class in LoadClass:
        sums = await _sum_columns(db, load_class, config.columns)
        series[load_class.value] = [sums[col] for col in config.columns]

    total = [sum(values) for values in zip(*series.values(), strict=True)]
    return {
        "interval": interval.value,
        "labels": list(config.labels),
        "series": series,
        "total": total,
    }


async def consumption_summary(db: AsyncSession, interval: Interval) -> dict[str, int]:
    """Return the running period total per load class.

    Daily uses eu_daily; weekly, monthly and yearly use eu_monthly.
    """
    column = INTERVAL_CONFIG[interval].total_column
    summary: dict[str, int] = {}
    for load_class in LoadClass:
        sums = await _sum_columns(db, load_class, (column,))
        summary[load_class.value] = sums[column]
    return summary
