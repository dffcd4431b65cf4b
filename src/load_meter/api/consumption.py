"""
GET /v1/consumption endpoints for chart data.

/v1/consumption/history returns bucket labels and per-load-class values
for an interval; /v1/consumption/summary returns the running period total
per load class. Unknown intervals fall back to daily. Responses are cached
in Redis per tenant and invalidated on ingest and reset.

CHANGELOG:
- 2026-10-14: Add summary endpoint and Redis caching (STORY-010)
- 2026-10-12: Initial creation (STORY-009)

TODO:
- None
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from load_meter.api.deps import Tenant, TenantSession, WallClock
from load_meter.cache.redis_client import get_cached_rollup, set_cached_rollup
from load_meter.services.rollup import (
    consumption_history,
    consumption_summary,
    resolve_interval,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/consumption", tags=["consumption"])

IntervalQuery = Annotated[
    str | None,
    Query(description="Interval: daily, weekly, monthly, yearly (or 1D, 1W, 1M, 1Y)."),
]


# ---------------------------------------------------------------------------
# Pydantic response models
# ---------------------------------------------------------------------------


class HistoryResponse(BaseModel):
    """Chart series for one interval, values in milli-watt-hours.

    Attributes:
        interval: Resolved interval.
        labels: Bucket labels in chart order.
        series: Load class -> value per label.
        total: Value per label summed across load classes.
    """

    interval: str
    labels: list[str]
    series: dict[str, list[int]]
    total: list[int]


class SummaryResponse(BaseModel):
    interval: str
    data: dict[str, int]
    timestamp: datetime


def _cache_ttl(request: Request) -> int:
    return request.app.state.settings.cache_ttl_s


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    request: Request,
    tenant: Tenant,
    db: TenantSession,
    interval: IntervalQuery = None,
) -> HistoryResponse:
    """Return bucket labels and summed values for the requested interval."""
    resolved = resolve_interval(interval)

    cached = await get_cached_rollup(tenant, "history", resolved.value)
    if cached is not None:
        return HistoryResponse(**cached)

    payload = await consumption_history(db, resolved)
    await set_cached_rollup(
        tenant, "history", resolved.value, payload, _cache_ttl(request)
    )

    logger.debug("History query: tenant=%s interval=%s", tenant, resolved.value)
    return HistoryResponse(**payload)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    request: Request,
    tenant: Tenant,
    db: TenantSession,
    clock: WallClock,
    interval: IntervalQuery = None,
) -> SummaryResponse:
    """Return the running daily or monthly total per load class."""
    resolved = resolve_interval(interval)

    data = await get_cached_rollup(tenant, "summary", resolved.value)
    if data is None:
        data = await consumption_summary(db, resolved)
        await set_cached_rollup(
            tenant, "summary", resolved.value, data, _cache_ttl(request)
        )

    return SummaryResponse(interval=resolved.value, data=data, timestamp=clock.now())
