"""
POST /v1/ingest endpoint for socket power readings.

Accepts one reading (load class, socket id, power, duration), converts it
to milli-watt-hours and increments the socket's active time buckets in the
authenticated tenant's database.

CHANGELOG:
- 2026-10-16: Reject non-finite and out-of-range power and duration
- 2026-10-11: Initial creation (STORY-004)

TODO:
- None
"""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from load_meter.api.deps import Tenant, TenantSession, WallClock
from load_meter.db.models import LoadClass
from load_meter.errors import UnknownSocket
from load_meter.services.ingestion import Reading, ingest_reading

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["ingest"])

# One reading is at most 1 MW for a day: 2.4e10 mWh, far inside a BIGINT.
MAX_POWER_W = 1_000_000
MAX_DURATION_S = 86_400


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class ReadingIn(BaseModel):
    """Single power reading from a socket."""

    load_class: LoadClass
    socket_id: str = Field(min_length=1, max_length=128)
    power_w: float = Field(ge=0, le=MAX_POWER_W, allow_inf_nan=False)
    duration_s: float = Field(
        default=60, ge=0, le=MAX_DURATION_S, allow_inf_nan=False
    )


class BucketsOut(BaseModel):
    hour: str
    day: str
    week: str
    month: str


class IngestResponse(BaseModel):
    """Response from the ingest endpoint."""

    success: bool = True
    delta_mwh: int
    watt_hours: float
    buckets: BucketsOut


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------


@router.post("/ingest", response_model=IngestResponse)
async def ingest(
    payload: ReadingIn,
    tenant: Tenant,
    db: TenantSession,
    clock: WallClock,
) -> IngestResponse:
    """Accumulate one power reading into the socket's buckets.

    Args:
        payload: The validated reading.
        tenant: Authenticated tenant id from bearer token.
        db: Session on the tenant's database.
        clock: Tenant wall clock.

    Returns:
        IngestResponse: Stored delta and the buckets it was added to.

    Raises:
        HTTPException: 404 if the socket is not provisioned.
    """
    reading = Reading(
        load_class=payload.load_class,
        socket_id=payload.socket_id,
        power_w=payload.power_w,
        duration_s=payload.duration_s,
    )
    try:
        result = await ingest_reading(db, tenant, reading, clock)
    except UnknownSocket as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return IngestResponse(
        delta_mwh=result.delta_mwh,
        watt_hours=float(result.watt_hours),
        buckets=BucketsOut(
            hour=result.buckets.hour,
            day=result.buckets.day,
            week=result.buckets.week,
            month=result.buckets.month,
        ),
    )
