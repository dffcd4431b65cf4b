"""
Ingestion service: turn one power reading into bucket increments.

Converts power and duration to milli-watt-hours, applies the delta to the
socket's counter row at the clock's current instant, and invalidates the
tenant's cached rollups on success.

Delivery from the telemetry source is at-least-once; a redelivered reading
is counted again.

CHANGELOG:
- 2026-10-11: Initial creation (STORY-004)

TODO:
- None
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.cache.redis_client import invalidate_tenant_cache
from load_meter.clock import Clock
from load_meter.db.models import LoadClass
from load_meter.services.accumulator import apply_delta
from load_meter.services.buckets import BucketKeys
from load_meter.services.energy import milliwatt_hours_to_wh, to_milliwatt_hours

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reading:
    """One power reading from a socket.

    Attributes:
        load_class: Load class the socket belongs to.
        socket_id: Socket identifier.
        power_w: Instantaneous power in watts.
        duration_s: How long the reading lasted, in seconds.
    """

    load_class: LoadClass
    socket_id: str
    power_w: float
    duration_s: float = 60


@dataclass(frozen=True)
class IngestResult:
    delta_mwh: int
    watt_hours: Decimal
    buckets: BucketKeys


async def ingest_reading(
    db: AsyncSession,
    tenant: str,
    reading: Reading,
    clock: Clock,
) -> IngestResult:
    """Convert a reading and accumulate it into the socket's buckets.

    Args:
        db: Session bound to the tenant's database.
        tenant: Tenant identifier (used for cache invalidation and logs).
        reading: The power reading.
        clock: Source of the tenant-local current instant.

    Returns:
        IngestResult: Stored delta, its watt-hour value and the buckets hit.

    Raises:
        UnknownSocket: If the socket has no counter row.
    """
    delta_mwh = to_milliwatt_hours(reading.power_w, reading.duration_s)
    at = clock.now()
    buckets = await apply_delta(db, reading.load_class, reading.socket_id, delta_mwh, at)

    logger.info(
        "Ingested %d mWh for tenant %s socket %s/%s at %s",
        delta_mwh,
        tenant,
        reading.load_class,
        reading.socket_id,
        at.isoformat(),
    )

    await invalidate_tenant_cache(tenant)

    return IngestResult(
        delta_mwh=delta_mwh,
        watt_hours=milliwatt_hours_to_wh(delta_mwh),
        buckets=buckets,
    )
