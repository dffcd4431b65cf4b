"""
Accumulator: apply an energy delta to one socket's counter row.

The increment is a single UPDATE ... SET col = col + :delta statement, so
concurrent writers to the same row are serialised by the database and no
increment is lost. Rows for different sockets never block each other.

CHANGELOG:
- 2026-10-10: Initial creation (STORY-004)

TODO:
- None
"""

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.db.models import LOAD_TABLES, LoadClass
from load_meter.errors import UnknownSocket
from load_meter.services.buckets import BucketKeys, derive_buckets

logger = logging.getLogger(__name__)

# Period totals incremented on every write, whatever the active buckets.
PERIOD_TOTAL_COLUMNS: tuple[str, ...] = ("eu_daily", "eu_monthly")


async def apply_delta(
    db: AsyncSession,
    load_class: LoadClass | str,
    socket_id: str,
    delta_mwh: int,
    at: datetime,
) -> BucketKeys:
    """Add ``delta_mwh`` to the active buckets and period totals of one row.

    Args:
        db: Session bound to the tenant's database.
        load_class: Load class of the socket; selects the counter table.
        socket_id: Socket identifier (row key).
        delta_mwh: Energy delta in milli-watt-hours.
        at: Tenant-local instant used to pick the active buckets.

    Returns:
        BucketKeys: The buckets that received the increment.

    Raises:
        ValueError: If ``load_class`` is not a known load class.
        UnknownSocket: If no row exists for the socket in that table.
    """
    model = LOAD_TABLES[LoadClass(load_class)]
    table = model.__table__
    keys = derive_buckets(at)

    values = {
        column: table.c[column] + delta_mwh
        for column in (*keys.columns(), *PERIOD_TOTAL_COLUMNS)
    }
    stmt = update(table).where(table.c.socket_id == socket_id).values(values)
    result = await db.execute(stmt)

    if result.rowcount == 0:
        await db.rollback()
        raise UnknownSocket(LoadClass(load_class).value, socket_id)

    await db.commit()
    logger.debug(
        "Applied %d mWh to %s/%s buckets=%s",
        delta_mwh,
        table.name,
        socket_id,
        keys.columns(),
    )
    return keys
