"""
Reset ledger: per-tenant record of the last reset instant per period kind.

A period is due for reset when the ledger has no entry for it, or when the
recorded last reset happened before the start of the current period
(today 00:00, Monday 00:00, the 1st 00:00, January 1st 00:00). Boundaries
are computed in the timezone of the ``now`` passed in; the ledger never
reads the system clock.

The reset_logs table is created lazily and seeded with ``now`` for all
four kinds, so a freshly provisioned tenant is not reset until its first
period boundary passes.

The ledger row is also the reset lock. A cycle claims a period by moving
last_reset_at to now with an UPDATE guarded by ``last_reset_at < boundary``;
only the cycle whose UPDATE hits the row goes on to zero the columns.

CHANGELOG:
- 2026-10-16: Claim resets with a conditional UPDATE so overlapping cycles reset once
- 2026-10-13: Seed with ON CONFLICT DO NOTHING for concurrent first access (STORY-007)
- 2026-10-10: Initial creation (STORY-005)

TODO:
- None
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.db.models import ResetLog

logger = logging.getLogger(__name__)


class PeriodKind(enum.StrEnum):
    """Granularity at which bucket columns are rolled back to zero."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def period_boundary(kind: PeriodKind | str, now: datetime) -> datetime:
    """Return the start of the period of ``kind`` that contains ``now``.

    Weeks start on Monday. The result keeps ``now``'s tzinfo.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    kind = PeriodKind(kind)
    if kind is PeriodKind.DAILY:
        return midnight
    if kind is PeriodKind.WEEKLY:
        return midnight - timedelta(days=now.weekday())
    if kind is PeriodKind.MONTHLY:
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def _align(stored: datetime, now: datetime) -> datetime:
    # Backends without timezone support hand back naive wall-clock values.
    if stored.tzinfo is None and now.tzinfo is not None:
        return stored.replace(tzinfo=now.tzinfo)
    if stored.tzinfo is not None and now.tzinfo is None:
        return stored.replace(tzinfo=None)
    return stored


@dataclass(frozen=True)
class ResetClaim:
    """A period reset taken by one check cycle.

    Attributes:
        kind: Period kind being reset.
        claimed_at: Value written to last_reset_at by the claim.
        previous: last_reset_at before the claim, None if there was no entry.
    """

    kind: PeriodKind
    claimed_at: datetime
    previous: datetime | None


class ResetLedger:
    """Reads and updates the reset_logs table of one tenant.

    Args:
        db: Session bound to the tenant's database.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def _upsert(self, rows: list[dict], *, overwrite: bool):
        dialect = self._dialect()
        if dialect == "postgresql":
            stmt = pg_insert(ResetLog).values(rows)
        elif dialect == "sqlite":
            stmt = sqlite_insert(ResetLog).values(rows)
        else:
            return None
        if overwrite:
            return stmt.on_conflict_do_update(
                index_elements=["reset_type"],
                set_={"last_reset_at": stmt.excluded.last_reset_at},
            )
        return stmt.on_conflict_do_nothing(index_elements=["reset_type"])

    async def ensure(self, now: datetime) -> bool:
        """Create and seed reset_logs if the table does not exist yet.

        Args:
            now: Seed value for every period kind.

        Returns:
            bool: True if the table was created by this call.
        """
        exists = await self.db.run_sync(
            lambda s: inspect(s.connection()).has_table(ResetLog.__tablename__)
        )
        if exists:
            return False

        await self.db.run_sync(
            lambda s: ResetLog.__table__.create(s.connection(), checkfirst=True)
        )
        rows = [{"reset_type": kind.value, "last_reset_at": now} for kind in PeriodKind]
        stmt = self._upsert(rows, overwrite=False)
        if stmt is None:
            await self.db.execute(ResetLog.__table__.insert(), rows)
        else:
            await self.db.execute(stmt)
        await self.db.commit()
        logger.info("Created reset_logs table seeded at %s", now.isoformat())
        return True

    async def last_reset_at(self, kind: PeriodKind | str) -> datetime | None:
        result = await self.db.execute(
            select(ResetLog.last_reset_at).where(
                ResetLog.reset_type == PeriodKind(kind).value
            )
        )
        return result.scalar_one_or_none()

    async def is_due(self, kind: PeriodKind | str, now: datetime) -> bool:
        """Return True if a reset of ``kind`` is due at ``now``.

        A missing ledger entry counts as due.
        """
        last = await self.last_reset_at(kind)
        if last is None:
            return True
        return _align(last, now) < period_boundary(kind, now)

    async def mark_reset(self, kind: PeriodKind | str, now: datetime) -> None:
        """Record that a reset of ``kind`` completed at ``now`` and commit."""
        kind = PeriodKind(kind)
        stmt = self._upsert(
            [{"reset_type": kind.value, "last_reset_at": now}], overwrite=True
        )
        if stmt is not None:
            await self.db.execute(stmt)
        else:
            result = await self.db.execute(
                update(ResetLog)
                .where(ResetLog.reset_type == kind.value)
                .values(last_reset_at=now)
            )
            if result.rowcount == 0:
                await self.db.execute(
                    ResetLog.__table__.insert(),
                    [{"reset_type": kind.value, "last_reset_at": now}],
                )
        await self.db.commit()

    async def claim(self, kind: PeriodKind | str, now: datetime) -> ResetClaim | None:
        """Take the reset of ``kind`` for the period containing ``now``.

        The entry is moved to ``now`` only while it still predates the
        period boundary, in a single statement, so of several overlapping
        cycles exactly one gets the claim. A missing entry is claimed by
        inserting it.

        Returns:
            ResetClaim | None: The claim, or None if the period was already
            reset or claimed by another cycle.
        """
        kind = PeriodKind(kind)
        previous = await self.last_reset_at(kind)
        if previous is None:
            claimed = await self._insert_entry(kind, now)
        else:
            result = await self.db.execute(
                update(ResetLog)
                .where(
                    ResetLog.reset_type == kind.value,
                    ResetLog.last_reset_at < period_boundary(kind, now),
                )
                .values(last_reset_at=now)
            )
            claimed = result.rowcount == 1
        await self.db.commit()

        if not claimed:
            logger.info("%s reset already claimed by another cycle", kind.value)
            return None
        return ResetClaim(kind=kind, claimed_at=now, previous=previous)

    async def release(self, claim: ResetClaim) -> None:
        """Give a claim back so the next cycle sees the period as due again.

        Nothing happens if the entry has moved on since the claim.
        """
        where = (
            ResetLog.reset_type == claim.kind.value,
            ResetLog.last_reset_at == claim.claimed_at,
        )
        if claim.previous is None:
            stmt = delete(ResetLog).where(*where)
        else:
            stmt = update(ResetLog).where(*where).values(last_reset_at=claim.previous)
        await self.db.execute(stmt)
        await self.db.commit()
        logger.info("Released %s reset claim", claim.kind.value)

    async def _insert_entry(self, kind: PeriodKind, now: datetime) -> bool:
        rows = [{"reset_type": kind.value, "last_reset_at": now}]
        stmt = self._upsert(rows, overwrite=False)
        if stmt is not None:
            result = await self.db.execute(stmt)
            return result.rowcount == 1
        try:
            await self.db.execute(ResetLog.__table__.insert(), rows)
        except IntegrityError:
            await self.db.rollback()
            return False
        return True
