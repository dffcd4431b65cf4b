"""
Reset executor and check cycle.

Each period kind owns a disjoint set of columns. Resetting a kind zeroes
those columns in all four load tables, one committed UPDATE per table. If
any table fails the ledger claim is given back, so the next check cycle
sees the period as still due and zeroes again; zeroing an already-zero
row is harmless.

The check cycle evaluates daily, weekly, monthly and yearly independently.
Failures are collected per kind and never stop the remaining kinds.

Before zeroing, a cycle claims the period through the ledger row (see
ResetLedger.claim), so overlapping cycles for one tenant reset a period
once; the loser skips it.

Zeroing uses UPDATE ... SET col = 0 at the database, so an increment that
races with a reset lands either before (and is cleared) or after (and is
kept); it is never half-applied.

CHANGELOG:
- 2026-10-16: Claim the period before zeroing, release it on failure
- 2026-10-13: Collect per-kind errors instead of aborting the cycle (STORY-008)
- 2026-10-11: Initial creation (STORY-007)

TODO:
- None
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.db.models import LOAD_TABLES
from load_meter.errors import ResetPartialFailure
from load_meter.services.buckets import (
    DAY_BUCKETS,
    HOUR_BUCKETS,
    MONTH_BUCKETS,
    WEEK_BUCKETS,
)
from load_meter.services.reset_ledger import PeriodKind, ResetLedger

logger = logging.getLogger(__name__)

RESET_COLUMNS: dict[PeriodKind, tuple[str, ...]] = {
    PeriodKind.DAILY: (*HOUR_BUCKETS, "eu_daily", "ec_daily"),
    PeriodKind.WEEKLY: DAY_BUCKETS,
    PeriodKind.MONTHLY: (*WEEK_BUCKETS, "eu_monthly", "ec_monthly"),
    PeriodKind.YEARLY: MONTH_BUCKETS,
}

# Evaluation order of the check cycle.
CYCLE_ORDER: tuple[PeriodKind, ...] = (
    PeriodKind.DAILY,
    PeriodKind.WEEKLY,
    PeriodKind.MONTHLY,
    PeriodKind.YEARLY,
)


@dataclass
class ResetCycleResult:
    """Outcome of one check cycle for one tenant.

    Attributes:
        checked_at: The ``now`` the cycle evaluated against.
        performed: Period kinds that were reset and marked.
        errors: Human-readable error per failed period kind.
    """

    checked_at: datetime
    performed: list[PeriodKind] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


async def zero_period_columns(db: AsyncSession, kind: PeriodKind | str) -> None:
    """Zero the columns owned by ``kind`` in every load table.

    Each table is updated and committed on its own. Failing tables are
    rolled back and collected.

    Raises:
        ResetPartialFailure: If at least one table could not be zeroed.
    """
    kind = PeriodKind(kind)
    values = {column: 0 for column in RESET_COLUMNS[kind]}
    failures: list[tuple[str, str]] = []

    for model in LOAD_TABLES.values():
        table = model.__table__
        try:
            await db.execute(update(table).values(values))
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning(
                "%s reset failed for table %s",
                kind.value.capitalize(),
                table.name,
                exc_info=True,
            )
            failures.append((table.name, str(exc)))

    if failures:
        raise ResetPartialFailure(kind.value, failures)


async def reset_period(
    db: AsyncSession,
    kind: PeriodKind | str,
    now: datetime,
) -> bool:
    """Run one due -> resetting -> reset_done transition for ``kind``.

    Claims the period in the ledger, then zeroes the owned columns across
    all load tables. If zeroing fails the claim is released, so the period
    is still due on the next cycle.

    Returns:
        bool: True if this call reset the period, False if another cycle
        had already claimed it.

    Raises:
        ResetPartialFailure: If any load table failed to zero.
    """
    kind = PeriodKind(kind)
    ledger = ResetLedger(db)
    claim = await ledger.claim(kind, now)
    if claim is None:
        return False

    try:
        await zero_period_columns(db, kind)
    except Exception:
        await ledger.release(claim)
        raise

    logger.info("%s reset completed at %s", kind.value.capitalize(), now.isoformat())
    return True


async def run_reset_cycle(db: AsyncSession, now: datetime) -> ResetCycleResult:
    """Check every period kind and reset the ones that are due.

    Args:
        db: Session bound to the tenant's database.
        now: Tenant-local current instant.

    Returns:
        ResetCycleResult: Kinds reset and errors collected.
    """
    ledger = ResetLedger(db)
    result = ResetCycleResult(checked_at=now)

    await ledger.ensure(now)

    for kind in CYCLE_ORDER:
        try:
            if not await ledger.is_due(kind, now):
                continue
            if await reset_period(db, kind, now):
                result.performed.append(kind)
        except ResetPartialFailure as exc:
            result.errors.append(str(exc))
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning(
                "%s reset check failed", kind.value.capitalize(), exc_info=True
            )
            result.errors.append(f"{kind.value.capitalize()} reset failed: {exc}")

    if result.performed or result.errors:
        logger.info(
            "Reset cycle at %s: performed=%s errors=%d",
            now.isoformat(),
            [k.value for k in result.performed],
            len(result.errors),
        )
    return result
