"""
Background reset sweep.

Runs the reset check cycle for every known tenant on a fixed interval.
Each tenant gets its own session; an exception for one tenant is logged
and does not stop the sweep or the loop. Tenants share no state, so they
are checked concurrently.

CHANGELOG:
- 2026-10-14: Initial creation (STORY-011)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from load_meter.cache.redis_client import invalidate_tenant_cache
from load_meter.services.reset_executor import ResetCycleResult, run_reset_cycle

if TYPE_CHECKING:
    from load_meter.clock import Clock
    from load_meter.db.session import TenantDatabases

logger = logging.getLogger(__name__)


async def check_tenant(
    tenants: TenantDatabases,
    tenant: str,
    clock: Clock,
) -> ResetCycleResult:
    """Run one reset check cycle for a single tenant.

    Raises:
        ConnectionFailure: If the tenant's database is unreachable.
    """
    async with tenants.session(tenant) as session:
        result = await run_reset_cycle(session, clock.now())
    if result.performed:
        await invalidate_tenant_cache(tenant)
    return result


async def sweep_once(
    tenants: TenantDatabases,
    tenant_ids: Iterable[str],
    clock: Clock,
) -> dict[str, ResetCycleResult | None]:
    """Check every tenant once.

    Returns:
        dict: Tenant id -> cycle result, or None if the cycle raised.
    """
    ids = sorted(set(tenant_ids))
    outcomes = await asyncio.gather(
        *(check_tenant(tenants, tenant, clock) for tenant in ids),
        return_exceptions=True,
    )
    results: dict[str, ResetCycleResult | None] = {}
    for tenant, outcome in zip(ids, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            logger.error(
                "Reset sweep failed for tenant %s",
                tenant,
                exc_info=outcome,
            )
            results[tenant] = None
            continue
        for error in outcome.errors:
            logger.error("Tenant %s: %s", tenant, error)
        results[tenant] = outcome
    return results


async def reset_loop(
    *,
    tenants: TenantDatabases,
    tenant_ids: Iterable[str],
    clock: Clock,
    interval_s: float,
    shutdown_event: asyncio.Event,
) -> None:
    """Run sweep_once every ``interval_s`` seconds until shutdown_event is set."""
    tenant_ids = tuple(tenant_ids)
    logger.info(
        "Reset loop started (interval=%ss, tenants=%d)", interval_s, len(tenant_ids)
    )
    while not shutdown_event.is_set():
        await sweep_once(tenants, tenant_ids, clock)
        # Use wait with timeout so we can check shutdown between sleeps
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval_s)
    logger.info("Reset loop stopped")
