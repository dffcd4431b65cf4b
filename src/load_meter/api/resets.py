"""
POST /v1/resets/check endpoint for on-demand reset cycles.

Runs the reset check cycle for the authenticated tenant: every period kind
that is due is zeroed and marked in the ledger. Per-kind failures are
reported in the response body rather than failing the request.

CHANGELOG:
- 2026-10-13: Initial creation (STORY-008)

TODO:
- None
"""

import logging
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from load_meter.api.deps import Tenant, TenantSession, WallClock
from load_meter.cache.redis_client import invalidate_tenant_cache
from load_meter.services.reset_executor import run_reset_cycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/resets", tags=["resets"])


class ResetCheckResponse(BaseModel):
    """Outcome of a reset check cycle."""

    success: bool
    resets_performed: list[str]
    errors: list[str]
    timestamp: datetime


@router.post("/check", response_model=ResetCheckResponse)
async def check_resets(
    tenant: Tenant,
    db: TenantSession,
    clock: WallClock,
) -> ResetCheckResponse:
    """Reset every due period kind for the authenticated tenant."""
    result = await run_reset_cycle(db, clock.now())

    if result.performed:
        await invalidate_tenant_cache(tenant)
    for error in result.errors:
        logger.error("Tenant %s: %s", tenant, error)

    return ResetCheckResponse(
        success=result.ok,
        resets_performed=[kind.value for kind in result.performed],
        errors=result.errors,
        timestamp=result.checked_at,
    )
