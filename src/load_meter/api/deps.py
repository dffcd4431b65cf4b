"""
FastAPI dependency injection providers.

Provides the authenticated tenant id, a session on that tenant's database,
and the wall clock, for use with FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-12: Resolve tenant session from the bearer token (STORY-006)
- 2026-10-09: Initial creation (STORY-001)
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from load_meter.clock import Clock
from load_meter.errors import ConnectionFailure, UnknownTenant


async def get_tenant(request: Request) -> str:
    """Extract the authenticated tenant id via BearerAuth on app.state.

    Args:
        request: The incoming FastAPI request.

    Returns:
        str: The tenant bound to the bearer token.
    """
    return await request.app.state.auth.verify(request)


async def get_db(
    request: Request,
    tenant: Annotated[str, Depends(get_tenant)],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the authenticated tenant's database.

    Raises:
        HTTPException: 503 if the tenant's database is unreachable.
        HTTPException: 500 if the token maps to an invalid tenant id.
    """
    try:
        async with request.app.state.tenants.session(tenant) as session:
            yield session
    except ConnectionFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except UnknownTenant as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def get_clock(request: Request) -> Clock:
    """Return the application clock."""
    return request.app.state.clock


Tenant = Annotated[str, Depends(get_tenant)]
TenantSession = Annotated[AsyncSession, Depends(get_db)]
WallClock = Annotated[Clock, Depends(get_clock)]
