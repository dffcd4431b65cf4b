"""
Tenant connection resolver.

Every tenant owns an isolated database. TenantDatabases turns a tenant id
into an async SQLAlchemy session bound to that tenant's database, creating
and caching one engine per tenant on first use. The core services only
ever receive an already-resolved AsyncSession.

CHANGELOG:
- 2026-10-12: Map connect errors to ConnectionFailure (STORY-006)
- 2026-10-09: Initial creation (STORY-002)

TODO:
- None
"""

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from load_meter.errors import ConnectionFailure, UnknownTenant

logger = logging.getLogger(__name__)

# Tenant ids become database names, so only a conservative charset is allowed.
_TENANT_ID_RE = re.compile(r"^[A-Za-z0-9_]{1,64}$")


def validate_tenant_id(tenant: str) -> str:
    """Return the tenant id unchanged if it is a safe database name.

    Raises:
        UnknownTenant: If the id contains anything outside ``[A-Za-z0-9_]``.
    """
    if not _TENANT_ID_RE.fullmatch(tenant):
        raise UnknownTenant(tenant)
    return tenant


class TenantDatabases:
    """Per-tenant engine and session factory cache.

    Args:
        url_template: SQLAlchemy URL with a ``{tenant}`` placeholder.
        echo: Forwarded to ``create_async_engine``.

    Usage::

        tenants = TenantDatabases("postgresql+asyncpg://u:p@db/{tenant}")
        async with tenants.session("acme") as session:
            await apply_delta(session, ...)
        await tenants.dispose()
    """

    def __init__(self, url_template: str, *, echo: bool = False) -> None:
        self.url_template = url_template
        self.echo = echo
        self._engines: dict[str, AsyncEngine] = {}
        self._factories: dict[str, async_sessionmaker[AsyncSession]] = {}

    def url_for(self, tenant: str) -> str:
        """Build the database URL for a validated tenant id."""
        return self.url_template.format(tenant=validate_tenant_id(tenant))

    def engine(self, tenant: str) -> AsyncEngine:
        """Return the cached engine for a tenant, creating it on first use."""
        engine = self._engines.get(tenant)
        if engine is None:
            engine = create_async_engine(self.url_for(tenant), echo=self.echo)
            self._engines[tenant] = engine
            self._factories[tenant] = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
            logger.info("Created engine for tenant %s", tenant)
        return engine

    def session_factory(self, tenant: str) -> async_sessionmaker[AsyncSession]:
        self.engine(tenant)
        return self._factories[tenant]

    @asynccontextmanager
    async def session(self, tenant: str) -> AsyncIterator[AsyncSession]:
        """Open a session on the tenant's database.

        The connection is acquired eagerly so that an unreachable database
        surfaces as ConnectionFailure before any work is attempted.

        Yields:
            AsyncSession: Session bound to the tenant's database.

        Raises:
            UnknownTenant: If the tenant id is not a valid namespace.
            ConnectionFailure: If the database cannot be reached.
        """
        factory = self.session_factory(tenant)
        async with factory() as session:
            try:
                await session.connection()
            except (OSError, DBAPIError) as exc:
                logger.warning("Connection to tenant %s failed: %s", tenant, exc)
                raise ConnectionFailure(tenant, str(exc)) from exc
            yield session

    async def dispose(self) -> None:
        """Dispose every cached engine."""
        for tenant, engine in self._engines.items():
            await engine.dispose()
            logger.debug("Disposed engine for tenant %s", tenant)
        self._engines.clear()
        self._factories.clear()
