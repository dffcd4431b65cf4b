"""
Redis cache for rollup responses.

Chart responses are cached per tenant under ``rollup:{tenant}:{view}:{interval}``
and invalidated whenever the tenant's counters change (ingest or reset).
All cache operations are best-effort: failures are logged and never
propagate. When REDIS_URL is not set, caching is disabled.

CHANGELOG:
- 2026-10-14: Cache rollup views per tenant (STORY-010)
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""

import json
import logging
import os

import redis.asyncio as redis

logger = logging.getLogger(__name__)

ROLLUP_VIEWS: tuple[str, ...] = ("history", "summary")
ROLLUP_INTERVALS: tuple[str, ...] = ("daily", "weekly", "monthly", "yearly")


def _get_redis_url() -> str | None:
    """Read REDIS_URL from environment; None disables caching."""
    return os.environ.get("REDIS_URL") or None


def rollup_key(tenant: str, view: str, interval: str) -> str:
    return f"rollup:{tenant}:{view}:{interval}"


async def get_redis() -> redis.Redis | None:
    """Create an async Redis client, or return None if caching is disabled."""
    url = _get_redis_url()
    if url is None:
        return None
    return redis.from_url(url)


async def get_cached_rollup(tenant: str, view: str, interval: str) -> dict | None:
    """Return a cached rollup payload, or None on miss or Redis failure."""
    key = rollup_key(tenant, view, interval)
    try:
        client = await get_redis()
        if client is None:
            return None
        try:
            cached = await client.get(key)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis read failed for key %s", key, exc_info=True)
        return None
    return json.loads(cached) if cached is not None else None


async def set_cached_rollup(
    tenant: str,
    view: str,
    interval: str,
    payload: dict,
    ttl_s: int,
) -> None:
    """Store a rollup payload with a TTL. A TTL of 0 skips caching."""
    if ttl_s <= 0:
        return
    key = rollup_key(tenant, view, interval)
    try:
        client = await get_redis()
        if client is None:
            return
        try:
            await client.set(key, json.dumps(payload), ex=ttl_s)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis write failed for key %s", key, exc_info=True)


async def invalidate_tenant_cache(tenant: str) -> None:
    """Delete every cached rollup of a tenant.

    Best-effort operation: if Redis is unavailable or the delete fails,
    the error is logged but not raised, so ingest and resets are never
    blocked by cache infrastructure.

    Args:
        tenant: The tenant whose cached rollups should be cleared.
    """
    keys = [
        rollup_key(tenant, view, interval)
        for view in ROLLUP_VIEWS
        for interval in ROLLUP_INTERVALS
    ]
    try:
        client = await get_redis()
        if client is None:
            return
        try:
            await client.delete(*keys)
        finally:
            await client.aclose()
    except Exception:
        logger.warning(
            "Failed to invalidate rollup cache for tenant %s",
            tenant,
            exc_info=True,
        )
