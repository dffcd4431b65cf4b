"""
Health check endpoint for the load meter API.

Provides a simple GET /health endpoint that returns {"status": "ok"} with
HTTP 200. No authentication is required and no tenant database is touched.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status."""
    return {"status": "ok"}
