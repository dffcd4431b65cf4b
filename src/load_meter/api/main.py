"""
FastAPI application entry point for the load meter API.

Settings are loaded and validated at startup. TENANT_TOKENS are parsed into
a BearerAuth instance, and a TenantDatabases resolver and tenant wall clock
are stored on app.state for route handlers. When RESET_CHECK_INTERVAL_S is
set, a background task sweeps every configured tenant for due resets.

CHANGELOG:
- 2026-10-16: 422 handler that survives Infinity/NaN in the rejected body
- 2026-10-14: Start background reset loop from lifespan (STORY-011)
- 2026-10-13: Register resets router (STORY-008)
- 2026-10-12: Register consumption router (STORY-009)
- 2026-10-11: Register ingest router (STORY-004)
- 2026-10-09: Initial creation (STORY-001)
"""

import asyncio
import logging
import math
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from load_meter.api.consumption import router as consumption_router
from load_meter.api.health import router as health_router
from load_meter.api.ingest import router as ingest_router
from load_meter.api.resets import router as resets_router
from load_meter.auth.bearer import BearerAuth
from load_meter.clock import SystemClock
from load_meter.config import Settings
from load_meter.db.session import TenantDatabases
from load_meter.services.scheduler import reset_loop

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup wiring and shutdown cleanup.

    Startup:
        - Loads and validates Settings from the environment.
        - Builds BearerAuth, the tenant resolver and the wall clock.
        - Starts the reset loop if enabled.

    Shutdown:
        - Stops the reset loop and disposes tenant engines.
    """
    settings = Settings()
    app.state.settings = settings

    app.state.auth = BearerAuth.from_setting(settings.tenant_tokens)
    app.state.tenants = TenantDatabases(settings.tenant_database_url)
    app.state.clock = SystemClock(settings.timezone)
    logger.info(
        "Parsed %d token(s) for %d tenant(s), timezone=%s",
        len(app.state.auth.token_map),
        len(app.state.auth.tenants),
        settings.timezone,
    )

    shutdown_event = asyncio.Event()
    reset_task: asyncio.Task | None = None
    if settings.reset_check_interval_s > 0:
        reset_task = asyncio.create_task(
            reset_loop(
                tenants=app.state.tenants,
                tenant_ids=app.state.auth.tenants,
                clock=app.state.clock,
                interval_s=settings.reset_check_interval_s,
                shutdown_event=shutdown_event,
            )
        )

    logger.info("Settings validated, load meter API ready")
    yield

    shutdown_event.set()
    if reset_task is not None:
        await reset_task
    await app.state.tenants.dispose()
    logger.info("Load meter API shutting down")


app = FastAPI(
    title="Load Meter API",
    description="Per-tenant bucketed energy consumption for socket loads.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", "").split(",")
        if origin.strip()
    ],
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


def _json_safe(value):
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(item) for item in value]
    return value


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with the validation errors.

    Rejected inputs are echoed back; Infinity and NaN are not valid JSON
    output, so they are echoed as strings.
    """
    errors = _json_safe(jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=422, content={"detail": errors})


app.include_router(health_router)
app.include_router(ingest_router)
app.include_router(consumption_router)
app.include_router(resets_router)


@app.get("/")
async def root() -> dict:
    """Root health check endpoint."""
    return {"status": "ok"}
