"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Tenant database credentials live only in TENANT_DATABASE_URL; no hardcoded
hosts or passwords.

CHANGELOG:
- 2026-10-15: Add LOG_LEVEL, HOST and PORT for the server entrypoint
- 2026-10-14: Add RESET_CHECK_INTERVAL_S for the background sweep (STORY-011)
- 2026-10-09: Initial creation (STORY-001)

TODO:
- None
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Load meter API configuration.

    Attributes:
        tenant_database_url: SQLAlchemy URL template with a ``{tenant}``
            placeholder for the tenant's database name.
        tenant_tokens: Comma-separated ``token:tenant`` pairs.
        redis_url: Redis URL for rollup caching. Caching is disabled if unset.
        cache_ttl_s: Seconds a cached rollup response stays valid.
        timezone: IANA timezone of the tenants' wall clock.
        reset_check_interval_s: Seconds between background reset sweeps.
            0 disables the sweep (resets then run on demand only).
        log_level: Root log level for the JSON log handler.
        host: Interface the API server binds to.
        port: Port the API server listens on.
    """

    tenant_database_url: str
    tenant_tokens: str
    redis_url: str | None = None
    cache_ttl_s: int = 30
    timezone: str = "UTC"
    reset_check_interval_s: int = 0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("tenant_database_url")
    @classmethod
    def url_must_have_tenant_placeholder(cls, v: str) -> str:
        """Require the ``{tenant}`` placeholder so each tenant gets its own DB."""
        if "{tenant}" not in v:
            raise ValueError("TENANT_DATABASE_URL must contain a '{tenant}' placeholder")
        return v

    @field_validator("timezone")
    @classmethod
    def timezone_must_exist(cls, v: str) -> str:
        """Validate the timezone against the IANA database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"TIMEZONE '{v}' is not a known IANA timezone") from None
        return v

    @field_validator("cache_ttl_s")
    @classmethod
    def cache_ttl_must_be_non_negative(cls, v: int) -> int:
        """Validate cache TTL is non-negative."""
        if v < 0:
            raise ValueError("CACHE_TTL_S must be >= 0")
        return v

    @field_validator("reset_check_interval_s")
    @classmethod
    def reset_interval_must_be_sane(cls, v: int) -> int:
        """Validate sweep interval: 0 (disabled) or at least 10 seconds."""
        if v != 0 and v < 10:
            raise ValueError("RESET_CHECK_INTERVAL_S must be 0 or >= 10")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL '{v}' is not a logging level")
        return level

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
