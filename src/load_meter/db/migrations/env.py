"""
Alembic environment configuration for async per-tenant migrations.

Each tenant has its own database, so the target tenant is passed on the
command line and substituted into TENANT_DATABASE_URL:

    alembic -x tenant=acme upgrade head

CHANGELOG:
- 2026-10-10: Initial creation (STORY-002)

TODO:
- None
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from load_meter.db.models import Base
from load_meter.db.session import validate_tenant_id

# Alembic Config object for access to .ini values.
config = context.config

# Set up Python logging from the config file.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# SQLAlchemy MetaData for autogenerate support.
target_metadata = Base.metadata


def get_url() -> str:
    """Build the tenant database URL from TENANT_DATABASE_URL and ``-x tenant=``.

    Raises:
        RuntimeError: If the template or the tenant argument is missing.
    """
    template = os.environ.get("TENANT_DATABASE_URL")
    if not template:
        raise RuntimeError("TENANT_DATABASE_URL environment variable is required")
    tenant = context.get_x_argument(as_dictionary=True).get("tenant")
    if not tenant:
        raise RuntimeError("Pass the target tenant with: alembic -x tenant=<id> ...")
    return template.format(tenant=validate_tenant_id(tenant))


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL to the script output)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with an async engine."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
