"""
Shared test fixtures for load meter tests.

Tenant databases are real SQLite files under tmp_path: service tests use an
async session through aiosqlite, API tests go through the FastAPI TestClient
with TENANT_DATABASE_URL pointing at the same directory. Redis is disabled
(REDIS_URL unset) unless a test patches the cache helpers.

CHANGELOG:
- 2026-10-11: Add provisioned tenant fixtures (STORY-004)
- 2026-10-09: Initial creation with app fixture (STORY-001)
"""

from collections.abc import AsyncGenerator, Generator, Iterable
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from load_meter.db.models import LOAD_TABLES, Base, LoadClass

TENANT = "tenant_t"
OTHER_TENANT = "tenant_u"
AUTH_HEADER = {"Authorization": "Bearer test-token-abc"}
OTHER_AUTH_HEADER = {"Authorization": "Bearer other-token"}
TZ = ZoneInfo("UTC")

# All Settings environment variable names, used for cleanup.
_ALL_ENV_VARS = (
    "TENANT_DATABASE_URL",
    "TENANT_TOKENS",
    "REDIS_URL",
    "CACHE_TTL_S",
    "TIMEZONE",
    "RESET_CHECK_INTERVAL_S",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
)


def at(*args: int) -> datetime:
    """Build a UTC instant: at(2024, 3, 15, 9, 30)."""
    return datetime(*args, tzinfo=TZ)


def provision_tenant(
    db_path: Path,
    sockets: Iterable[tuple[LoadClass, str]] = (),
    *,
    with_ledger: bool = False,
) -> None:
    """Create the load tables (and optionally reset_logs) and insert sockets.

    Uses a synchronous engine so it can run outside any event loop.
    """
    engine = create_engine(f"sqlite:///{db_path}")
    tables = [model.__table__ for model in LOAD_TABLES.values()]
    if with_ledger:
        tables.append(Base.metadata.tables["reset_logs"])
    Base.metadata.create_all(engine, tables=tables)
    with engine.begin() as conn:
        for load_class, socket_id in sockets:
            conn.execute(insert(LOAD_TABLES[load_class].__table__).values(socket_id=socket_id))
    engine.dispose()


async def row_values(db: AsyncSession, load_class: LoadClass, socket_id: str) -> dict:
    """Read a counter row straight from the table, bypassing the ORM identity map."""
    table = LOAD_TABLES[load_class].__table__
    result = await db.execute(select(table).where(table.c.socket_id == socket_id))
    return dict(result.mappings().one())


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Point the app at per-test SQLite tenant databases and disable Redis.

    Also changes into tmp_path so no .env file is picked up by Settings.
    """
    for var in _ALL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TENANT_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/{{tenant}}.db")
    monkeypatch.setenv(
        "TENANT_TOKENS", f"test-token-abc:{TENANT},other-token:{OTHER_TENANT}"
    )


@pytest.fixture()
def tenant_db_path(tmp_path: Path) -> Path:
    """Path of the primary test tenant's database file."""
    return tmp_path / f"{TENANT}.db"


@pytest_asyncio.fixture()
async def db(tenant_db_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """Async session on a tenant DB with one socket provisioned per load class.

    Sockets: light/S1, light/S2, medium/M1, heavy/H1, universal/U1.
    reset_logs is not created; tests that need it call ResetLedger.ensure().
    """
    provision_tenant(
        tenant_db_path,
        [
            (LoadClass.LIGHT, "S1"),
            (LoadClass.LIGHT, "S2"),
            (LoadClass.MEDIUM, "M1"),
            (LoadClass.HEAVY, "H1"),
            (LoadClass.UNIVERSAL, "U1"),
        ],
    )
    engine = create_async_engine(f"sqlite+aiosqlite:///{tenant_db_path}")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture()
def client(tenant_db_path: Path) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the primary tenant provisioned.

    Uses a context manager so the lifespan (settings, auth, resolver) runs.
    """
    provision_tenant(
        tenant_db_path,
        [(LoadClass.LIGHT, "S1"), (LoadClass.HEAVY, "H1")],
    )
    from load_meter.api.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
