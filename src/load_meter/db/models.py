"""
SQLAlchemy ORM models for a tenant's load meter database.

Each load class has its own counter table (light_loads, medium_loads,
heavy_loads, universal_loads) with one row per socket. All counters are
non-negative integers in milli-watt-hours. The reset_logs table records
the last reset instant per period kind.

Load classes form a closed enumeration mapped onto ORM classes through
LOAD_TABLES; table names are never built from request input.

CHANGELOG:
- 2026-10-10: Add ResetLog model (STORY-005)
- 2026-10-09: Initial creation (STORY-002)

TODO:
- None
"""

import datetime
import enum

from sqlalchemy import BigInteger, DateTime, Integer, String, Text, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all tenant ORM models."""

    pass


class LoadClass(enum.StrEnum):
    """Device category; each one is stored in its own counter table."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    UNIVERSAL = "universal"


def _counter() -> Mapped[int]:
    return mapped_column(BigInteger, nullable=False, default=0, server_default=text("0"))


class LoadCounterMixin:
    """Bucket and period-total columns shared by every load-class table.

    Attributes:
        socket_id: Physical socket identifier (primary key).
        h4 .. h24: Six 4-hour hour-of-day buckets (h4 covers 00:00-03:59).
        mon .. sun: Day-of-week buckets.
        week1 .. week4: Week-of-month buckets (week4 absorbs days 22-31).
        jan .. dec: Month-of-year buckets.
        eu_daily, ec_daily: Daily period totals.
        eu_monthly, ec_monthly: Monthly period totals.
    """

    socket_id: Mapped[str] = mapped_column(Text, primary_key=True, nullable=False)

    h4: Mapped[int] = _counter()
    h8: Mapped[int] = _counter()
    h12: Mapped[int] = _counter()
    h16: Mapped[int] = _counter()
    h20: Mapped[int] = _counter()
    h24: Mapped[int] = _counter()

    mon: Mapped[int] = _counter()
    tue: Mapped[int] = _counter()
    wed: Mapped[int] = _counter()
    thu: Mapped[int] = _counter()
    fri: Mapped[int] = _counter()
    sat: Mapped[int] = _counter()
    sun: Mapped[int] = _counter()

    week1: Mapped[int] = _counter()
    week2: Mapped[int] = _counter()
    week3: Mapped[int] = _counter()
    week4: Mapped[int] = _counter()

    jan: Mapped[int] = _counter()
    feb: Mapped[int] = _counter()
    mar: Mapped[int] = _counter()
    apr: Mapped[int] = _counter()
    may: Mapped[int] = _counter()
    jun: Mapped[int] = _counter()
    jul: Mapped[int] = _counter()
    aug: Mapped[int] = _counter()
    sep: Mapped[int] = _counter()
    oct: Mapped[int] = _counter()
    nov: Mapped[int] = _counter()
    dec: Mapped[int] = _counter()

    eu_daily: Mapped[int] = _counter()
    ec_daily: Mapped[int] = _counter()
    eu_monthly: Mapped[int] = _counter()
    ec_monthly: Mapped[int] = _counter()

    def __repr__(self) -> str:
        """Return string representation of the counter row."""
        return (
            f"{type(self).__name__}(socket_id={self.socket_id!r}, "
            f"eu_daily={self.eu_daily!r}, eu_monthly={self.eu_monthly!r})"
        )


class LightLoad(LoadCounterMixin, Base):
    __tablename__ = "light_loads"


class MediumLoad(LoadCounterMixin, Base):
    __tablename__ = "medium_loads"


class HeavyLoad(LoadCounterMixin, Base):
    __tablename__ = "heavy_loads"


class UniversalLoad(LoadCounterMixin, Base):
    __tablename__ = "universal_loads"


LOAD_TABLES: dict[LoadClass, type[LoadCounterMixin]] = {
    LoadClass.LIGHT: LightLoad,
    LoadClass.MEDIUM: MediumLoad,
    LoadClass.HEAVY: HeavyLoad,
    LoadClass.UNIVERSAL: UniversalLoad,
}


class ResetLog(Base):
    """Last reset instant per period kind.

    Attributes:
        id: Surrogate key.
        reset_type: One of daily, weekly, monthly, yearly (unique).
        last_reset_at: Instant the last reset of this kind completed.
    """

    __tablename__ = "reset_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reset_type: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    last_reset_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )

    def __repr__(self) -> str:
        """Return string representation of the ResetLog."""
        return (
            f"ResetLog(reset_type={self.reset_type!r}, "
            f"last_reset_at={self.last_reset_at!r})"
        )
