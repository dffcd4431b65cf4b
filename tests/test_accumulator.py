"""
Tests for the accumulator against a real SQLite tenant database.

Tests verify:
- The four active buckets and eu_daily / eu_monthly receive the delta.
- Applying the same delta n times adds exactly n * delta.
- Unknown sockets raise UnknownSocket and change nothing.
- Only the target row is touched.

CHANGELOG:
- 2026-10-10: Initial creation (STORY-004)

TODO:
- None
"""

import asyncio

import pytest
from conftest import at, row_values
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from load_meter.db.models import LoadClass
from load_meter.errors import UnknownSocket
from load_meter.services.accumulator import apply_delta
from load_meter.services.energy import to_milliwatt_hours

UNTOUCHED = (
    "h4", "h8", "h16", "h20", "h24",
    "mon", "tue", "wed", "thu", "sat", "sun",
    "week1", "week2", "week4",
    "jan", "feb", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec",
    "ec_daily", "ec_monthly",
)  # fmt: skip


class TestApplyDelta:
    @pytest.mark.asyncio
    async def test_friday_morning_reading(self, db: AsyncSession) -> None:
        """100 W for 60 s on 2024-03-15 09:30 lands 1667 mWh in h12/fri/week3/mar."""
        delta = to_milliwatt_hours(100, 60)
        keys = await apply_delta(db, LoadClass.LIGHT, "S1", delta, at(2024, 3, 15, 9, 30))

        assert keys.columns() == ("h12", "fri", "week3", "mar")
        row = await row_values(db, LoadClass.LIGHT, "S1")
        for column in ("h12", "fri", "week3", "mar", "eu_daily", "eu_monthly"):
            assert row[column] == 1667, column
        for column in UNTOUCHED:
            assert row[column] == 0, column

    @pytest.mark.asyncio
    async def test_accepts_plain_string_load_class(self, db: AsyncSession) -> None:
        await apply_delta(db, "medium", "M1", 10, at(2024, 3, 15, 9, 30))
        row = await row_values(db, LoadClass.MEDIUM, "M1")
        assert row["h12"] == 10

    @pytest.mark.asyncio
    async def test_repeated_delta_adds_linearly(self, db: AsyncSession) -> None:
        for _ in range(25):
            await apply_delta(db, LoadClass.HEAVY, "H1", 1234, at(2024, 6, 2, 21, 0))

        row = await row_values(db, LoadClass.HEAVY, "H1")
        assert row["h24"] == 25 * 1234
        assert row["sun"] == 25 * 1234
        assert row["week1"] == 25 * 1234
        assert row["jun"] == 25 * 1234
        assert row["eu_daily"] == 25 * 1234
        assert row["eu_monthly"] == 25 * 1234

    @pytest.mark.asyncio
    async def test_instants_spread_across_buckets(self, db: AsyncSession) -> None:
        await apply_delta(db, LoadClass.LIGHT, "S1", 100, at(2024, 3, 15, 3, 59))
        await apply_delta(db, LoadClass.LIGHT, "S1", 200, at(2024, 3, 15, 4, 0))

        row = await row_values(db, LoadClass.LIGHT, "S1")
        assert row["h4"] == 100
        assert row["h8"] == 200
        assert row["fri"] == 300
        assert row["eu_daily"] == 300

    @pytest.mark.asyncio
    async def test_only_target_row_changes(self, db: AsyncSession) -> None:
        await apply_delta(db, LoadClass.LIGHT, "S1", 500, at(2024, 3, 15, 9, 30))

        other = await row_values(db, LoadClass.LIGHT, "S2")
        assert other["h12"] == 0
        assert other["eu_daily"] == 0
        universal = await row_values(db, LoadClass.UNIVERSAL, "U1")
        assert universal["h12"] == 0

    @pytest.mark.asyncio
    async def test_negative_delta_is_applied(self, db: AsyncSession) -> None:
        await apply_delta(db, LoadClass.LIGHT, "S1", 500, at(2024, 3, 15, 9, 30))
        await apply_delta(db, LoadClass.LIGHT, "S1", -200, at(2024, 3, 15, 9, 31))

        row = await row_values(db, LoadClass.LIGHT, "S1")
        assert row["h12"] == 300

    @pytest.mark.asyncio
    async def test_concurrent_sessions_do_not_lose_updates(
        self, db: AsyncSession
    ) -> None:
        """Increments from separate sessions on the same row all land."""
        factory = async_sessionmaker(db.bind, class_=AsyncSession, expire_on_commit=False)

        async def one_write() -> None:
            async with factory() as session:
                await apply_delta(session, LoadClass.LIGHT, "S1", 7, at(2024, 3, 15, 9, 30))

        await asyncio.gather(*(one_write() for _ in range(10)))

        row = await row_values(db, LoadClass.LIGHT, "S1")
        assert row["h12"] == 70


class TestUnknownSocket:
    @pytest.mark.asyncio
    async def test_unknown_socket_raises(self, db: AsyncSession) -> None:
        with pytest.raises(UnknownSocket) as exc_info:
            await apply_delta(db, LoadClass.LIGHT, "nope", 10, at(2024, 3, 15, 9, 30))

        assert exc_info.value.socket_id == "nope"
        assert exc_info.value.load_class == "light"

    @pytest.mark.asyncio
    async def test_socket_in_wrong_load_class_raises(self, db: AsyncSession) -> None:
        """S1 is a light socket; writing it as heavy is a provisioning error."""
        with pytest.raises(UnknownSocket):
            await apply_delta(db, LoadClass.HEAVY, "S1", 10, at(2024, 3, 15, 9, 30))

        row = await row_values(db, LoadClass.LIGHT, "S1")
        assert row["h12"] == 0

    @pytest.mark.asyncio
    async def test_invalid_load_class_rejected(self, db: AsyncSession) -> None:
        with pytest.raises(ValueError):
            await apply_delta(db, "light_loads; --", "S1", 10, at(2024, 3, 15, 9, 30))
