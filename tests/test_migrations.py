"""
Tests for the per-tenant alembic migration.

Runs ``upgrade head`` against a fresh SQLite tenant database through the
async env.py, the same path ``alembic -x tenant=<id> upgrade head`` takes.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

import sqlite3
from argparse import Namespace
from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from alembic import command
from alembic.config import Config

import load_meter

MIGRATIONS_DIR = Path(load_meter.__file__).parent / "db" / "migrations"


def _upgrade(tenant: str) -> None:
    # No ini file: env.py then leaves the test logging setup alone.
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.cmd_opts = Namespace(x=[f"tenant={tenant}"])
    command.upgrade(config, "head")


def _ledger(db_path: Path) -> dict[str, str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT reset_type, last_reset_at FROM reset_logs").fetchall()
    finally:
        conn.close()
    return dict(rows)


class TestUpgrade:
    def test_creates_tables(self, tmp_path: Path) -> None:
        _upgrade("mig")

        conn = sqlite3.connect(tmp_path / "mig.db")
        try:
            names = {
                row[0]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        finally:
            conn.close()
        assert {
            "light_loads",
            "medium_loads",
            "heavy_loads",
            "universal_loads",
            "reset_logs",
        } <= names

    @pytest.mark.parametrize("zone", ["UTC", "Asia/Manila", "America/New_York"])
    def test_ledger_seeded_with_wall_clock_in_timezone(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, zone: str
    ) -> None:
        monkeypatch.setenv("TIMEZONE", zone)
        before = datetime.now(ZoneInfo(zone)).replace(tzinfo=None)

        _upgrade("mig")

        after = datetime.now(ZoneInfo(zone)).replace(tzinfo=None)
        ledger = _ledger(tmp_path / "mig.db")
        assert sorted(ledger) == ["daily", "monthly", "weekly", "yearly"]
        for value in ledger.values():
            seeded = datetime.fromisoformat(value)
            assert before - timedelta(seconds=1) <= seeded <= after
