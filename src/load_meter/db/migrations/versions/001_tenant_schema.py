"""
Initial tenant schema: four load-class counter tables and reset_logs.

Creates light_loads, medium_loads, heavy_loads and universal_loads with one
row per socket and all bucket / period-total counters defaulting to 0, plus
the reset_logs ledger seeded with the current time for every period kind.
The seed is the wall clock in TIMEZONE, the same clock the service compares
it against, not the database server's own timestamp.

Revision ID: 001
Revises: None
Create Date: 2026-10-10

CHANGELOG:
- 2026-10-16: Seed reset_logs from the TIMEZONE wall clock
- 2026-10-10: Initial creation (STORY-002)

TODO:
- None
"""

import os
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from load_meter.clock import SystemClock

# Revision identifiers used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

LOAD_TABLE_NAMES = ("light_loads", "medium_loads", "heavy_loads", "universal_loads")

COUNTER_COLUMNS = (
    "h4", "h8", "h12", "h16", "h20", "h24",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun",
    "week1", "week2", "week3", "week4",
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
    "eu_daily", "ec_daily", "eu_monthly", "ec_monthly",
)  # fmt: skip

PERIOD_KINDS = ("daily", "weekly", "monthly", "yearly")


def upgrade() -> None:
    """Create the counter tables and the seeded reset ledger."""
    for table_name in LOAD_TABLE_NAMES:
        op.create_table(
            table_name,
            sa.Column("socket_id", sa.Text(), nullable=False),
            *(
                sa.Column(
                    name,
                    sa.BigInteger(),
                    nullable=False,
                    server_default=sa.text("0"),
                )
                for name in COUNTER_COLUMNS
            ),
            sa.PrimaryKeyConstraint("socket_id"),
        )

    reset_logs = op.create_table(
        "reset_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reset_type", sa.String(length=50), nullable=False),
        sa.Column(
            "last_reset_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reset_type"),
    )

    now = SystemClock(os.environ.get("TIMEZONE", "UTC")).now()
    op.bulk_insert(
        reset_logs,
        [{"reset_type": kind, "last_reset_at": now} for kind in PERIOD_KINDS],
    )


def downgrade() -> None:
    op.drop_table("reset_logs")
    for table_name in reversed(LOAD_TABLE_NAMES):
        op.drop_table(table_name)
