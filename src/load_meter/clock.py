"""
Injectable wall clocks.

The bucket deriver and reset ledger never read the system clock directly;
callers pass an instant obtained from one of these clocks.

CHANGELOG:
- 2026-10-09: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Anything that can tell the current tenant-local wall-clock time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the system time, expressed in a fixed timezone."""

    def __init__(self, timezone: str | tzinfo = "UTC") -> None:
        self.tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """Clock that always returns the same instant (tests, replays)."""

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
