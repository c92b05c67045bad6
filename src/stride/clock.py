"""Injectable wall-clock sources.

All day arithmetic in the engine is done on UTC calendar days, so a clock
only needs to answer "what instant is it" and "which UTC day is that".
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""
        ...

    def today(self) -> date:
        """Return the current UTC calendar day."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant; used by tests and backfills."""

    def __init__(self, value: date | datetime):
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            self._now = value.astimezone(timezone.utc)
        else:
            self._now = datetime.combine(value, time(12, 0), tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()

    def set(self, value: date | datetime) -> None:
        """Move the clock to a new instant."""
        self._now = FixedClock(value)._now


__all__ = ["Clock", "FixedClock", "SystemClock"]
