"""Service module exports."""

from . import dates, expiration, gate, goals, habits, progress, schedule, streaks

__all__ = [
    "dates",
    "expiration",
    "gate",
    "goals",
    "habits",
    "progress",
    "schedule",
    "streaks",
]
