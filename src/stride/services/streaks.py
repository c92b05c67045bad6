"""Habit streak calculations."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..models.habit import Habit
from .dates import to_day

_ONE_DAY = timedelta(days=1)


def current_streak(days: Iterable[date], today: date) -> int:
    """Consecutive completed days walking back from ``today``.

    A missing ``today`` yields 0, even if yesterday closed a long run.
    """

    completed = {to_day(d) for d in days}
    streak = 0
    cursor = today
    while cursor in completed:
        streak += 1
        cursor -= _ONE_DAY
    return streak


def longest_streak(days: Iterable[date]) -> int:
    """Length of the longest run of consecutive completed days."""

    completed = {to_day(d) for d in days}
    longest = 0
    for day in completed:
        # Only walk forward from run starts, so each day is visited at most twice.
        if day - _ONE_DAY in completed:
            continue
        run = 1
        cursor = day + _ONE_DAY
        while cursor in completed:
            run += 1
            cursor += _ONE_DAY
        longest = max(longest, run)
    return longest


def compute_streaks(days: Iterable[date], *, today: date) -> tuple[int, int]:
    """Return (current_streak, longest_streak) for a collection of days."""

    completed = {to_day(d) for d in days}
    return current_streak(completed, today), longest_streak(completed)


def refresh_streaks(habit: Habit, days: Iterable[date], *, today: date) -> Habit:
    """Write fresh streak values onto ``habit``; the stored longest never drops."""

    current, longest = compute_streaks(days, today=today)
    habit.streak = current
    habit.longest_streak = max(habit.longest_streak or 0, longest)
    return habit


__all__ = ["compute_streaks", "current_streak", "longest_streak", "refresh_streaks"]
