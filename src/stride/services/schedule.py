"""Expected vs actual completion counts for a habit schedule."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable

from ..errors import ValidationError
from ..models.enums import Frequency
from ..models.habit import Habit
from .dates import iter_days, normalize_weekday, to_day, weekday_token


def _scheduled_tokens(habit: Habit) -> set[str]:
    return {normalize_weekday(d) for d in habit.days or []}


def _monthly_anchor(start: date, year: int, month: int) -> int:
    """Day-of-month a monthly habit falls on, clamped for short months."""

    return min(start.day, calendar.monthrange(year, month)[1])


def matches_schedule(habit: Habit, day: date) -> bool:
    """Whether ``day`` is an occurrence of the habit's schedule pattern."""

    if habit.frequency == Frequency.DAILY.value:
        return True
    if habit.frequency == Frequency.WEEKLY.value:
        return weekday_token(day) in _scheduled_tokens(habit)
    if habit.frequency == Frequency.MONTHLY.value:
        start = to_day(habit.start_date)
        return day.day == _monthly_anchor(start, day.year, day.month)
    raise ValidationError(f"Unknown frequency: {habit.frequency!r}")


def expected_completions(habit: Habit, window_end: date) -> int:
    """Occurrences the schedule implies between the habit start and ``window_end``."""

    start = to_day(habit.start_date)
    end = to_day(window_end)
    if start > end:
        return 0

    if habit.frequency == Frequency.DAILY.value:
        return (end - start).days + 1
    if habit.frequency == Frequency.WEEKLY.value:
        tokens = _scheduled_tokens(habit)
        return sum(1 for day in iter_days(start, end) if weekday_token(day) in tokens)
    return sum(1 for day in iter_days(start, end) if matches_schedule(habit, day))


def actual_completions(habit: Habit, days: Iterable[date], window_end: date) -> int:
    """Completions that count toward ``expected_completions`` for the same window.

    Days outside [start, window_end] are ignored; weekly habits only count
    configured weekdays; monthly habits count at most once per month, and only
    for months whose occurrence falls on or before ``window_end``.
    """

    start = to_day(habit.start_date)
    end = to_day(window_end)
    if start > end:
        return 0

    in_window = {d for d in (to_day(v) for v in days) if start <= d <= end}
    if habit.frequency == Frequency.DAILY.value:
        return len(in_window)
    if habit.frequency == Frequency.WEEKLY.value:
        tokens = _scheduled_tokens(habit)
        return sum(1 for d in in_window if weekday_token(d) in tokens)
    if habit.frequency == Frequency.MONTHLY.value:
        months = {(d.year, d.month) for d in in_window}
        return sum(1 for y, m in months if date(y, m, _monthly_anchor(start, y, m)) <= end)
    raise ValidationError(f"Unknown frequency: {habit.frequency!r}")


__all__ = ["actual_completions", "expected_completions", "matches_schedule"]
