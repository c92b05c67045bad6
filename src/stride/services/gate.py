"""Completion gate for weekly habits."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from ..errors import ValidationError
from ..models.enums import Frequency
from ..models.habit import Habit
from .dates import normalize_weekday, to_day, week_bounds, weekday_token


def ensure_can_complete(
    habit: Habit,
    days: Iterable[date],
    today: date,
    *,
    unmarking: bool = False,
) -> None:
    """Raise ``ValidationError`` if a weekly habit may not be marked today.

    A weekly habit can only be marked on one of its weekdays and at most once
    per Sunday..Saturday week. Un-marking today's own completion is always
    allowed. Daily and monthly habits pass through.
    """

    if habit.frequency != Frequency.WEEKLY.value or unmarking:
        return

    token = weekday_token(today)
    allowed = {normalize_weekday(d) for d in habit.days or []}
    if token not in allowed:
        raise ValidationError(
            f"Habit {habit.id} is scheduled on {', '.join(sorted(allowed)) or 'no days'}, not {token}",
            code="wrong_weekday",
        )

    week_start, week_end = week_bounds(today)
    if any(week_start <= to_day(d) <= week_end for d in days):
        raise ValidationError(
            f"Habit {habit.id} was already completed this week",
            code="already_completed_this_week",
        )


def can_complete_today(
    habit: Habit,
    days: Iterable[date],
    today: date,
    *,
    unmarking: bool = False,
) -> bool:
    try:
        ensure_can_complete(habit, days, today, unmarking=unmarking)
    except ValidationError:
        return False
    return True


__all__ = ["can_complete_today", "ensure_can_complete"]
