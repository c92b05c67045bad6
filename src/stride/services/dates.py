"""Calendar helpers working on UTC day boundaries.

Every date-like value the engine sees (stored dates, aware or naive
timestamps, ISO strings) is collapsed to a UTC calendar ``date`` before any
comparison, so streaks, windows and week gates agree on where a day starts.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator

from ..errors import ValidationError

WEEKDAY_TOKENS: tuple[str, ...] = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

_WEEKDAY_ALIASES = {
    "sun": "sun", "sunday": "sun",
    "mon": "mon", "monday": "mon",
    "tue": "tue", "tues": "tue", "tuesday": "tue",
    "wed": "wed", "weds": "wed", "wednesday": "wed",
    "thu": "thu", "thur": "thu", "thurs": "thu", "thursday": "thu",
    "fri": "fri", "friday": "fri",
    "sat": "sat", "saturday": "sat",
}


def to_day(value: date | datetime | str) -> date:
    """Return the UTC calendar day for a date-like value.

    Naive datetimes are taken to already be in UTC.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return to_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {value!r}") from exc
    raise ValidationError(f"Unsupported date value: {value!r}")


def day_key(value: date | datetime | str) -> str:
    """Canonical ``YYYY-MM-DD`` key for a date-like value."""

    return to_day(value).isoformat()


def weekday_token(value: date | datetime | str) -> str:
    day = to_day(value)
    # date.weekday() is Monday=0; tokens start on Sunday.
    return WEEKDAY_TOKENS[(day.weekday() + 1) % 7]


def normalize_weekday(value: str) -> str:
    """Map a day name or abbreviation (any case) to its token."""

    token = _WEEKDAY_ALIASES.get(str(value).strip().lower())
    if token is None:
        raise ValidationError(f"Unknown weekday: {value!r}")
    return token


def normalize_days(days: Iterable[str] | None, start_date: date | None = None) -> list[str]:
    """Return deduplicated weekday tokens in week order.

    An empty selection falls back to the weekday of ``start_date``.
    """

    tokens = {normalize_weekday(d) for d in (days or [])}
    if not tokens:
        if start_date is None:
            raise ValidationError("Weekly habits need at least one weekday")
        tokens = {weekday_token(start_date)}
    return [t for t in WEEKDAY_TOKENS if t in tokens]


def week_bounds(value: date | datetime | str) -> tuple[date, date]:
    """Return the Sunday..Saturday week containing ``value``."""

    day = to_day(value)
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each day from ``start`` to ``end`` inclusive."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


__all__ = [
    "WEEKDAY_TOKENS",
    "day_key",
    "iter_days",
    "normalize_days",
    "normalize_weekday",
    "to_day",
    "week_bounds",
    "weekday_token",
]
