"""Tests for UTC calendar helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from stride.errors import ValidationError
from stride.services.dates import (
    day_key,
    iter_days,
    normalize_days,
    normalize_weekday,
    to_day,
    week_bounds,
    weekday_token,
)


class TestToDay:
    def test_date_passes_through(self):
        assert to_day(date(2024, 3, 5)) == date(2024, 3, 5)

    def test_aware_datetime_uses_utc_day(self):
        # 23:30 on the 4th in UTC-5 is already the 5th in UTC.
        value = datetime(2024, 3, 4, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert to_day(value) == date(2024, 3, 5)

    def test_naive_datetime_is_taken_as_utc(self):
        assert to_day(datetime(2024, 3, 4, 23, 59)) == date(2024, 3, 4)

    def test_iso_strings(self):
        assert to_day("2024-03-05") == date(2024, 3, 5)
        assert to_day("2024-03-05T01:00:00Z") == date(2024, 3, 5)
        assert to_day("2024-03-05T01:00:00+02:00") == date(2024, 3, 4)

    def test_invalid_string_raises(self):
        with pytest.raises(ValidationError):
            to_day("not a date")

    def test_day_key(self):
        assert day_key(datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)) == "2024-01-02"


class TestWeekdays:
    def test_tokens(self):
        assert weekday_token(date(2024, 1, 1)) == "mon"
        assert weekday_token(date(2024, 1, 7)) == "sun"
        assert weekday_token(date(2024, 1, 6)) == "sat"

    @pytest.mark.parametrize("raw", ["Monday", "mon", "MON", " monday "])
    def test_normalize_weekday(self, raw):
        assert normalize_weekday(raw) == "mon"

    def test_normalize_weekday_rejects_unknown(self):
        with pytest.raises(ValidationError):
            normalize_weekday("someday")

    def test_normalize_days_orders_and_dedupes(self):
        assert normalize_days(["Wednesday", "mon", "wed", "Sunday"]) == ["sun", "mon", "wed"]

    def test_normalize_days_falls_back_to_start_weekday(self):
        assert normalize_days([], date(2024, 1, 3)) == ["wed"]

    def test_normalize_days_without_fallback_raises(self):
        with pytest.raises(ValidationError):
            normalize_days([])


class TestWeekBounds:
    def test_midweek(self):
        assert week_bounds(date(2024, 1, 17)) == (date(2024, 1, 14), date(2024, 1, 20))

    def test_sunday_starts_its_own_week(self):
        assert week_bounds(date(2024, 1, 14)) == (date(2024, 1, 14), date(2024, 1, 20))

    def test_saturday_ends_week(self):
        assert week_bounds(date(2024, 1, 20)) == (date(2024, 1, 14), date(2024, 1, 20))


def test_iter_days_inclusive():
    days = list(iter_days(date(2024, 2, 27), date(2024, 3, 1)))
    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]


def test_iter_days_empty_when_inverted():
    assert list(iter_days(date(2024, 3, 2), date(2024, 3, 1))) == []
