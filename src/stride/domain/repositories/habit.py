"""Habit repository protocol."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit entities and their completion days."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit owned by ``user_id``."""
        ...

    def list_all(self, *, user_id: int, status: Optional[str] = None) -> list[Habit]:
        """List a user's habits, optionally filtered by status."""
        ...

    def list_for_goal(self, goal_id: int) -> list[Habit]:
        """Habits linked to a goal."""
        ...

    def list_expired(self, *, user_id: int, as_of: date) -> list[Habit]:
        """Active habits with an end date on or before ``as_of``."""
        ...

    def list_owner_ids(self) -> list[int]:
        """Distinct user ids owning at least one habit."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Persist changes to an existing habit."""
        ...

    def set_linked_goal(self, habit_id: int, goal_id: Optional[int], *, user_id: int) -> None:
        """Point a habit at a goal (or clear the link)."""
        ...

    def clear_goal_links(self, goal_id: int) -> list[int]:
        """Unlink every habit from ``goal_id``; return the affected habit ids."""
        ...

    def complete_many(
        self, habit_ids: Iterable[int], *, end_date: Optional[date] = None
    ) -> int:
        """Set status=completed (and optionally end_date) on the given habits."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its completion days."""
        ...

    # Completion days
    def completed_days(self, habit_id: int) -> list[date]:
        """All days the habit was marked done, ascending."""
        ...

    def completed_days_by_habit(self, habit_ids: Iterable[int]) -> dict[int, list[date]]:
        """Completion days for several habits in one query."""
        ...

    def add_completion(
        self, habit_id: int, day: date, *, user_id: int, completed_at: Optional[datetime] = None
    ) -> None:
        """Mark a habit done on ``day`` (no-op if already marked)."""
        ...

    def remove_completion(self, habit_id: int, day: date, *, user_id: int) -> None:
        """Unmark a habit on ``day``."""
        ...
