"""Goal repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from ...models.goal import Goal


class GoalRepository(Protocol):
    """Repository for managing goal entities."""

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[Goal]:
        """Retrieve a goal owned by ``user_id``."""
        ...

    def get_any(self, goal_id: int) -> Optional[Goal]:
        """Retrieve a goal regardless of owner (internal recomputes only)."""
        ...

    def list_all(self, *, user_id: int, status: Optional[str] = None) -> list[Goal]:
        """List a user's goals, optionally filtered by status."""
        ...

    def list_expired(self, *, user_id: int, as_of: date) -> list[Goal]:
        """Active goals whose target date is on or before ``as_of``."""
        ...

    def list_owner_ids(self) -> list[int]:
        """Distinct user ids owning at least one goal."""
        ...

    def create(self, goal: Goal, *, user_id: int) -> Goal:
        """Create a new goal."""
        ...

    def update(self, goal: Goal, *, user_id: int) -> Goal:
        """Persist changes to an existing goal."""
        ...

    def update_progress(self, goal_id: int, progress: int) -> None:
        """Store a freshly computed progress value."""
        ...

    def mark_completed(self, goal_ids: Iterable[int], *, user_id: int) -> int:
        """Set status=completed / is_completed on the given goals; return count."""
        ...

    def delete(self, goal_id: int, *, user_id: int) -> None:
        """Delete a goal by ID."""
        ...
