"""SQLModel implementation of Goal repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, Optional

from sqlmodel import col, select

from ...models.enums import Status
from ...models.goal import Goal
from ..database import SessionFactory


class SQLModelGoalRepository:
    """SQLModel-based goal repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[Goal]:
        """Retrieve a goal by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_any(self, goal_id: int) -> Optional[Goal]:
        with self.session_factory() as session:
            obj = session.get(Goal, goal_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, status: Optional[str] = None) -> list[Goal]:
        """List a user's goals ordered by target date."""
        with self.session_factory() as session:
            statement = (
                select(Goal)
                .where(Goal.user_id == user_id)
                .order_by(col(Goal.target_date), col(Goal.id))
            )
            if status is not None:
                statement = statement.where(Goal.status == status)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_expired(self, *, user_id: int, as_of: date) -> list[Goal]:
        with self.session_factory() as session:
            statement = (
                select(Goal)
                .where(Goal.user_id == user_id)
                .where(Goal.status == Status.ACTIVE.value)
                .where(Goal.target_date <= as_of)
                .order_by(col(Goal.target_date), col(Goal.id))
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_owner_ids(self) -> list[int]:
        with self.session_factory() as session:
            return sorted(session.exec(select(Goal.user_id).distinct()).all())

    def create(self, goal: Goal, *, user_id: int) -> Goal:
        """Create a new goal."""
        with self.session_factory() as session:
            goal.user_id = user_id
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def update(self, goal: Goal, *, user_id: int) -> Goal:
        """Update an existing goal."""
        with self.session_factory() as session:
            goal.user_id = user_id
            goal.updated_at = datetime.now(timezone.utc)
            merged = session.merge(goal)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def update_progress(self, goal_id: int, progress: int) -> None:
        with self.session_factory() as session:
            goal = session.get(Goal, goal_id)
            if goal is None:
                return
            goal.progress = progress
            goal.updated_at = datetime.now(timezone.utc)
            session.add(goal)
            session.commit()

    def mark_completed(self, goal_ids: Iterable[int], *, user_id: int) -> int:
        ids = list(goal_ids)
        if not ids:
            return 0
        with self.session_factory() as session:
            goals = session.exec(
                select(Goal).where(col(Goal.id).in_(ids), Goal.user_id == user_id)
            ).all()
            now = datetime.now(timezone.utc)
            for goal in goals:
                goal.status = Status.COMPLETED.value
                goal.is_completed = True
                goal.updated_at = now
                session.add(goal)
            session.commit()
            return len(goals)

    def delete(self, goal_id: int, *, user_id: int) -> None:
        """Delete a goal by ID."""
        with self.session_factory() as session:
            goal = session.exec(
                select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
            ).first()
            if goal:
                session.delete(goal)
                session.commit()
