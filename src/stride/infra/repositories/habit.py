"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from sqlmodel import col, select

from ...models.enums import Status
from ...models.habit import Habit, HabitCompletion
from ..database import SessionFactory


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, status: Optional[str] = None) -> list[Habit]:
        """List a user's habits, optionally filtered by status."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(col(Habit.title), col(Habit.id))
            )
            if status is not None:
                statement = statement.where(Habit.status == status)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_for_goal(self, goal_id: int) -> list[Habit]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(Habit).where(Habit.linked_goal_id == goal_id).order_by(col(Habit.id))
                ).all()
            )
            session.expunge_all()
            return rows

    def list_expired(self, *, user_id: int, as_of: date) -> list[Habit]:
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .where(Habit.status == Status.ACTIVE.value)
                .where(col(Habit.end_date).is_not(None))
                .where(col(Habit.end_date) <= as_of)
                .order_by(col(Habit.id))
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_owner_ids(self) -> list[int]:
        with self.session_factory() as session:
            return sorted(session.exec(select(Habit.user_id).distinct()).all())

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def set_linked_goal(self, habit_id: int, goal_id: Optional[int], *, user_id: int) -> None:
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit is None:
                return
            habit.linked_goal_id = goal_id
            session.add(habit)
            session.commit()

    def clear_goal_links(self, goal_id: int) -> list[int]:
        with self.session_factory() as session:
            habits = session.exec(select(Habit).where(Habit.linked_goal_id == goal_id)).all()
            for habit in habits:
                habit.linked_goal_id = None
                session.add(habit)
            session.commit()
            return [h.id for h in habits]

    def complete_many(
        self, habit_ids: Iterable[int], *, end_date: Optional[date] = None
    ) -> int:
        ids = list(habit_ids)
        if not ids:
            return 0
        with self.session_factory() as session:
            habits = session.exec(select(Habit).where(col(Habit.id).in_(ids))).all()
            for habit in habits:
                habit.status = Status.COMPLETED.value
                if end_date is not None:
                    habit.end_date = end_date
                session.add(habit)
            session.commit()
            return len(habits)

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its completion days."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit:
                completions = session.exec(
                    select(HabitCompletion).where(HabitCompletion.habit_id == habit_id)
                ).all()
                for completion in completions:
                    session.delete(completion)
                session.flush()
                session.delete(habit)
                session.commit()

    # Completion days
    def completed_days(self, habit_id: int) -> list[date]:
        with self.session_factory() as session:
            return list(
                session.exec(
                    select(HabitCompletion.completed_on)
                    .where(HabitCompletion.habit_id == habit_id)
                    .order_by(col(HabitCompletion.completed_on))
                ).all()
            )

    def completed_days_by_habit(self, habit_ids: Iterable[int]) -> dict[int, list[date]]:
        ids = list(habit_ids)
        if not ids:
            return {}
        by_habit: dict[int, list[date]] = defaultdict(list)
        with self.session_factory() as session:
            rows = session.exec(
                select(HabitCompletion.habit_id, HabitCompletion.completed_on)
                .where(col(HabitCompletion.habit_id).in_(ids))
                .order_by(col(HabitCompletion.completed_on))
            ).all()
            for habit_id, completed_on in rows:
                by_habit[habit_id].append(completed_on)
        return dict(by_habit)

    def add_completion(
        self, habit_id: int, day: date, *, user_id: int, completed_at: Optional[datetime] = None
    ) -> None:
        with self.session_factory() as session:
            if session.get(HabitCompletion, (habit_id, day)) is not None:
                return
            session.add(
                HabitCompletion(
                    habit_id=habit_id,
                    completed_on=day,
                    user_id=user_id,
                    completed_at=completed_at or datetime.now(timezone.utc),
                )
            )
            session.commit()

    def remove_completion(self, habit_id: int, day: date, *, user_id: int) -> None:
        with self.session_factory() as session:
            completion = session.get(HabitCompletion, (habit_id, day))
            if completion is not None and completion.user_id == user_id:
                session.delete(completion)
                session.commit()
