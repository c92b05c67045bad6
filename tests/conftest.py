"""Pytest configuration and shared fixtures for Stride tests.

Each test gets its own SQLite file, SQLModel repositories bound to it, a
pinned clock and factories for goals and habits.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from stride import models  # noqa: F401  # register tables with SQLModel metadata
from stride.clock import FixedClock
from stride.config import TestConfig
from stride.context import AppContext
from stride.infra.database import create_session_factory
from stride.infra.repositories import SQLModelGoalRepository, SQLModelHabitRepository
from stride.models import Goal, Habit, User

# Wednesday. 2024-01-01 was a Monday, so this week runs Sun 14th .. Sat 20th.
TODAY = date(2024, 1, 17)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory committing on exit, as the application uses it."""
    return create_session_factory(db_engine)


@pytest.fixture
def make_user(session_factory):
    """Factory for users; returns the new user's id."""

    def _create_user(username: str = "tester") -> int:
        with session_factory() as session:
            user = User(username=username)
            session.add(user)
            session.commit()
            session.refresh(user)
            return user.id

    return _create_user


@pytest.fixture
def user_id(make_user) -> int:
    return make_user("tester")


@pytest.fixture
def other_user_id(make_user) -> int:
    return make_user("someone-else")


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def goal_repo(session_factory) -> SQLModelGoalRepository:
    return SQLModelGoalRepository(session_factory)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def config(tmp_path, monkeypatch) -> TestConfig:
    monkeypatch.setenv("STRIDE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("STRIDE_STRICT_PROGRESS", raising=False)
    return TestConfig()


@pytest.fixture
def app_ctx(config, goal_repo, habit_repo, clock, session_factory) -> AppContext:
    return AppContext(
        config=config,
        goal_repo=goal_repo,
        habit_repo=habit_repo,
        clock=clock,
        session_factory=session_factory,
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def goal_factory(goal_repo, user_id):
    """Factory for persisted goals (bypasses the goal service)."""

    def _create_goal(
        title: str = "Test Goal",
        target_date: date = date(2024, 1, 31),
        status: str = "active",
        owner: int | None = None,
    ) -> Goal:
        goal = Goal(
            user_id=owner or user_id,
            title=title,
            target_date=target_date,
            status=status,
            is_completed=status == "completed",
        )
        return goal_repo.create(goal, user_id=owner or user_id)

    return _create_goal


@pytest.fixture
def habit_factory(habit_repo, user_id):
    """Factory for persisted habits (bypasses the habit service).

    ``completed`` days are written straight to the completion table.
    """

    def _create_habit(
        title: str = "Test Habit",
        frequency: str = "daily",
        days: list[str] | None = None,
        start_date: date = date(2024, 1, 1),
        end_date: date | None = None,
        goal: Goal | None = None,
        status: str = "active",
        completed: list[date] | None = None,
        owner: int | None = None,
    ) -> Habit:
        owner = owner or user_id
        habit = Habit(
            user_id=owner,
            title=title,
            frequency=frequency,
            days=days or [],
            start_date=start_date,
            end_date=end_date,
            linked_goal_id=goal.id if goal else None,
            status=status,
        )
        habit = habit_repo.create(habit, user_id=owner)
        for day in completed or []:
            habit_repo.add_completion(habit.id, day, user_id=owner)
        return habit

    return _create_habit
