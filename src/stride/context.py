"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock import Clock, SystemClock
from .config import BaseConfig
from .domain.repositories import GoalRepository, HabitRepository
from .infra.database import (
    SessionFactory,
    create_db_engine,
    create_session_factory,
    init_database,
)
from .infra.repositories import SQLModelGoalRepository, SQLModelHabitRepository


@dataclass
class AppContext:
    """Repositories, clock and settings handed to the services."""

    config: BaseConfig
    goal_repo: GoalRepository
    habit_repo: HabitRepository
    clock: Clock
    session_factory: Optional[SessionFactory] = None

    @property
    def strict_progress(self) -> bool:
        return bool(getattr(self.config, "STRICT_PROGRESS", False))


def create_app_context(
    config: Optional[BaseConfig] = None, *, clock: Optional[Clock] = None
) -> AppContext:
    """Create the engine, schema and SQLModel repositories."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        goal_repo=SQLModelGoalRepository(session_factory),
        habit_repo=SQLModelHabitRepository(session_factory),
        clock=clock or SystemClock(),
        session_factory=session_factory,
    )
