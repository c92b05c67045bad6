"""Concrete repository implementations using SQLModel."""

from .goal import SQLModelGoalRepository
from .habit import SQLModelHabitRepository

__all__ = [
    "SQLModelGoalRepository",
    "SQLModelHabitRepository",
]
