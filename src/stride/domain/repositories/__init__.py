"""Repository protocol definitions for domain layer."""

from .goal import GoalRepository
from .habit import HabitRepository

__all__ = [
    "GoalRepository",
    "HabitRepository",
]
