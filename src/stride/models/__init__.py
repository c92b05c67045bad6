"""SQLModel table exports."""

from .enums import Frequency, Priority, Status
from .goal import Goal
from .habit import Habit, HabitCompletion
from .user import User

__all__ = [
    "Frequency",
    "Goal",
    "Habit",
    "HabitCompletion",
    "Priority",
    "Status",
    "User",
]
