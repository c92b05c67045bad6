"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import Frequency, Status

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class Habit(SQLModel, table=True):
    """A recurring activity on a daily, weekly or monthly schedule."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=80)
    description: str = Field(default="", max_length=255)
    frequency: str = Field(default=Frequency.DAILY.value, max_length=16)
    # Weekday tokens (sun..sat); only read for weekly habits.
    days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None, index=True)
    streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    last_completed_at: Optional[datetime] = Field(default=None)
    linked_goal_id: Optional[int] = Field(default=None, foreign_key="goal.id", index=True)
    status: str = Field(default=Status.ACTIVE.value, max_length=16, index=True)
    icon: str = Field(default="🎯", max_length=8)
    category: str = Field(default="General", max_length=64)
    color: str = Field(default="blue", max_length=16)
    is_archived: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="habits"))

    @property
    def is_active(self) -> bool:
        return self.status == Status.ACTIVE.value


class HabitCompletion(SQLModel, table=True):
    """A habit marked done on one UTC calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    completed_on: date = Field(primary_key=True, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
