"""Goal data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import Priority, Status

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class Goal(SQLModel, table=True):
    """A dated objective whose progress is derived from its linked habits.

    The set of linked habits is not stored here: each habit carries
    ``linked_goal_id`` and the repository answers ``list_for_goal``.
    """

    __tablename__: ClassVar[str] = "goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=120)
    description: str = Field(default="", max_length=500)
    target_date: date = Field(nullable=False, index=True)
    status: str = Field(default=Status.ACTIVE.value, max_length=16, index=True)
    is_completed: bool = Field(default=False, nullable=False)
    progress: int = Field(default=0, ge=0, le=100, nullable=False)
    priority: str = Field(default=Priority.MEDIUM.value, max_length=8)
    category: str = Field(default="General", max_length=64)
    color: str = Field(default="blue", max_length=16)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="goals"))

    @property
    def is_active(self) -> bool:
        return self.status == Status.ACTIVE.value
