"""String enumerations stored on goal and habit rows."""

from __future__ import annotations

from enum import Enum


class Status(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


COLORS = (
    "blue", "green", "purple", "orange", "red",
    "pink", "indigo", "teal", "yellow", "gray",
)
