"""Goal progress aggregation over linked habits."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..domain.repositories import GoalRepository, HabitRepository
from ..logging_config import get_logger
from .schedule import actual_completions, expected_completions

logger = get_logger(__name__)


@dataclass(slots=True)
class HabitContribution:
    """Expected and actual completions one habit adds to a goal."""

    habit_id: int
    expected: int
    actual: int


def compute_progress(total_actual: int, total_expected: int) -> int:
    """Percentage of expected completions achieved, clamped to [0, 100]."""

    if total_expected <= 0:
        return 0
    ratio = Decimal(100 * total_actual) / Decimal(total_expected)
    value = int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, value))


def recompute_goal_progress(
    goal_id: int,
    *,
    goal_repo: GoalRepository,
    habit_repo: HabitRepository,
) -> Optional[int]:
    """Recompute and store a goal's cached progress.

    Returns the new value, or ``None`` when the goal no longer exists.
    """

    goal = goal_repo.get_any(goal_id)
    if goal is None:
        logger.debug("Skipping progress for missing goal", extra={"goal_id": goal_id})
        return None

    habits = habit_repo.list_for_goal(goal_id)
    days_by_habit = habit_repo.completed_days_by_habit(h.id for h in habits)

    contributions = [
        HabitContribution(
            habit_id=habit.id,
            expected=expected_completions(habit, goal.target_date),
            actual=actual_completions(habit, days_by_habit.get(habit.id, []), goal.target_date),
        )
        for habit in habits
    ]
    total_expected = sum(c.expected for c in contributions)
    total_actual = sum(c.actual for c in contributions)
    progress = compute_progress(total_actual, total_expected)

    goal_repo.update_progress(goal_id, progress)
    logger.info(
        "Goal progress recomputed",
        extra={
            "goal_id": goal_id,
            "habits": len(contributions),
            "expected": total_expected,
            "actual": total_actual,
            "progress": progress,
        },
    )
    return progress


__all__ = ["HabitContribution", "compute_progress", "recompute_goal_progress"]
