"""Read-triggered expiration of goals and habits past their deadline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Optional

from ..clock import Clock
from ..domain.repositories import GoalRepository, HabitRepository
from ..errors import CascadeFailure, PartialCascadeFailure
from ..logging_config import get_logger
from ..models.goal import Goal
from .progress import recompute_goal_progress

if TYPE_CHECKING:
    from ..context import AppContext

logger = get_logger(__name__)


@dataclass
class SweepReport:
    """What a sweep finalized and what it could not."""

    user_id: int
    as_of: date
    completed_goal_ids: list[int] = field(default_factory=list)
    completed_habit_ids: list[int] = field(default_factory=list)
    failures: list[CascadeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PartialCascadeFailure(self.failures)


def finalize_goal(
    goal: Goal,
    *,
    goal_repo: GoalRepository,
    habit_repo: HabitRepository,
) -> list[int]:
    """Complete a goal and every habit linked to it.

    Linked habits end on the goal's target date. Progress is recomputed last
    so the cached value reflects the final state. Returns the habit ids that
    were completed.
    """

    goal_repo.mark_completed([goal.id], user_id=goal.user_id)
    habit_ids = [h.id for h in habit_repo.list_for_goal(goal.id)]
    habit_repo.complete_many(habit_ids, end_date=goal.target_date)
    recompute_goal_progress(goal.id, goal_repo=goal_repo, habit_repo=habit_repo)
    return habit_ids


def sweep_expired(
    user_id: int,
    *,
    goal_repo: GoalRepository,
    habit_repo: HabitRepository,
    clock: Clock,
    as_of: Optional[date] = None,
) -> SweepReport:
    """Finalize a user's expired goals, then their expired habits.

    Anything whose deadline day is today or earlier counts as expired.
    Failures are isolated per entity and collected on the report; this
    function does not raise for them.
    """

    today = as_of or clock.today()
    report = SweepReport(user_id=user_id, as_of=today)

    try:
        expired_goals = goal_repo.list_expired(user_id=user_id, as_of=today)
    except Exception as exc:
        logger.exception("Expired goal lookup failed", extra={"user_id": user_id})
        report.failures.append(CascadeFailure("user", user_id, str(exc)))
        expired_goals = []

    for goal in expired_goals:
        try:
            habit_ids = finalize_goal(goal, goal_repo=goal_repo, habit_repo=habit_repo)
        except Exception as exc:
            logger.exception(
                "Failed to finalize expired goal",
                extra={"user_id": user_id, "goal_id": goal.id},
            )
            report.failures.append(CascadeFailure("goal", goal.id, str(exc)))
            continue
        report.completed_goal_ids.append(goal.id)
        report.completed_habit_ids.extend(habit_ids)

    try:
        expired_habits = habit_repo.list_expired(user_id=user_id, as_of=today)
    except Exception as exc:
        logger.exception("Expired habit lookup failed", extra={"user_id": user_id})
        report.failures.append(CascadeFailure("user", user_id, str(exc)))
        expired_habits = []

    for habit in expired_habits:
        try:
            habit_repo.complete_many([habit.id])
        except Exception as exc:
            logger.exception(
                "Failed to finalize expired habit",
                extra={"user_id": user_id, "habit_id": habit.id},
            )
            report.failures.append(CascadeFailure("habit", habit.id, str(exc)))
            continue
        report.completed_habit_ids.append(habit.id)

    if report.completed_goal_ids or report.completed_habit_ids or report.failures:
        logger.info(
            "Expiration sweep finished",
            extra={
                "user_id": user_id,
                "as_of": today.isoformat(),
                "goals": len(report.completed_goal_ids),
                "habits": len(report.completed_habit_ids),
                "failures": len(report.failures),
            },
        )
    return report


def sweep_user(ctx: AppContext, user_id: int) -> SweepReport:
    """Run ``sweep_expired`` with the repositories and clock of ``ctx``."""

    return sweep_expired(
        user_id,
        goal_repo=ctx.goal_repo,
        habit_repo=ctx.habit_repo,
        clock=ctx.clock,
    )


__all__ = ["SweepReport", "finalize_goal", "sweep_expired", "sweep_user"]
