"""Goal lifecycle: create, read (with sweep), edit, complete and delete."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.enums import COLORS, Priority, Status
from ..models.goal import Goal
from ..models.habit import Habit
from .dates import to_day
from .expiration import finalize_goal, sweep_user
from .habits import link_habit, refresh_goal_progress

if TYPE_CHECKING:
    from ..context import AppContext

logger = get_logger(__name__)

GOAL_EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "target_date",
        "status",
        "is_completed",
        "priority",
        "category",
        "color",
        "habit_ids",
    }
)
_PRIORITIES = {p.value for p in Priority}
_STATUSES = {s.value for s in Status}


def _validate_goal(goal: Goal) -> Goal:
    if not (goal.title or "").strip():
        raise ValidationError("Goal title is required")
    if goal.target_date is None:
        raise ValidationError("Goal target_date is required")
    goal.target_date = to_day(goal.target_date)
    if goal.status not in _STATUSES:
        raise ValidationError(f"Unknown status: {goal.status!r}")
    if goal.priority not in _PRIORITIES:
        raise ValidationError(f"Unknown priority: {goal.priority!r}")
    if goal.color not in COLORS:
        raise ValidationError(f"Unknown color: {goal.color!r}")
    return goal


def _require_goal(ctx: AppContext, goal_id: int, user_id: int) -> Goal:
    goal = ctx.goal_repo.get_by_id(goal_id, user_id=user_id)
    if goal is None:
        raise NotFoundError("Goal", goal_id)
    return goal


def _require_habits(ctx: AppContext, habit_ids: Iterable[int], user_id: int) -> list[int]:
    ids = list(dict.fromkeys(habit_ids))
    for habit_id in ids:
        if ctx.habit_repo.get_by_id(habit_id, user_id=user_id) is None:
            raise NotFoundError("Habit", habit_id)
    return ids


def _finalize(ctx: AppContext, goal: Goal) -> None:
    try:
        finalize_goal(goal, goal_repo=ctx.goal_repo, habit_repo=ctx.habit_repo)
    except Exception:
        if ctx.strict_progress:
            raise
        logger.exception("Goal completion cascade failed", extra={"goal_id": goal.id})


def create_goal(
    ctx: AppContext,
    goal: Goal,
    *,
    user_id: int,
    habit_ids: Iterable[int] = (),
) -> Goal:
    """Persist a new active goal and link the given habits to it."""

    _validate_goal(goal)
    ids = _require_habits(ctx, habit_ids, user_id)

    goal.status = Status.ACTIVE.value
    goal.is_completed = False
    goal.progress = 0
    created = ctx.goal_repo.create(goal, user_id=user_id)
    logger.info("Goal created", extra={"user_id": user_id, "goal_id": created.id})

    for habit_id in ids:
        link_habit(ctx, habit_id, created.id, user_id=user_id)
    return _require_goal(ctx, created.id, user_id)


def get_goal(ctx: AppContext, goal_id: int, *, user_id: int) -> Goal:
    """Sweep expired entities, then fetch one goal."""

    sweep_user(ctx, user_id)
    return _require_goal(ctx, goal_id, user_id)


def list_goals(
    ctx: AppContext, *, user_id: int, status: Optional[str] = None
) -> list[Goal]:
    """Sweep expired entities, then list the user's goals."""

    sweep_user(ctx, user_id)
    return ctx.goal_repo.list_all(user_id=user_id, status=status)


def linked_habits(ctx: AppContext, goal_id: int, *, user_id: int) -> list[Habit]:
    _require_goal(ctx, goal_id, user_id)
    return ctx.habit_repo.list_for_goal(goal_id)


def update_goal(
    ctx: AppContext, goal_id: int, changes: Mapping[str, Any], *, user_id: int
) -> Goal:
    """Apply field edits to a goal.

    ``habit_ids`` replaces the linked set. Moving the goal to completed (via
    ``status`` or ``is_completed``) cascades to its habits; a new target date
    recomputes progress.
    """

    unknown = set(changes) - GOAL_EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    goal = _require_goal(ctx, goal_id, user_id)
    desired_ids = (
        set(_require_habits(ctx, changes["habit_ids"], user_id))
        if "habit_ids" in changes
        else None
    )
    was_completed = goal.status == Status.COMPLETED.value
    previous_target = goal.target_date

    for key, value in changes.items():
        if key != "habit_ids":
            setattr(goal, key, value)
    if changes.get("is_completed") is True:
        goal.status = Status.COMPLETED.value
    elif "status" in changes:
        goal.is_completed = goal.status == Status.COMPLETED.value
    _validate_goal(goal)
    updated = ctx.goal_repo.update(goal, user_id=user_id)

    if desired_ids is not None:
        current_ids = {h.id for h in ctx.habit_repo.list_for_goal(goal_id)}
        for habit_id in sorted(current_ids - desired_ids):
            link_habit(ctx, habit_id, None, user_id=user_id)
        for habit_id in sorted(desired_ids - current_ids):
            link_habit(ctx, habit_id, goal_id, user_id=user_id)

    if updated.status == Status.COMPLETED.value and not was_completed:
        logger.info("Goal completed by user", extra={"goal_id": goal_id})
        _finalize(ctx, updated)
    elif updated.target_date != previous_target:
        refresh_goal_progress(ctx, goal_id)
    return _require_goal(ctx, goal_id, user_id)


def complete_goal(ctx: AppContext, goal_id: int, *, user_id: int) -> Goal:
    return update_goal(ctx, goal_id, {"status": Status.COMPLETED.value}, user_id=user_id)


def delete_goal(ctx: AppContext, goal_id: int, *, user_id: int) -> None:
    """Unlink the goal's habits, then delete it."""

    _require_goal(ctx, goal_id, user_id)
    unlinked = ctx.habit_repo.clear_goal_links(goal_id)
    ctx.goal_repo.delete(goal_id, user_id=user_id)
    logger.info(
        "Goal deleted",
        extra={"user_id": user_id, "goal_id": goal_id, "unlinked_habits": len(unlinked)},
    )


__all__ = [
    "GOAL_EDITABLE_FIELDS",
    "complete_goal",
    "create_goal",
    "delete_goal",
    "get_goal",
    "linked_habits",
    "list_goals",
    "update_goal",
]
