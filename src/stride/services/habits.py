"""Habit lifecycle: create, edit, link, toggle and delete.

Every change to which goal a habit belongs goes through ``link_habit`` so the
old and new goal both get their progress recomputed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.enums import COLORS, Frequency, Status
from ..models.habit import Habit
from .dates import normalize_days, normalize_weekday, to_day
from .expiration import sweep_user
from .gate import ensure_can_complete
from .progress import recompute_goal_progress
from .streaks import refresh_streaks

if TYPE_CHECKING:
    from ..context import AppContext

logger = get_logger(__name__)

HABIT_EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "frequency",
        "days",
        "start_date",
        "end_date",
        "icon",
        "category",
        "color",
        "is_archived",
        "status",
        "linked_goal_id",
    }
)
SCHEDULE_FIELDS = frozenset({"frequency", "days", "start_date"})
_FREQUENCIES = {f.value for f in Frequency}
_STATUSES = {s.value for s in Status}


def refresh_goal_progress(ctx: AppContext, goal_id: Optional[int]) -> Optional[int]:
    """Recompute a goal after a mutation.

    Best-effort: failures are logged and swallowed unless the context runs
    with strict progress, in which case they propagate to the caller.
    """

    if goal_id is None:
        return None
    try:
        return recompute_goal_progress(
            goal_id, goal_repo=ctx.goal_repo, habit_repo=ctx.habit_repo
        )
    except Exception:
        if ctx.strict_progress:
            raise
        logger.exception("Goal progress recompute failed", extra={"goal_id": goal_id})
        return None


def _normalize_schedule(habit: Habit) -> Habit:
    if habit.frequency not in _FREQUENCIES:
        raise ValidationError(f"Unknown frequency: {habit.frequency!r}")
    if habit.status not in _STATUSES:
        raise ValidationError(f"Unknown status: {habit.status!r}")
    if habit.color not in COLORS:
        raise ValidationError(f"Unknown color: {habit.color!r}")
    if habit.start_date is None:
        raise ValidationError("Habit start_date is required")
    habit.start_date = to_day(habit.start_date)
    if habit.end_date is not None:
        habit.end_date = to_day(habit.end_date)
        if habit.end_date < habit.start_date:
            raise ValidationError("Habit end_date is before start_date")
    if habit.frequency == Frequency.WEEKLY.value:
        habit.days = normalize_days(habit.days, habit.start_date)
    else:
        habit.days = sorted({normalize_weekday(d) for d in habit.days or []})
    return habit


def _require_habit(ctx: AppContext, habit_id: int, user_id: int) -> Habit:
    habit = ctx.habit_repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise NotFoundError("Habit", habit_id)
    return habit


def _require_goal(ctx: AppContext, goal_id: int, user_id: int) -> None:
    if ctx.goal_repo.get_by_id(goal_id, user_id=user_id) is None:
        raise NotFoundError("Goal", goal_id)


def get_habit(ctx: AppContext, habit_id: int, *, user_id: int) -> Habit:
    return _require_habit(ctx, habit_id, user_id)


def list_habits(
    ctx: AppContext, *, user_id: int, status: Optional[str] = None
) -> list[Habit]:
    """Sweep expired entities, then list the user's habits."""

    sweep_user(ctx, user_id)
    return ctx.habit_repo.list_all(user_id=user_id, status=status)


def create_habit(ctx: AppContext, habit: Habit, *, user_id: int) -> Habit:
    """Validate and persist a new habit, linking it to a goal if requested."""

    _normalize_schedule(habit)
    goal_id = habit.linked_goal_id
    if goal_id is not None:
        _require_goal(ctx, goal_id, user_id)

    habit.linked_goal_id = None
    habit.status = Status.ACTIVE.value
    habit.streak = 0
    habit.longest_streak = 0
    habit.last_completed_at = None
    created = ctx.habit_repo.create(habit, user_id=user_id)
    logger.info("Habit created", extra={"user_id": user_id, "habit_id": created.id})

    if goal_id is not None:
        return link_habit(ctx, created.id, goal_id, user_id=user_id)
    return created


def link_habit(
    ctx: AppContext, habit_id: int, goal_id: Optional[int], *, user_id: int
) -> Habit:
    """Attach a habit to ``goal_id`` (or detach it with ``None``).

    Both the previous and the new goal are recomputed.
    """

    habit = _require_habit(ctx, habit_id, user_id)
    if goal_id is not None:
        _require_goal(ctx, goal_id, user_id)

    previous = habit.linked_goal_id
    if previous == goal_id:
        return habit

    ctx.habit_repo.set_linked_goal(habit_id, goal_id, user_id=user_id)
    logger.info(
        "Habit link changed",
        extra={"habit_id": habit_id, "from_goal": previous, "to_goal": goal_id},
    )
    refresh_goal_progress(ctx, previous)
    refresh_goal_progress(ctx, goal_id)
    return _require_habit(ctx, habit_id, user_id)


def update_habit(
    ctx: AppContext, habit_id: int, changes: Mapping[str, Any], *, user_id: int
) -> Habit:
    """Apply field edits to a habit.

    Schedule edits on a linked habit recompute its goal; a changed
    ``linked_goal_id`` is routed through ``link_habit``.
    """

    unknown = set(changes) - HABIT_EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    habit = _require_habit(ctx, habit_id, user_id)
    relink = "linked_goal_id" in changes and changes["linked_goal_id"] != habit.linked_goal_id
    new_goal_id = changes.get("linked_goal_id")
    if relink and new_goal_id is not None:
        _require_goal(ctx, new_goal_id, user_id)

    for key, value in changes.items():
        if key != "linked_goal_id":
            setattr(habit, key, value)
    _normalize_schedule(habit)
    updated = ctx.habit_repo.update(habit, user_id=user_id)

    if relink:
        return link_habit(ctx, habit_id, new_goal_id, user_id=user_id)
    if SCHEDULE_FIELDS & set(changes):
        refresh_goal_progress(ctx, updated.linked_goal_id)
    return updated


def delete_habit(ctx: AppContext, habit_id: int, *, user_id: int) -> None:
    habit = _require_habit(ctx, habit_id, user_id)
    ctx.habit_repo.delete(habit_id, user_id=user_id)
    logger.info("Habit deleted", extra={"user_id": user_id, "habit_id": habit_id})
    refresh_goal_progress(ctx, habit.linked_goal_id)


def toggle_completion(ctx: AppContext, habit_id: int, *, user_id: int) -> Habit:
    """Mark or unmark today's completion and refresh streaks and goal progress."""

    habit = _require_habit(ctx, habit_id, user_id)
    if not habit.is_active:
        raise ValidationError(
            f"Habit {habit_id} is {habit.status}; completions are closed",
            code="habit_not_active",
        )

    today = ctx.clock.today()
    days = set(ctx.habit_repo.completed_days(habit_id))
    marked = today in days
    ensure_can_complete(habit, days, today, unmarking=marked)

    if marked:
        ctx.habit_repo.remove_completion(habit_id, today, user_id=user_id)
        days.discard(today)
        habit.last_completed_at = None
    else:
        now = ctx.clock.now()
        ctx.habit_repo.add_completion(habit_id, today, user_id=user_id, completed_at=now)
        days.add(today)
        habit.last_completed_at = now

    refresh_streaks(habit, days, today=today)
    updated = ctx.habit_repo.update(habit, user_id=user_id)
    logger.info(
        "Habit completion toggled",
        extra={
            "habit_id": habit_id,
            "day": today.isoformat(),
            "marked": not marked,
            "streak": updated.streak,
        },
    )
    refresh_goal_progress(ctx, updated.linked_goal_id)
    return updated


__all__ = [
    "HABIT_EDITABLE_FIELDS",
    "create_habit",
    "delete_habit",
    "get_habit",
    "link_habit",
    "list_habits",
    "refresh_goal_progress",
    "toggle_completion",
    "update_habit",
]
