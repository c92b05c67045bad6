"""Tests for goal lifecycle operations."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from stride.errors import NotFoundError, TransientStoreError, ValidationError
from stride.infra.repositories import SQLModelGoalRepository
from stride.models import Goal
from stride.services.goals import (
    complete_goal,
    create_goal,
    delete_goal,
    get_goal,
    linked_habits,
    list_goals,
    update_goal,
)
from stride.services.progress import recompute_goal_progress

TODAY = date(2024, 1, 17)


class BrokenProgressGoalRepository(SQLModelGoalRepository):
    def update_progress(self, goal_id, progress):
        raise TransientStoreError("progress write failed")


def _new_goal(**overrides) -> Goal:
    fields = {"user_id": 0, "title": "Run a 10k", "target_date": date(2024, 1, 31)}
    fields.update(overrides)
    return Goal(**fields)


class TestCreateGoal:
    def test_links_habits_and_computes_progress(self, app_ctx, user_id, habit_factory, habit_repo):
        done = habit_factory(title="Run", start_date=TODAY, completed=[TODAY])
        pending = habit_factory(title="Stretch", start_date=TODAY)

        goal = create_goal(app_ctx, _new_goal(), user_id=user_id, habit_ids=[done.id, pending.id])

        assert goal.status == "active"
        assert [h.id for h in habit_repo.list_for_goal(goal.id)] == [done.id, pending.id]
        # 1 of 2 * 15 expected days
        assert goal.progress == 3

    def test_foreign_habit_rejected_before_writing(
        self, app_ctx, user_id, other_user_id, habit_factory, goal_repo
    ):
        theirs = habit_factory(owner=other_user_id)
        with pytest.raises(NotFoundError):
            create_goal(app_ctx, _new_goal(), user_id=user_id, habit_ids=[theirs.id])
        assert goal_repo.list_all(user_id=user_id) == []

    @pytest.mark.parametrize(
        "overrides",
        [{"title": "  "}, {"priority": "urgent"}, {"color": "mauve"}],
    )
    def test_invalid_fields_rejected(self, app_ctx, user_id, overrides):
        with pytest.raises(ValidationError):
            create_goal(app_ctx, _new_goal(**overrides), user_id=user_id)


class TestReadGoal:
    def test_get_goal_finalizes_expired_goal(self, app_ctx, user_id, goal_factory, habit_factory, habit_repo):
        goal = goal_factory(target_date=TODAY)
        habit = habit_factory(goal=goal, completed=[TODAY])

        fetched = get_goal(app_ctx, goal.id, user_id=user_id)

        assert fetched.status == "completed"
        assert fetched.is_completed is True
        stored = habit_repo.get_by_id(habit.id, user_id=user_id)
        assert stored.status == "completed"
        assert stored.end_date == TODAY

    def test_get_goal_for_other_user(self, app_ctx, other_user_id, goal_factory):
        goal = goal_factory()
        with pytest.raises(NotFoundError):
            get_goal(app_ctx, goal.id, user_id=other_user_id)

    def test_list_goals_by_status(self, app_ctx, user_id, goal_factory):
        goal_factory(title="Past", target_date=date(2024, 1, 10))
        goal_factory(title="Future", target_date=date(2024, 2, 10))

        active = list_goals(app_ctx, user_id=user_id, status="active")
        completed = list_goals(app_ctx, user_id=user_id, status="completed")

        assert [g.title for g in active] == ["Future"]
        assert [g.title for g in completed] == ["Past"]

    def test_linked_habits(self, app_ctx, user_id, goal_factory, habit_factory):
        goal = goal_factory()
        habit = habit_factory(goal=goal)
        habit_factory(title="Loose")

        assert [h.id for h in linked_habits(app_ctx, goal.id, user_id=user_id)] == [habit.id]


class TestUpdateGoal:
    def test_new_target_date_recomputes(self, app_ctx, user_id, goal_factory, habit_factory, goal_repo, habit_repo):
        goal = goal_factory(target_date=date(2024, 1, 20))
        habit_factory(start_date=TODAY, goal=goal, completed=[TODAY])
        assert recompute_goal_progress(goal.id, goal_repo=goal_repo, habit_repo=habit_repo) == 25

        updated = update_goal(app_ctx, goal.id, {"target_date": date(2024, 1, 18)}, user_id=user_id)

        assert updated.progress == 50

    def test_replace_habit_ids(self, app_ctx, user_id, goal_factory, habit_factory, habit_repo):
        goal = goal_factory()
        first = habit_factory(title="first", goal=goal)
        second = habit_factory(title="second", goal=goal)
        third = habit_factory(title="third")

        update_goal(app_ctx, goal.id, {"habit_ids": [second.id, third.id]}, user_id=user_id)

        assert [h.id for h in habit_repo.list_for_goal(goal.id)] == [second.id, third.id]
        assert habit_repo.get_by_id(first.id, user_id=user_id).linked_goal_id is None

    def test_completion_cascades_to_habits(self, app_ctx, user_id, goal_factory, habit_factory, habit_repo):
        goal = goal_factory(target_date=date(2024, 1, 31))
        habit = habit_factory(goal=goal)

        completed = complete_goal(app_ctx, goal.id, user_id=user_id)

        assert completed.status == "completed"
        assert completed.is_completed is True
        stored = habit_repo.get_by_id(habit.id, user_id=user_id)
        assert stored.status == "completed"
        assert stored.end_date == date(2024, 1, 31)

    def test_is_completed_flag_completes(self, app_ctx, user_id, goal_factory):
        goal = goal_factory()
        updated = update_goal(app_ctx, goal.id, {"is_completed": True}, user_id=user_id)
        assert updated.status == "completed"

    def test_cancel_does_not_cascade(self, app_ctx, user_id, goal_factory, habit_factory, habit_repo):
        goal = goal_factory()
        habit = habit_factory(goal=goal)

        cancelled = update_goal(app_ctx, goal.id, {"status": "cancelled"}, user_id=user_id)

        assert cancelled.status == "cancelled"
        assert cancelled.is_completed is False
        assert habit_repo.get_by_id(habit.id, user_id=user_id).status == "active"

    def test_derived_fields_are_not_editable(self, app_ctx, user_id, goal_factory):
        goal = goal_factory()
        with pytest.raises(ValidationError):
            update_goal(app_ctx, goal.id, {"progress": 100}, user_id=user_id)

    def test_cascade_failure_is_logged(self, app_ctx, user_id, session_factory, goal_factory, caplog):
        goal = goal_factory()
        app_ctx.goal_repo = BrokenProgressGoalRepository(session_factory)

        with caplog.at_level(logging.ERROR, logger="stride"):
            updated = complete_goal(app_ctx, goal.id, user_id=user_id)

        assert updated.status == "completed"
        assert "Goal completion cascade failed" in caplog.text

    def test_cascade_failure_raises_in_strict_mode(self, app_ctx, user_id, session_factory, goal_factory):
        goal = goal_factory()
        app_ctx.goal_repo = BrokenProgressGoalRepository(session_factory)
        app_ctx.config.STRICT_PROGRESS = True

        with pytest.raises(TransientStoreError):
            complete_goal(app_ctx, goal.id, user_id=user_id)


class TestDeleteGoal:
    def test_delete_unlinks_habits(self, app_ctx, user_id, goal_factory, habit_factory, goal_repo, habit_repo):
        goal = goal_factory()
        habit = habit_factory(goal=goal)

        delete_goal(app_ctx, goal.id, user_id=user_id)

        assert goal_repo.get_by_id(goal.id, user_id=user_id) is None
        remaining = habit_repo.get_by_id(habit.id, user_id=user_id)
        assert remaining is not None
        assert remaining.linked_goal_id is None

    def test_delete_missing_goal(self, app_ctx, user_id):
        with pytest.raises(NotFoundError):
            delete_goal(app_ctx, 999, user_id=user_id)
