"""Tests for the nightly sweep scheduler."""

from __future__ import annotations

from datetime import date

from stride import scheduler as scheduler_module
from stride.scheduler import SWEEP_JOB_ID, SweepScheduler, create_scheduler


def test_owner_ids_cover_goals_and_habits(app_ctx, goal_factory, habit_factory, user_id, other_user_id):
    goal_factory()
    habit_factory(owner=other_user_id)

    assert SweepScheduler(app_ctx).owner_ids() == sorted([user_id, other_user_id])


def test_run_sweep_reports_every_user(
    app_ctx, goal_factory, habit_factory, goal_repo, user_id, other_user_id
):
    mine = goal_factory(target_date=date(2024, 1, 10))
    theirs = goal_factory(target_date=date(2024, 1, 12), owner=other_user_id)
    habit_factory(owner=other_user_id, goal=theirs)

    reports = SweepScheduler(app_ctx).run_sweep()

    by_user = {r.user_id: r for r in reports}
    assert by_user[user_id].completed_goal_ids == [mine.id]
    assert by_user[other_user_id].completed_goal_ids == [theirs.id]
    assert len(by_user[other_user_id].completed_habit_ids) == 1
    assert goal_repo.get_by_id(theirs.id, user_id=other_user_id).status == "completed"


def test_run_sweep_isolates_user_failures(app_ctx, goal_factory, monkeypatch, user_id, other_user_id):
    goal_factory()
    goal_factory(owner=other_user_id)
    real_sweep = scheduler_module.sweep_user

    def failing_sweep(ctx, uid):
        if uid == user_id:
            raise RuntimeError("boom")
        return real_sweep(ctx, uid)

    monkeypatch.setattr(scheduler_module, "sweep_user", failing_sweep)

    reports = SweepScheduler(app_ctx).run_sweep()

    assert [r.user_id for r in reports] == [other_user_id]


def test_start_registers_nightly_job(app_ctx):
    app_ctx.config.SWEEP_HOUR = 2
    sweep_scheduler = create_scheduler(app_ctx, auto_start=True)
    try:
        job = sweep_scheduler.scheduler.get_job(SWEEP_JOB_ID)
        assert job is not None
        assert "hour='2'" in str(job.trigger)
        assert "minute='5'" in str(job.trigger)
    finally:
        sweep_scheduler.stop()
    assert sweep_scheduler.scheduler is None

