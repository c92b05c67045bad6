"""Operator commands for Stride."""

from __future__ import annotations

import time
from datetime import date

import click

from .clock import FixedClock
from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import PartialCascadeFailure
from .logging_config import setup_logging
from .scheduler import SweepScheduler, create_scheduler
from .services.expiration import sweep_user
from .services.progress import recompute_goal_progress


def _app_context(ctx: click.Context) -> AppContext:
    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_app_context(config)
    return ctx.obj


@click.group()
def cli() -> None:
    """Goal and habit progress maintenance."""


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""

    app = _app_context(ctx)
    click.echo(f"Database ready: {app.config.DATABASE_URL}")


@cli.command("sweep")
@click.option("--user-id", type=int, default=None, help="Sweep a single user")
@click.option("--all", "all_users", is_flag=True, default=False, help="Sweep every user")
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Treat this UTC day as today",
)
@click.option("--strict", is_flag=True, default=False, help="Exit non-zero on any failure")
@click.pass_context
def sweep(ctx: click.Context, user_id: int | None, all_users: bool, today, strict: bool) -> None:
    """Complete goals and habits whose deadline has passed."""

    if (user_id is None) == (not all_users):
        raise click.UsageError("Pass exactly one of --user-id or --all.")

    app = _app_context(ctx)
    if today is not None:
        app.clock = FixedClock(date(today.year, today.month, today.day))

    if all_users:
        reports = SweepScheduler(app).run_sweep()
    else:
        reports = [sweep_user(app, user_id)]

    for report in reports:
        click.echo(
            f"user {report.user_id}: {len(report.completed_goal_ids)} goals, "
            f"{len(report.completed_habit_ids)} habits completed, "
            f"{len(report.failures)} failures"
        )

    if strict:
        for report in reports:
            try:
                report.raise_for_failures()
            except PartialCascadeFailure as exc:
                raise click.ClickException(str(exc)) from exc


@cli.command("recompute")
@click.argument("goal_id", type=int)
@click.pass_context
def recompute(ctx: click.Context, goal_id: int) -> None:
    """Recompute the cached progress of one goal."""

    app = _app_context(ctx)
    progress = recompute_goal_progress(
        goal_id, goal_repo=app.goal_repo, habit_repo=app.habit_repo
    )
    if progress is None:
        raise click.ClickException(f"Goal {goal_id} not found")
    click.echo(f"goal {goal_id}: {progress}%")


@cli.command("scheduler")
@click.option("--run-now", is_flag=True, default=False, help="Sweep every user before waiting")
@click.pass_context
def run_scheduler(ctx: click.Context, run_now: bool) -> None:
    """Run the nightly sweep in the foreground until interrupted."""

    app = _app_context(ctx)
    sweep_scheduler = create_scheduler(app, auto_start=True)
    click.echo(f"Nightly sweep scheduled at {app.config.SWEEP_HOUR:02d}:05 UTC")
    try:
        if run_now:
            sweep_scheduler.run_sweep()
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        click.echo("Stopping scheduler")
    finally:
        sweep_scheduler.stop()


def main() -> None:  # pragma: no cover - console entry point
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
