"""Background scheduler for the nightly expiration sweep."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .logging_config import get_logger
from .services.expiration import SweepReport, sweep_user

if TYPE_CHECKING:
    from .context import AppContext

logger = get_logger(__name__)

SWEEP_JOB_ID = "nightly_sweep"


class SweepScheduler:
    """Runs the expiration sweep for every user once a day.

    Reads already sweep on demand; the nightly job keeps goals that nobody
    opens from sitting active past their deadline.
    """

    def __init__(self, ctx: AppContext):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context with repositories, clock and config
        """
        self.ctx = ctx
        self.scheduler: BackgroundScheduler | None = None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = BackgroundScheduler(timezone="UTC")
        hour = getattr(self.ctx.config, "SWEEP_HOUR", 0)
        self.scheduler.add_job(
            func=self.run_sweep,
            trigger=CronTrigger(hour=hour, minute=5, timezone="UTC"),
            id=SWEEP_JOB_ID,
            name="Nightly Expiration Sweep",
            replace_existing=True,
        )
        logger.info(f"Scheduled expiration sweep at {hour:02d}:05 UTC")

        self.scheduler.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def owner_ids(self) -> list[int]:
        """Users owning at least one goal or habit."""
        ids = set(self.ctx.goal_repo.list_owner_ids())
        ids.update(self.ctx.habit_repo.list_owner_ids())
        return sorted(ids)

    def run_sweep(self) -> list[SweepReport]:
        """Sweep every owner; one user's failure does not stop the others."""
        reports: list[SweepReport] = []
        try:
            user_ids = self.owner_ids()
        except Exception as exc:
            logger.error(f"Scheduled sweep could not list users: {exc}", exc_info=True)
            return reports

        for user_id in user_ids:
            try:
                reports.append(sweep_user(self.ctx, user_id))
            except Exception as exc:
                logger.error(f"Scheduled sweep failed for user {user_id}: {exc}", exc_info=True)

        failures = sum(len(r.failures) for r in reports)
        logger.info(
            "Scheduled sweep completed",
            extra={"users": len(user_ids), "failures": failures},
        )
        return reports


def create_scheduler(ctx: AppContext, *, auto_start: bool = False) -> SweepScheduler:
    """Create and optionally start a sweep scheduler.

    Args:
        ctx: Application context
        auto_start: Whether to start the scheduler immediately

    Returns:
        SweepScheduler instance
    """
    scheduler = SweepScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler
