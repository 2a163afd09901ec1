"""Scheduler for background jobs (overdue reconciliation)."""

import logging
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.core.config import constants, settings
from src.core.scheduler_tracker import run_tracked_job
from src.services.overdue_scanner import scan_overdue_tasks


logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def run_overdue_scan() -> None:
    """Run one tracked overdue reconciliation pass."""
    await run_tracked_job(scan_overdue_tasks, constants.OVERDUE_SCAN_JOB_ID)


def start_scheduler() -> None:
    """Start the scheduler and register all jobs.

    This should be called during FastAPI app startup. The first overdue scan
    runs immediately, later ones every ``overdue_scan_interval_seconds``.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        run_overdue_scan,
        trigger=IntervalTrigger(seconds=settings.overdue_scan_interval_seconds),
        id=constants.OVERDUE_SCAN_JOB_ID,
        name="Reconcile Overdue Tasks",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(UTC),
    )
    logger.info(f"Scheduled overdue scan job: every {settings.overdue_scan_interval_seconds}s")

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown. No job run starts
    after this returns: the scheduler is paused and the scan job removed
    before the (event-loop deferred) shutdown is requested.
    """
    if not scheduler.running:
        return
    logger.info("Stopping scheduler")
    scheduler.pause()
    if scheduler.get_job(constants.OVERDUE_SCAN_JOB_ID) is not None:
        scheduler.remove_job(constants.OVERDUE_SCAN_JOB_ID)
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
