"""Job execution tracking and monitoring for scheduled jobs."""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from src.core.config import Constants


logger = logging.getLogger(__name__)


class JobTracker:
    """Track job execution history and health status in memory."""

    def __init__(self) -> None:
        """Initialize job tracker."""
        self._storage: dict[str, dict[str, Any]] = {}

    def _job(self, job_name: str) -> dict[str, Any]:
        return self._storage.setdefault(job_name, {})

    def record_job_start(self, job_name: str) -> None:
        """Record job execution start."""
        self._job(job_name)["current_run"] = datetime.now(UTC).isoformat()

    def record_job_success(self, job_name: str) -> None:
        """Record successful job execution."""
        job = self._job(job_name)
        job["last_success"] = datetime.now(UTC).isoformat()
        job["consecutive_failures"] = 0
        job["success_count"] = job.get("success_count", 0) + 1
        job.pop("current_run", None)

    def record_job_failure(self, job_name: str, error: str) -> int:
        """Record failed job execution.

        Returns:
            Number of consecutive failures including this one
        """
        job = self._job(job_name)
        job["last_failure"] = datetime.now(UTC).isoformat()
        job["last_error"] = error[: Constants.TRACKER_ERROR_MAXLEN]
        job["consecutive_failures"] = job.get("consecutive_failures", 0) + 1
        job["failure_count"] = job.get("failure_count", 0) + 1
        job.pop("current_run", None)
        return job["consecutive_failures"]

    def get_job_status(self, job_name: str) -> dict[str, Any]:
        """Get job execution status.

        Args:
            job_name: Name of the scheduled job

        Returns:
            Dict with job status information
        """
        job_data = self._storage.get(job_name, {})
        return {
            "job_name": job_name,
            "last_success": job_data.get("last_success"),
            "last_failure": job_data.get("last_failure"),
            "last_error": job_data.get("last_error"),
            "consecutive_failures": job_data.get("consecutive_failures", 0),
            "success_count": job_data.get("success_count", 0),
            "failure_count": job_data.get("failure_count", 0),
            "currently_running": "current_run" in job_data,
            "current_run_started": job_data.get("current_run"),
        }


# Global job tracker instance
job_tracker = JobTracker()


async def run_tracked_job(job_func: Callable[[], Awaitable[object]], job_name: str) -> None:
    """Execute one run of a job and record the outcome.

    A failing run is logged and recorded but never raised, so the schedule
    keeps firing.
    """
    job_tracker.record_job_start(job_name)
    try:
        await job_func()
    except Exception as e:
        consecutive_failures = job_tracker.record_job_failure(job_name, str(e))
        logger.exception(
            "%s failed",
            job_name,
            extra={"consecutive_failures": consecutive_failures},
        )
        return

    job_tracker.record_job_success(job_name)
    logger.debug("%s completed successfully", job_name)
