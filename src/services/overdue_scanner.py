"""Background reconciliation of the derived overdue flag."""

import logging
from datetime import date

from src.core import clock, db_client
from src.core.cache_client import task_cache
from src.core.logging import span
from src.domain.task import compute_is_overdue
from src.models.service_models import ScanReport


logger = logging.getLogger(__name__)


async def scan_overdue_tasks(*, today: date | None = None) -> ScanReport:
    """Flag pending tasks whose due date has passed since they were last written.

    Runs in its own store session. Each write is guarded by the task's
    version; a task changed concurrently is skipped and picked up again by the
    next pass. Only ``is_overdue`` is written, ``updated_at`` is left alone.
    The list cache is invalidated when at least one task was flagged.

    Args:
        today: Date to evaluate against (defaults to the current date)

    Returns:
        ScanReport with matched, flagged and skipped counts
    """
    today = today or clock.today()
    flagged = 0
    skipped_ids: list[int] = []

    with span("overdue_scanner.scan_overdue_tasks"):
        async with db_client.session():
            candidates = await db_client.fetch_overdue_candidates(today=today)

            for task in candidates:
                if not compute_is_overdue(task, today):
                    continue
                try:
                    await db_client.update_task(task.id, {"is_overdue": True}, expected_version=task.version)
                    flagged += 1
                except db_client.ConcurrencyConflictError as e:
                    skipped_ids.append(task.id)
                    logger.warning(
                        "Skipping overdue flag for task changed concurrently",
                        extra={"task_id": task.id, "error": str(e)},
                    )

        if flagged:
            task_cache.invalidate()

    if candidates:
        logger.info(
            "Overdue scan complete: %d/%d tasks flagged",
            flagged,
            len(candidates),
            extra={"today": today.isoformat(), "skipped_ids": skipped_ids},
        )
    else:
        logger.debug("Overdue scan found no tasks to flag")

    return ScanReport(today=today.isoformat(), matched=len(candidates), flagged=flagged, skipped_ids=skipped_ids)
