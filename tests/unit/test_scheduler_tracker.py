"""Tests for scheduler job tracking."""

import pytest

from src.core.config import Constants
from src.core.scheduler_tracker import JobTracker, run_tracked_job


@pytest.fixture
def job_tracker() -> JobTracker:
    """Create a job tracker instance for testing."""
    return JobTracker()


@pytest.fixture
def global_tracker(monkeypatch: pytest.MonkeyPatch, job_tracker: JobTracker) -> JobTracker:
    """Swap the module-level tracker for a fresh one."""
    monkeypatch.setattr("src.core.scheduler_tracker.job_tracker", job_tracker)
    return job_tracker


@pytest.mark.unit
def test_record_job_start(job_tracker: JobTracker) -> None:
    """Test recording job start."""
    job_tracker.record_job_start("test_job")

    status = job_tracker.get_job_status("test_job")
    assert status["currently_running"] is True
    assert status["current_run_started"] is not None


@pytest.mark.unit
def test_record_job_success(job_tracker: JobTracker) -> None:
    """Test recording successful job execution."""
    job_tracker.record_job_start("test_job")
    job_tracker.record_job_success("test_job")

    status = job_tracker.get_job_status("test_job")
    assert status["last_success"] is not None
    assert status["consecutive_failures"] == 0
    assert status["success_count"] == 1
    assert status["currently_running"] is False


@pytest.mark.unit
def test_record_job_failure(job_tracker: JobTracker) -> None:
    """Test recording failed job execution."""
    job_tracker.record_job_start("test_job")
    job_tracker.record_job_failure("test_job", "Test error")

    status = job_tracker.get_job_status("test_job")
    assert status["last_failure"] is not None
    assert status["last_error"] == "Test error"
    assert status["consecutive_failures"] == 1
    assert status["failure_count"] == 1
    assert status["currently_running"] is False


@pytest.mark.unit
def test_consecutive_failures_reset_on_success(job_tracker: JobTracker) -> None:
    """Test that consecutive failures are counted and reset by a success."""
    assert job_tracker.record_job_failure("test_job", "Error 1") == 1
    assert job_tracker.record_job_failure("test_job", "Error 2") == 2

    job_tracker.record_job_success("test_job")

    status = job_tracker.get_job_status("test_job")
    assert status["consecutive_failures"] == 0
    assert status["failure_count"] == 2
    assert status["last_error"] == "Error 2"


@pytest.mark.unit
def test_error_message_truncated(job_tracker: JobTracker) -> None:
    """Test that long error messages are truncated."""
    job_tracker.record_job_failure("test_job", "x" * 2000)

    status = job_tracker.get_job_status("test_job")
    assert len(status["last_error"]) == Constants.TRACKER_ERROR_MAXLEN


@pytest.mark.unit
def test_unknown_job_status(job_tracker: JobTracker) -> None:
    """Test status of a job that never ran."""
    status = job_tracker.get_job_status("never_ran")

    assert status["job_name"] == "never_ran"
    assert status["last_success"] is None
    assert status["consecutive_failures"] == 0
    assert status["currently_running"] is False


@pytest.mark.unit
async def test_run_tracked_job_records_success(global_tracker: JobTracker) -> None:
    """Test that a successful run is recorded."""
    calls = []

    async def job() -> None:
        calls.append("ran")

    await run_tracked_job(job, "test_job")

    assert calls == ["ran"]
    assert global_tracker.get_job_status("test_job")["success_count"] == 1


@pytest.mark.unit
async def test_run_tracked_job_swallows_and_records_failure(global_tracker: JobTracker) -> None:
    """Test that a failing run is recorded and does not raise."""

    async def job() -> None:
        raise RuntimeError("database is locked")

    await run_tracked_job(job, "test_job")
    await run_tracked_job(job, "test_job")

    status = global_tracker.get_job_status("test_job")
    assert status["consecutive_failures"] == 2
    assert status["last_error"] == "database is locked"
    assert status["currently_running"] is False
