"""
Tests for derived job values.

These are pure functions over job fields, so plain objects stand in for rows.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from docu_service.ingestion.jobs import derived
from docu_service.ingestion.jobs.models import JobStatus


def _job(status=JobStatus.PENDING, **fields):
    values = {
        "status": status,
        "retry_count": 0,
        "max_retries": 3,
        "started_at": None,
        "completed_at": None,
    }
    values.update(fields)
    return SimpleNamespace(**values)


class TestActiveAndTerminal:
    """is_active / is_terminal partition the statuses."""

    @pytest.mark.parametrize("status", [JobStatus.PENDING, JobStatus.PROCESSING])
    def test_active_statuses(self, status):
        job = _job(status)
        assert derived.is_active(job) is True
        assert derived.is_terminal(job) is False

    @pytest.mark.parametrize(
        "status", [JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED]
    )
    def test_terminal_statuses(self, status):
        job = _job(status)
        assert derived.is_active(job) is False
        assert derived.is_terminal(job) is True


class TestCanRetry:

    def test_failed_with_budget(self):
        assert derived.can_retry(_job(JobStatus.FAILED, retry_count=2)) is True

    def test_failed_budget_exhausted(self):
        assert derived.can_retry(_job(JobStatus.FAILED, retry_count=3)) is False

    def test_only_failed_jobs(self):
        assert derived.can_retry(_job(JobStatus.CANCELLED)) is False
        assert derived.can_retry(_job(JobStatus.PROCESSING)) is False


class TestDuration:

    def test_never_started_is_zero(self):
        assert derived.duration_seconds(_job()) == 0.0

    def test_finished_job_uses_completed_at(self):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        job = _job(
            JobStatus.COMPLETED,
            started_at=start,
            completed_at=start + timedelta(seconds=90),
        )
        assert derived.duration_seconds(job) == 90.0

    def test_running_job_uses_now(self):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        job = _job(JobStatus.PROCESSING, started_at=start)
        now = start + timedelta(minutes=2)
        assert derived.duration_seconds(job, now=now) == 120.0

    def test_naive_timestamps_are_utc(self):
        """SQLite hands back naive datetimes."""
        start = datetime(2024, 1, 1, 12, 0)
        job = _job(JobStatus.PROCESSING, started_at=start)
        now = datetime(2024, 1, 1, 12, 0, 30, tzinfo=timezone.utc)
        assert derived.duration_seconds(job, now=now) == 30.0


class TestProgress:

    @pytest.mark.parametrize(
        "status,expected",
        [
            (JobStatus.PENDING, 0),
            (JobStatus.PROCESSING, 50),
            (JobStatus.COMPLETED, 100),
            (JobStatus.FAILED, 0),
            (JobStatus.CANCELLED, 0),
        ],
    )
    def test_coarse_progress(self, status, expected):
        assert derived.progress(_job(status)) == expected
