import threading
from datetime import datetime

import pytest
import pytz

from src.attendance_sync.attendance_sync.scheduler.service import DEVICE_SYNC_JOB_ID, PeriodicJob, SchedulerService


class FakeSyncService:
    def __init__(self):
        self.calls = 0
        self.ran = threading.Event()

    def sync_all_devices(self):
        self.calls += 1
        self.ran.set()


def _clock(hour):
    return lambda: pytz.utc.localize(datetime(2026, 3, 2, hour, 0))


def test_device_sync_job_is_always_registered():
    scheduler = SchedulerService(FakeSyncService(), interval_seconds=60)

    assert scheduler.job_ids == [DEVICE_SYNC_JOB_ID]


def test_duplicate_job_id_rejected():
    scheduler = SchedulerService(FakeSyncService())

    with pytest.raises(ValueError, match="Duplicate job id"):
        scheduler.add_job(PeriodicJob(job_id=DEVICE_SYNC_JOB_ID, func=lambda: None, interval_seconds=10))


def test_run_job_respects_hour_gate():
    calls = []
    job = PeriodicJob(job_id="reminder", func=lambda: calls.append(1), interval_seconds=3600, only_at_hours=frozenset({9}))

    assert SchedulerService(FakeSyncService(), clock=_clock(8)).run_job(job) is False
    assert SchedulerService(FakeSyncService(), clock=_clock(9)).run_job(job) is True
    assert calls == [1]


def test_failing_job_is_logged_not_raised(caplog):
    def boom():
        raise RuntimeError("mail server down")

    job = PeriodicJob(job_id="reminder", func=boom, interval_seconds=60)

    assert SchedulerService(FakeSyncService()).run_job(job) is True
    assert "Scheduled job reminder failed" in caplog.text


def test_start_runs_device_sync_immediately_and_stop_is_idempotent():
    sync = FakeSyncService()
    scheduler = SchedulerService(sync, interval_seconds=3600)

    scheduler.start()
    scheduler.start()
    try:
        assert scheduler.running is True
        assert sync.ran.wait(5)
    finally:
        scheduler.stop()
        scheduler.stop()

    assert scheduler.running is False
    assert sync.calls == 1


def test_jobs_added_after_start_are_scheduled():
    sync = FakeSyncService()
    extra = FakeSyncService()
    scheduler = SchedulerService(sync, interval_seconds=3600)
    scheduler.start()
    try:
        scheduler.add_job(PeriodicJob(job_id="extra", func=extra.sync_all_devices, interval_seconds=3600))
        assert extra.ran.wait(5)
    finally:
        scheduler.stop()

    assert scheduler.job_ids == [DEVICE_SYNC_JOB_ID, "extra"]
