from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, FrozenSet, Iterable, List, Optional

import pytz
from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import SYNC_INTERVAL_SECONDS
from ..sync.service import AttendanceSyncService

logger = logging.getLogger(__name__)

DEVICE_SYNC_JOB_ID = "device-sync"


@dataclass(frozen=True)
class PeriodicJob:
    """A job run once on start and then every ``interval_seconds``.

    When ``only_at_hours`` is set, ticks outside those local hours are skipped.
    """

    job_id: str
    func: Callable[[], Any]
    interval_seconds: int
    only_at_hours: Optional[FrozenSet[int]] = None
    run_on_start: bool = True


class SchedulerService:
    """Drives the device sync cycle and sibling reminder jobs on fixed intervals.

    Ticks fire independently of how long a run takes; a tick that lands while
    the previous run of the same job is still going is dropped, never queued.
    """

    def __init__(
        self,
        sync_service: AttendanceSyncService,
        *,
        interval_seconds: int = SYNC_INTERVAL_SECONDS,
        timezone: pytz.BaseTzInfo = pytz.utc,
        jobs: Iterable[PeriodicJob] = (),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._sync = sync_service
        self._tz = timezone
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._jobs: List[PeriodicJob] = [
            PeriodicJob(job_id=DEVICE_SYNC_JOB_ID, func=sync_service.sync_all_devices, interval_seconds=int(interval_seconds))
        ]
        self._jobs.extend(jobs)
        self._scheduler = BackgroundScheduler(
            timezone=timezone,
            job_defaults={"coalesce": True, "max_instances": 1},
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    @property
    def job_ids(self) -> List[str]:
        return [job.job_id for job in self._jobs]

    def add_job(self, job: PeriodicJob) -> None:
        if any(j.job_id == job.job_id for j in self._jobs):
            raise ValueError(f"Duplicate job id: {job.job_id}")
        self._jobs.append(job)
        if self.running:
            self._register(job)

    def start(self) -> None:
        if self.running:
            return
        for job in self._jobs:
            self._register(job)
        self._scheduler.start()
        logger.info("Scheduler service started (%s)", ", ".join(self.job_ids))

    def stop(self) -> None:
        """Stop all timers; a run already in progress is left to finish."""
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        logger.info("Scheduler service stopped")

    def run_job(self, job: PeriodicJob) -> bool:
        """Run one tick of ``job``. Returns False when the hour gate skipped it."""
        if job.only_at_hours is not None and self._clock().hour not in job.only_at_hours:
            return False
        try:
            job.func()
        except Exception:
            logger.exception("Scheduled job %s failed", job.job_id)
        return True

    def _register(self, job: PeriodicJob) -> None:
        options = {}
        if job.run_on_start:
            options["next_run_time"] = datetime.now(self._tz)
        self._scheduler.add_job(
            self.run_job,
            "interval",
            args=[job],
            seconds=job.interval_seconds,
            id=job.job_id,
            replace_existing=True,
            **options,
        )
