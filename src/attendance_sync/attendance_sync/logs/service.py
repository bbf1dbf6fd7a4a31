from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable

from ..attendance.service import AttendanceMerger
from ..common.datetime_utils import utc_now
from ..core.constants import DEDUP_WINDOW_SECONDS
from ..devices.model import RawPunchEvent
from ..employees.repository import EmployeeRepository
from .repository import DeviceLogRepository

logger = logging.getLogger(__name__)


class LogIngestor:
    """Turns raw device punches into stored, merged log entries.

    Events are handled one by one in the order the adapter returned them; a
    failure on one event is logged and never stops the rest of the batch.
    """

    def __init__(
        self,
        logs: DeviceLogRepository,
        employees: EmployeeRepository,
        merger: AttendanceMerger,
        *,
        dedup_window_seconds: int = DEDUP_WINDOW_SECONDS,
    ):
        self._logs = logs
        self._employees = employees
        self._merger = merger
        self._window = timedelta(seconds=int(dedup_window_seconds))

    def ingest(self, events: Iterable[RawPunchEvent]) -> int:
        """Returns how many events were stored and merged into attendance."""
        stored = 0
        for event in events:
            try:
                if self._ingest_one(event):
                    stored += 1
            except Exception:
                logger.exception(
                    "Error processing device log for employee %s from device %s",
                    event.employee_code,
                    event.device_id,
                )
        return stored

    def _is_duplicate(self, event: RawPunchEvent) -> bool:
        existing = self._logs.find_near(
            device_id=event.device_id,
            employee_code=event.employee_code,
            start=event.punch_time - self._window,
            end=event.punch_time + self._window,
        )
        return existing is not None

    def _ingest_one(self, event: RawPunchEvent) -> bool:
        if self._is_duplicate(event):
            logger.info(
                "Skipping duplicate log for employee %s at %s", event.employee_code, event.punch_time.isoformat()
            )
            return False

        employee = self._employees.get_by_code(event.employee_code)
        if employee is None:
            logger.warning("Employee not found for employee code: %s", event.employee_code)
            return False

        log_id = self._logs.create(
            device_id=event.device_id,
            employee_code=event.employee_code,
            employee_id=employee.employee_id,
            punch_time=event.punch_time,
            punch_type=event.punch_type,
            raw_data=event.raw,
        )
        self._merger.merge(employee_id=employee.employee_id, punch_time=event.punch_time, punch_type=event.punch_type)
        self._logs.mark_synced(log_id, synced_at=utc_now())
        return True
