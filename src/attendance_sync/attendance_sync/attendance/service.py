from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

import pytz

from ..common.datetime_utils import local_date
from ..core.enums import PunchType
from ..core.exceptions import ConflictError
from ..settings.service import GracePolicyService
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceMerger:
    """Folds individual punches into the per-employee, per-day ledger.

    Every write is a monotone compare-and-swap (first check-in wins, last
    check-out wins), so replaying a punch any number of times, in any order,
    converges to the same row.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        grace_policies: GracePolicyService,
        *,
        timezone: pytz.BaseTzInfo,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._policies = grace_policies
        self._tz = timezone
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def merge(self, *, employee_id: int, punch_time: datetime, punch_type: PunchType) -> None:
        work_date = local_date(punch_time, self._tz)
        policy = self._policies.current()

        if punch_type == PunchType.CHECK_IN:
            strategy = self._factory.for_checkin(punch_time=punch_time, work_date=work_date, policy=policy, tz=self._tz)
            decision = strategy.decide_checkin()
            existing = self._find_or_create(
                employee_id, work_date, status=decision.status, check_in=punch_time
            )
            if existing is not None and (existing.check_in is None or punch_time < existing.check_in):
                self._attendance.update_check_in_if_earlier(
                    attendance_id=existing.attendance_id, check_in=punch_time, status=decision.status
                )
            logger.info(
                "Processed check-in for employee %s: %s at %s", employee_id, decision.status.value, punch_time.isoformat()
            )
            return

        decision = self._factory.for_checkout().decide_checkout()
        existing = self._find_or_create(employee_id, work_date, status=decision.status, check_out=punch_time)
        if existing is not None and (existing.check_out is None or punch_time > existing.check_out):
            self._attendance.update_check_out_if_later(attendance_id=existing.attendance_id, check_out=punch_time)
        logger.info("Processed check-out for employee %s at %s", employee_id, punch_time.isoformat())

    def _find_or_create(self, employee_id: int, work_date: date, **values) -> Optional[AttendanceRecord]:
        """Return the existing row, or None after inserting a fresh one."""
        existing = self._attendance.get_for_employee_and_date(employee_id, work_date)
        if existing is not None:
            return existing

        try:
            self._attendance.create(employee_id=employee_id, work_date=work_date, **values)
            return None
        except ConflictError:
            # Another device inserted the same day concurrently; merge into it.
            existing = self._attendance.get_for_employee_and_date(employee_id, work_date)
            if existing is None:
                raise
            return existing
