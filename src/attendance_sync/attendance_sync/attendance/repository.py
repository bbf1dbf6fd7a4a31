from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
    ) -> int:
        """Insert a new day row.

        Raises ConflictError if a row for (employee_id, work_date) already exists.
        """

        raise NotImplementedError

    def update_check_in_if_earlier(self, *, attendance_id: int, check_in: datetime, status: AttendanceStatus) -> bool:
        """Compare-and-swap: only writes when the stored check-in is empty or later."""

        raise NotImplementedError

    def update_check_out_if_later(self, *, attendance_id: int, check_out: datetime) -> bool:
        """Compare-and-swap: only writes when the stored check-out is empty or earlier."""

        raise NotImplementedError
