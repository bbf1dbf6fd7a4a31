from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One ledger row per (employee, local calendar day).

    ``check_in`` only ever moves earlier and ``check_out`` only ever moves
    later; rows are never deleted by the sync engine.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
