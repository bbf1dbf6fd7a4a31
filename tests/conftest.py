from __future__ import annotations

from datetime import date, datetime, time
from typing import Callable

import pytest

from src.attendance_sync.attendance_sync.attendance.service import AttendanceMerger
from src.attendance_sync.attendance_sync.core.enums import PunchType
from src.attendance_sync.attendance_sync.devices.model import RawPunchEvent
from src.attendance_sync.attendance_sync.employees.model import Employee
from src.attendance_sync.attendance_sync.logs.service import LogIngestor
from src.attendance_sync.attendance_sync.settings.model import GracePolicy
from src.attendance_sync.attendance_sync.settings.service import GracePolicyService

from tests.fakes import TZ, WORK_DAY, InMemoryAttendance, InMemoryEmployees, InMemoryHrSettings, InMemoryLogs


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def at() -> Callable[..., datetime]:
    """Aware local datetime on the default work day."""

    def _at(hour: int, minute: int = 0, second: int = 0, *, day: date = WORK_DAY) -> datetime:
        return TZ.localize(datetime.combine(day, time(hour, minute, second)))

    return _at


@pytest.fixture
def fixed_now(at) -> datetime:
    return at(12, 0)


@pytest.fixture
def employees():
    return InMemoryEmployees(
        [
            Employee(employee_id=1, employee_code="EMP001", full_name="Rahim Uddin"),
            Employee(employee_id=2, employee_code="EMP002", full_name="Karim Ahmed"),
        ]
    )


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def logs_repo():
    return InMemoryLogs()


@pytest.fixture
def hr_settings():
    return InMemoryHrSettings(GracePolicy(office_start=time(9, 0), grace_period_minutes=15))


@pytest.fixture
def merger(attendance_repo, hr_settings):
    return AttendanceMerger(attendance_repo, GracePolicyService(hr_settings), timezone=TZ)


@pytest.fixture
def ingestor(logs_repo, employees, merger):
    return LogIngestor(logs_repo, employees, merger)


def punch(device_id: int, code: str, when: datetime, kind: PunchType = PunchType.CHECK_IN) -> RawPunchEvent:
    return RawPunchEvent(device_id=device_id, employee_code=code, punch_time=when, punch_type=kind, raw={"src": "test"})


@pytest.fixture
def make_punch():
    return punch

