from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

import pytz

from ..common.datetime_utils import local_datetime
from ..settings.model import GracePolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(
        self,
        *,
        punch_time: datetime,
        work_date: date,
        policy: GracePolicy,
        tz: pytz.BaseTzInfo,
    ) -> AttendanceStrategy:
        office_start = local_datetime(work_date, policy.office_start, tz)
        # Strictly after the deadline is late; the deadline itself is on time.
        if punch_time > policy.grace_deadline(office_start):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self) -> AttendanceStrategy:
        return NormalStrategy()
