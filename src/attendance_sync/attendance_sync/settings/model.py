from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES, DEFAULT_OFFICE_START_TIME


@dataclass(frozen=True)
class GracePolicy:
    """Office start plus the buffer during which a check-in is still on time."""

    office_start: time
    grace_period_minutes: int

    @classmethod
    def defaults(cls) -> "GracePolicy":
        return cls(
            office_start=parse_hhmm(DEFAULT_OFFICE_START_TIME),
            grace_period_minutes=DEFAULT_GRACE_PERIOD_MINUTES,
        )

    def grace_deadline(self, office_start_at: datetime) -> datetime:
        return office_start_at + timedelta(minutes=self.grace_period_minutes)
