from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """Check-in within the grace period."""

    def decide_checkin(self) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
