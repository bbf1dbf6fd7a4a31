from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self) -> StatusDecision:
        raise NotImplementedError

    def decide_checkout(self) -> StatusDecision:
        # Status for a row opened by a check-out; later check-outs never reclassify the day.
        return StatusDecision(status=AttendanceStatus.PRESENT)
