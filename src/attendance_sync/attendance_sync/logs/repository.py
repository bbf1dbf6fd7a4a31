from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import PunchType
from .model import DeviceLogEntry


class DeviceLogRepository(Protocol):
    def find_near(
        self,
        *,
        device_id: int,
        employee_code: str,
        start: datetime,
        end: datetime,
    ) -> Optional[DeviceLogEntry]:
        """Any entry for device+employee with start <= punch_time <= end."""

        raise NotImplementedError

    def create(
        self,
        *,
        device_id: int,
        employee_code: str,
        employee_id: int,
        punch_time: datetime,
        punch_type: PunchType,
        raw_data: Optional[Dict[str, Any]] = None,
    ) -> int:
        raise NotImplementedError

    def mark_synced(self, log_id: int, *, synced_at: datetime) -> bool:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[DeviceLogEntry]:
        raise NotImplementedError
