from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import PunchType


@dataclass(frozen=True)
class DeviceLogEntry:
    """Persisted, employee-resolved punch. Only the synced marker ever changes."""

    log_id: int
    device_id: int
    employee_code: str
    employee_id: int
    punch_time: datetime
    punch_type: PunchType
    raw_data: Optional[Dict[str, Any]] = None
    synced: bool = False
    synced_at: Optional[datetime] = None
