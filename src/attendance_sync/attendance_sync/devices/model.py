from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import PunchType


@dataclass(frozen=True)
class Device:
    """Registry entry for one punch clock.

    Only ``last_sync_at`` and ``last_sync_error`` are written by the sync engine.
    """

    device_id: int
    name: str
    device_type: str
    ip_address: Optional[str] = None
    port: Optional[int] = None
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    connection_params: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    last_sync_at: Optional[datetime] = None
    last_sync_error: Optional[str] = None

    def connection_config(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "id": self.device_id,
            "name": self.name,
            "ip_address": self.ip_address,
            "port": self.port,
            "api_key": self.api_key,
            "api_url": self.api_url,
        }
        config.update(self.connection_params or {})
        return config


@dataclass(frozen=True)
class RawPunchEvent:
    """Adapter output, already normalized to one shape for every vendor.

    ``raw`` is an opaque audit copy of the vendor record; nothing downstream
    reads it.
    """

    device_id: int
    employee_code: str
    punch_time: datetime
    punch_type: PunchType
    raw: Optional[Dict[str, Any]] = None
