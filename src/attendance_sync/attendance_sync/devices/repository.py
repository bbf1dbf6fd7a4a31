from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Device


class DeviceRepository(Protocol):
    def list_active(self) -> Sequence[Device]:
        raise NotImplementedError

    def get_by_id(self, device_id: int) -> Optional[Device]:
        raise NotImplementedError

    def mark_synced(self, device_id: int, *, synced_at: datetime) -> bool:
        """Advance the watermark and clear the last error."""

        raise NotImplementedError

    def mark_failed(self, device_id: int, *, error: str, synced_at: datetime) -> bool:
        """Record the error; the watermark still moves to ``synced_at``."""

        raise NotImplementedError
