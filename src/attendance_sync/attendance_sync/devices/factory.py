from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Type

import pytz

from ..core.enums import DeviceType
from ..core.exceptions import UnsupportedDeviceTypeError
from .adapters.base import DeviceAdapter
from .adapters.http_device import HttpDeviceAdapter
from .adapters.suprema import SupremaAdapter
from .adapters.zkteco import ZKTecoAdapter


@dataclass
class DeviceAdapterFactory:
    """Factory Pattern: choose the transport adapter from a device type tag."""

    default_timezone: pytz.BaseTzInfo = pytz.utc
    adapters: Dict[str, Type[DeviceAdapter]] = field(
        default_factory=lambda: {
            DeviceType.ZKTECO.value: ZKTecoAdapter,
            DeviceType.SUPREMA.value: SupremaAdapter,
            DeviceType.HTTP.value: HttpDeviceAdapter,
        }
    )

    def for_device_type(self, device_type: str) -> DeviceAdapter:
        adapter_cls = self.adapters.get(str(device_type or "").strip().lower())
        if adapter_cls is None:
            raise UnsupportedDeviceTypeError(f"Unsupported device type: {device_type}")
        return adapter_cls(default_timezone=self.default_timezone)
