from __future__ import annotations

from enum import Enum


class PunchType(str, Enum):
    """Direction of a single punch, normalized across vendors."""

    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class AttendanceStatus(str, Enum):
    """Status stored on the daily attendance ledger."""

    PRESENT = "present"
    LATE = "late"


class DeviceType(str, Enum):
    """Vendor transports understood by the adapter factory."""

    ZKTECO = "zkteco"
    SUPREMA = "suprema"
    HTTP = "http"
