from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from zk import ZK
from zk.exception import ZKError

from ...core.constants import DEFAULT_ZKTECO_PORT
from ...core.enums import PunchType
from ..model import RawPunchEvent
from .base import DeviceAdapter

logger = logging.getLogger(__name__)

# pyzk punch codes: 0 check-in, 1 check-out, 2 break-out, 3 break-in,
# 4 overtime-in, 5 overtime-out.
_CHECK_OUT_PUNCHES = frozenset({1, 2, 5})


class ZKTecoAdapter(DeviceAdapter):
    """ZKTeco terminals over their binary TCP/UDP protocol (pyzk)."""

    vendor = "ZKTeco"
    required_fields = ("ip_address",)
    transport_errors = (ZKError, OSError)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._conn = None

    def _open(self) -> None:
        zk = ZK(
            self._config["ip_address"],
            port=int(self._config.get("port") or DEFAULT_ZKTECO_PORT),
            timeout=int(self._config.get("timeout") or 10),
            password=int(self._config.get("password") or 0),
            force_udp=bool(self._config.get("force_udp", False)),
            ommit_ping=bool(self._config.get("ommit_ping", True)),
        )
        self._conn = zk.connect()

    def _close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.disconnect()

    def _probe(self) -> bool:
        return bool(self._conn is not None and self._conn.is_connect)

    def _fetch(self, since: Optional[datetime]) -> List[RawPunchEvent]:
        # Keep the terminal from accepting punches while its log is read.
        self._conn.disable_device()
        try:
            records = self._conn.get_attendance() or []
        finally:
            self._conn.enable_device()

        return self._normalize(records, self._to_event)

    def _to_event(self, att: Any) -> Optional[RawPunchEvent]:
        user_id = str(getattr(att, "user_id", "") or "").strip()
        timestamp = getattr(att, "timestamp", None)
        if not user_id or timestamp is None:
            return None

        punch = int(getattr(att, "punch", 0) or 0)
        punch_type = PunchType.CHECK_OUT if punch in _CHECK_OUT_PUNCHES else PunchType.CHECK_IN
        return self._event(
            user_id,
            timestamp,
            punch_type,
            raw={
                "uid": getattr(att, "uid", None),
                "user_id": user_id,
                "timestamp": timestamp.isoformat(),
                "status": getattr(att, "status", None),
                "punch": punch,
            },
        )
