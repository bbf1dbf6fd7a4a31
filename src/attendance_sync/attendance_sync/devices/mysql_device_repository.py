from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_datetime, to_db_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .model import Device
from .repository import DeviceRepository

_DEVICE_COLUMNS = """
    device_id, name, device_type, ip_address, port, api_key, api_url,
    connection_params, is_active, last_sync_at, last_sync_error
"""


def _to_device(r: Dict[str, Any]) -> Device:
    return Device(
        device_id=int(r["device_id"]),
        name=r["name"],
        device_type=r["device_type"],
        ip_address=r.get("ip_address"),
        port=int(r["port"]) if r.get("port") is not None else None,
        api_key=r.get("api_key"),
        api_url=r.get("api_url"),
        connection_params=load_json(r.get("connection_params")) or {},
        is_active=bool(r.get("is_active", True)),
        last_sync_at=from_db_datetime(r.get("last_sync_at")),
        last_sync_error=r.get("last_sync_error"),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DEVICE_COLUMNS}
                FROM attendance_devices
                WHERE is_active=1
                ORDER BY device_id
                """
            )
            return [_to_device(r) for r in fetchall(cur)]

    def get_by_id(self, device_id: int) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DEVICE_COLUMNS}
                FROM attendance_devices
                WHERE device_id=%s
                """,
                (int(device_id),),
            )
            r = fetchone(cur)
            return _to_device(r) if r else None

    def mark_synced(self, device_id: int, *, synced_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_devices
                SET last_sync_at=%s, last_sync_error=NULL
                WHERE device_id=%s
                """,
                (to_db_datetime(synced_at), int(device_id)),
            )
            return cur.rowcount > 0

    def mark_failed(self, device_id: int, *, error: str, synced_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_devices
                SET last_sync_at=%s, last_sync_error=%s
                WHERE device_id=%s
                """,
                (to_db_datetime(synced_at), error, int(device_id)),
            )
            return cur.rowcount > 0
