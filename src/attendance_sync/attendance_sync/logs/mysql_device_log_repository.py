from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_datetime, to_db_datetime
from ..core.enums import PunchType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import DeviceLogEntry
from .repository import DeviceLogRepository

_LOG_COLUMNS = """
    log_id, device_id, employee_code, employee_id, punch_time, punch_type,
    raw_data, synced, synced_at
"""


def _to_entry(r: Dict[str, Any]) -> DeviceLogEntry:
    return DeviceLogEntry(
        log_id=int(r["log_id"]),
        device_id=int(r["device_id"]),
        employee_code=str(r["employee_code"]),
        employee_id=int(r["employee_id"]),
        punch_time=from_db_datetime(r["punch_time"]),
        punch_type=PunchType(r["punch_type"]),
        raw_data=load_json(r.get("raw_data")),
        synced=bool(r.get("synced")),
        synced_at=from_db_datetime(r.get("synced_at")),
    )


class MySQLDeviceLogRepository(DeviceLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_near(
        self,
        *,
        device_id: int,
        employee_code: str,
        start: datetime,
        end: datetime,
    ) -> Optional[DeviceLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS}
                FROM device_logs
                WHERE device_id=%s AND employee_code=%s
                  AND punch_time BETWEEN %s AND %s
                LIMIT 1
                """,
                (int(device_id), employee_code, to_db_datetime(start), to_db_datetime(end)),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO device_logs(device_id, employee_code, employee_id, punch_time, punch_type, raw_data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(device_id),
                    employee_code,
                    int(employee_id),
                    to_db_datetime(punch_time),
                    punch_type.value,
                    dump_json(raw_data),
                ),
            )
            return int(cur.lastrowid)

    def mark_synced(self, log_id: int, *, synced_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE device_logs SET synced=1, synced_at=%s WHERE log_id=%s",
                (to_db_datetime(synced_at), int(log_id)),
            )
            return cur.rowcount > 0

    def list_recent(self, *, limit: int) -> Sequence[DeviceLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS}
                FROM device_logs
                ORDER BY punch_time DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_to_entry(r) for r in fetchall(cur)]
