from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from mysql.connector import errors as mysql_errors

from ..common.datetime_utils import from_db_datetime, to_db_datetime
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, employee_id, work_date, check_in, check_out, status
                FROM attendance
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceRecord(
                attendance_id=int(r["attendance_id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                check_in=from_db_datetime(r.get("check_in")),
                check_out=from_db_datetime(r.get("check_out")),
                status=AttendanceStatus(r["status"]),
            )

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(employee_id, work_date, check_in, check_out, status)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), work_date, to_db_datetime(check_in), to_db_datetime(check_out), status.value),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as exc:
            raise ConflictError(f"Attendance for employee {employee_id} on {work_date} already exists") from exc

    def update_check_in_if_earlier(self, *, attendance_id: int, check_in: datetime, status: AttendanceStatus) -> bool:
        value = to_db_datetime(check_in)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_in=%s, status=%s
                WHERE attendance_id=%s AND (check_in IS NULL OR check_in > %s)
                """,
                (value, status.value, int(attendance_id), value),
            )
            return cur.rowcount > 0

    def update_check_out_if_later(self, *, attendance_id: int, check_out: datetime) -> bool:
        value = to_db_datetime(check_out)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out=%s
                WHERE attendance_id=%s AND (check_out IS NULL OR check_out < %s)
                """,
                (value, int(attendance_id), value),
            )
            return cur.rowcount > 0
