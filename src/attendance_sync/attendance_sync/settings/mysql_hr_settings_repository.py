from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES, DEFAULT_OFFICE_START_TIME
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import GracePolicy
from .repository import HrSettingsRepository


class MySQLHrSettingsRepository(HrSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_grace_policy(self) -> Optional[GracePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT office_start_time, grace_period_minutes
                FROM hr_settings
                ORDER BY settings_id
                LIMIT 1
                """
            )
            row = fetchone(cur)
            if not row:
                return None

            defaults = GracePolicy.defaults()
            office_start = normalize_mysql_time(row.get("office_start_time")) or defaults.office_start
            grace = row.get("grace_period_minutes")
            return GracePolicy(
                office_start=office_start,
                grace_period_minutes=defaults.grace_period_minutes if grace is None else int(grace),
            )

    def create_default(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hr_settings(office_start_time, grace_period_minutes)
                VALUES(%s,%s)
                """,
                (DEFAULT_OFFICE_START_TIME, DEFAULT_GRACE_PERIOD_MINUTES),
            )
