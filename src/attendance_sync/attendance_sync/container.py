from __future__ import annotations

from dataclasses import dataclass

import pytz

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceMerger
from .core.constants import DEFAULT_TIMEZONE, DEVICE_SYNC_TIMEOUT_SECONDS, SYNC_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .devices.factory import DeviceAdapterFactory
from .devices.mysql_device_repository import MySQLDeviceRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .logs.mysql_device_log_repository import MySQLDeviceLogRepository
from .logs.service import LogIngestor
from .scheduler.service import SchedulerService
from .settings.mysql_hr_settings_repository import MySQLHrSettingsRepository
from .settings.service import GracePolicyService
from .sync.service import AttendanceSyncService


@dataclass(frozen=True)
class SyncSettings:
    timezone: str = DEFAULT_TIMEZONE
    sync_enabled: bool = True
    sync_interval_seconds: int = SYNC_INTERVAL_SECONDS
    device_timeout_seconds: int = DEVICE_SYNC_TIMEOUT_SECONDS

    @classmethod
    def from_module(cls, settings) -> "SyncSettings":
        return cls(
            timezone=str(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
            sync_enabled=bool(getattr(settings, "SYNC_ENABLED", True)),
            sync_interval_seconds=int(getattr(settings, "SYNC_INTERVAL_SECONDS", SYNC_INTERVAL_SECONDS)),
            device_timeout_seconds=int(getattr(settings, "DEVICE_SYNC_TIMEOUT_SECONDS", DEVICE_SYNC_TIMEOUT_SECONDS)),
        )


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    devices_repo: MySQLDeviceRepository
    employees_repo: MySQLEmployeeRepository
    logs_repo: MySQLDeviceLogRepository
    attendance_repo: MySQLAttendanceRepository
    hr_settings_repo: MySQLHrSettingsRepository

    grace_policy_service: GracePolicyService
    attendance_merger: AttendanceMerger
    log_ingestor: LogIngestor
    sync_service: AttendanceSyncService
    scheduler_service: SchedulerService


def build_container(*, db_config: dict, sync_settings: SyncSettings | None = None) -> Container:
    sync_settings = sync_settings or SyncSettings()
    tz = pytz.timezone(sync_settings.timezone)
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    devices_repo = MySQLDeviceRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    logs_repo = MySQLDeviceLogRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    hr_settings_repo = MySQLHrSettingsRepository(conn)

    grace_policy_service = GracePolicyService(hr_settings_repo)
    attendance_merger = AttendanceMerger(attendance_repo, grace_policy_service, timezone=tz)
    log_ingestor = LogIngestor(logs_repo, employees_repo, attendance_merger)
    sync_service = AttendanceSyncService(
        devices_repo,
        log_ingestor,
        DeviceAdapterFactory(default_timezone=tz),
        device_timeout_seconds=sync_settings.device_timeout_seconds,
        enabled=sync_settings.sync_enabled,
    )
    scheduler_service = SchedulerService(
        sync_service,
        interval_seconds=sync_settings.sync_interval_seconds,
        timezone=tz,
    )

    return Container(
        conn=conn,
        devices_repo=devices_repo,
        employees_repo=employees_repo,
        logs_repo=logs_repo,
        attendance_repo=attendance_repo,
        hr_settings_repo=hr_settings_repo,
        grace_policy_service=grace_policy_service,
        attendance_merger=attendance_merger,
        log_ingestor=log_ingestor,
        sync_service=sync_service,
        scheduler_service=scheduler_service,
    )
