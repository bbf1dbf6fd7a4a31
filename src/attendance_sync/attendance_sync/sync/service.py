from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import utc_now
from ..core.constants import DEVICE_SYNC_TIMEOUT_SECONDS
from ..core.exceptions import (
    DeviceConnectionError,
    DeviceInactiveError,
    DeviceNotFoundError,
    DeviceSyncTimeoutError,
)
from ..devices.factory import DeviceAdapterFactory
from ..devices.model import Device
from ..devices.repository import DeviceRepository
from ..logs.service import LogIngestor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceSyncOutcome:
    device_id: int
    device_name: str
    synced: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SyncCycleResult:
    outcomes: List[DeviceSyncOutcome] = field(default_factory=list)

    @property
    def devices(self) -> int:
        return len(self.outcomes)

    @property
    def synced(self) -> int:
        return sum(o.synced for o in self.outcomes)

    @property
    def errors(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)


class _DeviceTask:
    """Decides whether a device worker or the cycle deadline settles a device.

    Whichever side gets the lock first wins: a committed watermark is never
    replaced by a timeout error, and an abandoned task never commits.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.abandoned = False
        self.committed = False

    def abandon(self) -> bool:
        with self._lock:
            if not self.committed:
                self.abandoned = True
            return self.abandoned

    def commit(self, write: Callable[[], None]) -> bool:
        with self._lock:
            if self.abandoned:
                return False
            write()
            self.committed = True
            return True


class AttendanceSyncService:
    """Polls every active device concurrently and folds their punches in.

    Each device runs connect -> fetch -> disconnect -> ingest on its own
    thread against a fixed deadline. A device that fails or times out gets
    its error recorded and its watermark moved to "now"; other devices in the
    same cycle are unaffected. Only one cycle runs at a time per instance.
    """

    def __init__(
        self,
        devices: DeviceRepository,
        ingestor: LogIngestor,
        adapter_factory: DeviceAdapterFactory,
        *,
        device_timeout_seconds: float = DEVICE_SYNC_TIMEOUT_SECONDS,
        enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._devices = devices
        self._ingestor = ingestor
        self._factory = adapter_factory
        self._timeout = float(device_timeout_seconds)
        self._enabled = bool(enabled)
        self._clock = clock
        self._cycle_lock = threading.Lock()

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_syncing(self) -> bool:
        return self._cycle_lock.locked()

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        logger.info("Attendance device sync %s", "enabled" if self._enabled else "disabled")

    def sync_all_devices(self) -> Optional[SyncCycleResult]:
        """Run one full cycle. Returns None when skipped (busy or disabled)."""
        if not self._cycle_lock.acquire(blocking=False):
            logger.info("Device sync already in progress, skipping...")
            return None

        try:
            if not self._enabled:
                return None
            return self._run_cycle()
        except Exception:
            logger.exception("Error in device sync")
            return None
        finally:
            self._cycle_lock.release()

    def sync_device_by_id(self, device_id: int) -> int:
        device = self._devices.get_by_id(device_id)
        if device is None:
            raise DeviceNotFoundError("Device not found")
        if not device.is_active:
            raise DeviceInactiveError("Device is not active")
        return self._sync_device(device)

    def test_device_connection(self, device_id: int) -> bool:
        device = self._devices.get_by_id(device_id)
        if device is None:
            raise DeviceNotFoundError("Device not found")

        adapter = self._factory.for_device_type(device.device_type)
        try:
            return adapter.connect(device.connection_config()) and adapter.test_connection()
        finally:
            adapter.disconnect()

    def _run_cycle(self) -> SyncCycleResult:
        devices = list(self._devices.list_active())
        if not devices:
            return SyncCycleResult()

        logger.info("Starting device sync for %d active device(s)", len(devices))

        executor = ThreadPoolExecutor(max_workers=len(devices), thread_name_prefix="device-sync")
        try:
            deadline = time.monotonic() + self._timeout
            tasks = []
            for device in devices:
                task = _DeviceTask()
                tasks.append((device, task, executor.submit(self._sync_device, device, task)))

            outcomes = [self._settle(device, task, future, deadline) for device, task, future in tasks]
        finally:
            # Timed-out workers are left to finish on their own.
            executor.shutdown(wait=False)

        result = SyncCycleResult(outcomes)
        if result.synced or result.errors:
            logger.info("Device sync complete: %d logs synced, %d errors", result.synced, result.errors)
        return result

    def _settle(self, device: Device, task: _DeviceTask, future: Future, deadline: float) -> DeviceSyncOutcome:
        done, _ = wait([future], timeout=max(0.0, deadline - time.monotonic()))
        # A worker that already committed its watermark is allowed to finish.
        if not done and task.abandon():
            error: BaseException = DeviceSyncTimeoutError(f"Device sync timeout ({self._timeout:g}s)")
        else:
            try:
                return DeviceSyncOutcome(device.device_id, device.name, synced=future.result())
            except Exception as exc:
                error = exc

        message = str(error) or error.__class__.__name__
        logger.error("Error syncing device %s: %s", device.name, message)
        self._record_failure(device, message)
        return DeviceSyncOutcome(device.device_id, device.name, error=message)

    def _record_failure(self, device: Device, message: str) -> None:
        try:
            self._devices.mark_failed(device.device_id, error=message, synced_at=self._clock())
        except Exception:
            logger.exception("Could not record sync error for device %s", device.name)

    def _sync_device(self, device: Device, task: Optional[_DeviceTask] = None) -> int:
        adapter = self._factory.for_device_type(device.device_type)
        started_at = self._clock()

        try:
            if not adapter.connect(device.connection_config()):
                raise DeviceConnectionError("Failed to connect to device")
            events = adapter.fetch_logs(device.last_sync_at)
        finally:
            adapter.disconnect()

        if task is not None and task.abandoned:
            logger.warning("Discarding %d log(s) fetched from %s after its deadline", len(events), device.name)
            return 0

        stored = self._ingestor.ingest(events) if events else 0

        def write_watermark():
            self._devices.mark_synced(device.device_id, synced_at=started_at)

        if task is None:
            write_watermark()
        elif not task.commit(write_watermark):
            return stored

        if stored:
            logger.info("Synced %d logs from device: %s", stored, device.name)
        return stored
