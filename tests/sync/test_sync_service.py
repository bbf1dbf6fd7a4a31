import logging
import threading
import time

import pytest
import requests

from src.attendance_sync.attendance_sync.core.enums import PunchType
from src.attendance_sync.attendance_sync.core.exceptions import (
    DeviceInactiveError,
    DeviceNotFoundError,
    UnsupportedDeviceTypeError,
)
from src.attendance_sync.attendance_sync.devices.factory import DeviceAdapterFactory
from src.attendance_sync.attendance_sync.devices.model import Device
from src.attendance_sync.attendance_sync.sync.service import AttendanceSyncService

from tests.fakes import DeviceScript, InMemoryDevices, scripted_factory


def _device(device_id, *, device_type="scripted", is_active=True, last_sync_at=None):
    return Device(
        device_id=device_id,
        name=f"Gate {device_id}",
        device_type=device_type,
        ip_address=f"10.0.0.{device_id}",
        is_active=is_active,
        last_sync_at=last_sync_at,
    )


def _service(devices, scripts, ingestor, now, **kwargs):
    return AttendanceSyncService(
        InMemoryDevices(devices), ingestor, scripted_factory(scripts), clock=lambda: now, **kwargs
    )


def _join_device_workers(timeout=5):
    for thread in threading.enumerate():
        if thread.name.startswith("device-sync"):
            thread.join(timeout)


def test_cycle_ingests_and_advances_watermark(ingestor, logs_repo, attendance_repo, make_punch, at, fixed_now):
    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0)), make_punch(1, "EMP001", at(11, 0), PunchType.CHECK_OUT)])}
    service = _service([_device(1)], scripts, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.devices == 1
    assert result.synced == 2
    assert result.errors == 0
    device = service._devices.get_by_id(1)
    assert device.last_sync_at == fixed_now
    assert device.last_sync_error is None
    assert scripts[1].connects == 1
    assert scripts[1].disconnects == 1
    assert len(logs_repo.entries) == 2
    assert len(attendance_repo.all()) == 1


def test_fetch_uses_stored_watermark(ingestor, at, fixed_now):
    watermark = at(8, 0)
    scripts = {1: DeviceScript()}
    service = _service([_device(1, last_sync_at=watermark)], scripts, ingestor, fixed_now)

    service.sync_all_devices()

    assert scripts[1].fetched_since == [watermark]


def test_device_with_no_new_logs_still_advances_watermark(ingestor, at, fixed_now):
    scripts = {1: DeviceScript()}
    service = _service([_device(1, last_sync_at=at(8, 0))], scripts, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.synced == 0
    assert service._devices.get_by_id(1).last_sync_at == fixed_now


def test_no_active_devices_is_a_quiet_no_op(ingestor, fixed_now):
    service = _service([_device(1, is_active=False)], {}, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.devices == 0
    assert result.errors == 0


def test_connect_failure_is_recorded_and_moves_watermark(ingestor, at, fixed_now, caplog):
    scripts = {1: DeviceScript(connect_error=OSError("no route to host"))}
    service = _service([_device(1, last_sync_at=at(8, 0))], scripts, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.errors == 1
    assert result.outcomes[0].error == "Failed to connect to device"
    device = service._devices.get_by_id(1)
    assert device.last_sync_error == "Failed to connect to device"
    assert device.last_sync_at == fixed_now
    assert "Error syncing device Gate 1" in caplog.text


def test_fetch_failure_is_recorded_and_adapter_released(ingestor, fixed_now):
    scripts = {1: DeviceScript(fetch_error=RuntimeError("bad payload"))}
    service = _service([_device(1)], scripts, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.outcomes[0].error == "bad payload"
    assert scripts[1].disconnects == 1
    assert service._devices.get_by_id(1).last_sync_error == "bad payload"


def test_unsupported_device_type_is_recorded_per_device(ingestor, make_punch, at, fixed_now):
    scripts = {2: DeviceScript(events=[make_punch(2, "EMP002", at(9, 0))])}
    service = _service([_device(1, device_type="biostar3000"), _device(2)], scripts, ingestor, fixed_now)

    result = service.sync_all_devices()

    assert result.synced == 1
    assert service._devices.get_by_id(1).last_sync_error == "Unsupported device type: biostar3000"
    assert service._devices.get_by_id(2).last_sync_error is None


def test_slow_device_times_out_without_blocking_others(ingestor, logs_repo, make_punch, at, fixed_now):
    gate = threading.Event()
    scripts = {
        1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0))], gate=gate),
        2: DeviceScript(events=[make_punch(2, "EMP002", at(9, 3))]),
    }
    service = _service([_device(1), _device(2)], scripts, ingestor, fixed_now, device_timeout_seconds=0.3)

    try:
        result = service.sync_all_devices()
    finally:
        gate.set()
        _join_device_workers()

    outcomes = {o.device_id: o for o in result.outcomes}
    assert outcomes[1].error == "Device sync timeout (0.3s)"
    assert outcomes[2].synced == 1
    assert service._devices.get_by_id(1).last_sync_error == "Device sync timeout (0.3s)"
    assert service._devices.get_by_id(1).last_sync_at == fixed_now
    assert service._devices.get_by_id(2).last_sync_error is None
    # Logs the slow device returned after its deadline are discarded.
    assert [e.device_id for e in logs_repo.entries] == [2]


def test_overlapping_cycle_is_skipped(ingestor, logs_repo, make_punch, at, fixed_now, caplog):
    caplog.set_level(logging.INFO)
    gate = threading.Event()
    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0))], gate=gate)}
    service = _service([_device(1)], scripts, ingestor, fixed_now)
    results = []
    first = threading.Thread(target=lambda: results.append(service.sync_all_devices()))
    first.start()

    try:
        assert scripts[1].fetch_started.wait(5)
        assert service.is_syncing is True
        assert service.sync_all_devices() is None
        assert "Device sync already in progress, skipping..." in caplog.text
    finally:
        gate.set()
        first.join(5)

    assert scripts[1].connects == 1
    assert results[0].synced == 1
    assert len(logs_repo.entries) == 1
    assert service.is_syncing is False


def test_disabled_service_does_nothing(ingestor, fixed_now):
    scripts = {1: DeviceScript()}
    service = _service([_device(1)], scripts, ingestor, fixed_now, enabled=False)

    assert service.sync_all_devices() is None
    assert scripts[1].connects == 0

    service.set_enabled(True)
    assert service.sync_all_devices() is not None
    assert scripts[1].connects == 1


def test_guard_is_released_after_unexpected_error(ingestor, fixed_now, caplog):
    class BrokenDevices(InMemoryDevices):
        def list_active(self):
            raise RuntimeError("registry unavailable")

    service = AttendanceSyncService(BrokenDevices([]), ingestor, scripted_factory({}), clock=lambda: fixed_now)

    assert service.sync_all_devices() is None
    assert "Error in device sync" in caplog.text
    assert service.is_syncing is False


def test_replayed_device_logs_are_absorbed_across_cycles(ingestor, logs_repo, attendance_repo, make_punch, at, fixed_now):
    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0)), make_punch(1, "EMP001", at(17, 0), PunchType.CHECK_OUT)])}
    service = _service([_device(1)], scripts, ingestor, fixed_now)

    service.sync_all_devices()
    before = (list(logs_repo.entries), attendance_repo.all())
    # A device that ignores the watermark resends everything.
    service._devices.mark_synced(1, synced_at=at(8, 0))
    second = service.sync_all_devices()

    assert second.synced == 0
    assert (logs_repo.entries, attendance_repo.all()) == before


def test_sync_device_by_id_returns_stored_count(ingestor, make_punch, at, fixed_now):
    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0)), make_punch(1, "GHOST", at(9, 1))])}
    service = _service([_device(1)], scripts, ingestor, fixed_now)

    assert service.sync_device_by_id(1) == 1
    assert service._devices.get_by_id(1).last_sync_at == fixed_now


def test_sync_device_by_id_rejects_unknown_and_inactive(ingestor, fixed_now):
    service = _service([_device(1, is_active=False)], {1: DeviceScript()}, ingestor, fixed_now)

    with pytest.raises(DeviceNotFoundError, match="Device not found"):
        service.sync_device_by_id(99)
    with pytest.raises(DeviceInactiveError, match="Device is not active"):
        service.sync_device_by_id(1)


def test_sync_device_by_id_propagates_type_errors(ingestor, fixed_now):
    service = _service([_device(1, device_type="unknown")], {}, ingestor, fixed_now)

    with pytest.raises(UnsupportedDeviceTypeError):
        service.sync_device_by_id(1)


def test_device_connection_check_disconnects(ingestor, fixed_now):
    scripts = {1: DeviceScript(), 2: DeviceScript(connect_error=OSError("refused"))}
    service = _service([_device(1), _device(2)], scripts, ingestor, fixed_now)

    assert service.test_device_connection(1) is True
    assert service.test_device_connection(2) is False
    assert scripts[1].disconnects == 1
    assert scripts[2].disconnects == 1
    with pytest.raises(DeviceNotFoundError):
        service.test_device_connection(42)


class _JsonResponse:
    def __init__(self, payload):
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        pass


def test_malformed_device_record_does_not_fail_the_device(ingestor, logs_repo, tz, fixed_now, monkeypatch):
    payload = [
        {"employeeId": "EMP001", "timestamp": "2026-03-02 09:02:00", "type": "IN"},
        {"employeeId": "EMP002", "timestamp": "not-a-time", "type": "IN"},
        "garbage",
    ]
    monkeypatch.setattr(requests.Session, "request", lambda session, method, url, **kwargs: _JsonResponse(payload))
    bridge = Device(device_id=1, name="Bridge", device_type="http", api_url="http://bridge.local")
    service = AttendanceSyncService(
        InMemoryDevices([bridge]), ingestor, DeviceAdapterFactory(default_timezone=tz), clock=lambda: fixed_now
    )

    result = service.sync_all_devices()

    assert result.errors == 0
    assert result.synced == 1
    assert [e.employee_code for e in logs_repo.entries] == ["EMP001"]
    device = service._devices.get_by_id(1)
    assert device.last_sync_error is None
    assert device.last_sync_at == fixed_now


def test_committed_watermark_is_not_overwritten_by_deadline(ingestor, make_punch, at, fixed_now):
    class SlowWatermarkDevices(InMemoryDevices):
        def __init__(self, devices):
            super().__init__(devices)
            self.failures = []

        def mark_synced(self, device_id, *, synced_at):
            time.sleep(0.5)
            return super().mark_synced(device_id, synced_at=synced_at)

        def mark_failed(self, device_id, *, error, synced_at):
            self.failures.append(error)
            return super().mark_failed(device_id, error=error, synced_at=synced_at)

    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0))])}
    devices = SlowWatermarkDevices([_device(1)])
    service = AttendanceSyncService(
        devices, ingestor, scripted_factory(scripts), clock=lambda: fixed_now, device_timeout_seconds=0.2
    )

    result = service.sync_all_devices()

    assert result.errors == 0
    assert result.synced == 1
    assert devices.failures == []
    assert devices.get_by_id(1).last_sync_error is None


def test_deadline_during_ingest_keeps_timeout_error(ingestor, logs_repo, make_punch, at, fixed_now):
    gate = threading.Event()

    class GatedIngestor:
        def ingest(self, events):
            gate.wait(5)
            return ingestor.ingest(events)

    scripts = {1: DeviceScript(events=[make_punch(1, "EMP001", at(9, 0))])}
    service = AttendanceSyncService(
        InMemoryDevices([_device(1)]),
        GatedIngestor(),
        scripted_factory(scripts),
        clock=lambda: fixed_now,
        device_timeout_seconds=0.2,
    )

    try:
        result = service.sync_all_devices()
    finally:
        gate.set()
        _join_device_workers()

    assert result.outcomes[0].error == "Device sync timeout (0.2s)"
    # The punch merged after the deadline stays, but the device keeps its timeout error.
    assert len(logs_repo.entries) == 1
    assert service._devices.get_by_id(1).last_sync_error == "Device sync timeout (0.2s)"
