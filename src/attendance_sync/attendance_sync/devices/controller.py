from __future__ import annotations

import threading

from flask import Flask, jsonify, request

from ..core.constants import DEFAULT_DEVICE_LOG_LIMIT
from ..core.exceptions import (
    DeviceInactiveError,
    DeviceNotFoundError,
    DomainError,
    UnsupportedDeviceTypeError,
)
from ..container import Container


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, DeviceNotFoundError):
        return 404
    if isinstance(exc, DeviceInactiveError):
        return 409
    if isinstance(exc, UnsupportedDeviceTypeError):
        return 400
    return 502


def register(app: Flask, container: Container) -> None:
    sync = container.sync_service

    @app.route("/api/attendance-devices/sync-all", methods=["POST"], endpoint="devices_sync_all")
    def sync_all():
        if not sync.is_enabled:
            return _error("Device sync is disabled", 409)
        # Fire and forget; the cycle guard drops overlapping requests.
        threading.Thread(target=sync.sync_all_devices, name="device-sync-manual", daemon=True).start()
        return jsonify({"success": True, "message": "Device sync initiated"}), 202

    @app.route("/api/attendance-devices/<int:device_id>/sync", methods=["POST"], endpoint="devices_sync_one")
    def sync_one(device_id: int):
        try:
            count = sync.sync_device_by_id(device_id)
        except DomainError as exc:
            return _error(str(exc), _status_for(exc))
        return jsonify({"success": True, "synced": count, "message": f"Synced {count} logs"})

    @app.route("/api/attendance-devices/<int:device_id>/test", methods=["POST"], endpoint="devices_test")
    def test_connection(device_id: int):
        try:
            connected = sync.test_device_connection(device_id)
        except DomainError as exc:
            return _error(str(exc), _status_for(exc))
        return jsonify(
            {
                "success": connected,
                "message": "Device connected successfully" if connected else "Failed to connect to device",
            }
        )

    @app.route("/api/attendance-devices/sync-enabled", methods=["POST"], endpoint="devices_sync_enabled")
    def set_enabled():
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload.get("enabled"), bool):
            return _error("'enabled' must be true or false", 400)
        sync.set_enabled(payload["enabled"])
        return jsonify({"success": True, "enabled": sync.is_enabled})

    @app.route("/api/device-logs", methods=["GET"], endpoint="device_logs")
    def device_logs():
        limit = request.args.get("limit", DEFAULT_DEVICE_LOG_LIMIT, type=int)
        rows = container.logs_repo.list_recent(limit=max(1, min(limit, 1000)))
        return jsonify(
            [
                {
                    "log_id": r.log_id,
                    "device_id": r.device_id,
                    "employee_code": r.employee_code,
                    "employee_id": r.employee_id,
                    "punch_time": r.punch_time.isoformat(),
                    "punch_type": r.punch_type.value,
                    "synced": r.synced,
                    "synced_at": r.synced_at.isoformat() if r.synced_at else None,
                }
                for r in rows
            ]
        )
