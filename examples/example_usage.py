"""Example: run one sync cycle through the service layer (no Flask, no scheduler)."""

import importlib
import logging

from config import get_settings_module

from src.attendance_sync.attendance_sync.container import SyncSettings, build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, sync_settings=SyncSettings.from_module(settings))

    result = container.sync_service.sync_all_devices()
    if result is None:
        print("Sync skipped (disabled or already running)")
        return

    for outcome in result.outcomes:
        status = f"{outcome.synced} logs" if outcome.success else f"error: {outcome.error}"
        print(f"{outcome.device_name}: {status}")


if __name__ == "__main__":
    main()
