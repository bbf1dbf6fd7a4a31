import importlib
from types import SimpleNamespace

import pytest

from config import get_settings_module
from src.attendance_sync.attendance_sync.container import SyncSettings


@pytest.mark.parametrize(
    "app_env, module",
    [("production", "config.production"), ("PROD", "config.production"), ("test", "config.testing"), ("", "config.development")],
)
def test_settings_module_follows_app_env(monkeypatch, app_env, module):
    monkeypatch.setenv("APP_ENV", app_env)

    assert get_settings_module() == module


def test_testing_settings_keep_scheduler_off():
    settings = importlib.import_module("config.testing")

    assert settings.START_SCHEDULER is False
    assert settings.TIMEZONE
    assert set(settings.DB_CONFIG) == {"host", "port", "user", "password", "database"}


def test_sync_settings_read_from_settings_module():
    settings = SimpleNamespace(
        TIMEZONE="UTC", SYNC_ENABLED=False, SYNC_INTERVAL_SECONDS=30, DEVICE_SYNC_TIMEOUT_SECONDS=10
    )

    assert SyncSettings.from_module(settings) == SyncSettings(
        timezone="UTC", sync_enabled=False, sync_interval_seconds=30, device_timeout_seconds=10
    )


def test_sync_settings_defaults_when_unset():
    assert SyncSettings.from_module(SimpleNamespace()) == SyncSettings()
