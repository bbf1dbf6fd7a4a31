"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Two punches for the same device/employee closer than this are one event.
DEDUP_WINDOW_SECONDS = 60

DEVICE_SYNC_TIMEOUT_SECONDS = 60
SYNC_INTERVAL_SECONDS = 60

# Used (and inserted) when HR settings are missing.
DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_OFFICE_START_TIME = "09:00"

DEFAULT_TIMEZONE = "Asia/Dhaka"

DEFAULT_ZKTECO_PORT = 4370
DEFAULT_HTTP_TIMEOUT_SECONDS = 15
DEFAULT_DEVICE_LOG_LIMIT = 100
DEFAULT_EVENT_PAGE_LIMIT = 1000
