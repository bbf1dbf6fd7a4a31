"""Settings shared by every environment; each env module overrides a few."""
import os


def _flag(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

# IANA zone used to decide which calendar day a punch belongs to.
TIMEZONE = os.getenv("TIMEZONE", "Asia/Dhaka")

SYNC_ENABLED = _flag("SYNC_ENABLED", "1")
SYNC_INTERVAL_SECONDS = int(os.getenv("SYNC_INTERVAL_SECONDS", "60"))
DEVICE_SYNC_TIMEOUT_SECONDS = int(os.getenv("DEVICE_SYNC_TIMEOUT_SECONDS", "60"))
START_SCHEDULER = _flag("START_SCHEDULER", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEBUG = False
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
