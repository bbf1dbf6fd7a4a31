from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

# Tests drive cycles by hand.
START_SCHEDULER = False
SYNC_INTERVAL_SECONDS = 1
DEVICE_SYNC_TIMEOUT_SECONDS = 5
