import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "lesson_scheduler_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

MAX_OCCURRENCES = 52
LATE_HOURS_FRACTION = "0.5"
LOW_BALANCE_THRESHOLD = "0.20"
ENFORCE_ROOM_CONFLICTS = False

DB_RETRY_ATTEMPTS = 3
DB_RETRY_BACKOFF_SECONDS = 0.0

NOTIFICATION_SINK = "log"
