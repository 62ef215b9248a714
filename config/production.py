import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "lesson_scheduler"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

MAX_OCCURRENCES = int(os.getenv("MAX_OCCURRENCES", "52"))
LATE_HOURS_FRACTION = os.getenv("LATE_HOURS_FRACTION", "0.5")
LOW_BALANCE_THRESHOLD = os.getenv("LOW_BALANCE_THRESHOLD", "0.20")
ENFORCE_ROOM_CONFLICTS = bool(int(os.getenv("ENFORCE_ROOM_CONFLICTS", "0")))

DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_BACKOFF_SECONDS = float(os.getenv("DB_RETRY_BACKOFF_SECONDS", "0.1"))

NOTIFICATION_SINK = os.getenv("NOTIFICATION_SINK", "db")
