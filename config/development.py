import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "lesson_scheduler"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Scheduling rules
MAX_OCCURRENCES = int(os.getenv("MAX_OCCURRENCES", "52"))
LATE_HOURS_FRACTION = os.getenv("LATE_HOURS_FRACTION", "0.5")
LOW_BALANCE_THRESHOLD = os.getenv("LOW_BALANCE_THRESHOLD", "0.20")
ENFORCE_ROOM_CONFLICTS = bool(int(os.getenv("ENFORCE_ROOM_CONFLICTS", "0")))

# Lock wait timeout / deadlock retries
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_BACKOFF_SECONDS = float(os.getenv("DB_RETRY_BACKOFF_SECONDS", "0.1"))

# "log" writes low-balance events to the log, "db" queues them in notifications
NOTIFICATION_SINK = os.getenv("NOTIFICATION_SINK", "log")
