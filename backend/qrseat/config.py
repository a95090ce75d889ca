# backend/qrseat/config.py
import os

STORE_BACKEND = os.getenv("QRSEAT_STORE", "sql").strip().lower()

DATA_DIR = os.getenv("QRSEAT_DATA_DIR", ".qrseat-data")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///./{DATA_DIR}/qrseat.db")

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "qrseat:")

# all durations below are milliseconds unless the name says otherwise
MESSAGE_TTL_MS = int(os.getenv("MESSAGE_TTL_MS", str(5 * 60 * 1000)))
MESSAGE_TTL_MIN_MS = int(os.getenv("MESSAGE_TTL_MIN_MS", "100"))
MESSAGE_TTL_MAX_MS = int(os.getenv("MESSAGE_TTL_MAX_MS", str(60 * 60 * 1000)))

VIEWER_HEARTBEAT_MS = int(os.getenv("VIEWER_HEARTBEAT_MS", "10000"))

SESSION_MAX_AGE_HOURS = int(os.getenv("SESSION_MAX_AGE_HOURS", "24"))
CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "60"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def session_max_age_ms() -> int:
    return SESSION_MAX_AGE_HOURS * 60 * 60 * 1000
