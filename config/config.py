"""Settings shared by every environment; environment modules override them."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "readiness_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# "exclude": on-leave members never count. "fold_in": an on-leave member who
# checks in anyway counts as expected and checked in.
EXEMPT_CHECKIN_POLICY = os.getenv("EXEMPT_CHECKIN_POLICY", "exclude").lower()

# "daily_mean": mean of daily compliance rates. "total_ratio": sum checked-in / sum expected.
COMPLIANCE_FORMULA = os.getenv("COMPLIANCE_FORMULA", "daily_mean").lower()

LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
CHECKIN_EARLY_WINDOW_MINUTES = int(os.getenv("CHECKIN_EARLY_WINDOW_MINUTES", "30"))

RECOMPUTE_WORKERS = int(os.getenv("RECOMPUTE_WORKERS", "2"))
RECOMPUTE_BUDGET_SECONDS = float(os.getenv("RECOMPUTE_BUDGET_SECONDS", "20"))
RECOMPUTE_SYNC = bool(int(os.getenv("RECOMPUTE_SYNC", "0")))
