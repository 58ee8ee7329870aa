"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Manila"
DEFAULT_PERIOD_DAYS = 30
MAX_PERIOD_DAYS = 365
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_EARLY_WINDOW_MINUTES = 30

# Grading
MIN_CHECKIN_DAYS_THRESHOLD = 3
READINESS_WEIGHT = 0.60
COMPLIANCE_WEIGHT = 0.40
TREND_THRESHOLD = 3
AT_RISK_THRESHOLD = 60
NEEDS_ATTENTION_THRESHOLD = 70
TEAM_AT_RISK_SCORE = 70
TEAM_CRITICAL_SCORE = 60

# Readiness
READINESS_GREEN_MIN = 70
READINESS_YELLOW_MIN = 40
WELLNESS_MIN = 1
WELLNESS_MAX = 10

# Absences
MAX_EXPLANATION_LENGTH = 1000
MAX_REVIEW_NOTES_LENGTH = 500
MAX_HOLIDAY_NAME_LENGTH = 100
MAX_EXEMPTION_REASON_LENGTH = 500

# Background recompute
DEFAULT_RECOMPUTE_WORKERS = 2
DEFAULT_RECOMPUTE_BUDGET_SECONDS = 20.0
