from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, Optional

from ..core.enums import DailyAttendanceStatus, ReadinessStatus

# Lateness is tracked in minutes_late; it carries no score penalty.
ATTENDANCE_SCORES: Dict[DailyAttendanceStatus, Optional[int]] = {
    DailyAttendanceStatus.GREEN: 100,
    DailyAttendanceStatus.YELLOW: 100,
    DailyAttendanceStatus.ABSENT: 0,
    DailyAttendanceStatus.EXCUSED: None,
}


@dataclass(frozen=True)
class Checkin:
    """Immutable readiness check-in. At most one per member per local day."""

    checkin_id: int
    user_id: int
    company_id: int
    checked_in_at: datetime
    mood: int
    stress: int
    sleep: int
    physical_health: int
    readiness_score: int
    readiness_status: ReadinessStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class NewCheckin:
    user_id: int
    company_id: int
    check_in_date: date
    checked_in_at: datetime
    mood: int
    stress: int
    sleep: int
    physical_health: int
    readiness_score: int
    readiness_status: ReadinessStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class DailyAttendance:
    user_id: int
    team_id: int
    attendance_date: date
    status: DailyAttendanceStatus
    score: Optional[int]
    check_in_time: Optional[datetime] = None
    minutes_late: int = 0
    scheduled_start: Optional[time] = None
    grace_period_mins: int = 0
