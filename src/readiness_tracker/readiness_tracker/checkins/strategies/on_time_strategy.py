from __future__ import annotations

from datetime import datetime

from ...core.enums import DailyAttendanceStatus
from ...teams.model import Team
from .base import AttendanceDecision, AttendanceStrategy


class OnTimeStrategy(AttendanceStrategy):
    """Checked in before shift start plus grace."""

    def decide(self, *, checked_in_at: datetime, team: Team, grace_minutes: int) -> AttendanceDecision:
        return AttendanceDecision(status=DailyAttendanceStatus.GREEN)
