from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_late
from ...core.enums import DailyAttendanceStatus
from ...teams.model import Team
from .base import AttendanceDecision, AttendanceStrategy


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide(self, *, checked_in_at: datetime, team: Team, grace_minutes: int) -> AttendanceDecision:
        late = minutes_late(checked_in_at, team.shift_start, grace_minutes, team.timezone)
        return AttendanceDecision(status=DailyAttendanceStatus.YELLOW, minutes_late=late)
