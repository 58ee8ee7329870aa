from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import minutes_late
from ..teams.model import Team
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the team's shift."""

    def for_checkin(self, *, checked_in_at: datetime, team: Team, grace_minutes: int) -> AttendanceStrategy:
        if minutes_late(checked_in_at, team.shift_start, grace_minutes, team.timezone) > 0:
            return LateStrategy()
        return OnTimeStrategy()
