from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import DailyAttendanceStatus
from ...teams.model import Team


@dataclass(frozen=True)
class AttendanceDecision:
    status: DailyAttendanceStatus
    minutes_late: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: decide the per-day attendance status of a check-in."""

    @abstractmethod
    def decide(self, *, checked_in_at: datetime, team: Team, grace_minutes: int) -> AttendanceDecision:
        raise NotImplementedError
