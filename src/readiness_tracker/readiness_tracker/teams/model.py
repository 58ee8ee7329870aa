from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import FrozenSet, Optional

from ..core.enums import ReadinessStatus, Role


@dataclass(frozen=True)
class Team:
    team_id: int
    company_id: int
    name: str
    work_days: FrozenSet[str]
    shift_start: time
    shift_end: time
    # Owning company's timezone; local calendar days are resolved in it.
    timezone: str
    leader_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Member:
    user_id: int
    company_id: int
    team_id: Optional[int]
    first_name: str
    last_name: str
    role: Role
    created_at: datetime
    team_joined_at: Optional[datetime] = None
    is_active: bool = True
    total_checkins: int = 0
    avg_readiness_score: Optional[float] = None
    last_readiness_status: Optional[ReadinessStatus] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def joined_at(self) -> datetime:
        """Instant the check-in obligation is anchored to."""
        return self.team_joined_at or self.created_at
