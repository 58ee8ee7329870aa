from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ReadinessStatus
from .model import Member, Team


class TeamRepository(Protocol):
    def get_team(self, team_id: int) -> Optional[Team]:
        raise NotImplementedError

    def list_active_teams(self, company_id: int) -> Sequence[Team]:
        raise NotImplementedError

    def get_team_led_by(self, user_id: int) -> Optional[Team]:
        raise NotImplementedError

    def get_member(self, user_id: int) -> Optional[Member]:
        raise NotImplementedError

    def list_active_members(self, team_ids: Sequence[int]) -> Sequence[Member]:
        """Active users in a worker/member role belonging to any of `team_ids`."""

        raise NotImplementedError

    def update_checkin_stats(
        self,
        *,
        user_id: int,
        total_checkins: int,
        avg_readiness_score: float,
        last_readiness_status: ReadinessStatus,
    ) -> None:
        raise NotImplementedError
