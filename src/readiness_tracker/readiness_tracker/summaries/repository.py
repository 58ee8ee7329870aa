from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyTeamSummary


class SummaryRepository(Protocol):
    def upsert(self, summary: DailyTeamSummary) -> None:
        """Insert or fully replace the (team, date) row."""

        raise NotImplementedError

    def get(self, team_id: int, day: date) -> Optional[DailyTeamSummary]:
        raise NotImplementedError

    def list_between(self, team_id: int, start: date, end: date) -> Sequence[DailyTeamSummary]:
        raise NotImplementedError

    def list_for_company_on(self, company_id: int, day: date) -> Sequence[DailyTeamSummary]:
        raise NotImplementedError
