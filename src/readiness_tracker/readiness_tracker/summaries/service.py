from __future__ import annotations

import logging
import time
from datetime import date
from typing import List, Optional, Sequence

from ..common.datetime_utils import iter_dates
from ..core.constants import DEFAULT_RECOMPUTE_BUDGET_SECONDS
from ..core.enums import ExemptCheckinPolicy
from ..core.exceptions import NotFoundError, ValidationError
from ..core.scope import Scope, scope_allows
from ..teams.model import Team
from ..teams.repository import TeamRepository
from .aggregator import AttendanceProjector, aggregate_summaries
from .model import DailyTeamSummary, SummaryRollup
from .repository import SummaryRepository
from .snapshot import SnapshotLoader

log = logging.getLogger(__name__)


class DailySummaryService:
    """Maintains the per-(team, date) summary cache.

    The cache is a projection: any row can be dropped and rebuilt from check-ins,
    holidays, exemptions and absences without loss.
    """

    def __init__(
        self,
        teams: TeamRepository,
        summaries: SummaryRepository,
        loader: SnapshotLoader,
        *,
        policy: ExemptCheckinPolicy = ExemptCheckinPolicy.EXCLUDE,
        budget_seconds: float = DEFAULT_RECOMPUTE_BUDGET_SECONDS,
    ):
        self._teams = teams
        self._summaries = summaries
        self._loader = loader
        self._policy = ExemptCheckinPolicy(policy)
        self._budget_seconds = float(budget_seconds)

    @property
    def policy(self) -> ExemptCheckinPolicy:
        return self._policy

    def _require_team(self, team_id: int, scope: Optional[Scope] = None) -> Team:
        team = self._teams.get_team(int(team_id))
        if not team:
            raise NotFoundError("Team not found")
        if scope is not None and not scope_allows(scope, company_id=team.company_id, team_id=team.team_id):
            raise NotFoundError("Team not found")
        return team

    def recalculate(self, team_id: int, day: date) -> DailyTeamSummary:
        team = self._require_team(team_id)
        snapshot = self._loader.load(team, day, day)
        summary = AttendanceProjector(snapshot, policy=self._policy).summarize(day)
        self._summaries.upsert(summary)
        log.info(
            "Summary recomputed team=%s date=%s expected=%s checked_in=%s",
            team.team_id,
            day.isoformat(),
            summary.expected_to_check_in,
            summary.checked_in_count,
        )
        return summary

    def recalculate_range(self, team_id: int, start: date, end: date) -> List[DailyTeamSummary]:
        """Rebuild every date in [start, end]; stops early once the time budget is spent."""
        if end < start:
            raise ValidationError("end must not be before start")
        team = self._require_team(team_id)
        projector = AttendanceProjector(self._loader.load(team, start, end), policy=self._policy)

        deadline = time.monotonic() + self._budget_seconds
        results: List[DailyTeamSummary] = []
        for day in iter_dates(start, end):
            if time.monotonic() > deadline:
                log.warning(
                    "Recompute budget exhausted team=%s range=%s..%s stopped_at=%s",
                    team.team_id,
                    start.isoformat(),
                    end.isoformat(),
                    day.isoformat(),
                )
                break
            summary = projector.summarize(day)
            self._summaries.upsert(summary)
            results.append(summary)
        log.info("Summaries recomputed team=%s days=%d", team.team_id, len(results))
        return results

    def recalculate_company_date(self, company_id: int, day: date) -> List[DailyTeamSummary]:
        teams = self._teams.list_active_teams(int(company_id))
        deadline = time.monotonic() + self._budget_seconds
        results: List[DailyTeamSummary] = []
        for snapshot in self._loader.load_many(teams, day, day):
            if time.monotonic() > deadline:
                log.warning(
                    "Recompute budget exhausted company=%s date=%s done=%d/%d",
                    company_id,
                    day.isoformat(),
                    len(results),
                    len(teams),
                )
                break
            summary = AttendanceProjector(snapshot, policy=self._policy).summarize(day)
            self._summaries.upsert(summary)
            results.append(summary)
        log.info("Company summaries recomputed company=%s date=%s teams=%d", company_id, day.isoformat(), len(results))
        return results

    def get_daily_summary(self, team_id: int, day: date, *, scope: Optional[Scope] = None) -> DailyTeamSummary:
        """Cached row, rebuilt on a cache miss."""
        self._require_team(team_id, scope)
        cached = self._summaries.get(int(team_id), day)
        if cached is not None:
            return cached
        return self.recalculate(int(team_id), day)

    def list_summaries(
        self, team_id: int, start: date, end: date, *, scope: Optional[Scope] = None
    ) -> Sequence[DailyTeamSummary]:
        if end < start:
            raise ValidationError("end must not be before start")
        self._require_team(team_id, scope)
        return self._summaries.list_between(int(team_id), start, end)

    def list_company_summaries(self, company_id: int, day: date) -> Sequence[DailyTeamSummary]:
        return self._summaries.list_for_company_on(int(company_id), day)

    def summarize_range(
        self, team_id: int, start: date, end: date, *, scope: Optional[Scope] = None
    ) -> SummaryRollup:
        return aggregate_summaries(self.list_summaries(team_id, start, end, scope=scope))
