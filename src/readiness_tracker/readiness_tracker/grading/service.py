from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from ..common.datetime_utils import period_bounds, previous_period, today_in
from ..common.validators import round_half_up
from ..core.constants import (
    DEFAULT_PERIOD_DAYS,
    DEFAULT_TIMEZONE,
    MAX_PERIOD_DAYS,
    TEAM_AT_RISK_SCORE,
    TEAM_CRITICAL_SCORE,
)
from ..core.enums import ComplianceFormula, ExemptCheckinPolicy, Trend
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.scope import CompanyScope, Scope, TeamScope, scope_allows
from ..summaries.aggregator import AttendanceProjector
from ..summaries.snapshot import SnapshotLoader
from ..teams.repository import TeamRepository
from .engine import grade_team
from .formula import simple_grade
from .model import OverviewSummary, TeamGrade, TeamsOverview

log = logging.getLogger(__name__)


class GradingService:
    def __init__(
        self,
        teams: TeamRepository,
        loader: SnapshotLoader,
        *,
        policy: ExemptCheckinPolicy = ExemptCheckinPolicy.EXCLUDE,
        formula: ComplianceFormula = ComplianceFormula.DAILY_MEAN,
    ):
        self._teams = teams
        self._loader = loader
        self._policy = ExemptCheckinPolicy(policy)
        self._formula = ComplianceFormula(formula)

    @staticmethod
    def _validate_days(period_days: int) -> int:
        try:
            days = int(period_days)
        except (TypeError, ValueError):
            raise ValidationError("days must be an integer")
        if days < 1 or days > MAX_PERIOD_DAYS:
            raise ValidationError(f"days must be between 1 and {MAX_PERIOD_DAYS}")
        return days

    def get_team_grade(
        self,
        team_id: int,
        period_days: int = DEFAULT_PERIOD_DAYS,
        *,
        scope: Optional[Scope] = None,
        today: Optional[date] = None,
    ) -> TeamGrade:
        days = self._validate_days(period_days)
        team = self._teams.get_team(int(team_id))
        if not team or (scope is not None and not scope_allows(scope, company_id=team.company_id, team_id=team.team_id)):
            raise NotFoundError("Team not found")

        start, end = period_bounds(days, today or today_in(team.timezone))
        prev_start, _ = previous_period(start, end)
        projector = AttendanceProjector(self._loader.load(team, prev_start, end), policy=self._policy)
        return grade_team(projector, start, end, formula=self._formula)

    def get_teams_overview(
        self,
        company_id: int,
        period_days: int = DEFAULT_PERIOD_DAYS,
        *,
        scope: Optional[Scope] = None,
        today: Optional[date] = None,
    ) -> TeamsOverview:
        days = self._validate_days(period_days)
        if scope is not None and not isinstance(scope, (CompanyScope, TeamScope)):
            raise AuthorizationError("Only team leads and above can view team grades")
        if scope is not None and scope.company_id != int(company_id):
            raise NotFoundError("Company not found")

        teams = list(self._teams.list_active_teams(int(company_id)))
        if isinstance(scope, TeamScope):
            teams = [t for t in teams if t.team_id == scope.team_id]

        tz = teams[0].timezone if teams else DEFAULT_TIMEZONE
        start, end = period_bounds(days, today or today_in(tz))
        prev_start, _ = previous_period(start, end)

        grades: List[TeamGrade] = [
            grade_team(AttendanceProjector(snapshot, policy=self._policy), start, end, formula=self._formula)
            for snapshot in self._loader.load_many(teams, prev_start, end)
        ]
        grades.sort(key=lambda g: (g.score, g.team_name))
        log.info("Graded %d team(s) for company=%s period=%s..%s", len(grades), company_id, start, end)

        avg_score = round_half_up(sum(g.score for g in grades) / len(grades)) if grades else 0
        summary = OverviewSummary(
            total_teams=len(grades),
            total_members=sum(g.member_count for g in grades),
            avg_score=avg_score,
            avg_grade=simple_grade(avg_score) if grades else "N/A",
            teams_at_risk=sum(1 for g in grades if g.score < TEAM_AT_RISK_SCORE),
            teams_critical=sum(1 for g in grades if g.score < TEAM_CRITICAL_SCORE),
            teams_improving=sum(1 for g in grades if g.trend == Trend.UP),
            teams_declining=sum(1 for g in grades if g.trend == Trend.DOWN),
        )
        return TeamsOverview(period_start=start, period_end=end, teams=tuple(grades), summary=summary)
