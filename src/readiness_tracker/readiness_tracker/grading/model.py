from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Optional, Tuple

from ..core.enums import RiskTier, Trend


@dataclass(frozen=True)
class MemberGrade:
    user_id: int
    name: str
    checkin_count: int
    avg_readiness: Optional[float]
    score: Optional[int]
    risk_tier: RiskTier
    expected_days: int
    checked_in_days: int
    absent_days: int
    excused_days: int
    on_leave_days: int
    avg_mood: Optional[float] = None
    avg_stress: Optional[float] = None
    avg_sleep: Optional[float] = None
    avg_physical_health: Optional[float] = None

    @property
    def is_onboarding(self) -> bool:
        return self.risk_tier == RiskTier.ONBOARDING


@dataclass(frozen=True)
class GradeBreakdown:
    green: int
    yellow: int
    red: int
    absent: int
    excused: int
    on_leave: int
    expected: int
    checked_in: int
    graded_days: int


@dataclass(frozen=True)
class TeamGrade:
    team_id: int
    team_name: str
    period_start: date
    period_end: date
    score: int
    letter: str
    label: str
    color: str
    compliance: int
    avg_readiness: int
    trend: Trend
    score_delta: float
    previous_score: int
    member_count: int
    included_count: int
    onboarding_count: int
    at_risk_count: int
    needs_attention_count: int
    breakdown: GradeBreakdown
    members: Tuple[MemberGrade, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["period_start"] = self.period_start.isoformat()
        data["period_end"] = self.period_end.isoformat()
        data["trend"] = self.trend.value
        for member in data["members"]:
            member["risk_tier"] = member["risk_tier"].value
        return data

    def as_summary_context(self) -> Dict[str, Any]:
        """Plain statistics handed to the narrative text generator."""
        return {
            "team": self.team_name,
            "period": {"start": self.period_start.isoformat(), "end": self.period_end.isoformat()},
            "score": self.score,
            "grade": self.letter,
            "label": self.label,
            "compliance": self.compliance,
            "avg_readiness": self.avg_readiness,
            "trend": self.trend.value,
            "score_delta": self.score_delta,
            "at_risk_count": self.at_risk_count,
            "onboarding_count": self.onboarding_count,
            "members": [
                {
                    "name": m.name,
                    "score": m.score,
                    "avg_readiness": m.avg_readiness,
                    "checkin_count": m.checkin_count,
                    "risk_tier": m.risk_tier.value,
                    "mood": m.avg_mood,
                    "stress": m.avg_stress,
                    "sleep": m.avg_sleep,
                    "physical_health": m.avg_physical_health,
                }
                for m in self.members
            ],
        }


@dataclass(frozen=True)
class OverviewSummary:
    total_teams: int
    total_members: int
    avg_score: int
    avg_grade: str
    teams_at_risk: int
    teams_critical: int
    teams_improving: int
    teams_declining: int


@dataclass(frozen=True)
class TeamsOverview:
    period_start: date
    period_end: date
    teams: Tuple[TeamGrade, ...]
    summary: OverviewSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "teams": [t.to_dict() for t in self.teams],
            "summary": asdict(self.summary),
        }
