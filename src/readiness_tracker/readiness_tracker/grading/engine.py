"""Team and member grading over a period, with trend versus the prior period.

Pure computation over an `AttendanceProjector`; no I/O. Each day is classified
by the same projection the daily summary uses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..checkins.model import Checkin
from ..common.datetime_utils import iter_dates, previous_period
from ..common.validators import round_half_up
from ..core.constants import MIN_CHECKIN_DAYS_THRESHOLD
from ..core.enums import ComplianceFormula, ReadinessStatus, RiskTier
from ..summaries.aggregator import AttendanceProjector, compliance_rate
from .formula import classify_trend, grade_score, letter_grade, risk_tier
from .model import GradeBreakdown, MemberGrade, TeamGrade


@dataclass
class _MemberTally:
    checkins: List[Checkin] = field(default_factory=list)
    expected: int = 0
    checked_in: int = 0
    excused: int = 0
    on_leave: int = 0


@dataclass(frozen=True)
class PeriodScore:
    start: date
    end: date
    avg_readiness: int
    compliance: int
    score: int
    members: tuple
    breakdown: GradeBreakdown

    @property
    def included(self) -> List[MemberGrade]:
        return [m for m in self.members if not m.is_onboarding]


def _mean(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _one_decimal(value: Optional[float]) -> Optional[float]:
    return round(value, 1) if value is not None else None


def score_period(
    projector: AttendanceProjector,
    start: date,
    end: date,
    *,
    formula: ComplianceFormula = ComplianceFormula.DAILY_MEAN,
) -> PeriodScore:
    members = projector.snapshot.members
    tallies: Dict[int, _MemberTally] = {m.user_id: _MemberTally() for m in members}

    daily_rates: List[int] = []
    total_expected = 0
    total_checked = 0
    graded_days = 0

    for day in iter_dates(start, end):
        projection = projector.project(day)
        if not projection.counts:
            continue
        graded_days += 1
        for checkin in projection.checkins:
            if day >= projector.start_day(checkin.user_id):
                tallies[checkin.user_id].checkins.append(checkin)
        for uid in projection.expected:
            tallies[uid].expected += 1
        for uid in projection.checked_in:
            tallies[uid].checked_in += 1
        for uid in projection.excused:
            tallies[uid].excused += 1
        for uid in projection.on_leave:
            tallies[uid].on_leave += 1

        total_expected += len(projection.expected)
        total_checked += len(projection.checked_in)
        rate = compliance_rate(len(projection.checked_in), len(projection.expected))
        if rate is not None:
            daily_rates.append(rate)

    if ComplianceFormula(formula) == ComplianceFormula.TOTAL_RATIO:
        compliance = compliance_rate(total_checked, total_expected) or 0
    else:
        compliance = round_half_up(sum(daily_rates) / len(daily_rates)) if daily_rates else 0

    grades = [_grade_member(m.user_id, m.full_name, tallies[m.user_id]) for m in members]
    included = [g for g in grades if not g.is_onboarding]
    team_avg = _mean([_raw_avg(tallies[g.user_id]) for g in included])
    avg_readiness = round_half_up(team_avg) if team_avg is not None else 0

    all_checkins = [c for t in tallies.values() for c in t.checkins]
    breakdown = GradeBreakdown(
        green=sum(1 for c in all_checkins if c.readiness_status == ReadinessStatus.GREEN),
        yellow=sum(1 for c in all_checkins if c.readiness_status == ReadinessStatus.YELLOW),
        red=sum(1 for c in all_checkins if c.readiness_status == ReadinessStatus.RED),
        absent=max(0, total_expected - total_checked),
        excused=sum(t.excused for t in tallies.values()),
        on_leave=sum(t.on_leave for t in tallies.values()),
        expected=total_expected,
        checked_in=total_checked,
        graded_days=graded_days,
    )
    return PeriodScore(
        start=start,
        end=end,
        avg_readiness=avg_readiness,
        compliance=compliance,
        score=grade_score(avg_readiness, compliance),
        members=tuple(grades),
        breakdown=breakdown,
    )


def _raw_avg(tally: _MemberTally) -> Optional[float]:
    return _mean([c.readiness_score for c in tally.checkins])


def _grade_member(user_id: int, name: str, tally: _MemberTally) -> MemberGrade:
    avg = _raw_avg(tally)
    count = len(tally.checkins)
    onboarding = count < MIN_CHECKIN_DAYS_THRESHOLD
    member_compliance = compliance_rate(tally.checked_in, tally.expected)
    score = None
    if not onboarding:
        score = grade_score(avg, member_compliance if member_compliance is not None else 0)
    return MemberGrade(
        user_id=user_id,
        name=name,
        checkin_count=count,
        avg_readiness=_one_decimal(avg),
        score=score,
        risk_tier=risk_tier(avg, onboarding=onboarding),
        expected_days=tally.expected,
        checked_in_days=tally.checked_in,
        absent_days=max(0, tally.expected - tally.checked_in),
        excused_days=tally.excused,
        on_leave_days=tally.on_leave,
        avg_mood=_one_decimal(_mean([c.mood for c in tally.checkins])),
        avg_stress=_one_decimal(_mean([c.stress for c in tally.checkins])),
        avg_sleep=_one_decimal(_mean([c.sleep for c in tally.checkins])),
        avg_physical_health=_one_decimal(_mean([c.physical_health for c in tally.checkins])),
    )


def grade_team(
    projector: AttendanceProjector,
    start: date,
    end: date,
    *,
    formula: ComplianceFormula = ComplianceFormula.DAILY_MEAN,
) -> TeamGrade:
    """Grade [start, end] and compare with the equal-length window before it.

    The projector's snapshot must cover both windows.
    """
    current = score_period(projector, start, end, formula=formula)
    prev_start, prev_end = previous_period(start, end)
    previous = score_period(projector, prev_start, prev_end, formula=formula)

    delta = current.score - previous.score
    info = letter_grade(current.score)
    included = current.included
    team = projector.snapshot.team

    return TeamGrade(
        team_id=team.team_id,
        team_name=team.name,
        period_start=start,
        period_end=end,
        score=current.score,
        letter=info.letter,
        label=info.label,
        color=info.color,
        compliance=current.compliance,
        avg_readiness=current.avg_readiness,
        trend=classify_trend(delta),
        score_delta=round(float(delta), 1),
        previous_score=previous.score,
        member_count=len(current.members),
        included_count=len(included),
        onboarding_count=len(current.members) - len(included),
        at_risk_count=sum(1 for m in included if m.risk_tier == RiskTier.AT_RISK),
        needs_attention_count=sum(
            1 for m in included if m.risk_tier in (RiskTier.AT_RISK, RiskTier.NEEDS_ATTENTION)
        ),
        breakdown=current.breakdown,
        members=current.members,
    )
