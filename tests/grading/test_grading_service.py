from datetime import date, datetime, timezone

import pytest

from src.readiness_tracker.readiness_tracker.container import EngineOptions
from src.readiness_tracker.readiness_tracker.core.enums import AbsenceStatus, ComplianceFormula, RiskTier, Trend
from src.readiness_tracker.readiness_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.readiness_tracker.readiness_tracker.core.scope import CompanyScope, SelfScope, TeamScope
from tests.fakes import FakeWorld, make_member, make_team

FRIDAY = date(2025, 1, 17)


def _at(day):
    return datetime(2025, 1, day, 8, 0, tzinfo=timezone.utc)


def _world(options=None):
    world = FakeWorld(options=options)
    world.teams.add_team(make_team(1, name="Alpha"))
    world.teams.add_member(make_member(1, first_name="Ana"))
    world.teams.add_member(make_member(2, first_name="Ben"))
    for day in (13, 14, 15):
        world.checkins.add(1, _at(day), score=90)
    for day in (13, 14):
        world.checkins.add(2, _at(day), score=30)
    return world


def _grade(world, **kwargs):
    return world.container.grading_service.get_team_grade(1, 5, today=FRIDAY, **kwargs)


def test_team_grade_combines_readiness_and_compliance():
    grade = _grade(_world())

    assert (grade.period_start, grade.period_end) == (date(2025, 1, 13), FRIDAY)
    # Daily rates 100, 100, 50, 0, 0
    assert grade.compliance == 50
    assert grade.avg_readiness == 90
    assert grade.score == 74
    assert grade.letter == "C"
    assert grade.previous_score == 0
    assert grade.trend == Trend.UP
    assert grade.breakdown.expected == 10
    assert grade.breakdown.checked_in == 5
    assert grade.breakdown.absent == 5
    assert grade.breakdown.graded_days == 5


def test_member_below_checkin_threshold_is_onboarding():
    grade = _grade(_world())
    members = {m.name: m for m in grade.members}

    assert members["Ben Test"].risk_tier == RiskTier.ONBOARDING
    assert members["Ben Test"].score is None
    assert members["Ana Test"].risk_tier == RiskTier.HEALTHY
    assert (grade.included_count, grade.onboarding_count) == (1, 1)


def test_member_at_checkin_threshold_is_included():
    world = _world()
    world.checkins.add(2, _at(15), score=30)

    grade = _grade(world)
    ben = next(m for m in grade.members if m.name == "Ben Test")

    assert grade.included_count == 2
    assert grade.avg_readiness == 60
    assert ben.risk_tier == RiskTier.AT_RISK
    assert grade.at_risk_count == 1
    assert grade.needs_attention_count == 1


def test_total_ratio_formula_differs_from_daily_mean_under_leave():
    daily = _world()
    daily.exemptions.add(2, date(2025, 1, 16), FRIDAY)
    ratio = _world(options=EngineOptions(recompute_sync=True, formula=ComplianceFormula.TOTAL_RATIO))
    ratio.exemptions.add(2, date(2025, 1, 16), FRIDAY)

    # Rates 100, 100, 50, 0/1, 0/1 versus 5 checked of 8 expected
    assert _grade(daily).compliance == 50
    assert _grade(ratio).compliance == 63
    assert _grade(ratio).breakdown.on_leave == 2


def test_excused_absence_leaves_the_grade_denominator():
    world = _world()
    world.checkins.add(2, _at(15), score=30)
    for day in (16, 17):
        world.checkins.add(1, _at(day), score=90)
    world.checkins.add(2, _at(17), score=30)
    before = _grade(world)
    world.absences.add(2, date(2025, 1, 16), status=AbsenceStatus.EXCUSED, justified=True)

    after = _grade(world)

    assert before.compliance == 90
    assert after.compliance == 100
    assert after.breakdown.excused == 1


def test_team_grade_validates_period_and_scope():
    world = _world()
    service = world.container.grading_service

    with pytest.raises(ValidationError):
        service.get_team_grade(1, 0, today=FRIDAY)
    with pytest.raises(ValidationError):
        service.get_team_grade(1, 366, today=FRIDAY)
    with pytest.raises(NotFoundError):
        service.get_team_grade(1, 5, scope=CompanyScope(2), today=FRIDAY)
    with pytest.raises(NotFoundError):
        service.get_team_grade(1, 5, scope=TeamScope(1, 9), today=FRIDAY)
    assert service.get_team_grade(1, "5", scope=TeamScope(1, 1), today=FRIDAY).score == 74


def test_overview_sorts_worst_first_and_summarizes():
    world = _world()
    world.teams.add_team(make_team(2, name="Bravo", leader_id=200))
    world.teams.add_member(make_member(3, team_id=2))
    service = world.container.grading_service

    overview = service.get_teams_overview(1, 5, scope=CompanyScope(1), today=FRIDAY)

    assert [t.team_name for t in overview.teams] == ["Bravo", "Alpha"]
    assert overview.summary.total_teams == 2
    assert overview.summary.total_members == 3
    assert overview.summary.avg_score == 37
    assert overview.summary.avg_grade == "D"
    assert overview.summary.teams_at_risk == 1
    assert overview.summary.teams_critical == 1
    assert overview.summary.teams_improving == 1
    assert overview.to_dict()["teams"][1]["trend"] == "up"

    lead_view = service.get_teams_overview(1, 5, scope=TeamScope(1, 2), today=FRIDAY)
    assert [t.team_name for t in lead_view.teams] == ["Bravo"]
    with pytest.raises(AuthorizationError):
        service.get_teams_overview(1, 5, scope=SelfScope(1, 1), today=FRIDAY)


def test_overview_of_company_without_teams():
    world = FakeWorld()

    overview = world.container.grading_service.get_teams_overview(5, 7, today=FRIDAY)

    assert overview.teams == ()
    assert overview.summary.avg_grade == "N/A"


def _steady_world(previous_days, current_days):
    world = FakeWorld()
    world.teams.add_team(make_team(1, name="Alpha"))
    world.teams.add_member(make_member(1))
    for day in tuple(previous_days) + tuple(current_days):
        world.checkins.add(1, _at(day), score=80)
    return world


def test_trend_is_stable_when_previous_week_matches():
    world = _steady_world((6, 7, 8, 9, 10), (13, 14, 15, 16, 17))

    grade = world.container.grading_service.get_team_grade(1, 7, today=FRIDAY)

    assert (grade.period_start, grade.period_end) == (date(2025, 1, 11), FRIDAY)
    assert grade.score == 88
    assert grade.previous_score == 88
    assert grade.score_delta == 0.0
    assert grade.trend == Trend.STABLE


def test_trend_is_down_when_attendance_drops():
    world = _steady_world((6, 7, 8, 9, 10), (13, 14, 15))

    grade = world.container.grading_service.get_team_grade(1, 7, today=FRIDAY)

    # Readiness 80, compliance 60
    assert grade.score == 72
    assert grade.previous_score == 88
    assert grade.score_delta == -16.0
    assert grade.trend == Trend.DOWN
