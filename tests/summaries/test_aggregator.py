from datetime import date, datetime, timezone

from src.readiness_tracker.readiness_tracker.core.enums import AbsenceStatus, ExemptCheckinPolicy
from src.readiness_tracker.readiness_tracker.summaries.aggregator import (
    AttendanceProjector,
    aggregate_summaries,
    build_daily_summary,
    compliance_rate,
)
from tests.fakes import FakeWorld, make_member, make_team

TUESDAY = date(2025, 1, 14)
SATURDAY = date(2025, 1, 18)


def _at(day, hour=8, minute=5):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def _world(members=(1, 2, 3)):
    world = FakeWorld()
    team = world.teams.add_team(make_team())
    for uid in members:
        world.teams.add_member(make_member(uid))
    return world, team


def _summary(world, team, day, policy=ExemptCheckinPolicy.EXCLUDE):
    snapshot = world.container.snapshot_loader.load(team, day, day)
    return build_daily_summary(snapshot, day, policy=policy)


def test_compliance_rate_rounds_and_caps():
    assert compliance_rate(2, 3) == 67
    assert compliance_rate(1, 8) == 13  # 12.5 rounds half up
    assert compliance_rate(5, 4) == 100
    assert compliance_rate(0, 0) is None


def test_work_day_summary_counts_expected_and_checked_in():
    world, team = _world()
    world.checkins.add(1, _at(TUESDAY), score=85)
    world.checkins.add(2, _at(TUESDAY), score=50)

    summary = _summary(world, team, TUESDAY)

    assert summary.is_work_day and not summary.is_holiday
    assert summary.total_members == 3
    assert summary.expected_to_check_in == 3
    assert summary.checked_in_count == 2
    assert summary.not_checked_in_count == 1
    assert summary.compliance_rate == 67
    assert (summary.green_count, summary.yellow_count, summary.red_count) == (1, 1, 0)
    assert summary.avg_readiness_score == 67.5


def test_non_work_day_and_holiday_have_no_compliance():
    world, team = _world()
    world.checkins.add(1, _at(SATURDAY))
    world.holidays.create(company_id=1, holiday_date=TUESDAY, name="Founders Day")

    weekend = _summary(world, team, SATURDAY)
    holiday = _summary(world, team, TUESDAY)

    assert not weekend.is_work_day
    assert weekend.expected_to_check_in == 0
    assert weekend.compliance_rate is None
    assert holiday.is_holiday
    assert holiday.expected_to_check_in == 0
    assert holiday.compliance_rate is None


def test_only_first_checkin_of_a_local_day_counts():
    world, team = _world(members=(1,))
    world.checkins.add(1, _at(TUESDAY, 8, 0), score=90)
    world.checkins.add(1, _at(TUESDAY, 12, 0), score=20)

    summary = _summary(world, team, TUESDAY)

    assert summary.checked_in_count == 1
    assert summary.avg_readiness_score == 90
    assert summary.compliance_rate == 100


def test_checkin_bucketed_by_company_local_day():
    world = FakeWorld()
    team = world.teams.add_team(make_team(tz="Asia/Manila"))
    world.teams.add_member(make_member(1))
    # 23:30 UTC Monday is 07:30 Tuesday in Manila
    world.checkins.add(1, datetime(2025, 1, 13, 23, 30, tzinfo=timezone.utc), tz="Asia/Manila")

    assert _summary(world, team, TUESDAY).checked_in_count == 1
    assert _summary(world, team, date(2025, 1, 13)).checked_in_count == 0


def test_members_not_yet_started_are_not_expected():
    world, team = _world(members=(1,))
    world.teams.add_member(make_member(2, joined_at=datetime(2025, 1, 14, 6, 0, tzinfo=timezone.utc)))

    summary = _summary(world, team, TUESDAY)

    assert summary.total_members == 2
    assert summary.expected_to_check_in == 1


def test_exempt_checkin_policy_exclude_versus_fold_in():
    world, team = _world(members=(1, 2))
    world.exemptions.add(2, TUESDAY, TUESDAY)
    world.checkins.add(1, _at(TUESDAY))
    world.checkins.add(2, _at(TUESDAY))

    excluded = _summary(world, team, TUESDAY, ExemptCheckinPolicy.EXCLUDE)
    folded = _summary(world, team, TUESDAY, ExemptCheckinPolicy.FOLD_IN)

    assert excluded.on_leave_count == 1
    assert (excluded.expected_to_check_in, excluded.compliance_rate) == (1, 100)
    assert folded.on_leave_count == 1
    assert (folded.expected_to_check_in, folded.checked_in_count) == (2, 2)


def test_on_leave_member_without_checkin_is_never_expected():
    world, team = _world(members=(1, 2))
    world.exemptions.add(2, TUESDAY, TUESDAY)
    world.checkins.add(1, _at(TUESDAY))

    for policy in ExemptCheckinPolicy:
        summary = _summary(world, team, TUESDAY, policy)
        assert summary.expected_to_check_in == 1
        assert summary.compliance_rate == 100


def test_excused_absence_leaves_denominator_and_unexcused_counts_absent():
    world, team = _world()
    world.checkins.add(1, _at(TUESDAY))
    world.absences.add(2, TUESDAY, status=AbsenceStatus.EXCUSED, justified=True)
    world.absences.add(3, TUESDAY, status=AbsenceStatus.UNEXCUSED, justified=True)

    summary = _summary(world, team, TUESDAY)

    assert summary.excused_count == 1
    assert summary.expected_to_check_in == 2
    assert summary.absent_count == 1
    assert summary.compliance_rate == 50


def test_absent_count_does_not_wait_for_absence_rows():
    world, team = _world(members=(1, 2))
    world.checkins.add(1, _at(TUESDAY))

    summary = _summary(world, team, TUESDAY)

    assert (summary.expected_to_check_in, summary.checked_in_count) == (2, 1)
    assert summary.not_checked_in_count == 1
    assert summary.absent_count == 1


def test_summary_is_idempotent():
    world, team = _world()
    world.checkins.add(1, _at(TUESDAY))
    projector = AttendanceProjector(world.container.snapshot_loader.load(team, TUESDAY, TUESDAY))

    assert projector.summarize(TUESDAY) == projector.summarize(TUESDAY)


def test_rollup_ignores_non_counting_days():
    world, team = _world(members=(1, 2))
    world.checkins.add(1, _at(TUESDAY), score=80)
    world.checkins.add(1, _at(SATURDAY), score=40)
    projector = AttendanceProjector(world.container.snapshot_loader.load(team, TUESDAY, SATURDAY))

    rollup = aggregate_summaries(projector.summarize(d) for d in (TUESDAY, SATURDAY))

    assert rollup.total_days == 1
    assert (rollup.total_expected, rollup.total_checked_in) == (2, 1)
    assert rollup.avg_compliance_rate == 50.0
    assert rollup.avg_readiness_score == 80.0
