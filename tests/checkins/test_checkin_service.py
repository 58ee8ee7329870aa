from datetime import date, datetime, time, timezone

import pytest

from src.readiness_tracker.readiness_tracker.core.enums import DailyAttendanceStatus, ReadinessStatus, Role
from src.readiness_tracker.readiness_tracker.core.exceptions import NotFoundError, StateConflictError, ValidationError
from tests.fakes import FailingSink, FakeWorld, make_member, make_team

TUESDAY = date(2025, 1, 14)
SCORES = dict(mood=8, stress=2, sleep=7, physical_health=9)


def _at(hour, minute, day=TUESDAY):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def _world(**kwargs):
    world = FakeWorld(**kwargs)
    world.teams.add_team(make_team())
    world.teams.add_member(make_member(1))
    return world


def test_on_time_checkin_is_recorded_and_summary_refreshed():
    world = _world()

    checkin = world.container.checkin_service.submit_checkin(1, now=_at(8, 10), **SCORES)

    assert checkin.readiness_score == 80
    assert checkin.readiness_status == ReadinessStatus.GREEN
    attendance = world.checkins.attendance[(1, TUESDAY)]
    assert attendance.status == DailyAttendanceStatus.GREEN
    assert attendance.score == 100
    summary = world.summaries.get(1, TUESDAY)
    assert summary.checked_in_count == 1
    assert summary.compliance_rate == 100
    assert world.teams.get_member(1).total_checkins == 1
    assert world.audit.calls[0]["action_tag"] == "CHECKIN_SUBMITTED"


def test_late_checkin_keeps_full_score_and_tracks_minutes():
    world = _world()

    world.container.checkin_service.submit_checkin(1, now=_at(8, 40), **SCORES)

    attendance = world.checkins.attendance[(1, TUESDAY)]
    assert attendance.status == DailyAttendanceStatus.YELLOW
    assert attendance.score == 100
    assert attendance.minutes_late == 25


def test_second_checkin_same_local_day_conflicts():
    world = _world()
    world.container.checkin_service.submit_checkin(1, now=_at(8, 10), **SCORES)

    with pytest.raises(StateConflictError):
        world.container.checkin_service.submit_checkin(1, now=_at(9, 0), **SCORES)


@pytest.mark.parametrize(
    "now",
    [
        _at(7, 20),  # before the early window opens at 07:30
        _at(17, 30),  # after shift end
        _at(9, 0, day=date(2025, 1, 18)),  # Saturday
    ],
)
def test_checkin_outside_window_is_rejected(now):
    world = _world()

    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(1, now=now, **SCORES)


def test_checkin_on_holiday_or_leave_is_rejected():
    world = _world()
    world.holidays.create(company_id=1, holiday_date=TUESDAY, name="Founders Day")
    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(1, now=_at(8, 10), **SCORES)

    world = _world()
    world.exemptions.add(1, TUESDAY, TUESDAY)
    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(1, now=_at(8, 10), **SCORES)


def test_only_team_members_can_check_in():
    world = _world()
    world.teams.add_member(make_member(2, role=Role.SUPERVISOR))
    world.teams.add_member(make_member(3, team_id=None))

    with pytest.raises(NotFoundError):
        world.container.checkin_service.submit_checkin(99, now=_at(8, 10), **SCORES)
    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(2, now=_at(8, 10), **SCORES)
    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(3, now=_at(8, 10), **SCORES)


def test_audit_failure_does_not_fail_checkin():
    world = _world(audit=FailingSink())

    checkin = world.container.checkin_service.submit_checkin(1, now=_at(8, 10), **SCORES)

    assert checkin.checkin_id == 1
    assert world.summaries.get(1, TUESDAY).checked_in_count == 1


def test_overnight_shift_accepts_checkins_after_the_start():
    world = FakeWorld()
    world.teams.add_team(make_team(shift_start=time(22, 0), shift_end=time(6, 0)))
    world.teams.add_member(make_member(1))
    world.teams.add_member(make_member(2))
    service = world.container.checkin_service

    service.submit_checkin(1, now=_at(21, 45), **SCORES)
    service.submit_checkin(2, now=_at(23, 30), **SCORES)

    assert world.checkins.attendance[(1, TUESDAY)].status == DailyAttendanceStatus.GREEN
    assert world.checkins.attendance[(2, TUESDAY)].minutes_late == 75
    with pytest.raises(ValidationError):
        world.container.checkin_service.submit_checkin(1, now=_at(21, 0, day=date(2025, 1, 15)), **SCORES)
