from datetime import date, datetime, timezone

from src.readiness_tracker.readiness_tracker.common.datetime_utils import count_work_days_in_range
from src.readiness_tracker.readiness_tracker.core.enums import ReadinessStatus
from tests.fakes import FakeWorld, make_member, make_team


def _at(day):
    return datetime(2025, 1, day, 8, 5, tzinfo=timezone.utc)


def test_first_week_of_a_new_member():
    world = FakeWorld()
    team = world.teams.add_team(make_team(tz="UTC"))
    world.teams.add_member(make_member(1, joined_at=datetime(2025, 1, 13, 10, 0, tzinfo=timezone.utc)))
    world.holidays.create(company_id=1, holiday_date=date(2025, 1, 16), name="Company Day")
    world.checkins.add(1, _at(14), score=85)
    world.checkins.add(1, _at(15), score=90)
    yellow = world.checkins.add(1, _at(17), score=55)
    assert yellow.readiness_status == ReadinessStatus.YELLOW

    assert count_work_days_in_range(date(2025, 1, 14), date(2025, 1, 17), team.work_days, "UTC", ["2025-01-16"]) == 3

    rows = {
        s.summary_date.day: s
        for s in world.container.summary_service.recalculate_range(team.team_id, date(2025, 1, 13), date(2025, 1, 17))
    }

    assert rows[13].expected_to_check_in == 0
    assert rows[13].compliance_rate is None
    for day in (14, 15):
        assert (rows[day].expected_to_check_in, rows[day].checked_in_count, rows[day].compliance_rate) == (1, 1, 100)
        assert rows[day].green_count == 1
    assert rows[16].is_holiday
    assert rows[16].expected_to_check_in == 0
    assert rows[17].expected_to_check_in == 1
    assert rows[17].checked_in_count == 1
    assert rows[17].compliance_rate == 100
    assert rows[17].yellow_count == 1

    # Detection on the following Monday finds nothing to flag
    created = world.container.absence_service.detect_absences(1, now=datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc))
    assert created == []
