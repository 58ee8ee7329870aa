from datetime import date, datetime, timezone

import pytest

from src.readiness_tracker.readiness_tracker.core.enums import ExemptionStatus, ExemptionType, Role
from src.readiness_tracker.readiness_tracker.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from src.readiness_tracker.readiness_tracker.core.scope import CompanyScope, SelfScope, TeamScope, Viewer
from tests.fakes import FakeWorld, make_member, make_team

LEAD = Viewer(user_id=100, company_id=1, role=Role.TEAM_LEAD, team_id=1)


def _world():
    world = FakeWorld()
    world.teams.add_team(make_team(1, leader_id=100))
    world.teams.add_member(make_member(1))
    world.teams.add_member(make_member(2))
    world.checkins.add(2, datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc))
    return world


def _request(world, start=date(2025, 1, 15), end=date(2025, 1, 16)):
    return world.container.exemption_service.request_exemption(
        1, start_date=start, end_date=end, exemption_type="sick_leave", reason="Flu"
    )


def test_request_creates_pending_exemption():
    world = _world()

    exemption = _request(world)

    assert exemption.status == ExemptionStatus.PENDING
    assert exemption.exemption_type == ExemptionType.SICK_LEAVE
    assert not exemption.covers(date(2025, 1, 15))


def test_request_validates_range_and_type():
    world = _world()
    service = world.container.exemption_service

    with pytest.raises(ValidationError):
        _request(world, start=date(2025, 1, 16), end=date(2025, 1, 15))
    with pytest.raises(ValidationError):
        service.request_exemption(1, start_date=date(2025, 1, 15), end_date=date(2025, 1, 15), exemption_type="NAP")
    with pytest.raises(NotFoundError):
        service.request_exemption(99, start_date=date(2025, 1, 15), end_date=date(2025, 1, 15), exemption_type="OTHER")


def test_approval_recomputes_each_day_of_the_range():
    world = _world()
    exemption = _request(world)

    approved = world.container.exemption_service.approve(exemption.exemption_id, LEAD, "Get well")

    assert approved.status == ExemptionStatus.APPROVED
    for day in (date(2025, 1, 15), date(2025, 1, 16)):
        summary = world.summaries.get(1, day)
        assert summary.on_leave_count == 1
        assert summary.expected_to_check_in == 1
    assert world.summaries.get(1, date(2025, 1, 15)).compliance_rate == 100
    assert world.notifier.calls[-1]["type_tag"] == "EXEMPTION_APPROVED"
    assert world.notifier.calls[-1]["user_id"] == 1


def test_rejected_exemption_does_not_affect_attendance():
    world = _world()
    exemption = _request(world)

    world.container.exemption_service.reject(exemption.exemption_id, LEAD)

    summary = world.summaries.get(1, date(2025, 1, 15))
    assert summary.on_leave_count == 0
    assert summary.expected_to_check_in == 2


def test_decision_guards():
    world = _world()
    service = world.container.exemption_service
    exemption = _request(world)

    with pytest.raises(AuthorizationError):
        service.approve(exemption.exemption_id, Viewer(2, 1, Role.WORKER, team_id=1))
    with pytest.raises(NotFoundError):
        service.approve(exemption.exemption_id, Viewer(200, 1, Role.TEAM_LEAD, team_id=2))

    service.approve(exemption.exemption_id, LEAD)
    with pytest.raises(StateConflictError) as excinfo:
        service.reject(exemption.exemption_id, LEAD)
    assert excinfo.value.current_status == "APPROVED"


def test_pending_list_follows_scope():
    world = _world()
    _request(world)
    service = world.container.exemption_service

    assert len(service.list_pending(CompanyScope(1))) == 1
    assert len(service.list_pending(TeamScope(1, 1))) == 1
    assert len(service.list_pending(TeamScope(1, 2))) == 0
    assert len(service.list_pending(SelfScope(1, 2))) == 0
