from datetime import date, datetime, timezone

import pytest

from src.readiness_tracker.readiness_tracker.main import create_app
from tests.fakes import FakeWorld, make_member, make_team


@pytest.fixture()
def world(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    world = FakeWorld()
    world.teams.add_team(make_team(1, leader_id=100))
    world.teams.add_member(make_member(1))
    world.checkins.add(1, datetime(2025, 1, 14, 8, 0, tzinfo=timezone.utc))
    world.app = create_app(container=world.container)
    return world


def _client(world, *, user_id, role, team_id=1, company_id=1):
    client = world.app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["company_id"] = company_id
        sess["role"] = role
        sess["team_id"] = team_id
    return client


def test_routes_require_login(world):
    resp = world.app.test_client().get("/api/teams/1/summaries/2025-01-14")

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "UNAUTHENTICATED"


def test_daily_summary_route(world):
    client = _client(world, user_id=100, role="TEAM_LEAD")

    resp = client.get("/api/teams/1/summaries/2025-01-14")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["summary_date"] == "2025-01-14"
    assert body["data"]["compliance_rate"] == 100


def test_domain_errors_map_to_status_codes(world):
    lead = _client(world, user_id=100, role="TEAM_LEAD")
    other_lead = _client(world, user_id=200, role="TEAM_LEAD", team_id=2)

    assert lead.get("/api/teams/1/summaries/14-01-2025").status_code == 400
    assert other_lead.get("/api/teams/1/summaries/2025-01-14").status_code == 404
    assert lead.get("/api/teams/1/grade?days=0").status_code == 400


def test_team_grade_route(world):
    client = _client(world, user_id=300, role="SUPERVISOR", team_id=None)

    resp = client.get("/api/teams/1/grade?days=7")

    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["team_name"] == "Alpha"
    assert data["trend"] in ("up", "down", "stable")
    assert "breakdown" in data


def test_justify_and_review_flow(world):
    absence = world.absences.add(1, date(2025, 1, 15))
    worker = _client(world, user_id=1, role="WORKER")
    lead = _client(world, user_id=100, role="TEAM_LEAD")

    resp = worker.post(
        "/api/absences/justify",
        json={"items": [{"absence_id": absence.absence_id, "reason_category": "SICK", "explanation": "Fever"}]},
    )
    assert resp.status_code == 200

    resp = worker.post(f"/api/absences/{absence.absence_id}/review", json={"verdict": "EXCUSED"})
    assert resp.status_code == 403

    resp = lead.post(f"/api/absences/{absence.absence_id}/review", json={"verdict": "EXCUSED"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "EXCUSED"

    resp = lead.post(f"/api/absences/{absence.absence_id}/review", json={"verdict": "UNEXCUSED"})
    assert resp.status_code == 409
    assert resp.get_json()["error"]["detail"]["current_status"] == "EXCUSED"


def test_holiday_writes_need_company_scope(world):
    lead = _client(world, user_id=100, role="TEAM_LEAD")
    admin = _client(world, user_id=1000, role="ADMIN", team_id=None)

    assert lead.post("/api/holidays", json={"date": "2025-01-16", "name": "Day"}).status_code == 403
    resp = admin.post("/api/holidays", json={"date": "2025-01-16", "name": "Day"})
    assert resp.status_code == 201
    assert world.summaries.get(1, date(2025, 1, 16)).is_holiday


def test_non_object_body_is_rejected(world):
    worker = _client(world, user_id=1, role="WORKER")

    resp = worker.post("/api/absences/justify", data="[]", content_type="application/json")

    assert resp.status_code == 400
