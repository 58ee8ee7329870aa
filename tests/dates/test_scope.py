import pytest

from src.readiness_tracker.readiness_tracker.core.enums import Role
from src.readiness_tracker.readiness_tracker.core.exceptions import AuthorizationError
from src.readiness_tracker.readiness_tracker.core.scope import (
    CompanyScope,
    SelfScope,
    TeamScope,
    Viewer,
    resolve_scope,
    scope_allows,
)


def test_resolve_scope_by_role():
    assert resolve_scope(Viewer(1, 7, Role.SUPERVISOR)) == CompanyScope(7)
    assert resolve_scope(Viewer(1, 7, Role.ADMIN)) == CompanyScope(7)
    assert resolve_scope(Viewer(2, 7, Role.TEAM_LEAD, team_id=3)) == TeamScope(7, 3)
    assert resolve_scope(Viewer(3, 7, Role.WORKER, team_id=3)) == SelfScope(7, 3)


def test_team_lead_without_team_is_rejected():
    with pytest.raises(AuthorizationError):
        resolve_scope(Viewer(2, 7, Role.TEAM_LEAD))


def test_scope_allows_never_crosses_companies():
    assert not scope_allows(CompanyScope(7), company_id=8)
    assert scope_allows(TeamScope(7, 3), company_id=7, team_id=3)
    assert not scope_allows(TeamScope(7, 3), company_id=7, team_id=4)
    assert scope_allows(SelfScope(7, 5), company_id=7, team_id=3, user_id=5)
    assert not scope_allows(SelfScope(7, 5), company_id=7, team_id=3, user_id=6)
