"""Visibility scope resolved once per call.

A caller sees either a whole company, one team, or only their own records.
Services receive one of these values instead of building ad-hoc filters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Viewer:
    user_id: int
    company_id: int
    role: Role
    # For TEAM_LEAD this is the team they lead; for members, their own team.
    team_id: Optional[int] = None


@dataclass(frozen=True)
class CompanyScope:
    company_id: int


@dataclass(frozen=True)
class TeamScope:
    company_id: int
    team_id: int


@dataclass(frozen=True)
class SelfScope:
    company_id: int
    user_id: int


Scope = Union[CompanyScope, TeamScope, SelfScope]


def resolve_scope(viewer: Viewer) -> Scope:
    if viewer.role in (Role.SUPERVISOR, Role.EXECUTIVE, Role.ADMIN):
        return CompanyScope(company_id=viewer.company_id)
    if viewer.role == Role.TEAM_LEAD:
        if viewer.team_id is None:
            raise AuthorizationError("Team lead is not assigned to a team")
        return TeamScope(company_id=viewer.company_id, team_id=int(viewer.team_id))
    return SelfScope(company_id=viewer.company_id, user_id=viewer.user_id)


def scope_allows(scope: Scope, *, company_id: int, team_id: Optional[int] = None, user_id: Optional[int] = None) -> bool:
    if scope.company_id != company_id:
        return False
    if isinstance(scope, CompanyScope):
        return True
    if isinstance(scope, TeamScope):
        return team_id is not None and scope.team_id == team_id
    return user_id is not None and scope.user_id == user_id
