from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import parse_work_days
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import ReadinessStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, in_clause, normalize_mysql_time
from .model import Member, Team
from .repository import TeamRepository

_TEAM_SELECT = """
    SELECT t.team_id, t.company_id, t.name, t.work_days, t.shift_start, t.shift_end,
           t.leader_id, t.is_active, t.created_at, c.timezone
    FROM teams t
    JOIN companies c ON c.company_id = t.company_id
"""

_MEMBER_SELECT = """
    SELECT user_id, company_id, team_id, first_name, last_name, role, created_at, team_joined_at,
           is_active, total_checkins, avg_readiness_score, last_readiness_status
    FROM users
"""


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _team(row: dict) -> Team:
        return Team(
            team_id=int(row["team_id"]),
            company_id=int(row["company_id"]),
            name=str(row["name"]),
            work_days=parse_work_days(row["work_days"]),
            shift_start=normalize_mysql_time(row["shift_start"]),
            shift_end=normalize_mysql_time(row["shift_end"]),
            timezone=row.get("timezone") or DEFAULT_TIMEZONE,
            leader_id=int(row["leader_id"]) if row.get("leader_id") is not None else None,
            is_active=bool(row["is_active"]),
            created_at=from_db_datetime(row.get("created_at")),
        )

    @staticmethod
    def _member(row: dict) -> Member:
        avg = row.get("avg_readiness_score")
        last = row.get("last_readiness_status")
        return Member(
            user_id=int(row["user_id"]),
            company_id=int(row["company_id"]),
            team_id=int(row["team_id"]) if row.get("team_id") is not None else None,
            first_name=str(row["first_name"]),
            last_name=str(row.get("last_name") or ""),
            role=Role(row["role"]),
            created_at=from_db_datetime(row["created_at"]),
            team_joined_at=from_db_datetime(row.get("team_joined_at")),
            is_active=bool(row["is_active"]),
            total_checkins=int(row.get("total_checkins") or 0),
            avg_readiness_score=float(avg) if avg is not None else None,
            last_readiness_status=ReadinessStatus(last) if last else None,
        )

    def get_team(self, team_id: int) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_TEAM_SELECT + " WHERE t.team_id=%s", (int(team_id),))
            row = fetchone(cur)
            return self._team(row) if row else None

    def list_active_teams(self, company_id: int) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _TEAM_SELECT + " WHERE t.company_id=%s AND t.is_active=1 ORDER BY t.name, t.team_id",
                (int(company_id),),
            )
            return [self._team(r) for r in fetchall(cur)]

    def get_team_led_by(self, user_id: int) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _TEAM_SELECT + " WHERE t.leader_id=%s AND t.is_active=1 ORDER BY t.team_id LIMIT 1",
                (int(user_id),),
            )
            row = fetchone(cur)
            return self._team(row) if row else None

    def get_member(self, user_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_MEMBER_SELECT + " WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return self._member(row) if row else None

    def list_active_members(self, team_ids: Sequence[int]) -> Sequence[Member]:
        if not team_ids:
            return []
        ids = [int(t) for t in team_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _MEMBER_SELECT
                + f" WHERE team_id IN ({in_clause(ids)}) AND is_active=1 AND role IN (%s,%s)"
                + " ORDER BY user_id",
                (*ids, Role.WORKER.value, Role.MEMBER.value),
            )
            return [self._member(r) for r in fetchall(cur)]

    def update_checkin_stats(
        self,
        *,
        user_id: int,
        total_checkins: int,
        avg_readiness_score: float,
        last_readiness_status: ReadinessStatus,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET total_checkins=%s, avg_readiness_score=%s, last_readiness_status=%s
                WHERE user_id=%s
                """,
                (int(total_checkins), float(avg_readiness_score), last_readiness_status.value, int(user_id)),
            )
