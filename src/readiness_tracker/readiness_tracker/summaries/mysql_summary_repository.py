from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DailyTeamSummary
from .repository import SummaryRepository

_COLUMNS = (
    "team_id",
    "company_id",
    "summary_date",
    "is_work_day",
    "is_holiday",
    "total_members",
    "on_leave_count",
    "excused_count",
    "expected_to_check_in",
    "checked_in_count",
    "not_checked_in_count",
    "absent_count",
    "green_count",
    "yellow_count",
    "red_count",
    "avg_readiness_score",
    "compliance_rate",
)

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM daily_team_summaries"

# Every column except the key is replaced on conflict.
_UPSERT = (
    f"INSERT INTO daily_team_summaries({', '.join(_COLUMNS)}) "
    f"VALUES({','.join(['%s'] * len(_COLUMNS))}) "
    "ON DUPLICATE KEY UPDATE "
    + ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS if c not in ("team_id", "summary_date"))
)


class MySQLSummaryRepository(SummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _map(row: dict) -> DailyTeamSummary:
        avg = row.get("avg_readiness_score")
        rate = row.get("compliance_rate")
        return DailyTeamSummary(
            team_id=int(row["team_id"]),
            company_id=int(row["company_id"]),
            summary_date=row["summary_date"],
            is_work_day=bool(row["is_work_day"]),
            is_holiday=bool(row["is_holiday"]),
            total_members=int(row["total_members"]),
            on_leave_count=int(row["on_leave_count"]),
            excused_count=int(row["excused_count"]),
            expected_to_check_in=int(row["expected_to_check_in"]),
            checked_in_count=int(row["checked_in_count"]),
            not_checked_in_count=int(row["not_checked_in_count"]),
            absent_count=int(row["absent_count"]),
            green_count=int(row["green_count"]),
            yellow_count=int(row["yellow_count"]),
            red_count=int(row["red_count"]),
            avg_readiness_score=float(avg) if avg is not None else None,
            compliance_rate=int(rate) if rate is not None else None,
        )

    def upsert(self, summary: DailyTeamSummary) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT, tuple(getattr(summary, c) for c in _COLUMNS))

    def get(self, team_id: int, day: date) -> Optional[DailyTeamSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE team_id=%s AND summary_date=%s", (int(team_id), day))
            row = fetchone(cur)
            return self._map(row) if row else None

    def list_between(self, team_id: int, start: date, end: date) -> Sequence[DailyTeamSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE team_id=%s AND summary_date BETWEEN %s AND %s ORDER BY summary_date",
                (int(team_id), start, end),
            )
            return [self._map(r) for r in fetchall(cur)]

    def list_for_company_on(self, company_id: int, day: date) -> Sequence[DailyTeamSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE company_id=%s AND summary_date=%s ORDER BY team_id",
                (int(company_id), day),
            )
            return [self._map(r) for r in fetchall(cur)]
