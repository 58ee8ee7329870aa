from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ExemptionStatus, ExemptionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, in_clause, to_db_datetime
from .model import Exemption
from .repository import ExemptionRepository

_SELECT = """
    SELECT e.exemption_id, e.user_id, e.company_id, e.exemption_type, e.reason, e.start_date, e.end_date,
           e.status, e.reviewed_by, e.reviewed_at, e.review_notes, e.created_at
    FROM exemptions e
"""


class MySQLExemptionRepository(ExemptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _map(row: dict) -> Exemption:
        return Exemption(
            exemption_id=int(row["exemption_id"]),
            user_id=int(row["user_id"]),
            company_id=int(row["company_id"]),
            exemption_type=ExemptionType(row["exemption_type"]),
            start_date=row["start_date"],
            end_date=row["end_date"],
            status=ExemptionStatus(row["status"]),
            reason=row.get("reason"),
            reviewed_by=int(row["reviewed_by"]) if row.get("reviewed_by") is not None else None,
            reviewed_at=from_db_datetime(row.get("reviewed_at")),
            review_notes=row.get("review_notes"),
            created_at=from_db_datetime(row.get("created_at")),
        )

    def list_approved_overlapping(self, user_ids: Sequence[int], start: date, end: date) -> Sequence[Exemption]:
        if not user_ids:
            return []
        ids = [int(u) for u in user_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f" WHERE e.user_id IN ({in_clause(ids)}) AND e.status=%s"
                + " AND e.start_date <= %s AND e.end_date >= %s ORDER BY e.start_date, e.exemption_id",
                (*ids, ExemptionStatus.APPROVED.value, end, start),
            )
            return [self._map(r) for r in fetchall(cur)]

    def get(self, exemption_id: int) -> Optional[Exemption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.exemption_id=%s", (int(exemption_id),))
            row = fetchone(cur)
            return self._map(row) if row else None

    def create(
        self,
        *,
        user_id: int,
        company_id: int,
        exemption_type: ExemptionType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> Exemption:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO exemptions(user_id, company_id, exemption_type, reason, start_date, end_date, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    int(company_id),
                    exemption_type.value,
                    reason,
                    start_date,
                    end_date,
                    ExemptionStatus.PENDING.value,
                ),
            )
            exemption_id = int(cur.lastrowid)
        return Exemption(
            exemption_id=exemption_id,
            user_id=int(user_id),
            company_id=int(company_id),
            exemption_type=exemption_type,
            start_date=start_date,
            end_date=end_date,
            status=ExemptionStatus.PENDING,
            reason=reason,
        )

    def decide(
        self,
        *,
        exemption_id: int,
        status: ExemptionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE exemptions
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                WHERE exemption_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    to_db_datetime(reviewed_at),
                    review_notes,
                    int(exemption_id),
                    ExemptionStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_pending(self, company_id: int, *, team_id: Optional[int] = None, user_id: Optional[int] = None) -> Sequence[Exemption]:
        sql = _SELECT + " JOIN users u ON u.user_id = e.user_id WHERE e.company_id=%s AND e.status=%s"
        params: list = [int(company_id), ExemptionStatus.PENDING.value]
        if team_id is not None:
            sql += " AND u.team_id=%s"
            params.append(int(team_id))
        if user_id is not None:
            sql += " AND e.user_id=%s"
            params.append(int(user_id))
        sql += " ORDER BY e.created_at, e.exemption_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._map(r) for r in fetchall(cur)]
