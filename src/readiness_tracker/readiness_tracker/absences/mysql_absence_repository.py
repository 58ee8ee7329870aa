from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AbsenceReason, AbsenceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, in_clause, to_db_datetime
from .model import Absence, AbsenceStatusCounts, JustificationItem
from .repository import AbsenceRepository

_SELECT = """
    SELECT absence_id, user_id, team_id, company_id, absence_date, status, reason_category, explanation,
           justified_at, reviewed_by, reviewed_at, review_notes, created_at
    FROM absences
"""


class _StaleJustification(Exception):
    """Rolls back a justification batch when one row was changed concurrently."""


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _map(row: dict) -> Absence:
        reason = row.get("reason_category")
        return Absence(
            absence_id=int(row["absence_id"]),
            user_id=int(row["user_id"]),
            team_id=int(row["team_id"]),
            company_id=int(row["company_id"]),
            absence_date=row["absence_date"],
            status=AbsenceStatus(row["status"]),
            reason_category=AbsenceReason(reason) if reason else None,
            explanation=row.get("explanation"),
            justified_at=from_db_datetime(row.get("justified_at")),
            reviewed_by=int(row["reviewed_by"]) if row.get("reviewed_by") is not None else None,
            reviewed_at=from_db_datetime(row.get("reviewed_at")),
            review_notes=row.get("review_notes"),
            created_at=from_db_datetime(row.get("created_at")),
        )

    def get(self, absence_id: int) -> Optional[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE absence_id=%s", (int(absence_id),))
            row = fetchone(cur)
            return self._map(row) if row else None

    def list_for_users_between(self, user_ids: Sequence[int], start: date, end: date) -> Sequence[Absence]:
        if not user_ids:
            return []
        ids = [int(u) for u in user_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f" WHERE user_id IN ({in_clause(ids)}) AND absence_date BETWEEN %s AND %s"
                + " ORDER BY absence_date, absence_id",
                (*ids, start, end),
            )
            return [self._map(r) for r in fetchall(cur)]

    def create_pending(self, *, user_id: int, team_id: int, company_id: int, absence_date: date) -> Optional[Absence]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO absences(user_id, team_id, company_id, absence_date, status)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), int(team_id), int(company_id), absence_date, AbsenceStatus.PENDING_JUSTIFICATION.value),
                )
                absence_id = int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError:
            # Concurrent detection already created it.
            return None
        return Absence(
            absence_id=absence_id,
            user_id=int(user_id),
            team_id=int(team_id),
            company_id=int(company_id),
            absence_date=absence_date,
            status=AbsenceStatus.PENDING_JUSTIFICATION,
        )

    def justify_all(self, *, user_id: int, items: Sequence[JustificationItem], justified_at: datetime) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for item in items:
                    cur.execute(
                        """
                        UPDATE absences
                        SET reason_category=%s, explanation=%s, justified_at=%s
                        WHERE absence_id=%s AND user_id=%s AND status=%s AND justified_at IS NULL
                        """,
                        (
                            item.reason_category.value,
                            item.explanation,
                            to_db_datetime(justified_at),
                            int(item.absence_id),
                            int(user_id),
                            AbsenceStatus.PENDING_JUSTIFICATION.value,
                        ),
                    )
                    if cur.rowcount == 0:
                        raise _StaleJustification()
        except _StaleJustification:
            return False
        return True

    def review(
        self,
        *,
        absence_id: int,
        status: AbsenceStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE absences
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                WHERE absence_id=%s AND status=%s AND justified_at IS NOT NULL
                """,
                (
                    status.value,
                    int(reviewed_by),
                    to_db_datetime(reviewed_at),
                    review_notes,
                    int(absence_id),
                    AbsenceStatus.PENDING_JUSTIFICATION.value,
                ),
            )
            return cur.rowcount > 0

    def list_pending_justifications(self, user_id: int) -> Sequence[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE user_id=%s AND status=%s AND justified_at IS NULL ORDER BY absence_date",
                (int(user_id), AbsenceStatus.PENDING_JUSTIFICATION.value),
            )
            return [self._map(r) for r in fetchall(cur)]

    def list_pending_reviews(self, company_id: int, *, team_id: Optional[int] = None) -> Sequence[Absence]:
        sql = _SELECT + " WHERE company_id=%s AND status=%s AND justified_at IS NOT NULL"
        params: list = [int(company_id), AbsenceStatus.PENDING_JUSTIFICATION.value]
        if team_id is not None:
            sql += " AND team_id=%s"
            params.append(int(team_id))
        sql += " ORDER BY justified_at, absence_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._map(r) for r in fetchall(cur)]

    def list_history(self, user_id: int, *, limit: int = 50) -> Sequence[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE user_id=%s ORDER BY absence_date DESC LIMIT %s",
                (int(user_id), int(limit)),
            )
            return [self._map(r) for r in fetchall(cur)]

    def count_by_state(
        self, company_id: int, *, team_id: Optional[int] = None, user_id: Optional[int] = None
    ) -> AbsenceStatusCounts:
        sql = """
            SELECT
                SUM(status='PENDING_JUSTIFICATION' AND justified_at IS NULL) AS pending_justification,
                SUM(status='PENDING_JUSTIFICATION' AND justified_at IS NOT NULL) AS pending_review,
                SUM(status='EXCUSED') AS excused,
                SUM(status='UNEXCUSED') AS unexcused
            FROM absences
            WHERE company_id=%s
        """
        params: list = [int(company_id)]
        if team_id is not None:
            sql += " AND team_id=%s"
            params.append(int(team_id))
        if user_id is not None:
            sql += " AND user_id=%s"
            params.append(int(user_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur) or {}
        return AbsenceStatusCounts(
            pending_justification=int(row.get("pending_justification") or 0),
            pending_review=int(row.get("pending_review") or 0),
            excused=int(row.get("excused") or 0),
            unexcused=int(row.get("unexcused") or 0),
        )
