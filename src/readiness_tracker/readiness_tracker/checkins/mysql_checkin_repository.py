from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import ReadinessStatus
from ..core.exceptions import StateConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, in_clause, to_db_datetime
from .model import Checkin, DailyAttendance, NewCheckin
from .repository import CheckinRepository

_SELECT = """
    SELECT checkin_id, user_id, company_id, checked_in_at, mood, stress, sleep, physical_health,
           readiness_score, readiness_status, notes
    FROM checkins
"""

_UPSERT_ATTENDANCE = """
    INSERT INTO daily_attendance(
        user_id, team_id, attendance_date, status, score, check_in_time,
        minutes_late, scheduled_start, grace_period_mins
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
    ON DUPLICATE KEY UPDATE
        team_id=VALUES(team_id), status=VALUES(status), score=VALUES(score),
        check_in_time=VALUES(check_in_time), minutes_late=VALUES(minutes_late),
        scheduled_start=VALUES(scheduled_start), grace_period_mins=VALUES(grace_period_mins)
"""


def _attendance_params(a: DailyAttendance) -> tuple:
    return (
        int(a.user_id),
        int(a.team_id),
        a.attendance_date,
        a.status.value,
        a.score,
        to_db_datetime(a.check_in_time),
        int(a.minutes_late),
        a.scheduled_start,
        int(a.grace_period_mins),
    )


class MySQLCheckinRepository(CheckinRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _map(row: dict) -> Checkin:
        return Checkin(
            checkin_id=int(row["checkin_id"]),
            user_id=int(row["user_id"]),
            company_id=int(row["company_id"]),
            checked_in_at=from_db_datetime(row["checked_in_at"]),
            mood=int(row["mood"]),
            stress=int(row["stress"]),
            sleep=int(row["sleep"]),
            physical_health=int(row["physical_health"]),
            readiness_score=int(row["readiness_score"]),
            readiness_status=ReadinessStatus(row["readiness_status"]),
            notes=row.get("notes"),
        )

    def list_for_users(self, user_ids: Sequence[int], *, start: datetime, end: datetime) -> Sequence[Checkin]:
        if not user_ids:
            return []
        ids = [int(u) for u in user_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f" WHERE user_id IN ({in_clause(ids)}) AND checked_in_at >= %s AND checked_in_at < %s"
                + " ORDER BY checked_in_at, checkin_id",
                (*ids, to_db_datetime(start), to_db_datetime(end)),
            )
            return [self._map(r) for r in fetchall(cur)]

    def find_for_user_on(self, user_id: int, day: date) -> Optional[Checkin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE user_id=%s AND check_in_date=%s LIMIT 1", (int(user_id), day))
            row = fetchone(cur)
            return self._map(row) if row else None

    def create_with_attendance(self, checkin: NewCheckin, attendance: DailyAttendance) -> Checkin:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO checkins(
                        user_id, company_id, check_in_date, checked_in_at, mood, stress, sleep,
                        physical_health, readiness_score, readiness_status, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(checkin.user_id),
                        int(checkin.company_id),
                        checkin.check_in_date,
                        to_db_datetime(checkin.checked_in_at),
                        checkin.mood,
                        checkin.stress,
                        checkin.sleep,
                        checkin.physical_health,
                        checkin.readiness_score,
                        checkin.readiness_status.value,
                        checkin.notes,
                    ),
                )
                checkin_id = int(cur.lastrowid)
                cur.execute(_UPSERT_ATTENDANCE, _attendance_params(attendance))
        except mysql.connector.errors.IntegrityError:
            raise StateConflictError("Already checked in today", current_status="CHECKED_IN")

        return Checkin(
            checkin_id=checkin_id,
            user_id=checkin.user_id,
            company_id=checkin.company_id,
            checked_in_at=checkin.checked_in_at,
            mood=checkin.mood,
            stress=checkin.stress,
            sleep=checkin.sleep,
            physical_health=checkin.physical_health,
            readiness_score=checkin.readiness_score,
            readiness_status=checkin.readiness_status,
            notes=checkin.notes,
        )

    def upsert_attendance(self, attendance: DailyAttendance) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT_ATTENDANCE, _attendance_params(attendance))
