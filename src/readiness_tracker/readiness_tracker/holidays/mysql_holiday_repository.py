from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import StateConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime
from .model import Holiday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _map(row: dict) -> Holiday:
        return Holiday(
            holiday_id=int(row["holiday_id"]),
            company_id=int(row["company_id"]),
            holiday_date=row["holiday_date"],
            name=str(row["name"]),
            created_by=int(row["created_by"]) if row.get("created_by") is not None else None,
            created_at=from_db_datetime(row.get("created_at")),
        )

    def list_between(self, company_id: int, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, company_id, holiday_date, name, created_by, created_at
                FROM holidays
                WHERE company_id=%s AND holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date
                """,
                (int(company_id), start, end),
            )
            return [self._map(r) for r in fetchall(cur)]

    def get(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, company_id, holiday_date, name, created_by, created_at FROM holidays WHERE holiday_id=%s",
                (int(holiday_id),),
            )
            row = fetchone(cur)
            return self._map(row) if row else None

    def create(self, *, company_id: int, holiday_date: date, name: str, created_by: Optional[int]) -> Holiday:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO holidays(company_id, holiday_date, name, created_by) VALUES(%s,%s,%s,%s)",
                    (int(company_id), holiday_date, name, created_by),
                )
                holiday_id = int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError:
            raise StateConflictError(f"A holiday already exists on {holiday_date.isoformat()}")
        return Holiday(
            holiday_id=holiday_id,
            company_id=int(company_id),
            holiday_date=holiday_date,
            name=name,
            created_by=created_by,
        )

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0
