from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Checkin, DailyAttendance, NewCheckin


class CheckinRepository(Protocol):
    def list_for_users(self, user_ids: Sequence[int], *, start: datetime, end: datetime) -> Sequence[Checkin]:
        """Check-ins with start <= checked_in_at < end, ordered by time."""

        raise NotImplementedError

    def find_for_user_on(self, user_id: int, day: date) -> Optional[Checkin]:
        raise NotImplementedError

    def create_with_attendance(self, checkin: NewCheckin, attendance: DailyAttendance) -> Checkin:
        """Insert the check-in and its daily attendance row in one transaction."""

        raise NotImplementedError

    def upsert_attendance(self, attendance: DailyAttendance) -> None:
        raise NotImplementedError
