from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AbsenceStatus
from .model import Absence, AbsenceStatusCounts, JustificationItem


class AbsenceRepository(Protocol):
    def get(self, absence_id: int) -> Optional[Absence]:
        raise NotImplementedError

    def list_for_users_between(self, user_ids: Sequence[int], start: date, end: date) -> Sequence[Absence]:
        raise NotImplementedError

    def create_pending(self, *, user_id: int, team_id: int, company_id: int, absence_date: date) -> Optional[Absence]:
        """Insert an unjustified absence. None when (user, date) already exists."""

        raise NotImplementedError

    def justify_all(self, *, user_id: int, items: Sequence[JustificationItem], justified_at: datetime) -> bool:
        """Justify every item atomically; nothing is written unless all rows were still unjustified."""

        raise NotImplementedError

    def review(
        self,
        *,
        absence_id: int,
        status: AbsenceStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Only moves a justified, still pending absence."""

        raise NotImplementedError

    def list_pending_justifications(self, user_id: int) -> Sequence[Absence]:
        raise NotImplementedError

    def list_pending_reviews(self, company_id: int, *, team_id: Optional[int] = None) -> Sequence[Absence]:
        raise NotImplementedError

    def list_history(self, user_id: int, *, limit: int = 50) -> Sequence[Absence]:
        raise NotImplementedError

    def count_by_state(
        self, company_id: int, *, team_id: Optional[int] = None, user_id: Optional[int] = None
    ) -> AbsenceStatusCounts:
        raise NotImplementedError
