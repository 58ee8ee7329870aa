from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ExemptionStatus, ExemptionType
from .model import Exemption


class ExemptionRepository(Protocol):
    def list_approved_overlapping(self, user_ids: Sequence[int], start: date, end: date) -> Sequence[Exemption]:
        raise NotImplementedError

    def get(self, exemption_id: int) -> Optional[Exemption]:
        raise NotImplementedError

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
        raise NotImplementedError

    def decide(
        self,
        *,
        exemption_id: int,
        status: ExemptionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Only moves a PENDING exemption; False when it was already decided."""

        raise NotImplementedError

    def list_pending(self, company_id: int, *, team_id: Optional[int] = None, user_id: Optional[int] = None) -> Sequence[Exemption]:
        raise NotImplementedError
