from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ExemptionStatus, ExemptionType


@dataclass(frozen=True)
class Exemption:
    """Leave request over an inclusive date range. Only APPROVED ones affect attendance."""

    exemption_id: int
    user_id: int
    company_id: int
    exemption_type: ExemptionType
    start_date: date
    end_date: date
    status: ExemptionStatus
    reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.status == ExemptionStatus.APPROVED and self.start_date <= day <= self.end_date
