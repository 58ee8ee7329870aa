from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AbsenceReason, AbsenceStatus


@dataclass(frozen=True)
class Absence:
    absence_id: int
    user_id: int
    team_id: int
    company_id: int
    absence_date: date
    status: AbsenceStatus
    reason_category: Optional[AbsenceReason] = None
    explanation: Optional[str] = None
    justified_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_justified(self) -> bool:
        return self.justified_at is not None

    @property
    def is_reviewed(self) -> bool:
        return self.status != AbsenceStatus.PENDING_JUSTIFICATION

    @property
    def state(self) -> str:
        """Lifecycle label, splitting pending into awaiting justification / review."""
        if self.is_reviewed:
            return self.status.value
        return "PENDING_REVIEW" if self.is_justified else "PENDING_JUSTIFICATION"


@dataclass(frozen=True)
class JustificationItem:
    absence_id: int
    reason_category: AbsenceReason
    explanation: str


@dataclass(frozen=True)
class AbsenceStatusCounts:
    pending_justification: int = 0
    pending_review: int = 0
    excused: int = 0
    unexcused: int = 0

    @property
    def total(self) -> int:
        return self.pending_justification + self.pending_review + self.excused + self.unexcused


@dataclass(frozen=True)
class FinalizeResult:
    company_id: int
    teams_processed: int
    days_processed: int
    created: Tuple[Absence, ...] = ()

    @property
    def marked_absent(self) -> int:
        return len(self.created)
