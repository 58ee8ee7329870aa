from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    company_id: int
    holiday_date: date
    name: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def date_key(self) -> str:
        return self.holiday_date.isoformat()
