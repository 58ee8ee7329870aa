from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_between(self, company_id: int, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def get(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def create(self, *, company_id: int, holiday_date: date, name: str, created_by: Optional[int]) -> Holiday:
        """Raises StateConflictError when the company already has a holiday on that date."""

        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
