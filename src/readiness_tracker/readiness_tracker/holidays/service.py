from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.dispatch import RecomputeDispatcher
from ..common.validators import require_length_between
from ..core.constants import MAX_HOLIDAY_NAME_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.sinks import AuditSink, audit_quietly
from ..summaries.service import DailySummaryService
from .model import Holiday
from .repository import HolidayRepository

log = logging.getLogger(__name__)


class HolidayService:
    """Company holidays. Every change recomputes that date for all teams of the company."""

    def __init__(
        self,
        holidays: HolidayRepository,
        *,
        summaries: DailySummaryService,
        dispatcher: RecomputeDispatcher,
        audit: Optional[AuditSink] = None,
    ):
        self._holidays = holidays
        self._summaries = summaries
        self._dispatcher = dispatcher
        self._audit = audit

    def list_holidays(self, company_id: int, start: date, end: date) -> Sequence[Holiday]:
        if end < start:
            raise ValidationError("end must not be before start")
        return self._holidays.list_between(int(company_id), start, end)

    def add_holiday(self, company_id: int, holiday_date: date, name: str, *, actor_id: Optional[int] = None) -> Holiday:
        name = require_length_between(name, "name", 1, MAX_HOLIDAY_NAME_LENGTH)
        holiday = self._holidays.create(
            company_id=int(company_id),
            holiday_date=holiday_date,
            name=name,
            created_by=actor_id,
        )
        audit_quietly(
            self._audit,
            company_id=int(company_id),
            user_id=actor_id,
            action_tag="HOLIDAY_CREATED",
            entity_type="holiday",
            entity_id=holiday.holiday_id,
            description=f"Holiday '{name}' added on {holiday_date.isoformat()}",
        )
        log.info("Holiday added company=%s date=%s", company_id, holiday_date.isoformat())
        self._schedule_recompute(int(company_id), holiday_date)
        return holiday

    def remove_holiday(self, holiday_id: int, company_id: int, *, actor_id: Optional[int] = None) -> Holiday:
        holiday = self._holidays.get(int(holiday_id))
        if not holiday or holiday.company_id != int(company_id):
            raise NotFoundError("Holiday not found")
        if not self._holidays.delete(holiday.holiday_id):
            raise NotFoundError("Holiday not found")
        audit_quietly(
            self._audit,
            company_id=holiday.company_id,
            user_id=actor_id,
            action_tag="HOLIDAY_DELETED",
            entity_type="holiday",
            entity_id=holiday.holiday_id,
            description=f"Holiday '{holiday.name}' removed from {holiday.date_key}",
        )
        log.info("Holiday removed company=%s date=%s", holiday.company_id, holiday.date_key)
        self._schedule_recompute(holiday.company_id, holiday.holiday_date)
        return holiday

    def _schedule_recompute(self, company_id: int, day: date) -> None:
        self._dispatcher.submit(
            f"holiday change company={company_id} date={day.isoformat()}",
            self._summaries.recalculate_company_date,
            company_id,
            day,
        )
