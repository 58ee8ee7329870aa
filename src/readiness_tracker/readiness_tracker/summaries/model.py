from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class DailyTeamSummary:
    """Derived per-(team, date) aggregate. Always rebuilt wholesale, never patched."""

    team_id: int
    company_id: int
    summary_date: date
    is_work_day: bool
    is_holiday: bool
    total_members: int
    on_leave_count: int
    excused_count: int
    expected_to_check_in: int
    checked_in_count: int
    not_checked_in_count: int
    absent_count: int
    green_count: int
    yellow_count: int
    red_count: int
    avg_readiness_score: Optional[float]
    compliance_rate: Optional[int]


@dataclass(frozen=True)
class SummaryRollup:
    """Totals over work-day, non-holiday summaries of a range."""

    total_days: int
    total_expected: int
    total_checked_in: int
    avg_compliance_rate: Optional[float]
    avg_readiness_score: Optional[float]
    total_green: int
    total_yellow: int
    total_red: int
