from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import is_work_day, now_utc, resolve_timezone, shift_bounds, to_local
from ..common.dispatch import RecomputeDispatcher
from ..common.validators import optional_max_length
from ..core.constants import DEFAULT_EARLY_WINDOW_MINUTES, DEFAULT_LATE_GRACE_MINUTES
from ..core.exceptions import NotFoundError, StateConflictError, ValidationError
from ..exemptions.repository import ExemptionRepository
from ..holidays.repository import HolidayRepository
from ..notifications.sinks import AuditSink, audit_quietly
from ..summaries.service import DailySummaryService
from ..teams.repository import TeamRepository
from .factory import AttendanceStrategyFactory
from .model import ATTENDANCE_SCORES, Checkin, DailyAttendance, NewCheckin
from .readiness import calculate_readiness
from .repository import CheckinRepository

log = logging.getLogger(__name__)


class CheckinService:
    def __init__(
        self,
        checkins: CheckinRepository,
        teams: TeamRepository,
        holidays: HolidayRepository,
        exemptions: ExemptionRepository,
        *,
        summaries: DailySummaryService,
        dispatcher: RecomputeDispatcher,
        audit: Optional[AuditSink] = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        early_window_minutes: int = DEFAULT_EARLY_WINDOW_MINUTES,
    ):
        self._checkins = checkins
        self._teams = teams
        self._holidays = holidays
        self._exemptions = exemptions
        self._summaries = summaries
        self._dispatcher = dispatcher
        self._audit = audit
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._grace_minutes = int(grace_minutes)
        self._early_window_minutes = int(early_window_minutes)

    def submit_checkin(
        self,
        member_id: int,
        *,
        mood: int,
        stress: int,
        sleep: int,
        physical_health: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Checkin:
        readiness = calculate_readiness(mood=mood, stress=stress, sleep=sleep, physical_health=physical_health)
        notes = optional_max_length(notes, "notes", 500)

        member = self._teams.get_member(int(member_id))
        if not member:
            raise NotFoundError("Member not found")
        if not member.role.is_member:
            raise ValidationError("Only workers can submit check-ins")
        if member.team_id is None:
            raise ValidationError("You must belong to a team to check in")
        team = self._teams.get_team(member.team_id)
        if not team or not team.is_active:
            raise ValidationError("Your team is not active")

        now = now or now_utc()
        zone = resolve_timezone(team.timezone)
        local_now = to_local(now, zone)
        day = local_now.date()

        if not is_work_day(day, team.work_days, zone):
            raise ValidationError("Today is not a scheduled work day for your team")
        if self._holidays.list_between(team.company_id, day, day):
            raise ValidationError("Today is a company holiday")
        if self._exemptions.list_approved_overlapping([member.user_id], day, day):
            raise ValidationError("You are on approved leave today")

        shift_opens, closes = shift_bounds(day, team.shift_start, team.shift_end, zone)
        opens = shift_opens - timedelta(minutes=self._early_window_minutes)
        if local_now < opens:
            raise ValidationError(f"Check-in opens at {opens.strftime('%H:%M')}")
        if local_now > closes:
            raise ValidationError("Check-in window has closed for today")

        existing = self._checkins.find_for_user_on(member.user_id, day)
        if existing:
            raise StateConflictError("Already checked in today", current_status="CHECKED_IN", current=existing)

        strategy = self._factory.for_checkin(checked_in_at=now, team=team, grace_minutes=self._grace_minutes)
        decision = strategy.decide(checked_in_at=now, team=team, grace_minutes=self._grace_minutes)

        created = self._checkins.create_with_attendance(
            NewCheckin(
                user_id=member.user_id,
                company_id=team.company_id,
                check_in_date=day,
                checked_in_at=now,
                mood=int(mood),
                stress=int(stress),
                sleep=int(sleep),
                physical_health=int(physical_health),
                readiness_score=readiness.score,
                readiness_status=readiness.status,
                notes=notes,
            ),
            DailyAttendance(
                user_id=member.user_id,
                team_id=team.team_id,
                attendance_date=day,
                status=decision.status,
                score=ATTENDANCE_SCORES[decision.status],
                check_in_time=now,
                minutes_late=decision.minutes_late,
                scheduled_start=team.shift_start,
                grace_period_mins=self._grace_minutes,
            ),
        )

        total = member.total_checkins + 1
        running = ((member.avg_readiness_score or 0.0) * member.total_checkins + readiness.score) / total
        self._teams.update_checkin_stats(
            user_id=member.user_id,
            total_checkins=total,
            avg_readiness_score=round(running, 2),
            last_readiness_status=readiness.status,
        )

        audit_quietly(
            self._audit,
            company_id=team.company_id,
            user_id=member.user_id,
            action_tag="CHECKIN_SUBMITTED",
            entity_type="checkin",
            entity_id=created.checkin_id,
            description=f"{member.full_name} checked in ({readiness.status.value}, score {readiness.score})",
            metadata={"readiness_score": readiness.score, "attendance_status": decision.status.value},
        )
        log.info(
            "Check-in member=%s date=%s score=%s status=%s",
            member.user_id,
            day.isoformat(),
            readiness.score,
            decision.status.value,
        )

        self._dispatcher.submit(
            f"check-in team={team.team_id} date={day.isoformat()}",
            self._summaries.recalculate,
            team.team_id,
            day,
        )
        return created
