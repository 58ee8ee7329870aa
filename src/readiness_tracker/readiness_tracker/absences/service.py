from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..checkins.model import ATTENDANCE_SCORES, DailyAttendance
from ..checkins.repository import CheckinRepository
from ..common.datetime_utils import effective_start_day, iter_dates, now_utc, shift_bounds, to_local, today_in
from ..common.dispatch import RecomputeDispatcher
from ..common.validators import optional_max_length, require_enum, require_length_between
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_EXPLANATION_LENGTH, MAX_REVIEW_NOTES_LENGTH
from ..core.enums import AbsenceReason, AbsenceStatus, DailyAttendanceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from ..core.scope import CompanyScope, Scope, TeamScope, Viewer, resolve_scope, scope_allows
from ..notifications.sinks import AuditSink, NotificationSink, audit_quietly, notify_quietly
from ..summaries.aggregator import AttendanceProjector
from ..summaries.service import DailySummaryService
from ..summaries.snapshot import SnapshotLoader
from ..teams.model import Team
from ..teams.repository import TeamRepository
from .model import Absence, AbsenceStatusCounts, FinalizeResult, JustificationItem
from .repository import AbsenceRepository

log = logging.getLogger(__name__)

JustificationInput = Union[JustificationItem, Mapping[str, Any]]

_VERDICTS = (AbsenceStatus.EXCUSED, AbsenceStatus.UNEXCUSED)


def _conflict(message: str, absence: Optional[Absence]) -> StateConflictError:
    return StateConflictError(message, current_status=absence.state if absence else None, current=absence)


class AbsenceService:
    """Absence lifecycle: detection -> justification -> review.

    Justified absences stay PENDING_JUSTIFICATION (with justified_at set) until
    a reviewer gives the terminal EXCUSED / UNEXCUSED verdict.
    """

    def __init__(
        self,
        absences: AbsenceRepository,
        teams: TeamRepository,
        loader: SnapshotLoader,
        *,
        summaries: DailySummaryService,
        dispatcher: RecomputeDispatcher,
        checkins: Optional[CheckinRepository] = None,
        notifier: Optional[NotificationSink] = None,
        audit: Optional[AuditSink] = None,
    ):
        self._absences = absences
        self._teams = teams
        self._loader = loader
        self._summaries = summaries
        self._dispatcher = dispatcher
        self._checkins = checkins
        self._notifier = notifier
        self._audit = audit

    # -------- Detection --------
    def detect_absences(self, member_id: int, *, now: Optional[datetime] = None) -> List[Absence]:
        """Create a pending absence for every past required day without a check-in.

        Safe to run repeatedly and concurrently; existing (member, date) rows are skipped.
        """
        member = self._teams.get_member(int(member_id))
        if not member:
            raise NotFoundError("Member not found")
        if not member.is_active or not member.role.is_member or member.team_id is None:
            return []
        team = self._teams.get_team(member.team_id)
        if not team or not team.is_active:
            return []

        start = effective_start_day(member.joined_at, team.timezone)
        end = today_in(team.timezone, now=now) - timedelta(days=1)
        if end < start:
            return []

        projector = AttendanceProjector(
            self._loader.load_for_member(team, member, start, end),
            policy=self._summaries.policy,
        )
        created: List[Absence] = []
        for day in iter_dates(start, end):
            if member.user_id not in projector.project(day).missing:
                continue
            if projector.absence_for(member.user_id, day) is not None:
                continue
            absence = self._absences.create_pending(
                user_id=member.user_id,
                team_id=team.team_id,
                company_id=team.company_id,
                absence_date=day,
            )
            if absence is not None:
                created.append(absence)

        if created:
            log.info("Detected %d absence(s) for member=%s", len(created), member.user_id)
        return created

    def finalize_company(self, company_id: int, *, now: Optional[datetime] = None) -> FinalizeResult:
        """Mark every team's missed check-ins once the shift they belong to has ended.

        Covers yesterday and today in each team's timezone, so it can run on any
        schedule. Days already finalized are skipped.
        """
        now = to_local(now or now_utc(), "UTC")
        teams = self._teams.list_active_teams(int(company_id))
        created: List[Absence] = []
        days = 0
        for team in teams:
            today = today_in(team.timezone, now=now)
            for day in (today - timedelta(days=1), today):
                _, ends = shift_bounds(day, team.shift_start, team.shift_end, team.timezone)
                if ends > now:
                    continue
                days += 1
                created.extend(self.finalize_team_day(team, day))

        log.info(
            "Finalized company=%s teams=%d days=%d absent=%d", company_id, len(teams), days, len(created)
        )
        return FinalizeResult(
            company_id=int(company_id), teams_processed=len(teams), days_processed=days, created=tuple(created)
        )

    def finalize_team_day(self, team: Team, day: date) -> List[Absence]:
        """Record an ABSENT day and a pending absence for each expected member without a check-in."""
        projector = AttendanceProjector(self._loader.load(team, day, day), policy=self._summaries.policy)
        projection = projector.project(day)
        if not projection.counts:
            return []

        created: List[Absence] = []
        for user_id in sorted(projection.missing):
            if projector.absence_for(user_id, day) is not None:
                continue
            absence = self._absences.create_pending(
                user_id=user_id,
                team_id=team.team_id,
                company_id=team.company_id,
                absence_date=day,
            )
            if absence is None:
                continue
            created.append(absence)
            if self._checkins is not None:
                self._checkins.upsert_attendance(
                    DailyAttendance(
                        user_id=user_id,
                        team_id=team.team_id,
                        attendance_date=day,
                        status=DailyAttendanceStatus.ABSENT,
                        score=ATTENDANCE_SCORES[DailyAttendanceStatus.ABSENT],
                        scheduled_start=team.shift_start,
                    )
                )

        if created:
            log.info("Marked %d member(s) absent team=%s date=%s", len(created), team.team_id, day)
            self._dispatcher.submit(
                f"finalize team={team.team_id} date={day.isoformat()}",
                self._summaries.recalculate,
                team.team_id,
                day,
            )
        return created

    # -------- Queries --------
    def get_pending_justifications(
        self, member_id: int, *, detect: bool = True, now: Optional[datetime] = None
    ) -> Sequence[Absence]:
        if detect:
            self.detect_absences(member_id, now=now)
        return self._absences.list_pending_justifications(int(member_id))

    def has_blocking_absences(self, member_id: int) -> bool:
        return len(self._absences.list_pending_justifications(int(member_id))) > 0

    def list_pending_reviews(self, scope: Scope) -> Sequence[Absence]:
        if isinstance(scope, CompanyScope):
            return self._absences.list_pending_reviews(scope.company_id)
        if isinstance(scope, TeamScope):
            return self._absences.list_pending_reviews(scope.company_id, team_id=scope.team_id)
        raise AuthorizationError("Only reviewers can list pending reviews")

    def get_absence(self, absence_id: int, scope: Scope) -> Absence:
        absence = self._absences.get(int(absence_id))
        if absence is None or not scope_allows(
            scope, company_id=absence.company_id, team_id=absence.team_id, user_id=absence.user_id
        ):
            raise NotFoundError("Absence not found")
        return absence

    def absence_history(self, member_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[Absence]:
        if int(limit) < 1 or int(limit) > 200:
            raise ValidationError("limit must be between 1 and 200")
        return self._absences.list_history(int(member_id), limit=int(limit))

    def status_counts(self, scope: Scope) -> AbsenceStatusCounts:
        if isinstance(scope, CompanyScope):
            return self._absences.count_by_state(scope.company_id)
        if isinstance(scope, TeamScope):
            return self._absences.count_by_state(scope.company_id, team_id=scope.team_id)
        return self._absences.count_by_state(scope.company_id, user_id=scope.user_id)

    # -------- Justification --------
    @staticmethod
    def _parse_item(raw: JustificationInput) -> JustificationItem:
        if isinstance(raw, JustificationItem):
            absence_id, reason, explanation = raw.absence_id, raw.reason_category, raw.explanation
        else:
            absence_id, reason, explanation = raw.get("absence_id"), raw.get("reason_category"), raw.get("explanation")
        try:
            absence_id = int(absence_id)
        except (TypeError, ValueError):
            raise ValidationError("absence_id is required")
        return JustificationItem(
            absence_id=absence_id,
            reason_category=require_enum(reason, AbsenceReason, "reason_category"),
            explanation=require_length_between(explanation, "explanation", 1, MAX_EXPLANATION_LENGTH),
        )

    def submit_justification(
        self,
        member_id: int,
        items: Sequence[JustificationInput],
        *,
        now: Optional[datetime] = None,
    ) -> List[Absence]:
        """Justify one or more of the member's absences. All items are validated before any write."""
        if not items:
            raise ValidationError("At least one justification is required")

        parsed: List[JustificationItem] = []
        originals: List[Absence] = []
        seen = set()
        for raw in items:
            item = self._parse_item(raw)
            if item.absence_id in seen:
                raise ValidationError(f"Absence {item.absence_id} listed more than once")
            seen.add(item.absence_id)

            absence = self._absences.get(item.absence_id)
            if absence is None or absence.user_id != int(member_id):
                raise NotFoundError(f"Absence {item.absence_id} not found")
            if absence.is_reviewed:
                raise _conflict("Absence has already been reviewed", absence)
            if absence.is_justified:
                raise _conflict("Absence has already been justified", absence)
            parsed.append(item)
            originals.append(absence)

        justified_at = now or now_utc()
        if not self._absences.justify_all(user_id=int(member_id), items=parsed, justified_at=justified_at):
            for item in parsed:
                current = self._absences.get(item.absence_id)
                if current is None or current.is_justified or current.is_reviewed:
                    raise _conflict("Absence was changed by another request", current)
            raise StateConflictError("Absence was changed by another request")

        updated = [self._absences.get(item.absence_id) for item in parsed]
        absence_ids = [item.absence_id for item in parsed]
        first = originals[0]

        member = self._teams.get_member(int(member_id))
        team = self._teams.get_team(first.team_id)
        member_name = member.full_name if member else f"Member {member_id}"
        if team and team.leader_id:
            notify_quietly(
                self._notifier,
                user_id=team.leader_id,
                title="Absence Justification Submitted",
                message=f"{member_name} submitted a justification for {len(parsed)} absence(s).",
                type_tag="ABSENCE_JUSTIFIED",
                payload={"member_id": int(member_id), "count": len(parsed), "absence_ids": absence_ids},
            )
        audit_quietly(
            self._audit,
            company_id=first.company_id,
            user_id=int(member_id),
            action_tag="ABSENCE_JUSTIFIED",
            entity_type="absence",
            entity_id=first.absence_id,
            description=f"{member_name} justified {len(parsed)} absence(s)",
            metadata={"absence_ids": absence_ids, "reasons": [i.reason_category.value for i in parsed]},
        )
        log.info("Justification submitted member=%s absences=%s", member_id, absence_ids)
        return updated

    # -------- Review --------
    def review_absence(
        self,
        absence_id: int,
        reviewer: Viewer,
        verdict: Union[AbsenceStatus, str],
        notes: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Absence:
        if not reviewer.role.can_review:
            raise AuthorizationError("Only team leads and above can review absences")
        status = require_enum(verdict, AbsenceStatus, "verdict")
        if status not in _VERDICTS:
            raise ValidationError("verdict must be EXCUSED or UNEXCUSED")
        notes = optional_max_length(notes, "notes", MAX_REVIEW_NOTES_LENGTH)

        absence = self.get_absence(absence_id, resolve_scope(reviewer))
        if absence.is_reviewed:
            raise _conflict("Absence has already been reviewed", absence)
        if not absence.is_justified:
            raise _conflict("Absence has not been justified yet", absence)

        reviewed = self._absences.review(
            absence_id=absence.absence_id,
            status=status,
            reviewed_by=reviewer.user_id,
            reviewed_at=now or now_utc(),
            review_notes=notes,
        )
        if not reviewed:
            raise _conflict("Absence was reviewed by another request", self._absences.get(absence.absence_id))

        updated = self._absences.get(absence.absence_id)
        label = "Excused" if status == AbsenceStatus.EXCUSED else "Unexcused"
        day = absence.absence_date.isoformat()
        message = f"Your absence on {day} was marked {label.lower()}."
        if notes:
            message += f" Notes: {notes}"

        notify_quietly(
            self._notifier,
            user_id=absence.user_id,
            title=f"Absence {label}",
            message=message,
            type_tag=f"ABSENCE_{status.value}",
            payload={"absence_id": absence.absence_id, "date": day, "status": status.value},
        )
        audit_quietly(
            self._audit,
            company_id=absence.company_id,
            user_id=reviewer.user_id,
            action_tag=f"ABSENCE_{status.value}",
            entity_type="absence",
            entity_id=absence.absence_id,
            description=f"Absence on {day} for member {absence.user_id} marked {status.value}",
            metadata={"member_id": absence.user_id, "date": day, "notes": notes},
        )
        log.info("Absence %s reviewed as %s by %s", absence.absence_id, status.value, reviewer.user_id)

        self._dispatcher.submit(
            f"absence review {absence.absence_id} team={absence.team_id} date={day}",
            self._after_review,
            updated,
        )
        return updated

    def _after_review(self, absence: Absence) -> None:
        if self._checkins is not None:
            status = (
                DailyAttendanceStatus.EXCUSED
                if absence.status == AbsenceStatus.EXCUSED
                else DailyAttendanceStatus.ABSENT
            )
            self._checkins.upsert_attendance(
                DailyAttendance(
                    user_id=absence.user_id,
                    team_id=absence.team_id,
                    attendance_date=absence.absence_date,
                    status=status,
                    score=ATTENDANCE_SCORES[status],
                )
            )
        self._summaries.recalculate(absence.team_id, absence.absence_date)
