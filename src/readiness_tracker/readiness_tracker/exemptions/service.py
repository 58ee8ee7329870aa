from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..common.datetime_utils import now_utc
from ..common.dispatch import RecomputeDispatcher
from ..common.validators import optional_max_length, require_enum
from ..core.constants import MAX_EXEMPTION_REASON_LENGTH, MAX_REVIEW_NOTES_LENGTH
from ..core.enums import ExemptionStatus, ExemptionType
from ..core.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from ..core.scope import CompanyScope, Scope, SelfScope, TeamScope, Viewer, resolve_scope, scope_allows
from ..notifications.sinks import AuditSink, NotificationSink, audit_quietly, notify_quietly
from ..summaries.service import DailySummaryService
from ..teams.repository import TeamRepository
from .model import Exemption
from .repository import ExemptionRepository

log = logging.getLogger(__name__)


class ExemptionService:
    def __init__(
        self,
        exemptions: ExemptionRepository,
        teams: TeamRepository,
        *,
        summaries: DailySummaryService,
        dispatcher: RecomputeDispatcher,
        notifier: Optional[NotificationSink] = None,
        audit: Optional[AuditSink] = None,
    ):
        self._exemptions = exemptions
        self._teams = teams
        self._summaries = summaries
        self._dispatcher = dispatcher
        self._notifier = notifier
        self._audit = audit

    def request_exemption(
        self,
        member_id: int,
        *,
        start_date: date,
        end_date: date,
        exemption_type: Union[ExemptionType, str],
        reason: Optional[str] = None,
    ) -> Exemption:
        member = self._teams.get_member(int(member_id))
        if not member:
            raise NotFoundError("Member not found")
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")
        return self._exemptions.create(
            user_id=member.user_id,
            company_id=member.company_id,
            exemption_type=require_enum(exemption_type, ExemptionType, "exemption_type"),
            start_date=start_date,
            end_date=end_date,
            reason=optional_max_length(reason, "reason", MAX_EXEMPTION_REASON_LENGTH),
        )

    def list_pending(self, scope: Scope) -> Sequence[Exemption]:
        if isinstance(scope, CompanyScope):
            return self._exemptions.list_pending(scope.company_id)
        if isinstance(scope, TeamScope):
            return self._exemptions.list_pending(scope.company_id, team_id=scope.team_id)
        if isinstance(scope, SelfScope):
            return self._exemptions.list_pending(scope.company_id, user_id=scope.user_id)
        raise AuthorizationError("Unknown scope")

    def approve(
        self, exemption_id: int, reviewer: Viewer, notes: Optional[str] = None, *, now: Optional[datetime] = None
    ) -> Exemption:
        return self._decide(exemption_id, reviewer, ExemptionStatus.APPROVED, notes, now=now)

    def reject(
        self, exemption_id: int, reviewer: Viewer, notes: Optional[str] = None, *, now: Optional[datetime] = None
    ) -> Exemption:
        return self._decide(exemption_id, reviewer, ExemptionStatus.REJECTED, notes, now=now)

    def _decide(
        self,
        exemption_id: int,
        reviewer: Viewer,
        status: ExemptionStatus,
        notes: Optional[str],
        *,
        now: Optional[datetime] = None,
    ) -> Exemption:
        if not reviewer.role.can_review:
            raise AuthorizationError("Only team leads and above can decide exemptions")
        notes = optional_max_length(notes, "notes", MAX_REVIEW_NOTES_LENGTH)

        exemption = self._exemptions.get(int(exemption_id))
        member = self._teams.get_member(exemption.user_id) if exemption else None
        if not exemption or not member or not scope_allows(
            resolve_scope(reviewer),
            company_id=exemption.company_id,
            team_id=member.team_id,
            user_id=member.user_id,
        ):
            raise NotFoundError("Exemption not found")
        if exemption.status != ExemptionStatus.PENDING:
            raise StateConflictError("Exemption has already been decided", current_status=exemption.status.value, current=exemption)

        decided = self._exemptions.decide(
            exemption_id=exemption.exemption_id,
            status=status,
            reviewed_by=reviewer.user_id,
            reviewed_at=now or now_utc(),
            review_notes=notes,
        )
        if not decided:
            current = self._exemptions.get(exemption.exemption_id)
            raise StateConflictError(
                "Exemption was decided by another request",
                current_status=current.status.value if current else None,
                current=current,
            )

        updated = self._exemptions.get(exemption.exemption_id)
        period = f"{exemption.start_date.isoformat()} to {exemption.end_date.isoformat()}"
        verb = "approved" if status == ExemptionStatus.APPROVED else "rejected"
        notify_quietly(
            self._notifier,
            user_id=member.user_id,
            title=f"Leave Request {verb.capitalize()}",
            message=f"Your leave request for {period} was {verb}.",
            type_tag=f"EXEMPTION_{status.value}",
            payload={"exemption_id": exemption.exemption_id, "status": status.value},
        )
        audit_quietly(
            self._audit,
            company_id=exemption.company_id,
            user_id=reviewer.user_id,
            action_tag=f"EXEMPTION_{status.value}",
            entity_type="exemption",
            entity_id=exemption.exemption_id,
            description=f"Leave for member {member.user_id} ({period}) {verb}",
            metadata={"member_id": member.user_id, "notes": notes},
        )
        log.info("Exemption %s %s by %s", exemption.exemption_id, verb, reviewer.user_id)

        if member.team_id is not None:
            self._dispatcher.submit(
                f"exemption {exemption.exemption_id} team={member.team_id} range={period}",
                self._summaries.recalculate_range,
                member.team_id,
                exemption.start_date,
                exemption.end_date,
            )
        return updated
