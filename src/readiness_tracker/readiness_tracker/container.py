from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.repository import AbsenceRepository
from .absences.service import AbsenceService
from .checkins.factory import AttendanceStrategyFactory
from .checkins.mysql_checkin_repository import MySQLCheckinRepository
from .checkins.repository import CheckinRepository
from .checkins.service import CheckinService
from .common.dispatch import RecomputeDispatcher
from .core.constants import (
    DEFAULT_EARLY_WINDOW_MINUTES,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_RECOMPUTE_BUDGET_SECONDS,
    DEFAULT_RECOMPUTE_WORKERS,
)
from .core.enums import ComplianceFormula, ExemptCheckinPolicy
from .database.connection import DBConfig, DatabaseConnection
from .exemptions.mysql_exemption_repository import MySQLExemptionRepository
from .exemptions.repository import ExemptionRepository
from .exemptions.service import ExemptionService
from .grading.service import GradingService
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .notifications.sinks import AuditSink, MySQLAuditSink, MySQLNotificationSink, NotificationSink
from .summaries.mysql_summary_repository import MySQLSummaryRepository
from .summaries.repository import SummaryRepository
from .summaries.service import DailySummaryService
from .summaries.snapshot import SnapshotLoader
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository


@dataclass(frozen=True)
class EngineOptions:
    policy: ExemptCheckinPolicy = ExemptCheckinPolicy.EXCLUDE
    formula: ComplianceFormula = ComplianceFormula.DAILY_MEAN
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    early_window_minutes: int = DEFAULT_EARLY_WINDOW_MINUTES
    recompute_workers: int = DEFAULT_RECOMPUTE_WORKERS
    recompute_budget_seconds: float = DEFAULT_RECOMPUTE_BUDGET_SECONDS
    recompute_sync: bool = False

    @classmethod
    def from_settings(cls, settings) -> "EngineOptions":
        """Read engine settings from a config module; unknown policy names raise ValueError."""
        return cls(
            policy=ExemptCheckinPolicy(getattr(settings, "EXEMPT_CHECKIN_POLICY", cls.policy.value)),
            formula=ComplianceFormula(getattr(settings, "COMPLIANCE_FORMULA", cls.formula.value)),
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", cls.grace_minutes)),
            early_window_minutes=int(getattr(settings, "CHECKIN_EARLY_WINDOW_MINUTES", cls.early_window_minutes)),
            recompute_workers=int(getattr(settings, "RECOMPUTE_WORKERS", cls.recompute_workers)),
            recompute_budget_seconds=float(getattr(settings, "RECOMPUTE_BUDGET_SECONDS", cls.recompute_budget_seconds)),
            recompute_sync=bool(getattr(settings, "RECOMPUTE_SYNC", cls.recompute_sync)),
        )


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    teams_repo: TeamRepository
    checkins_repo: CheckinRepository
    holidays_repo: HolidayRepository
    exemptions_repo: ExemptionRepository
    absences_repo: AbsenceRepository
    summaries_repo: SummaryRepository
    notifier: NotificationSink
    audit: AuditSink

    dispatcher: RecomputeDispatcher
    snapshot_loader: SnapshotLoader
    summary_service: DailySummaryService
    absence_service: AbsenceService
    grading_service: GradingService
    checkin_service: CheckinService
    holiday_service: HolidayService
    exemption_service: ExemptionService


def wire_container(
    *,
    teams_repo: TeamRepository,
    checkins_repo: CheckinRepository,
    holidays_repo: HolidayRepository,
    exemptions_repo: ExemptionRepository,
    absences_repo: AbsenceRepository,
    summaries_repo: SummaryRepository,
    notifier: NotificationSink,
    audit: AuditSink,
    options: EngineOptions = EngineOptions(),
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    dispatcher = RecomputeDispatcher(max_workers=options.recompute_workers, synchronous=options.recompute_sync)
    loader = SnapshotLoader(teams_repo, checkins_repo, holidays_repo, exemptions_repo, absences_repo)

    summary_service = DailySummaryService(
        teams_repo,
        summaries_repo,
        loader,
        policy=options.policy,
        budget_seconds=options.recompute_budget_seconds,
    )
    absence_service = AbsenceService(
        absences_repo,
        teams_repo,
        loader,
        summaries=summary_service,
        dispatcher=dispatcher,
        checkins=checkins_repo,
        notifier=notifier,
        audit=audit,
    )
    grading_service = GradingService(teams_repo, loader, policy=options.policy, formula=options.formula)
    checkin_service = CheckinService(
        checkins_repo,
        teams_repo,
        holidays_repo,
        exemptions_repo,
        summaries=summary_service,
        dispatcher=dispatcher,
        audit=audit,
        strategy_factory=AttendanceStrategyFactory(),
        grace_minutes=options.grace_minutes,
        early_window_minutes=options.early_window_minutes,
    )
    holiday_service = HolidayService(holidays_repo, summaries=summary_service, dispatcher=dispatcher, audit=audit)
    exemption_service = ExemptionService(
        exemptions_repo,
        teams_repo,
        summaries=summary_service,
        dispatcher=dispatcher,
        notifier=notifier,
        audit=audit,
    )

    return Container(
        conn=conn,
        teams_repo=teams_repo,
        checkins_repo=checkins_repo,
        holidays_repo=holidays_repo,
        exemptions_repo=exemptions_repo,
        absences_repo=absences_repo,
        summaries_repo=summaries_repo,
        notifier=notifier,
        audit=audit,
        dispatcher=dispatcher,
        snapshot_loader=loader,
        summary_service=summary_service,
        absence_service=absence_service,
        grading_service=grading_service,
        checkin_service=checkin_service,
        holiday_service=holiday_service,
        exemption_service=exemption_service,
    )


def build_container(*, db_config: dict, options: EngineOptions = EngineOptions()) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_container(
        teams_repo=MySQLTeamRepository(conn),
        checkins_repo=MySQLCheckinRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        exemptions_repo=MySQLExemptionRepository(conn),
        absences_repo=MySQLAbsenceRepository(conn),
        summaries_repo=MySQLSummaryRepository(conn),
        notifier=MySQLNotificationSink(conn),
        audit=MySQLAuditSink(conn),
        options=options,
        conn=conn,
    )
