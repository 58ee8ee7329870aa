from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for visibility scoping."""

    WORKER = "WORKER"
    MEMBER = "MEMBER"
    TEAM_LEAD = "TEAM_LEAD"
    SUPERVISOR = "SUPERVISOR"
    EXECUTIVE = "EXECUTIVE"
    ADMIN = "ADMIN"

    @property
    def is_member(self) -> bool:
        return self in (Role.WORKER, Role.MEMBER)

    @property
    def can_review(self) -> bool:
        return self in (Role.TEAM_LEAD, Role.SUPERVISOR, Role.EXECUTIVE, Role.ADMIN)


class ReadinessStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class DailyAttendanceStatus(str, Enum):
    """Per member, per day outcome stored in daily_attendance."""

    GREEN = "GREEN"
    YELLOW = "YELLOW"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class ExemptionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExemptionType(str, Enum):
    SICK_LEAVE = "SICK_LEAVE"
    PERSONAL_REASONS = "PERSONAL_REASONS"
    MEDICAL_APPOINTMENT = "MEDICAL_APPOINTMENT"
    FAMILY_EMERGENCY = "FAMILY_EMERGENCY"
    OTHER = "OTHER"


class AbsenceStatus(str, Enum):
    """Absence lifecycle. Justified absences stay PENDING_JUSTIFICATION until reviewed."""

    PENDING_JUSTIFICATION = "PENDING_JUSTIFICATION"
    EXCUSED = "EXCUSED"
    UNEXCUSED = "UNEXCUSED"


class AbsenceReason(str, Enum):
    SICK = "SICK"
    EMERGENCY = "EMERGENCY"
    PERSONAL = "PERSONAL"
    FORGOT_CHECKIN = "FORGOT_CHECKIN"
    TECHNICAL_ISSUE = "TECHNICAL_ISSUE"
    OTHER = "OTHER"


class ExemptCheckinPolicy(str, Enum):
    """How an on-leave member who checks in anyway is counted."""

    EXCLUDE = "exclude"
    FOLD_IN = "fold_in"


class ComplianceFormula(str, Enum):
    """How daily compliance is rolled up over a period."""

    DAILY_MEAN = "daily_mean"
    TOTAL_RATIO = "total_ratio"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class RiskTier(str, Enum):
    AT_RISK = "at_risk"
    NEEDS_ATTENTION = "needs_attention"
    HEALTHY = "healthy"
    ONBOARDING = "onboarding"
