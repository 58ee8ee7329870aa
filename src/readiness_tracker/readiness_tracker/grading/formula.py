"""Score, letter grade and trend rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.validators import round_half_up
from ..core.constants import (
    AT_RISK_THRESHOLD,
    COMPLIANCE_WEIGHT,
    NEEDS_ATTENTION_THRESHOLD,
    READINESS_WEIGHT,
    TREND_THRESHOLD,
)
from ..core.enums import RiskTier, Trend


@dataclass(frozen=True)
class GradeInfo:
    letter: str
    label: str
    color: str


# (minimum score, letter, label, color), highest first.
LETTER_GRADES = (
    (97, "A+", "Outstanding", "GREEN"),
    (93, "A", "Excellent", "GREEN"),
    (90, "A-", "Excellent", "GREEN"),
    (87, "B+", "Very Good", "YELLOW"),
    (83, "B", "Good", "YELLOW"),
    (80, "B-", "Good", "YELLOW"),
    (77, "C+", "Satisfactory", "ORANGE"),
    (73, "C", "Satisfactory", "ORANGE"),
    (70, "C-", "Satisfactory", "ORANGE"),
    (67, "D+", "Needs Improvement", "RED"),
    (63, "D", "Needs Improvement", "RED"),
    (60, "D-", "Needs Improvement", "RED"),
)
FAILING_GRADE = GradeInfo(letter="F", label="Critical", color="RED")


def grade_score(avg_readiness: float, compliance: float) -> int:
    return round_half_up(avg_readiness * READINESS_WEIGHT + compliance * COMPLIANCE_WEIGHT)


def letter_grade(score: float) -> GradeInfo:
    for minimum, letter, label, color in LETTER_GRADES:
        if score >= minimum:
            return GradeInfo(letter=letter, label=label, color=color)
    return FAILING_GRADE


def simple_grade(score: float) -> str:
    """Four-bucket grade for roll-ups across many teams."""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    return "D"


def classify_trend(delta: float) -> Trend:
    if delta >= TREND_THRESHOLD:
        return Trend.UP
    if delta <= -TREND_THRESHOLD:
        return Trend.DOWN
    return Trend.STABLE


def risk_tier(avg_readiness: Optional[float], *, onboarding: bool = False) -> RiskTier:
    if onboarding or avg_readiness is None:
        return RiskTier.ONBOARDING
    if avg_readiness < AT_RISK_THRESHOLD:
        return RiskTier.AT_RISK
    if avg_readiness < NEEDS_ATTENTION_THRESHOLD:
        return RiskTier.NEEDS_ATTENTION
    return RiskTier.HEALTHY
