from __future__ import annotations

from dataclasses import dataclass

from ..common.validators import require_int_between, round_half_up
from ..core.constants import READINESS_GREEN_MIN, READINESS_YELLOW_MIN, WELLNESS_MAX, WELLNESS_MIN
from ..core.enums import ReadinessStatus


@dataclass(frozen=True)
class ReadinessResult:
    score: int
    status: ReadinessStatus


def readiness_status(score: float) -> ReadinessStatus:
    if score >= READINESS_GREEN_MIN:
        return ReadinessStatus.GREEN
    if score >= READINESS_YELLOW_MIN:
        return ReadinessStatus.YELLOW
    return ReadinessStatus.RED


def calculate_readiness(*, mood: int, stress: int, sleep: int, physical_health: int) -> ReadinessResult:
    """Equal-weight score from four 1-10 inputs; stress is inverted."""
    mood = require_int_between(mood, "mood", WELLNESS_MIN, WELLNESS_MAX)
    stress = require_int_between(stress, "stress", WELLNESS_MIN, WELLNESS_MAX)
    sleep = require_int_between(sleep, "sleep", WELLNESS_MIN, WELLNESS_MAX)
    physical_health = require_int_between(physical_health, "physical_health", WELLNESS_MIN, WELLNESS_MAX)

    components = (
        mood / 10 * 100,
        (10 - stress) / 10 * 100,
        sleep / 10 * 100,
        physical_health / 10 * 100,
    )
    score = round_half_up(sum(c * 0.25 for c in components))
    return ReadinessResult(score=score, status=readiness_status(score))
