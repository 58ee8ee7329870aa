import pytest

from src.readiness_tracker.readiness_tracker.checkins.readiness import calculate_readiness, readiness_status
from src.readiness_tracker.readiness_tracker.core.enums import ReadinessStatus
from src.readiness_tracker.readiness_tracker.core.exceptions import ValidationError


def test_readiness_inverts_stress():
    result = calculate_readiness(mood=8, stress=2, sleep=7, physical_health=9)

    assert result.score == 80
    assert result.status == ReadinessStatus.GREEN


def test_readiness_status_bands():
    assert calculate_readiness(mood=5, stress=5, sleep=5, physical_health=5).status == ReadinessStatus.YELLOW
    assert calculate_readiness(mood=3, stress=8, sleep=3, physical_health=2).score == 25
    assert readiness_status(70) == ReadinessStatus.GREEN
    assert readiness_status(69) == ReadinessStatus.YELLOW
    assert readiness_status(40) == ReadinessStatus.YELLOW
    assert readiness_status(39) == ReadinessStatus.RED


@pytest.mark.parametrize("bad", [0, 11, True, 7.5, "seven", None])
def test_readiness_rejects_out_of_range_inputs(bad):
    with pytest.raises(ValidationError):
        calculate_readiness(mood=bad, stress=5, sleep=5, physical_health=5)
