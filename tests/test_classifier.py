"""Tests for the moisture classifier."""
import pytest

from plant_monitor.models.enums import MoistureStatus, Urgency
from plant_monitor.services.classifier import classify, is_dry


@pytest.mark.parametrize("moisture", [0, 12.5, 29, 29.99])
def test_below_thirty_is_critical(moisture):
    result = classify(moisture)
    assert result.status == MoistureStatus.DRY
    assert result.urgency == Urgency.HIGH
    assert result.label == "Critical — water now"
    assert result.pulse is True
    assert is_dry(moisture)


@pytest.mark.parametrize("moisture", [30, 45, 59.99])
def test_low_band_is_wet_with_medium_urgency(moisture):
    result = classify(moisture)
    assert result.status == MoistureStatus.WET
    assert result.urgency == Urgency.MEDIUM
    assert result.label == "Low — consider watering"
    assert result.color == "yellow"


@pytest.mark.parametrize("moisture", [60, 75, 100])
def test_sixty_and_above_is_optimal(moisture):
    result = classify(moisture)
    assert result.status == MoistureStatus.WET
    assert result.urgency == Urgency.NONE
    assert result.label == "Optimal"
    assert result.color == "green"


def test_thirty_is_not_dry():
    assert classify(30).status != MoistureStatus.DRY
    assert not is_dry(30)
