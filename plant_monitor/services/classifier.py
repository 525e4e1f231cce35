from __future__ import annotations

from plant_monitor.models.enums import MoistureStatus, Urgency
from plant_monitor.schemas.state import Classification

# Both thresholds also gate the buzzer; 30 itself is not critical.
DRY_THRESHOLD = 30
OPTIMAL_THRESHOLD = 60

CRITICAL = Classification(
    status=MoistureStatus.DRY,
    label="Critical — water now",
    urgency=Urgency.HIGH,
    color="red",
    pulse=True,
)
LOW = Classification(
    status=MoistureStatus.WET,
    label="Low — consider watering",
    urgency=Urgency.MEDIUM,
    color="yellow",
)
OPTIMAL = Classification(
    status=MoistureStatus.WET,
    label="Optimal",
    urgency=Urgency.NONE,
    color="green",
)


def classify(moisture: float) -> Classification:
    if moisture < DRY_THRESHOLD:
        return CRITICAL
    if moisture < OPTIMAL_THRESHOLD:
        return LOW
    return OPTIMAL


def moisture_status(moisture: float) -> MoistureStatus:
    return classify(moisture).status


def is_dry(moisture: float) -> bool:
    return moisture < DRY_THRESHOLD
