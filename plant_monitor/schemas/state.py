from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from plant_monitor.models.enums import BuzzerState, MoistureStatus, Urgency, WeatherCondition


class DeviceState(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: int = 0
    moisture: float = Field(default=0.0, ge=0, le=100)
    moisture_status: MoistureStatus = MoistureStatus.DRY
    timestamp: datetime


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature_c: float = 0.0
    humidity_pct: float = 0.0
    condition: WeatherCondition = WeatherCondition.SUNNY


class ActuatorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    buzzer: BuzzerState = BuzzerState.OFF


class Classification(BaseModel):
    """Moisture band plus the hints the dashboard needs to draw it."""

    model_config = ConfigDict(frozen=True)

    status: MoistureStatus
    label: str
    urgency: Urgency
    color: str
    pulse: bool = False


class ApplicationState(BaseModel):
    """Immutable snapshot published to observers after every change."""

    model_config = ConfigDict(frozen=True)

    device: DeviceState | None = None
    weather: WeatherSnapshot = WeatherSnapshot()
    actuator: ActuatorState = ActuatorState()
    classification: Classification | None = None
    history: tuple[float, ...] = ()
    plant_type: str = "Tomato"
    advisory_text: str = ""
    advisory_in_flight: bool = False
    watering: bool = False
    last_error: str | None = None
    last_success_at: datetime | None = None
    cycles_ok: int = 0
    cycles_failed: int = 0


class AdvisoryIn(BaseModel):
    plant_type: str | None = None


class AdvisoryOut(BaseModel):
    plant_type: str
    advisory_text: str
