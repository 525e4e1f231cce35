"""Map raw device payloads onto the canonical device and weather snapshots.

Firmware versions disagree on shape. Older boards send flat fields::

    {"raw": 2730, "moisture": 41}

newer ones group them::

    {"soil": {"raw": 512, "moisture": 20, "status": "LOW"},
     "weather": {"temp_c": 31, "humidity": 85},
     "buzzer": {"state": "on"}}

Every field is resolved on its own (grouped, then flat, then default) so a
half-populated payload still produces a usable state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from plant_monitor.models.enums import BuzzerState, WeatherCondition
from plant_monitor.schemas.state import DeviceState, WeatherSnapshot
from plant_monitor.services.classifier import moisture_status

_MISSING = object()

HUMID_ABOVE_PCT = 80
HOT_ABOVE_C = 30
COOL_BELOW_C = 15


@dataclass(frozen=True)
class NormalizedPayload:
    device: DeviceState
    weather: WeatherSnapshot
    buzzer: BuzzerState
    buzzer_reported: bool


def _group(payload: Mapping[str, Any], name: str) -> Mapping[str, Any] | None:
    value = payload.get(name)
    return value if isinstance(value, Mapping) else None


def _lookup(payload: Mapping[str, Any], group: str, key: str, flat_key: str | None = None) -> list[Any]:
    """Return candidate values for one field in precedence order."""
    candidates = []
    container = _group(payload, group)
    if container is not None and key in container:
        candidates.append(container[key])
    flat = payload.get(flat_key or key, _MISSING)
    if flat is not _MISSING:
        candidates.append(flat)
    return candidates


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _first_number(candidates: list[Any]) -> float | None:
    for candidate in candidates:
        number = _as_number(candidate)
        if number is not None:
            return number
    return None


def _as_buzzer(value: Any) -> BuzzerState | None:
    if isinstance(value, bool):
        return BuzzerState.ON if value else BuzzerState.OFF
    if isinstance(value, (int, float)) and value in (0, 1):
        return BuzzerState.ON if value == 1 else BuzzerState.OFF
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("on", "true", "1", "beeping"):
            return BuzzerState.ON
        if lowered in ("off", "false", "0", "idle"):
            return BuzzerState.OFF
    return None


def _as_condition(value: Any) -> WeatherCondition | None:
    if not isinstance(value, str):
        return None
    lowered = value.strip().lower()
    for condition in WeatherCondition:
        if condition.value.lower() == lowered:
            return condition
    return None


def clamp_moisture(value: float) -> float:
    return max(0.0, min(100.0, value))


def derive_condition(temperature_c: float, humidity_pct: float) -> WeatherCondition:
    # Humidity is checked before temperature; a hot, humid day reads as Humid.
    if humidity_pct > HUMID_ABOVE_PCT:
        return WeatherCondition.HUMID
    if temperature_c > HOT_ABOVE_C:
        return WeatherCondition.HOT
    if temperature_c < COOL_BELOW_C:
        return WeatherCondition.COOL
    return WeatherCondition.SUNNY


def _normalize_weather(payload: Mapping[str, Any]) -> WeatherSnapshot:
    temperature = _first_number(
        _lookup(payload, "weather", "temp_c") + _lookup(payload, "weather", "temperature")
    )
    humidity = _first_number(_lookup(payload, "weather", "humidity"))

    condition = None
    for candidate in _lookup(payload, "weather", "condition"):
        condition = _as_condition(candidate)
        if condition is not None:
            break
    if condition is None:
        if temperature is None and humidity is None:
            condition = WeatherCondition.SUNNY
        else:
            condition = derive_condition(temperature or 0.0, humidity or 0.0)

    return WeatherSnapshot(
        temperature_c=temperature or 0.0,
        humidity_pct=humidity or 0.0,
        condition=condition,
    )


def _normalize_buzzer(payload: Mapping[str, Any]) -> tuple[BuzzerState, bool]:
    for candidate in _lookup(payload, "buzzer", "state", flat_key="buzzer"):
        state = _as_buzzer(candidate)
        if state is not None:
            return state, True
    return BuzzerState.OFF, False


def normalize_payload(payload: Mapping[str, Any], captured_at: datetime) -> NormalizedPayload:
    """Build device/weather snapshots from an untrusted payload; never raises."""
    if not isinstance(payload, Mapping):
        payload = {}

    raw = _first_number(_lookup(payload, "soil", "raw")) or 0.0
    moisture = clamp_moisture(_first_number(_lookup(payload, "soil", "moisture")) or 0.0)
    buzzer, buzzer_reported = _normalize_buzzer(payload)

    device = DeviceState(
        raw=int(raw),
        moisture=moisture,
        moisture_status=moisture_status(moisture),
        timestamp=captured_at,
    )
    return NormalizedPayload(
        device=device,
        weather=_normalize_weather(payload),
        buzzer=buzzer,
        buzzer_reported=buzzer_reported,
    )
