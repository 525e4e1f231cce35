from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from plant_monitor.core.config import Settings
from plant_monitor.core.errors import ActuationCommandError
from plant_monitor.schemas.state import ActuatorState, ApplicationState, DeviceState
from plant_monitor.services.advisory import ADVISORY_ERROR_MESSAGE, AdvisoryClient
from plant_monitor.services.classifier import classify
from plant_monitor.services.controller import BuzzerController
from plant_monitor.services.device_client import DeviceClient
from plant_monitor.services.history import HistoryBuffer
from plant_monitor.services.normalizer import NormalizedPayload, normalize_payload

log = logging.getLogger(__name__)

Subscriber = Callable[[ApplicationState], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def advance(
    previous: ApplicationState,
    normalized: NormalizedPayload,
    history: tuple[float, ...],
    actuator: ActuatorState,
) -> ApplicationState:
    """Fold one successful poll into the previous state."""
    return previous.model_copy(
        update={
            "device": normalized.device,
            "weather": normalized.weather,
            "classification": classify(normalized.device.moisture),
            "history": history,
            "actuator": actuator,
            "last_error": None,
            "last_success_at": normalized.device.timestamp,
            "cycles_ok": previous.cycles_ok + 1,
        }
    )


class MonitorService:
    """Single owner of ApplicationState; everything else observes snapshots."""

    def __init__(
        self,
        settings: Settings,
        device_client: DeviceClient,
        advisory_client: AdvisoryClient,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings
        self.device_client = device_client
        self.advisory_client = advisory_client
        self.controller = BuzzerController(device_client, reconcile=settings.reconcile_buzzer_state)
        self.history = HistoryBuffer(settings.history_size)
        self.clock = clock
        self._state = ApplicationState(plant_type=settings.default_plant_type)
        self._subscribers: list[Subscriber] = []
        self._watering_reset: asyncio.TimerHandle | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> MonitorService:
        device_client = DeviceClient(settings.device_base_url, timeout=settings.request_timeout_seconds)
        return cls(settings, device_client, AdvisoryClient.from_settings(settings))

    @property
    def state(self) -> ApplicationState:
        return self._state

    # --- Notifications ---
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, state: ApplicationState) -> ApplicationState:
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                log.exception("State subscriber %r failed", callback)
        return state

    def _update(self, **changes: Any) -> ApplicationState:
        return self._publish(self._state.model_copy(update=changes))

    # --- Poll cycle ---
    async def fetch(self) -> dict[str, Any]:
        return await self.device_client.fetch_data()

    async def apply_payload(self, payload: dict[str, Any]) -> ApplicationState:
        """Normalize, classify, record and control, then publish the next state."""
        normalized = normalize_payload(payload, captured_at=self.clock())
        reported = normalized.buzzer if normalized.buzzer_reported else None
        await self.controller.evaluate(normalized.device, reported=reported)
        # Only a cycle that got this far leaves a reading behind.
        self.history.append(normalized.device.moisture)
        return self._publish(advance(self._state, normalized, self.history.snapshot(), self.controller.state))

    def record_failure(self, exc: BaseException) -> ApplicationState:
        """Keep the last good device state and note the failed cycle."""
        return self._update(last_error=str(exc) or type(exc).__name__, cycles_failed=self._state.cycles_failed + 1)

    # --- Manual buzzer controls ---
    async def start_beep(self) -> ApplicationState:
        return self._update(actuator=await self.controller.start_beep())

    async def stop_beep(self) -> ApplicationState:
        return self._update(actuator=await self.controller.stop_beep())

    async def toggle_beep(self) -> ApplicationState:
        return self._update(actuator=await self.controller.toggle_beep())

    # --- Watering ---
    async def water(self) -> bool:
        """Run the pump once; returns False if a watering run is already active.

        Raises:
            ActuationCommandError: If the device rejected the command; the
                watering flag is already cleared.
        """
        if self._state.watering:
            return False
        self._update(watering=True)
        try:
            await self.device_client.water()
        except ActuationCommandError as exc:
            log.error("Watering error: %s", exc)
            self._update(watering=False)
            raise

        loop = asyncio.get_running_loop()
        self._watering_reset = loop.call_later(self.settings.watering_reset_seconds, self._finish_watering)
        return True

    def _finish_watering(self) -> None:
        self._watering_reset = None
        self._update(watering=False)

    # --- Advisory ---
    def set_plant_type(self, plant_type: str) -> ApplicationState:
        if plant_type not in self.settings.plant_types:
            raise ValueError(f"Unknown plant type: {plant_type}")
        return self._update(plant_type=plant_type)

    async def request_advisory(self, plant_type: str | None = None) -> str | None:
        """Ask for advice on the latest snapshot; None while another request is outstanding."""
        if self._state.advisory_in_flight:
            return None
        if plant_type is not None:
            self.set_plant_type(plant_type)

        state = self._update(advisory_in_flight=True)
        device = state.device or DeviceState(timestamp=self.clock())
        text = ADVISORY_ERROR_MESSAGE
        try:
            text = await self.advisory_client.advise(device, state.weather, state.actuator, state.plant_type)
        finally:
            self._update(advisory_in_flight=False, advisory_text=text)
        return text

    async def close(self) -> None:
        if self._watering_reset is not None:
            self._watering_reset.cancel()
            self._watering_reset = None
        await self.device_client.close()
        await self.advisory_client.close()
