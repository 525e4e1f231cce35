"""Buzzer alert controller.

The automatic rule is level-triggered (re-evaluated from every new device
state) but its commands are edge-triggered against the last known
actuator state, so a run of dry readings produces one ``start`` and the
following run of wet readings one ``stop``.

Actuator state is updated optimistically when a command is dispatched and
is never rolled back if the command fails. Setting ``reconcile`` lets the
buzzer state reported by the device overwrite the local one on each poll.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from plant_monitor.core.errors import ActuationCommandError
from plant_monitor.models.enums import BuzzerCommand, BuzzerState, ControlSource, MoistureStatus
from plant_monitor.schemas.state import ActuatorState, DeviceState
from plant_monitor.services.classifier import is_dry
from plant_monitor.services.device_client import DeviceClient

log = logging.getLogger(__name__)

_NO_OVERRIDE = object()


@dataclass
class ControlDecision:
    """Outcome of one controller evaluation."""

    command: BuzzerCommand | None
    reason: str  # Human-readable explanation
    source: ControlSource = ControlSource.AUTOMATIC
    dispatched: bool = False

    @property
    def has_actions(self) -> bool:
        return self.command is not None


class BuzzerController:
    """Owns ActuatorState and issues buzzer commands to the device."""

    def __init__(self, client: DeviceClient, reconcile: bool = False):
        self.client = client
        self.reconcile = reconcile
        self._state = ActuatorState()
        # Moisture status at the time of the last manual action; automatic
        # commands stay suppressed until the status moves away from it.
        self._override: MoistureStatus | None | object = _NO_OVERRIDE
        self._last_status: MoistureStatus | None = None

    @property
    def state(self) -> ActuatorState:
        return self._state

    @property
    def override_active(self) -> bool:
        return self._override is not _NO_OVERRIDE

    def decide(self, device: DeviceState) -> ControlDecision:
        """Pick the command for this reading without touching any state."""
        moisture = device.moisture
        buzzer = self._state.buzzer

        if self.override_active and device.moisture_status == self._override:
            return ControlDecision(
                command=None,
                reason=f"Manual override active while soil stays {device.moisture_status.value}",
                source=ControlSource.MANUAL,
            )

        if is_dry(moisture):
            if buzzer == BuzzerState.OFF:
                return ControlDecision(
                    command=BuzzerCommand.START,
                    reason=f"Soil moisture {moisture}% is critical, starting buzzer",
                )
            return ControlDecision(command=None, reason=f"Soil moisture {moisture}% is critical, buzzer already on")

        if buzzer == BuzzerState.ON:
            return ControlDecision(
                command=BuzzerCommand.STOP,
                reason=f"Soil moisture {moisture}% recovered, stopping buzzer",
            )
        return ControlDecision(command=None, reason=f"Soil moisture {moisture}% is fine, buzzer off")

    async def evaluate(self, device: DeviceState, reported: BuzzerState | None = None) -> ControlDecision:
        """Run the automatic rule for one new device state."""
        if self.reconcile and reported is not None and reported != self._state.buzzer:
            log.info("Buzzer reconciled from %s to device-reported %s", self._state.buzzer.value, reported.value)
            self._state = ActuatorState(buzzer=reported)

        if self.override_active and device.moisture_status != self._override:
            log.info("Soil status changed to %s, clearing manual override", device.moisture_status.value)
            self._override = _NO_OVERRIDE
        self._last_status = device.moisture_status

        decision = self.decide(device)
        if decision.command is None:
            log.debug("Buzzer rule: %s", decision.reason)
            return decision

        log.info("Buzzer rule: %s", decision.reason)
        decision.dispatched = await self._dispatch(decision.command)
        return decision

    async def start_beep(self) -> ActuatorState:
        return await self._manual(BuzzerCommand.START)

    async def stop_beep(self) -> ActuatorState:
        return await self._manual(BuzzerCommand.STOP)

    async def toggle_beep(self) -> ActuatorState:
        return await self._manual(BuzzerCommand.TOGGLE)

    async def _manual(self, command: BuzzerCommand) -> ActuatorState:
        self._override = self._last_status
        log.info("Manual buzzer command %s", command.value)
        await self._dispatch(command)
        return self._state

    async def _dispatch(self, command: BuzzerCommand) -> bool:
        self._state = ActuatorState(buzzer=self._next_buzzer(command))
        try:
            await self.client.send_buzzer_command(command)
        except ActuationCommandError as exc:
            # Optimistic state is kept; the device may now disagree with us.
            log.error("%s", exc)
            return False
        return True

    def _next_buzzer(self, command: BuzzerCommand) -> BuzzerState:
        if command == BuzzerCommand.START:
            return BuzzerState.ON
        if command == BuzzerCommand.STOP:
            return BuzzerState.OFF
        return BuzzerState.OFF if self._state.buzzer == BuzzerState.ON else BuzzerState.ON
