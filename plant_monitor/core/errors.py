"""Error taxonomy for device, actuator and advisory round trips.

Adapters raise these; the poller, controller and advisory service catch
them at the call site and turn them into logged, non-fatal outcomes.
"""

from __future__ import annotations


class PlantMonitorError(Exception):
    """Base class for every recoverable failure in the monitor."""


class TransportError(PlantMonitorError):
    """The device could not be reached (connect, timeout, protocol)."""


class HttpStatusError(PlantMonitorError):
    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP error {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class MalformedPayloadError(PlantMonitorError):
    """The response body was not JSON or not a JSON object."""


class ActuationCommandError(PlantMonitorError):
    def __init__(self, command: str, reason: str):
        super().__init__(f"Actuator command '{command}' failed: {reason}")
        self.command = command
        self.reason = reason


class AdvisoryError(PlantMonitorError):
    """Any failure in the advisory request/response round trip."""
