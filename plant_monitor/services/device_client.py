"""HTTP client for the soil/weather sensor device."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from plant_monitor.core.errors import (
    ActuationCommandError,
    HttpStatusError,
    MalformedPayloadError,
    PlantMonitorError,
    TransportError,
)
from plant_monitor.models.enums import BuzzerCommand

logger = logging.getLogger(__name__)


class DeviceClient:
    """Async client for the device's data and actuator endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize device client.

        Args:
            base_url: Device base URL (e.g., http://192.168.0.105)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests to fake the device
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Make an HTTP request to the device.

        Raises:
            TransportError: If the request fails before a response arrives
            HttpStatusError: If the device answers with a non-2xx status
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except Exception as exc:
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc

        if not response.is_success:
            raise HttpStatusError(response.status_code, url)
        return response

    async def fetch_data(self) -> dict[str, Any]:
        """Fetch the current sensor payload.

        Returns:
            The decoded JSON object, unvalidated

        Raises:
            TransportError, HttpStatusError: On network or status failures
            MalformedPayloadError: If the body is not a JSON object
        """
        response = await self._request("GET", "/data")
        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedPayloadError(f"Device returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"Device returned {type(data).__name__}, expected an object")
        logger.debug("Received from device: %s", data)
        return data

    async def _command(self, name: str, path: str) -> None:
        try:
            await self._request("POST", path)
        except PlantMonitorError as exc:
            raise ActuationCommandError(name, str(exc)) from exc

    async def send_buzzer_command(self, command: BuzzerCommand) -> None:
        """Send start/stop/toggle to the buzzer; any 2xx counts as success.

        Raises:
            ActuationCommandError: If the command could not be delivered
        """
        await self._command(f"buzzer/{command.value}", f"/buzzer/{command.value}")

    async def water(self) -> None:
        """Trigger one watering run on the device.

        Raises:
            ActuationCommandError: If the command could not be delivered
        """
        await self._command("water", "/water")
