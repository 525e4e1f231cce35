"""Plant-care advice from an external text-generation endpoint.

The request/response schema belongs to the vendor, so it lives in an
adapter; the client only assembles the prompt, makes one POST and hands
the decoded body back to the adapter. Every failure collapses into
``ADVISORY_ERROR_MESSAGE``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from plant_monitor.core.config import Settings
from plant_monitor.core.errors import AdvisoryError
from plant_monitor.schemas.state import ActuatorState, DeviceState, WeatherSnapshot

log = logging.getLogger(__name__)

ADVISORY_ERROR_MESSAGE = "Error connecting to AI. Check your API setup."


def build_prompt(
    device: DeviceState,
    weather: WeatherSnapshot,
    actuator: ActuatorState,
    plant_type: str,
) -> str:
    return (
        f"I'm growing {plant_type}. Current sensor readings:\n"
        f"- Raw sensor value: {device.raw}\n"
        f"- Moisture level: {device.moisture:g}%\n"
        f"- Status: {device.moisture_status.value}\n"
        f"- Weather: {weather.temperature_c:g}°C, {weather.humidity_pct:g}% humidity, {weather.condition.value}\n"
        f"- Alert buzzer: {actuator.buzzer.value}\n"
        "\n"
        "Please provide brief, actionable advice on:\n"
        "1. Should I water the plant now?\n"
        "2. Any immediate concerns?\n"
        "3. Quick care tip for today's conditions\n"
        "\n"
        "Keep it under 100 words."
    )


class AdvisoryAdapter(ABC):
    """Vendor-specific request body and response parsing."""

    @abstractmethod
    def build_request(self, prompt: str) -> tuple[dict[str, str], dict[str, Any]]:
        """Return (headers, json body) for one prompt."""
        pass

    @abstractmethod
    def extract_text(self, data: Any) -> str:
        """Pull the advice out of a decoded response; raise AdvisoryError if absent."""
        pass


class MessagesApiAdapter(AdvisoryAdapter):
    """Adapter for Messages-style APIs (``content`` list of typed segments)."""

    def __init__(self, model: str, max_tokens: int, api_key: str = "", api_version: str = "2023-06-01"):
        self.model = model
        self.max_tokens = max_tokens
        self.api_key = api_key
        self.api_version = api_version

    def build_request(self, prompt: str) -> tuple[dict[str, str], dict[str, Any]]:
        headers = {"content-type": "application/json", "anthropic-version": self.api_version}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        return headers, body

    def extract_text(self, data: Any) -> str:
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            raise AdvisoryError("Response has no content list")
        for item in data["content"]:
            if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str):
                return item["text"]
        raise AdvisoryError("Response content has no text segment")


class AdvisoryClient:
    def __init__(
        self,
        endpoint: str,
        adapter: AdvisoryAdapter,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.adapter = adapter
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> AdvisoryClient:
        adapter = MessagesApiAdapter(
            model=settings.advisory_model,
            max_tokens=settings.advisory_max_tokens,
            api_key=settings.advisory_api_key,
            api_version=settings.advisory_api_version,
        )
        return cls(settings.advisory_endpoint, adapter, settings.advisory_timeout_seconds, transport)

    async def close(self):
        await self._client.aclose()

    async def _complete(self, prompt: str) -> str:
        headers, body = self.adapter.build_request(prompt)
        try:
            response = await self._client.post(self.endpoint, headers=headers, json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise AdvisoryError(f"Advisory request failed: {exc!r}") from exc
        return self.adapter.extract_text(data)

    async def advise(
        self,
        device: DeviceState,
        weather: WeatherSnapshot,
        actuator: ActuatorState,
        plant_type: str,
    ) -> str:
        """Return advice text, or ADVISORY_ERROR_MESSAGE on any failure."""
        prompt = build_prompt(device, weather, actuator, plant_type)
        try:
            return await self._complete(prompt)
        except AdvisoryError as exc:
            log.error("%s", exc)
            return ADVISORY_ERROR_MESSAGE
        except Exception:
            log.exception("Unexpected advisory failure")
            return ADVISORY_ERROR_MESSAGE
