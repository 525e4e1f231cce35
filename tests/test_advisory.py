"""Tests for the advisory client and its Messages-style adapter."""
import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from plant_monitor.core.errors import AdvisoryError
from plant_monitor.models.enums import BuzzerState, MoistureStatus, WeatherCondition
from plant_monitor.schemas.state import ActuatorState, DeviceState, WeatherSnapshot
from plant_monitor.services.advisory import (
    ADVISORY_ERROR_MESSAGE,
    AdvisoryClient,
    MessagesApiAdapter,
    build_prompt,
)

DEVICE = DeviceState(
    raw=512,
    moisture=20,
    moisture_status=MoistureStatus.DRY,
    timestamp=datetime(2026, 5, 1, tzinfo=timezone.utc),
)
WEATHER = WeatherSnapshot(temperature_c=31, humidity_pct=85, condition=WeatherCondition.HUMID)
ACTUATOR = ActuatorState(buzzer=BuzzerState.ON)


def test_prompt_carries_the_snapshot():
    prompt = build_prompt(DEVICE, WEATHER, ACTUATOR, "Basil")

    assert prompt.startswith("I'm growing Basil.")
    assert "Raw sensor value: 512" in prompt
    assert "Moisture level: 20%" in prompt
    assert "Status: dry" in prompt
    assert "31°C, 85% humidity, Humid" in prompt
    assert "Alert buzzer: on" in prompt
    assert "Keep it under 100 words." in prompt


@pytest.mark.asyncio
async def test_advise_returns_first_text_segment(advisory_client, fake_advisory):
    fake_advisory.response = {
        "content": [
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "Water now."},
            {"type": "text", "text": "Second segment."},
        ]
    }

    text = await advisory_client.advise(DEVICE, WEATHER, ACTUATOR, "Tomato")

    assert text == "Water now."
    body = json.loads(fake_advisory.bodies[0])
    assert body["model"]
    assert body["max_tokens"] == 1000
    assert body["messages"][0]["role"] == "user"
    assert "I'm growing Tomato." in body["messages"][0]["content"]
    assert fake_advisory.headers[0]["x-api-key"] == "test-key"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        500,
        "not json at all",
        {"error": {"type": "overloaded"}},
        {"content": []},
        {"content": [{"type": "image"}]},
        httpx.ReadTimeout("timed out"),
        RuntimeError("transport blew up"),
    ],
)
async def test_any_failure_returns_fixed_message(advisory_client, fake_advisory, response):
    fake_advisory.response = response
    assert await advisory_client.advise(DEVICE, WEATHER, ACTUATOR, "Fern") == ADVISORY_ERROR_MESSAGE


def test_adapter_rejects_missing_content():
    adapter = MessagesApiAdapter(model="m", max_tokens=10)
    with pytest.raises(AdvisoryError):
        adapter.extract_text({"content": "flat string"})


def test_adapter_omits_key_header_when_unset():
    headers, body = MessagesApiAdapter(model="m", max_tokens=10).build_request("hi")
    assert "x-api-key" not in headers
    assert body["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_invalid_endpoint_returns_fixed_message(fake_advisory, caplog):
    adapter = MessagesApiAdapter(model="m", max_tokens=10)
    client = AdvisoryClient("http://[::1", adapter, transport=httpx.MockTransport(fake_advisory.handler))
    try:
        with caplog.at_level(logging.ERROR):
            text = await client.advise(DEVICE, WEATHER, ACTUATOR, "Fern")
    finally:
        await client.close()

    assert text == ADVISORY_ERROR_MESSAGE
    assert fake_advisory.bodies == []
    assert "Advisory request failed" in caplog.text
