"""Test configuration and fixtures."""
import asyncio
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from plant_monitor.app_factory import create_app
from plant_monitor.core.config import Settings
from plant_monitor.schemas.state import DeviceState
from plant_monitor.services.advisory import AdvisoryClient
from plant_monitor.services.classifier import moisture_status
from plant_monitor.services.device_client import DeviceClient
from plant_monitor.services.monitor import MonitorService

DEVICE_URL = "http://device.test"
ADVISORY_URL = "http://advisory.test/v1/messages"


class FakeDevice:
    """In-memory stand-in for the sensor board, served through httpx.MockTransport.

    Queued ``/data`` responses: a dict is sent as JSON, a str as a raw body,
    an int as a bare status code and an exception is raised as-is. When the
    queue is empty ``default`` is served. ``command_status`` answers every
    POST the same way, as a status code or a raised exception.
    """

    def __init__(self) -> None:
        self.payloads: list[Any] = []
        self.default: Any = {"moisture": 50}
        self.requests: list[tuple[str, str]] = []
        self.command_status: int | Exception = 200
        self.gate: asyncio.Event | None = None
        self.fetch_started = asyncio.Event()

    @property
    def commands(self) -> list[str]:
        return [path for method, path in self.requests if method == "POST"]

    @property
    def fetches(self) -> int:
        return sum(1 for method, path in self.requests if method == "GET" and path == "/data")

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if request.method == "GET" and path == "/data":
            self.fetch_started.set()
            if self.gate is not None:
                await self.gate.wait()
            body = self.payloads.pop(0) if self.payloads else self.default
            if isinstance(body, Exception):
                raise body
            if isinstance(body, int):
                return httpx.Response(body)
            if isinstance(body, str):
                return httpx.Response(200, text=body)
            return httpx.Response(200, json=body)
        if request.method == "POST":
            if isinstance(self.command_status, Exception):
                raise self.command_status
            return httpx.Response(self.command_status)
        return httpx.Response(404)


class FakeAdvisory:
    """Messages-style endpoint; ``response`` is a JSON body, status code or exception."""

    def __init__(self) -> None:
        self.response: Any = {"content": [{"type": "text", "text": "Water lightly this evening."}]}
        self.bodies: list[bytes] = []
        self.headers: list[httpx.Headers] = []
        self.gate: asyncio.Event | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(request.content)
        self.headers.append(request.headers)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.response, Exception):
            raise self.response
        if isinstance(self.response, int):
            return httpx.Response(self.response)
        if isinstance(self.response, str):
            return httpx.Response(200, text=self.response)
        return httpx.Response(200, json=self.response)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        device_base_url=DEVICE_URL,
        advisory_endpoint=ADVISORY_URL,
        advisory_api_key="test-key",
        poll_interval_seconds=0.01,
        watering_reset_seconds=0.05,
    )


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def fake_advisory() -> FakeAdvisory:
    return FakeAdvisory()


@pytest_asyncio.fixture
async def device_client(fake_device: FakeDevice) -> AsyncGenerator[DeviceClient, None]:
    client = DeviceClient(DEVICE_URL, transport=httpx.MockTransport(fake_device.handler))
    yield client
    await client.close()


@pytest_asyncio.fixture
async def advisory_client(settings: Settings, fake_advisory: FakeAdvisory) -> AsyncGenerator[AdvisoryClient, None]:
    client = AdvisoryClient.from_settings(settings, transport=httpx.MockTransport(fake_advisory.handler))
    yield client
    await client.close()


@pytest_asyncio.fixture
async def monitor(
    settings: Settings, device_client: DeviceClient, advisory_client: AdvisoryClient
) -> AsyncGenerator[MonitorService, None]:
    service = MonitorService(settings, device_client, advisory_client)
    yield service
    await service.close()


@pytest_asyncio.fixture
async def client(settings: Settings, monitor: MonitorService) -> AsyncGenerator[AsyncClient, None]:
    """ASGI client; the transport does not run the lifespan, so no poller is started."""
    app = create_app(settings, monitor=monitor)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def reading() -> Callable[..., DeviceState]:
    """Build a DeviceState for a moisture value, status derived the usual way."""

    def _make(moisture: float, raw: int = 0) -> DeviceState:
        return DeviceState(
            raw=raw,
            moisture=moisture,
            moisture_status=moisture_status(moisture),
            timestamp=datetime.now(timezone.utc),
        )

    return _make
