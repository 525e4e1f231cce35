from contextlib import asynccontextmanager

from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from plant_monitor.core.config import Settings, get_settings
from plant_monitor.routers.groups import ALL_ROUTERS
from plant_monitor.services.monitor import MonitorService
from plant_monitor.services.poller import Poller


@asynccontextmanager
async def _lifespan(app: FastAPI):
    monitor: MonitorService = app.state.monitor
    poller = Poller(monitor, interval=app.state.settings.poll_interval_seconds)
    app.state.poller = poller
    poller.start()
    try:
        yield
    finally:
        await poller.stop()
        await monitor.close()


def create_app(settings: Settings | None = None, monitor: MonitorService | None = None) -> FastAPI:
    """
    Build the dashboard application. The poller is tied to the lifespan:
    it starts when the app starts serving and is stopped on shutdown.
    """
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, lifespan=_lifespan)
    app.state.settings = settings
    app.state.monitor = monitor or MonitorService.from_settings(settings)
    if settings.forwarded_allow_ips:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.forwarded_allow_ips)
    for router in ALL_ROUTERS:
        app.include_router(router)
    return app
