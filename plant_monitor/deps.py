from fastapi import Request

from plant_monitor.core.config import Settings
from plant_monitor.services.monitor import MonitorService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_monitor(request: Request) -> MonitorService:
    return request.app.state.monitor
