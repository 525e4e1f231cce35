from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.templating import Jinja2Templates

from plant_monitor.deps import get_app_settings, get_monitor
from plant_monitor.services.monitor import MonitorService

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
router = APIRouter(tags=["site"], include_in_schema=False)


def _time_since(moment: datetime | None) -> tuple[str, int | None]:
    """Human label for how long ago the device last answered."""
    if moment is None:
        return ("never", None)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    seconds = max(int((datetime.now(timezone.utc) - moment).total_seconds()), 0)

    if seconds < 60:
        label = f"{seconds}s ago"
    elif seconds < 3600:
        label = f"{seconds // 60}m ago"
    else:
        label = f"{seconds // 3600}h ago"
    return label, seconds


@router.get("/")
async def dashboard(
    request: Request,
    monitor: MonitorService = Depends(get_monitor),
    settings=Depends(get_app_settings),
):
    state = monitor.state
    updated_label, age = _time_since(state.last_success_at)
    context = {
        "state": state,
        "plant_types": settings.plant_types,
        "updated_label": updated_label,
        # Three missed polls in a row and the reading is considered stale.
        "stale": age is None or age > settings.poll_interval_seconds * 3,
        "device_base": settings.device_base_url,
        "app_name": settings.app_name,
    }
    return templates.TemplateResponse(request, "dashboard.html", context)


@router.get("/healthz")
async def healthz(monitor: MonitorService = Depends(get_monitor)):
    state = monitor.state
    return {
        "status": "ok",
        "last_success_at": state.last_success_at,
        "cycles_ok": state.cycles_ok,
        "cycles_failed": state.cycles_failed,
    }
