from fastapi import APIRouter, Depends, HTTPException, status

from plant_monitor.core.errors import ActuationCommandError
from plant_monitor.deps import get_app_settings, get_monitor
from plant_monitor.models.enums import BuzzerCommand
from plant_monitor.schemas.state import ActuatorState, AdvisoryIn, AdvisoryOut, ApplicationState
from plant_monitor.services.monitor import MonitorService

router = APIRouter(prefix="/api", tags=["monitor"])


@router.get("/state", response_model=ApplicationState)
async def get_state(monitor: MonitorService = Depends(get_monitor)):
    return monitor.state


@router.get("/history")
async def get_history(monitor: MonitorService = Depends(get_monitor)):
    """Moisture readings, oldest first."""
    return {"values": list(monitor.state.history), "capacity": monitor.history.capacity}


@router.get("/plant-types")
async def list_plant_types(monitor: MonitorService = Depends(get_monitor), settings=Depends(get_app_settings)):
    return {"plant_types": settings.plant_types, "selected": monitor.state.plant_type}


@router.post("/buzzer/{command}", response_model=ActuatorState)
async def buzzer_command(command: BuzzerCommand, monitor: MonitorService = Depends(get_monitor)):
    if command == BuzzerCommand.START:
        state = await monitor.start_beep()
    elif command == BuzzerCommand.STOP:
        state = await monitor.stop_beep()
    else:
        state = await monitor.toggle_beep()
    return state.actuator


@router.post("/water", status_code=status.HTTP_202_ACCEPTED)
async def water_plant(monitor: MonitorService = Depends(get_monitor)):
    try:
        started = await monitor.water()
    except ActuationCommandError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from None
    if not started:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Watering already in progress")
    return {"watering": monitor.state.watering}


@router.post("/advisory", response_model=AdvisoryOut)
async def request_advisory(payload: AdvisoryIn, monitor: MonitorService = Depends(get_monitor)):
    try:
        text = await monitor.request_advisory(payload.plant_type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None
    if text is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Advisory request already in progress")
    return AdvisoryOut(plant_type=monitor.state.plant_type, advisory_text=text)
