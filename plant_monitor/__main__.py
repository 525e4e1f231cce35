"""Headless entry point: run the poll loop without the web dashboard."""

from __future__ import annotations

import argparse
import asyncio
import logging

from plant_monitor.core.config import get_settings
from plant_monitor.schemas.state import ApplicationState
from plant_monitor.services.monitor import MonitorService
from plant_monitor.services.poller import Poller

log = logging.getLogger("plant-monitor")


def _log_state(state: ApplicationState) -> None:
    if state.device is None:
        return
    log.info(
        "moisture=%s%% raw=%s status=%s weather=%s buzzer=%s",
        state.device.moisture,
        state.device.raw,
        state.device.moisture_status.value,
        state.weather.condition.value,
        state.actuator.buzzer.value,
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Soil moisture monitor (headless)")
    parser.add_argument("--once", action="store_true", help="Run a single poll cycle, print the state and exit")
    parser.add_argument("--device", help="Device base URL (overrides PLANT_MONITOR_DEVICE_BASE_URL)")
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    settings = get_settings()
    if args.device:
        settings = settings.model_copy(update={"device_base_url": args.device.rstrip("/")})

    monitor = MonitorService.from_settings(settings)
    poller = Poller(monitor, interval=settings.poll_interval_seconds)
    try:
        if args.once:
            await poller.run_cycle()
            print(monitor.state.model_dump_json(indent=2))
            return
        monitor.subscribe(_log_state)
        poller.start()
        await asyncio.Event().wait()
    finally:
        await poller.stop()
        await monitor.close()


def run() -> None:
    args = parse_args()
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
