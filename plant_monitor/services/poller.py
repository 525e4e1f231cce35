"""Periodic fetch/normalize/control loop for one device."""

from __future__ import annotations

import asyncio
import logging

from plant_monitor.core.errors import PlantMonitorError
from plant_monitor.services.monitor import MonitorService

log = logging.getLogger("plant-poller")


class Poller:
    """Runs one poll cycle immediately on start, then every ``interval`` seconds.

    Cycles never overlap. ``stop()`` bumps the generation counter so a fetch
    that is still in flight completes but its payload is discarded.
    """

    def __init__(self, monitor: MonitorService, interval: float = 3.0, stop_grace: float = 10.0):
        self.monitor = monitor
        self.interval = interval
        self.stop_grace = stop_grace
        self._task: asyncio.Task | None = None
        self._stop = asyncio.Event()
        self._generation = 0
        self._in_flight = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._generation += 1
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._generation), name="plant-poller")
        log.info("Poller started, interval %.1fs", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._generation += 1
        self._stop.set()
        task, self._task = self._task, None
        done, _pending = await asyncio.wait({task}, timeout=self.stop_grace)
        if not done:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        log.info("Poller stopped")

    async def _run(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        while not self._stop.is_set() and generation == self._generation:
            started = loop.time()
            await self.run_cycle(generation)
            delay = max(0.0, self.interval - (loop.time() - started))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

    async def run_cycle(self, generation: int | None = None) -> bool:
        """Run one fetch-normalize-classify-control cycle; never raises."""
        if self._in_flight:
            log.warning("Previous poll still in flight, skipping cycle")
            return False
        if generation is None:
            generation = self._generation

        self._in_flight = True
        try:
            payload = await self.monitor.fetch()
            if generation != self._generation:
                log.info("Discarding payload from a poll cycle that outlived stop()")
                return False
            await self.monitor.apply_payload(payload)
            return True
        except PlantMonitorError as exc:
            log.error("Failed to fetch sensor data: %s", exc)
            self.monitor.record_failure(exc)
            return False
        except Exception as exc:
            log.exception("Unexpected poll error: %s", exc)
            self.monitor.record_failure(exc)
            return False
        finally:
            self._in_flight = False
