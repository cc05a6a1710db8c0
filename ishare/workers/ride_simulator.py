"""
Ride Simulator
==============

Advances a ride through its lifecycle on a fixed timer, standing in for the
backend when there is none.

Lifecycle
---------
searching -> driverAssigned -> driverArrived -> inProgress -> completed

``lifecycle()`` yields each next status after ``step_seconds`` and stops
early when its stop event is set.  ``RideSimulator`` drives the client store
with it; the mock backend uses the same generator to emit socket events.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from ishare.config import settings
from ishare.domain.enums import RideStatus
from ishare.store import Store
from ishare.store import ride as ride_slice

logger = logging.getLogger(__name__)

NEXT_STATUS: dict[RideStatus, RideStatus] = {
    RideStatus.SEARCHING: RideStatus.DRIVER_ASSIGNED,
    RideStatus.DRIVER_ASSIGNED: RideStatus.DRIVER_ARRIVED,
    RideStatus.DRIVER_ARRIVED: RideStatus.IN_PROGRESS,
    RideStatus.IN_PROGRESS: RideStatus.COMPLETED,
}

# socket event announcing each status
STATUS_EVENTS: dict[RideStatus, str] = {
    RideStatus.DRIVER_ASSIGNED: "driver_assigned",
    RideStatus.DRIVER_ARRIVED: "driver_arrived",
    RideStatus.IN_PROGRESS: "ride_started",
    RideStatus.COMPLETED: "ride_completed",
    RideStatus.CANCELLED: "ride_cancelled",
}

StepCallback = Callable[[RideStatus], Union[None, Awaitable[None]]]


async def lifecycle(
    step_seconds: float,
    stop: asyncio.Event,
    start: RideStatus = RideStatus.SEARCHING,
) -> AsyncIterator[RideStatus]:
    status = start
    while status in NEXT_STATUS:
        # Wait for the step interval or until stop is signalled
        try:
            await asyncio.wait_for(stop.wait(), timeout=step_seconds)
            return
        except asyncio.TimeoutError:
            pass
        status = NEXT_STATUS[status]
        yield status


class RideSimulator:
    def __init__(
        self,
        store: Store,
        step_seconds: Optional[float] = None,
        on_step: Optional[StepCallback] = None,
    ):
        self.store = store
        self.step_seconds = (
            settings.mock_simulation_step_seconds
            if step_seconds is None
            else step_seconds
        )
        self.on_step = on_step
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    # ── Public API ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        current = self.store.select("ride").current_ride
        if current.status not in NEXT_STATUS:
            raise ValueError(f"No ride to simulate (status={current.status})")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(current.status, current.id))
        logger.info("Ride simulator started (step=%ss)", self.step_seconds)

    async def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Ride simulator stopped")

    async def wait(self) -> None:
        """Block until the simulated ride has finished."""
        if self._task:
            await self._task

    # ── Internals ─────────────────────────────────────────────────────

    async def _loop(self, start: RideStatus, ride_id: Optional[str]) -> None:
        assert self._stop_event is not None
        async for status in lifecycle(self.step_seconds, self._stop_event, start):
            current = self.store.select("ride").current_ride
            replaced = ride_id is not None and current.id != ride_id
            if current.status not in NEXT_STATUS or replaced:
                logger.info("Ride changed outside the simulator, stopping")
                return
            try:
                ride_id = self.apply(status) or ride_id
                if self.on_step is not None:
                    result = self.on_step(status)
                    if inspect.isawaitable(result):
                        await result
            except Exception:
                logger.exception("Unhandled error in simulator step")

    def apply(self, status: RideStatus) -> Optional[str]:
        """Dispatch the store action for *status*; returns the ride id."""
        if status == RideStatus.DRIVER_ASSIGNED:
            drivers = self.store.select("map").nearby_drivers
            current = self.store.select("ride").current_ride
            ride_id = current.id or f"sim-{uuid.uuid4().hex[:8]}"
            self.store.dispatch(
                ride_slice.ride_request_success(
                    {"ride_id": ride_id, "driver": drivers[0] if drivers else None}
                )
            )
            return ride_id
        self.store.dispatch(ride_slice.update_ride_status({"status": status}))
        return None
