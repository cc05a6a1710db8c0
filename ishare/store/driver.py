"""
Driver slice (rider mode).

Incoming requests queue up while the driver is online.  Accepting one moves
it into ``active_ride``; the ride then advances through the driver-side
lifecycle (ACCEPTED -> ARRIVING -> ARRIVED -> IN_PROGRESS -> COMPLETED) and
completion books the fare into ``earnings``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ishare import fixtures
from ishare.domain.entities import (
    ActiveDriverRide,
    DriverRideRequest,
    Earnings,
    InvalidStateTransition,
)
from ishare.domain.enums import DriverRideStatus
from ishare.store.core import Slice

logger = logging.getLogger(__name__)


@dataclass
class DriverState:
    is_online: bool = True
    ride_requests: list[DriverRideRequest] = field(
        default_factory=fixtures.driver_ride_request_entities
    )
    active_ride: Optional[ActiveDriverRide] = None
    completed_rides: list[ActiveDriverRide] = field(default_factory=list)
    earnings: Earnings = field(default_factory=fixtures.driver_earnings)

    @property
    def active_ride_status(self) -> Optional[DriverRideStatus]:
        return self.active_ride.status if self.active_ride else None


driver = Slice("driver", DriverState)


def _advance(state: DriverState, status: DriverRideStatus) -> bool:
    if state.active_ride is None:
        logger.warning("No active ride to move to %s", status.value)
        return False
    try:
        state.active_ride.transition_to(status)
    except InvalidStateTransition as exc:
        logger.warning("Ignoring driver ride update: %s", exc)
        return False
    return True


@driver.reducer("setOnline")
def set_online(state: DriverState, online: bool) -> None:
    state.is_online = bool(online)


@driver.reducer("toggleOnline")
def toggle_online(state: DriverState, _payload) -> None:
    state.is_online = not state.is_online


@driver.reducer("receiveRideRequest")
def receive_ride_request(state: DriverState, request: DriverRideRequest) -> None:
    if not state.is_online:
        return
    if any(r.id == request.id for r in state.ride_requests):
        return
    state.ride_requests.append(request)


@driver.reducer("acceptRideRequest")
def accept_ride_request(state: DriverState, request_id: str) -> None:
    if state.active_ride is not None:
        logger.warning("Already on ride %s", state.active_ride.request.id)
        return
    request = next((r for r in state.ride_requests if r.id == request_id), None)
    if request is None:
        return
    state.ride_requests = [r for r in state.ride_requests if r.id != request_id]
    state.active_ride = ActiveDriverRide(request=request)


@driver.reducer("declineRideRequest")
def decline_ride_request(state: DriverState, request_id: str) -> None:
    state.ride_requests = [r for r in state.ride_requests if r.id != request_id]


@driver.reducer("advanceActiveRide")
def advance_active_ride(state: DriverState, status: DriverRideStatus) -> None:
    status = DriverRideStatus(status)
    if status == DriverRideStatus.COMPLETED:
        complete_active_ride.reducer(state, None)
        return
    if status == DriverRideStatus.CANCELLED:
        cancel_active_ride.reducer(state, None)
        return
    if _advance(state, status) and status == DriverRideStatus.IN_PROGRESS:
        state.active_ride.started_at = datetime.now()


@driver.reducer("completeActiveRide")
def complete_active_ride(state: DriverState, _payload) -> None:
    if not _advance(state, DriverRideStatus.COMPLETED):
        return
    ride = state.active_ride
    ride.finished_at = datetime.now()
    fare = ride.request.fare
    earnings = state.earnings
    earnings.today = round(earnings.today + fare, 2)
    earnings.week = round(earnings.week + fare, 2)
    earnings.month = round(earnings.month + fare, 2)
    earnings.completed_trips += 1
    earnings.hours = round(earnings.hours + ride.duration_seconds / 3600, 2)
    state.completed_rides.insert(0, ride)
    state.active_ride = None


@driver.reducer("cancelActiveRide")
def cancel_active_ride(state: DriverState, reason: Optional[str]) -> None:
    if not _advance(state, DriverRideStatus.CANCELLED):
        return
    state.active_ride.cancel_reason = reason
    state.active_ride.finished_at = datetime.now()
    state.earnings.cancelled_trips += 1
    state.active_ride = None
