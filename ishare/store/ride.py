"""Ride slice: the request being built, the live ride, schedule and history."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ishare import fixtures
from ishare.domain.entities import (
    CurrentRide,
    InvalidStateTransition,
    Location,
    RideOption,
    RideRecord,
    RideRequest,
    ScheduledRide,
)
from ishare.domain.enums import RideStatus, ScheduledRideStatus
from ishare.store.core import Slice

logger = logging.getLogger(__name__)


@dataclass
class RideState:
    ride_request: RideRequest = field(default_factory=RideRequest)
    available_ride_options: list[RideOption] = field(
        default_factory=fixtures.ride_option_entities
    )
    is_searching_ride: bool = False
    current_ride: CurrentRide = field(default_factory=CurrentRide)
    scheduled_rides: list[ScheduledRide] = field(
        default_factory=fixtures.scheduled_ride_entities
    )
    recent_rides: list[RideRecord] = field(default_factory=fixtures.recent_ride_entities)
    error: Optional[str] = None


ride = Slice("ride", RideState)


def _driver_name(driver: Any) -> str:
    if driver is None:
        return "Unknown"
    if isinstance(driver, dict):
        return driver.get("name", "Unknown")
    return getattr(driver, "name", "Unknown")


# ── Building the request ──────────────────────────────────────────────


@ride.reducer("setPickupLocation")
def set_pickup_location(state: RideState, location: Optional[Location]) -> None:
    state.ride_request.pickup_location = location


@ride.reducer("setDropoffLocation")
def set_dropoff_location(state: RideState, location: Optional[Location]) -> None:
    state.ride_request.dropoff_location = location


@ride.reducer("selectRideOption")
def select_ride_option(state: RideState, option: Optional[RideOption]) -> None:
    state.ride_request.selected_ride_option = option


@ride.reducer("setScheduledTime")
def set_scheduled_time(state: RideState, when: Optional[datetime]) -> None:
    state.ride_request.scheduled_time = when
    state.ride_request.is_scheduled = bool(when)


@ride.reducer("toggleRecurring")
def toggle_recurring(state: RideState, _payload) -> None:
    request = state.ride_request
    request.is_recurring = not request.is_recurring
    if not request.is_recurring:
        request.recurring_days = []


@ride.reducer("setRecurringDays")
def set_recurring_days(state: RideState, days: list[str]) -> None:
    state.ride_request.recurring_days = list(days)


@ride.reducer("setRideEstimates")
def set_ride_estimates(state: RideState, estimates: dict) -> None:
    state.ride_request.estimated_price = estimates.get("price")
    state.ride_request.estimated_duration = estimates.get("duration")
    state.ride_request.estimated_distance = estimates.get("distance")


@ride.reducer("applyPromoCode")
def apply_promo_code(state: RideState, code: Optional[str]) -> None:
    state.ride_request.promo_code = code


# ── Live ride ─────────────────────────────────────────────────────────


@ride.reducer("requestRide")
def request_ride(state: RideState, _payload) -> None:
    state.is_searching_ride = True
    state.current_ride = CurrentRide(status=RideStatus.SEARCHING)
    state.error = None


@ride.reducer("rideRequestSuccess")
def ride_request_success(state: RideState, payload: dict) -> None:
    state.is_searching_ride = False
    state.current_ride = CurrentRide(
        id=payload["ride_id"],
        status=RideStatus.DRIVER_ASSIGNED,
        driver=payload.get("driver"),
        start_time=datetime.now(),
    )


@ride.reducer("rideRequestFailure")
def ride_request_failure(state: RideState, message: str) -> None:
    state.is_searching_ride = False
    state.current_ride.status = None
    state.error = message


@ride.reducer("updateRideStatus")
def update_ride_status(state: RideState, payload: dict) -> None:
    status = payload["status"]
    if not isinstance(status, RideStatus):
        status = RideStatus.from_server(status)

    current = state.current_ride
    if current.status == status:
        return
    try:
        current.transition_to(status)
    except InvalidStateTransition as exc:
        logger.warning("Ignoring ride status update: %s", exc)
        return

    if status in (RideStatus.COMPLETED, RideStatus.CANCELLED):
        state.is_searching_ride = False
    if status != RideStatus.COMPLETED:
        return

    current.end_time = datetime.now()
    request = state.ride_request
    state.recent_rides.insert(
        0,
        RideRecord(
            id=current.id or f"ride{int(time.time() * 1000)}",
            date=current.end_time.date().isoformat(),
            time=current.end_time.strftime("%H:%M"),
            pickup=request.pickup_location.name if request.pickup_location else "Unknown",
            destination=(
                request.dropoff_location.name if request.dropoff_location else "Unknown"
            ),
            price=request.estimated_price or 0.0,
            driver_name=_driver_name(current.driver),
        ),
    )


@ride.reducer("clearCurrentRide")
def clear_current_ride(state: RideState, _payload) -> None:
    state.current_ride = CurrentRide()
    state.is_searching_ride = False


# ── Scheduling ────────────────────────────────────────────────────────


@ride.reducer("scheduleRide")
def schedule_ride(state: RideState, _payload) -> None:
    request = state.ride_request
    option = request.selected_ride_option
    if not (
        request.pickup_location
        and request.dropoff_location
        and request.scheduled_time
        and option
    ):
        return

    when = request.scheduled_time
    state.scheduled_rides.insert(
        0,
        ScheduledRide(
            id=f"sched{int(time.time() * 1000)}",
            date=when.date().isoformat(),
            time=when.strftime("%H:%M"),
            pickup=request.pickup_location.name,
            destination=request.dropoff_location.name,
            price=request.estimated_price or option.price,
            recurring_days=list(request.recurring_days) if request.is_recurring else [],
        ),
    )
    state.ride_request = RideRequest(
        pickup_location=request.pickup_location,
        dropoff_location=request.dropoff_location,
    )


@ride.reducer("cancelScheduledRide")
def cancel_scheduled_ride(state: RideState, ride_id: str) -> None:
    for scheduled in state.scheduled_rides:
        if scheduled.id == ride_id:
            scheduled.status = ScheduledRideStatus.CANCELLED


@ride.reducer("resetRideRequest")
def reset_ride_request(state: RideState, _payload) -> None:
    state.ride_request = RideRequest()


@ride.reducer("clearRideHistory")
def clear_ride_history(state: RideState, _payload) -> None:
    state.recent_rides = []
