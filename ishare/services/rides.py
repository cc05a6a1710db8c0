"""
Ride service.

REST calls for the ride resource, mirrored onto the socket for immediate
rides so the backend can start matching in real time.  Ride lifecycle
events from the socket are folded into ``ride.current_ride``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from ishare import endpoints
from ishare.client.errors import ApiError, RideRequestTimeout
from ishare.client.http import ApiClient
from ishare.config import settings
from ishare.domain.entities import Coordinates, CurrentRide, Driver
from ishare.domain.enums import RideStatus
from ishare.domain.pricing import FareEstimate, PricingEngine
from ishare.realtime.socket_client import SocketService
from ishare.services.auth import AuthService
from ishare.store import Store
from ishare.store import map as map_slice
from ishare.store import ride as ride_slice

logger = logging.getLogger(__name__)

NO_DRIVERS_AVAILABLE = "No drivers available"

# socket event -> lifecycle status it implies
RIDE_EVENT_STATUS = {
    "driver_accepted": RideStatus.DRIVER_ASSIGNED,
    "driver_arrived": RideStatus.DRIVER_ARRIVED,
    "ride_started": RideStatus.IN_PROGRESS,
    "ride_completed": RideStatus.COMPLETED,
    "ride_cancelled": RideStatus.CANCELLED,
}
RIDE_EVENTS = (
    "driver_assigned",
    *RIDE_EVENT_STATUS,
    "driver_location_update",
    "ride_request_error",
)


def _driver_from_event(data: Any) -> Any:
    if isinstance(data, dict) and "location" in data:
        return Driver.from_api(data)
    return data


class RideService:
    def __init__(
        self,
        api: ApiClient,
        socket: SocketService,
        store: Store,
        auth: AuthService,
        pricing: Optional[PricingEngine] = None,
    ):
        self.api = api
        self.socket = socket
        self.store = store
        self.auth = auth
        self.pricing = pricing or PricingEngine(
            settings.base_fare, settings.rate_per_km, settings.average_speed_kmh
        )

    # ── Requests ──────────────────────────────────────────────────────

    async def request_ride(self, details: dict) -> dict:
        try:
            response = await self.api.post(endpoints.CREATE_RIDE, details) or {}
        except ApiError as exc:
            logger.error("Error requesting ride: %s", exc)
            raise

        if not details.get("isScheduled"):
            user = await self.auth.get_current_user()
            if user:
                await self.socket.send_ride_request(
                    {
                        "userId": user.id,
                        "rideId": response.get("_id"),
                        "pickupLocation": details.get("pickupLocation"),
                        "dropoffLocation": details.get("dropoffLocation"),
                        "rideType": details.get("rideType"),
                        "paymentMethod": details.get("paymentMethod"),
                        "estimatedPrice": details.get("estimatedPrice"),
                    }
                )
        return response

    async def request_ride_and_wait(
        self, details: dict, timeout: Optional[float] = None
    ) -> CurrentRide:
        """Request an immediate ride and wait for a driver to be assigned.

        Dispatches ``ride/requestRide`` up front.  If nobody is assigned
        within *timeout* seconds the request fails with "No drivers
        available" in the store and ``RideRequestTimeout`` is raised.
        """
        timeout = settings.ride_request_timeout_seconds if timeout is None else timeout
        loop = asyncio.get_running_loop()
        assigned: asyncio.Future = loop.create_future()

        def on_assigned(data: Any) -> None:
            if not assigned.done():
                assigned.set_result(data if isinstance(data, dict) else {})

        def on_error(data: Any) -> None:
            if not assigned.done():
                message = data.get("message") if isinstance(data, dict) else str(data)
                assigned.set_exception(ApiError(message or "Ride request failed"))

        self.store.dispatch(ride_slice.request_ride())
        self.socket.on("driver_assigned", on_assigned)
        self.socket.on("ride_request_error", on_error)
        try:
            response = await self.request_ride(details)
            data = await asyncio.wait_for(assigned, timeout)
        except asyncio.TimeoutError:
            logger.warning("No driver assigned within %ss", timeout)
            self.store.dispatch(ride_slice.ride_request_failure(NO_DRIVERS_AVAILABLE))
            raise RideRequestTimeout(NO_DRIVERS_AVAILABLE) from None
        except ApiError as exc:
            self.store.dispatch(ride_slice.ride_request_failure(exc.detail))
            raise
        finally:
            self.socket.off("driver_assigned", on_assigned)
            self.socket.off("ride_request_error", on_error)

        current = self.store.select("ride").current_ride
        if current.status == RideStatus.SEARCHING:
            self.store.dispatch(
                ride_slice.ride_request_success(
                    {
                        "ride_id": data.get("rideId") or response.get("_id"),
                        "driver": _driver_from_event(data.get("driver")),
                    }
                )
            )
        return self.store.select("ride").current_ride

    async def get_user_rides(
        self, status: Optional[str] = None, limit: int = 10, skip: int = 0
    ) -> list[dict]:
        params: dict[str, Any] = {"limit": limit, "skip": skip}
        if status:
            params["status"] = status
        return await self.api.get(endpoints.USER_RIDES, params)

    async def get_ride(self, ride_id: str) -> dict:
        return await self.api.get(endpoints.ride_details(ride_id))

    async def cancel_ride(self, ride_id: str) -> dict:
        try:
            response = await self.api.put(
                endpoints.update_ride_status(ride_id),
                {"status": RideStatus.CANCELLED.value},
            )
        except ApiError as exc:
            logger.error("Error cancelling ride: %s", exc)
            raise

        await self.socket.cancel_ride(ride_id)
        if self.store.select("ride").current_ride.id == ride_id:
            self.store.dispatch(
                ride_slice.update_ride_status({"status": RideStatus.CANCELLED})
            )
        return response

    async def schedule_ride(self, details: dict) -> dict:
        return await self.api.post(
            endpoints.SCHEDULE_RIDE, {**details, "isScheduled": True}
        )

    async def submit_rating(
        self,
        ride_id: str,
        rated_user_id: str,
        score: int,
        comment: Optional[str] = None,
        categories: Optional[dict] = None,
    ) -> None:
        rating = {
            "rideId": ride_id,
            "ratedUserId": rated_user_id,
            "score": score,
            "comment": comment,
            "categories": categories,
        }
        await self.api.post(endpoints.CREATE_RATING, rating)

        user = await self.auth.get_current_user()
        if user:
            await self.socket.submit_rating({**rating, "raterUserId": user.id})

    # ── Pricing ───────────────────────────────────────────────────────

    def estimate_fare(
        self, option_id: Optional[str] = None, promo_code: Optional[str] = None
    ) -> FareEstimate:
        """Price the request being built and store the estimates on it."""
        request = self.store.select("ride").ride_request
        if request.pickup_location is None or request.dropoff_location is None:
            raise ValueError("Pickup and dropoff locations are required")

        if option_id is None and request.selected_ride_option is not None:
            option_id = request.selected_ride_option.id
        estimate = self.pricing.estimate(
            request.pickup_location.coordinates,
            request.dropoff_location.coordinates,
            option_id=option_id,
            areas=self.store.select("map").high_demand_areas,
            promo_code=promo_code or request.promo_code,
        )
        self.store.dispatch(
            ride_slice.set_ride_estimates(
                {
                    "price": estimate.price,
                    "duration": estimate.duration_minutes,
                    "distance": estimate.distance_km,
                }
            )
        )
        return estimate

    # ── Socket listeners ──────────────────────────────────────────────

    def setup_ride_listeners(
        self, **callbacks: Callable[[Any], Any]
    ) -> Callable[[], None]:
        """Track ride events in the store; extra ``on_<event>`` callbacks are
        attached alongside.  Returns a function that removes everything."""
        registered: list[tuple[str, Callable]] = []
        for event in RIDE_EVENTS:
            handlers = [self._tracker(event)]
            extra = callbacks.get(f"on_{event}")
            if extra is not None:
                handlers.append(extra)
            for handler in handlers:
                self.socket.on(event, handler)
                registered.append((event, handler))

        def cleanup() -> None:
            for event, handler in registered:
                self.socket.off(event, handler)

        return cleanup

    def _tracker(self, event: str) -> Callable[[Any], None]:
        def track(data: Any) -> None:
            data = data if isinstance(data, dict) else {}
            current = self.store.select("ride").current_ride

            if event == "driver_assigned":
                if current.status == RideStatus.SEARCHING:
                    self.store.dispatch(
                        ride_slice.ride_request_success(
                            {
                                "ride_id": data.get("rideId") or current.id,
                                "driver": _driver_from_event(data.get("driver")),
                            }
                        )
                    )
            elif event in RIDE_EVENT_STATUS:
                if current.status is not None:
                    self.store.dispatch(
                        ride_slice.update_ride_status(
                            {"status": RIDE_EVENT_STATUS[event]}
                        )
                    )
            elif event == "driver_location_update":
                if data.get("driverId") and data.get("location"):
                    self.store.dispatch(
                        map_slice.update_driver_location(
                            {
                                "driver_id": data["driverId"],
                                "location": Coordinates.from_api(data["location"]),
                            }
                        )
                    )
            elif event == "ride_request_error":
                if current.status == RideStatus.SEARCHING:
                    self.store.dispatch(
                        ride_slice.ride_request_failure(
                            data.get("message") or NO_DRIVERS_AVAILABLE
                        )
                    )

        return track
