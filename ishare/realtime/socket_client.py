"""
Real-time event client
======================

Wraps a ``socketio.AsyncClient``.  Server events are turned into store
actions (notifications, map updates, driver-side requests); services can
attach extra per-event callbacks with ``on`` / ``off``.

Emitters return ``False`` without sending when there is no live connection.
"""

from __future__ import annotations

import inspect
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from urllib.parse import urlencode

import socketio

from ishare.config import settings
from ishare.domain.entities import (
    Coordinates,
    DriverRideRequest,
    HighDemandArea,
    Location,
    Notification,
)
from ishare.domain.enums import NotificationType
from ishare.store import Store
from ishare.store.driver import receive_ride_request
from ishare.store.map import update_driver_location, update_high_demand_areas
from ishare.store.notification import (
    add_notification,
    receive_driver_update,
    receive_high_demand_update,
    receive_promo_notification,
    set_socket_connected,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

PASSENGER = "passenger"
DRIVER = "driver"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _location(data: Any, fallback_name: str) -> Location:
    if isinstance(data, dict) and "latitude" in data:
        return Location(
            name=data.get("name") or fallback_name,
            address=data.get("address", ""),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
        )
    return Location(
        name=str(data or fallback_name),
        address=str(data or ""),
        latitude=0.0,
        longitude=0.0,
    )


def _place_name(data: Any) -> str:
    if isinstance(data, dict):
        return data.get("address") or data.get("name") or ""
    return str(data)


def driver_request_from_event(data: dict) -> DriverRideRequest:
    """Build the driver-side view of a ``ride_request`` event."""
    pickup = _location(data.get("pickupLocation"), "Pickup")
    dropoff = _location(
        data.get("dropoffLocation") or data.get("destination"), "Dropoff"
    )
    return DriverRideRequest(
        id=str(data.get("rideId") or data.get("id") or uuid.uuid4().hex),
        passenger_name=data.get("passengerName", "Passenger"),
        pickup=pickup,
        dropoff=dropoff,
        fare=float(data.get("estimatedPrice") or data.get("fare") or 0.0),
        passenger_rating=float(data.get("passengerRating", 0.0)),
        passenger_trips=int(data.get("passengerTrips", 0)),
        estimated_distance=str(data.get("estimatedDistance", "")),
        estimated_duration=str(data.get("estimatedDuration", "")),
        type=str(data.get("rideType", "Standard")).capitalize(),
    )


class SocketService:
    def __init__(
        self,
        store: Store,
        url: Optional[str] = None,
        client_factory: Optional[Callable[[], socketio.AsyncClient]] = None,
    ):
        self.store = store
        self.url = url or settings.resolved_socket_url
        self._client_factory = client_factory or self._default_client
        self.sio: Optional[socketio.AsyncClient] = None
        self.user_id: Optional[str] = None
        self.user_type: Optional[str] = None
        self._listeners: dict[str, list[Handler]] = defaultdict(list)
        self._bound: set[str] = set()

    @staticmethod
    def _default_client() -> socketio.AsyncClient:
        return socketio.AsyncClient(
            reconnection=settings.socket_reconnection,
            reconnection_attempts=settings.socket_reconnection_attempts,
            reconnection_delay=settings.socket_reconnection_delay_seconds,
        )

    # ── Connection lifecycle ──────────────────────────────────────────

    async def initialize(self, user_id: str) -> None:
        self.user_id = user_id
        await self.disconnect()

        logger.info("[Socket] Initializing socket connection to %s", self.url)
        logger.info("[Socket] Connecting as user %s", user_id)
        self.sio = self._client_factory()
        self._bound = set()
        self._setup_listeners()
        try:
            await self.sio.connect(
                f"{self.url}?{urlencode({'userId': user_id})}",
                transports=settings.socket_transports,
                wait_timeout=settings.socket_timeout_seconds,
            )
        except socketio.exceptions.ConnectionError as exc:
            logger.error("[Socket] Error initializing socket: %s", exc)

    async def authenticate_user(self, user_id: str, user_type: str) -> None:
        logger.info("[Socket] Authenticating user %s as %s", user_id, user_type)
        self.user_id = user_id
        self.user_type = user_type
        if self.sio is None:
            logger.info("[Socket] Socket not connected, initializing first")
            await self.initialize(user_id)
        await self._emit("authenticate", {"userId": user_id, "userType": user_type})

    def is_connected(self) -> bool:
        return bool(self.sio is not None and self.sio.connected)

    async def disconnect(self) -> None:
        if self.sio is None:
            return
        logger.info("[Socket] Disconnecting")
        client, self.sio = self.sio, None
        await client.disconnect()
        self.store.dispatch(set_socket_connected(False))

    # ── Service-level listeners ───────────────────────────────────────

    def on(self, event: str, handler: Handler) -> None:
        self._listeners[event].append(handler)
        self._bind(event)

    def off(self, event: str, handler: Optional[Handler] = None) -> None:
        if handler is None:
            self._listeners.pop(event, None)
        elif handler in self._listeners.get(event, []):
            self._listeners[event].remove(handler)

    async def _fan_out(self, event: str, *args: Any) -> None:
        for handler in list(self._listeners.get(event, [])):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("[Socket] Listener for %s failed", event)

    def _bind(self, event: str) -> None:
        if self.sio is None or event in self._bound:
            return
        builtin = self._builtin_handlers().get(event)

        async def handler(*args: Any) -> None:
            if builtin is not None:
                try:
                    result = builtin(*args)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("[Socket] Handler for %s failed", event)
            await self._fan_out(event, *args)

        self.sio.on(event, handler)
        self._bound.add(event)

    def _setup_listeners(self) -> None:
        for event in set(self._builtin_handlers()) | set(self._listeners):
            self._bind(event)

    def _builtin_handlers(self) -> dict[str, Handler]:
        return {
            "connect": self.handle_connect,
            "disconnect": self.handle_disconnect,
            "connect_error": self.handle_connect_error,
            "error": self.handle_error,
            "driver_update": self.handle_driver_update,
            "high_demand_update": self.handle_high_demand_update,
            "promo_notification": self.handle_promo_notification,
            "notification": self.handle_notification,
            "ride_request": self.handle_ride_request,
            "ride_status_update": self.handle_ride_status_update,
            "payment_processed": self.handle_payment_processed,
        }

    # ── Built-in handlers ─────────────────────────────────────────────

    async def handle_connect(self) -> None:
        logger.info("[Socket] Connected")
        self.store.dispatch(set_socket_connected(True))
        if self.user_id and self.user_type:
            await self._emit(
                "authenticate", {"userId": self.user_id, "userType": self.user_type}
            )

    def handle_disconnect(self, *args: Any) -> None:
        logger.info("[Socket] Disconnected")
        self.store.dispatch(set_socket_connected(False))

    def handle_connect_error(self, data: Any = None) -> None:
        logger.error("[Socket] Connection error: %s", data)

    def handle_error(self, data: Any = None) -> None:
        logger.error("[Socket] Error: %s", data)

    def handle_driver_update(self, data: dict) -> None:
        logger.debug("[Socket] Driver update received: %s", data)
        self.store.dispatch(receive_driver_update(data))
        if data.get("location"):
            self.store.dispatch(
                update_driver_location(
                    {
                        "driver_id": data.get("driverId"),
                        "location": Coordinates.from_api(data["location"]),
                    }
                )
            )

    def handle_high_demand_update(self, data: dict) -> None:
        logger.debug("[Socket] High demand update received: %s", data)
        self.store.dispatch(receive_high_demand_update(data))
        if data.get("coordinates"):
            self.store.dispatch(update_high_demand_areas([HighDemandArea.from_api(data)]))

    def handle_promo_notification(self, data: dict) -> None:
        logger.debug("[Socket] Promo notification received: %s", data)
        self.store.dispatch(receive_promo_notification(data))

    def handle_notification(self, data: dict) -> None:
        logger.debug("[Socket] Notification received: %s", data)
        payload = {"id": f"notification-{uuid.uuid4().hex[:12]}", "time": _now(), **data}
        self.store.dispatch(add_notification(Notification.from_api(payload)))

    def handle_ride_request(self, data: dict) -> None:
        logger.debug("[Socket] Ride request notification received: %s", data)
        self._notify(
            NotificationType.RIDE,
            "ride-request",
            "New Ride Request",
            f"New ride request from {_place_name(data.get('pickupLocation'))} "
            f"to {_place_name(data.get('destination') or data.get('dropoffLocation'))}",
            data,
            related_id=data.get("rideId"),
        )
        if self.user_type == DRIVER:
            self.store.dispatch(receive_ride_request(driver_request_from_event(data)))

    def handle_ride_status_update(self, data: dict) -> None:
        logger.debug("[Socket] Ride status update notification received: %s", data)
        self._notify(
            NotificationType.RIDE,
            "ride-status",
            "Ride Status Update",
            f"Your ride status has changed to: {data.get('status')}",
            data,
            related_id=data.get("rideId"),
        )

    def handle_payment_processed(self, data: dict) -> None:
        logger.debug("[Socket] Payment processed notification received: %s", data)
        self._notify(
            NotificationType.PAYMENT,
            "payment",
            "Payment Processed",
            f"Your payment of ${data.get('amount')} has been processed successfully.",
            data,
            related_id=data.get("paymentId"),
        )

    def _notify(
        self,
        type_: NotificationType,
        prefix: str,
        title: str,
        body: str,
        data: Any = None,
        related_id: Optional[str] = None,
    ) -> None:
        self.store.dispatch(
            add_notification(
                Notification(
                    id=f"{prefix}-{uuid.uuid4().hex[:12]}",
                    title=title,
                    body=body,
                    time=_now(),
                    type=type_,
                    related_id=related_id,
                    data=data,
                )
            )
        )

    # ── Emitters ──────────────────────────────────────────────────────

    async def _emit(self, event: str, data: dict) -> bool:
        if not self.is_connected():
            logger.debug("[Socket] Not connected, dropping %s", event)
            return False
        await self.sio.emit(event, data)
        return True

    async def send_ride_request(self, details: dict) -> bool:
        return await self._emit("ride_request", {"userId": self.user_id, **details})

    async def cancel_ride(self, ride_id: str) -> bool:
        return await self._emit("cancel_ride", {"userId": self.user_id, "rideId": ride_id})

    async def schedule_ride(self, details: dict) -> bool:
        return await self._emit("schedule_ride", {"userId": self.user_id, **details})

    async def update_user_location(self, location: Coordinates) -> bool:
        return await self._emit(
            "update_user_location", {"userId": self.user_id, "location": location.to_api()}
        )

    async def update_driver_location(self, location: Coordinates) -> bool:
        return await self._emit(
            "update_driver_location",
            {"userId": self.user_id, "location": location.to_api()},
        )

    async def accept_ride(self, ride_id: str) -> bool:
        return await self._emit("accept_ride", {"userId": self.user_id, "rideId": ride_id})

    async def send_message(self, message: dict) -> bool:
        return await self._emit("send_message", {"userId": self.user_id, **message})

    async def mark_message_as_read(self, message_id: str) -> bool:
        return await self._emit(
            "mark_message_read", {"userId": self.user_id, "messageId": message_id}
        )

    async def submit_rating(self, rating: dict) -> bool:
        return await self._emit("submit_rating", {"userId": self.user_id, **rating})

    # ── Offline simulation ────────────────────────────────────────────

    def simulate_driver_update(self, data: dict) -> None:
        self.handle_driver_update(data)

    def simulate_high_demand_update(self, data: dict) -> None:
        self.handle_high_demand_update(data)

    def simulate_promo_notification(self, data: dict) -> None:
        self.handle_promo_notification(data)

    def simulate_notification(
        self, type_: str, title: str, body: str, data: Any = None
    ) -> None:
        self._notify(NotificationType(type_), "simulated", title, body, data)
