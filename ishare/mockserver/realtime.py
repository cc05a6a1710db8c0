"""
Socket.IO gateway
=================

Serves the real-time half of the API contract on a ``socketio.AsyncServer``.

Rooms
-----
``user:<id>``  every socket of one user (joined on connect / authenticate)
``drivers``    sockets authenticated as ``driver``

A ``ride_request`` starts a background task that walks the ride through
``ride_simulator.lifecycle`` and emits ``driver_assigned``,
``driver_arrived``, ``ride_started`` and ``ride_completed`` to the
passenger, each followed by a ``ride_status_update``.  ``cancel_ride`` stops
the task and emits ``ride_cancelled``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import parse_qs

import socketio

from ishare.config import settings
from ishare.domain.entities import InvalidStateTransition
from ishare.domain.enums import RideStatus
from ishare.mockserver.db import MockDatabase
from ishare.workers.ride_simulator import STATUS_EVENTS, lifecycle

logger = logging.getLogger(__name__)

NO_DRIVERS_AVAILABLE = "No drivers available"
DRIVERS_ROOM = "drivers"


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


class RealtimeGateway:
    def __init__(self, db: MockDatabase, step_seconds: Optional[float] = None):
        self.db = db
        self.step_seconds = (
            settings.mock_simulation_step_seconds
            if step_seconds is None
            else step_seconds
        )
        self.sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
        self._rides: dict[str, tuple[asyncio.Task, asyncio.Event]] = {}

        for event, handler in {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            "authenticate": self.on_authenticate,
            "ride_request": self.on_ride_request,
            "cancel_ride": self.on_cancel_ride,
            "send_message": self.on_send_message,
            "mark_message_read": self.on_mark_message_read,
            "update_user_location": self.on_update_location,
            "update_driver_location": self.on_update_location,
            "submit_rating": self.on_submit_rating,
        }.items():
            self.sio.on(event, handler)

    # ── Connection ────────────────────────────────────────────────────

    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        query = parse_qs(environ.get("QUERY_STRING", ""))
        user_id = (query.get("userId") or [None])[0]
        await self.sio.save_session(sid, {"user_id": user_id})
        if user_id:
            await self.sio.enter_room(sid, user_room(user_id))
        logger.info("[Socket] %s connected (user=%s)", sid, user_id)

    async def on_disconnect(self, sid: str, *args: Any) -> None:
        logger.info("[Socket] %s disconnected", sid)

    async def on_authenticate(self, sid: str, data: dict) -> None:
        user_id, user_type = data.get("userId"), data.get("userType")
        if not user_id:
            return
        await self.sio.save_session(sid, {"user_id": user_id, "user_type": user_type})
        await self.sio.enter_room(sid, user_room(user_id))
        if user_type == "driver":
            await self.sio.enter_room(sid, DRIVERS_ROOM)
        logger.info("[Socket] %s authenticated as %s (%s)", sid, user_id, user_type)

    async def _user_id(self, sid: str, data: dict) -> Optional[str]:
        session = await self.sio.get_session(sid)
        return data.get("userId") or session.get("user_id")

    # ── Rides ─────────────────────────────────────────────────────────

    async def on_ride_request(self, sid: str, data: dict) -> None:
        user_id = await self._user_id(sid, data)
        if not user_id:
            return
        ride = self.db.rides.get(data.get("rideId") or "")
        if ride is None:
            ride = self.db.create_ride(
                user_id,
                {
                    key: data.get(key)
                    for key in ("pickupLocation", "dropoffLocation", "rideType")
                },
            )
        logger.info("[Socket] Ride request %s from %s", ride["_id"], user_id)

        await self.sio.emit(
            "ride_request",
            {**data, "rideId": ride["_id"], "passengerId": user_id},
            to=DRIVERS_ROOM,
        )
        self.start_ride(ride["_id"], user_id)

    def start_ride(self, ride_id: str, user_id: str) -> None:
        if ride_id in self._rides:
            return
        stop = asyncio.Event()
        task = asyncio.create_task(self._run_ride(ride_id, user_id, stop))
        self._rides[ride_id] = (task, stop)

    async def _run_ride(self, ride_id: str, user_id: str, stop: asyncio.Event) -> None:
        room = user_room(user_id)
        try:
            async for status in lifecycle(self.step_seconds, stop):
                payload = {"rideId": ride_id, "status": status.value}
                if status == RideStatus.DRIVER_ASSIGNED:
                    driver = self._pick_driver(ride_id)
                    if driver is None:
                        self.db.set_ride_status(ride_id, RideStatus.CANCELLED.value)
                        await self.sio.emit(
                            "ride_request_error",
                            {"rideId": ride_id, "message": NO_DRIVERS_AVAILABLE},
                            to=room,
                        )
                        return
                    self.db.assign_driver(ride_id, driver)
                    payload["driver"] = driver
                else:
                    self.db.set_ride_status(ride_id, status.value)

                await self.sio.emit(STATUS_EVENTS[status], payload, to=room)
                await self.sio.emit("ride_status_update", payload, to=room)
        except InvalidStateTransition as exc:
            logger.info("[Socket] Ride %s left the simulated flow: %s", ride_id, exc)
        except Exception:
            logger.exception("Unhandled error while simulating ride %s", ride_id)
        finally:
            self._rides.pop(ride_id, None)

    def _pick_driver(self, ride_id: str) -> Optional[dict]:
        pickup = self.db.rides[ride_id].get("pickupLocation") or {}
        if "latitude" in pickup and "longitude" in pickup:
            drivers = self.db.nearby_drivers(pickup["latitude"], pickup["longitude"])
        else:
            drivers = list(self.db.driver_locations.values())
        return drivers[0] if drivers else None

    async def stop_ride(self, ride_id: str) -> None:
        entry = self._rides.pop(ride_id, None)
        if entry is None:
            return
        task, stop = entry
        stop.set()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def on_cancel_ride(self, sid: str, data: dict) -> None:
        ride_id = data.get("rideId")
        if ride_id not in self.db.rides:
            return
        await self.stop_ride(ride_id)
        try:
            self.db.set_ride_status(ride_id, RideStatus.CANCELLED.value)
        except InvalidStateTransition:
            # already cancelled over REST
            pass
        ride = self.db.rides[ride_id]
        payload = {"rideId": ride_id, "status": ride["status"]}
        await self.sio.emit("ride_cancelled", payload, to=user_room(ride["user"]))
        if ride.get("driver"):
            await self.sio.emit("ride_cancelled", payload, to=user_room(ride["driver"]))

    async def shutdown(self) -> None:
        for ride_id in list(self._rides):
            await self.stop_ride(ride_id)

    # ── Messages, locations, ratings ──────────────────────────────────

    async def on_send_message(self, sid: str, data: dict) -> None:
        sender_id = data.get("senderId") or await self._user_id(sid, data)
        receiver_id = data.get("receiverId")
        if not sender_id or not receiver_id:
            return
        message = self.db.add_message(
            sender_id,
            receiver_id,
            data.get("rideId", ""),
            data.get("content", ""),
            data.get("attachments"),
        )
        await self.sio.emit("new_message", message, to=user_room(receiver_id))

    async def on_mark_message_read(self, sid: str, data: dict) -> None:
        message = self.db.messages.get(data.get("messageId") or "")
        if message is None:
            return
        message["isRead"] = True
        await self.sio.emit(
            "message_read",
            {"messageId": message["_id"], "readBy": message["receiver"]},
            to=user_room(message["sender"]),
        )

    async def on_update_location(self, sid: str, data: dict) -> None:
        user_id = await self._user_id(sid, data)
        location = data.get("location")
        if not user_id or not location or user_id not in self.db.driver_locations:
            return
        self.db.move_driver(user_id, location)
        await self.sio.emit(
            "driver_location_update",
            {"driverId": user_id, "location": location},
            skip_sid=sid,
        )

    async def on_submit_rating(self, sid: str, data: dict) -> None:
        # the REST call already stored the rating; just tell the rated user
        rated_id = data.get("ratedUserId")
        if rated_id:
            await self.sio.emit(
                "rating_received",
                {"rideId": data.get("rideId"), "score": data.get("score")},
                to=user_room(rated_id),
            )
