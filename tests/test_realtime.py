"""Socket.IO gateway handlers, with the server's emit and room calls mocked."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from ishare import fixtures
from ishare.mockserver.db import MockDatabase
from ishare.mockserver.realtime import (
    DRIVERS_ROOM,
    NO_DRIVERS_AVAILABLE,
    RealtimeGateway,
    user_room,
)

USER_ID = fixtures.CURRENT_USER["_id"]
PICKUP = {"name": "Home", "latitude": 37.7749, "longitude": -122.4194}
DROPOFF = {"name": "Work", "latitude": 37.79, "longitude": -122.40}


def _make_gateway(step_seconds: float) -> RealtimeGateway:
    gateway = RealtimeGateway(MockDatabase(), step_seconds=step_seconds)
    gateway.sio.emit = AsyncMock()
    gateway.sio.enter_room = AsyncMock()
    gateway.sio.save_session = AsyncMock()
    gateway.sio.get_session = AsyncMock(return_value={"user_id": USER_ID})
    return gateway


def _events(gateway):
    return [c.args[0] for c in gateway.sio.emit.await_args_list]


@pytest.fixture
def gateway():
    return _make_gateway(0.01)


@pytest_asyncio.fixture
async def slow_gateway():
    gateway = _make_gateway(10)
    yield gateway
    await gateway.shutdown()


async def _request(gateway, **extra):
    await gateway.on_ride_request(
        "sid1", {"pickupLocation": PICKUP, "dropoffLocation": DROPOFF, **extra}
    )
    ride_id = gateway.sio.emit.await_args_list[0].args[1]["rideId"]
    return ride_id


class TestConnection:
    @pytest.mark.asyncio
    async def test_connect_joins_user_room(self, gateway):
        await gateway.on_connect("sid1", {"QUERY_STRING": "userId=user1"})
        gateway.sio.save_session.assert_awaited_once_with("sid1", {"user_id": "user1"})
        gateway.sio.enter_room.assert_awaited_once_with("sid1", user_room("user1"))

    @pytest.mark.asyncio
    async def test_anonymous_connect(self, gateway):
        await gateway.on_connect("sid1", {})
        gateway.sio.enter_room.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_driver_joins_drivers_room(self, gateway):
        await gateway.on_authenticate("sid2", {"userId": "driver1", "userType": "driver"})
        rooms = [c.args[1] for c in gateway.sio.enter_room.await_args_list]
        assert rooms == [user_room("driver1"), DRIVERS_ROOM]

    @pytest.mark.asyncio
    async def test_passenger_stays_out_of_drivers_room(self, gateway):
        await gateway.on_authenticate("sid1", {"userId": USER_ID, "userType": "passenger"})
        rooms = [c.args[1] for c in gateway.sio.enter_room.await_args_list]
        assert DRIVERS_ROOM not in rooms


class TestRideFlow:
    @pytest.mark.asyncio
    async def test_ride_walks_through_lifecycle(self, gateway):
        ride_id = await _request(gateway)
        task, _ = gateway._rides[ride_id]
        await task

        assert _events(gateway) == [
            "ride_request",
            "driver_assigned",
            "ride_status_update",
            "driver_arrived",
            "ride_status_update",
            "ride_started",
            "ride_status_update",
            "ride_completed",
            "ride_status_update",
        ]
        calls = gateway.sio.emit.await_args_list
        assert calls[0].kwargs["to"] == DRIVERS_ROOM
        assert calls[0].args[1]["passengerId"] == USER_ID
        assert all(c.kwargs["to"] == user_room(USER_ID) for c in calls[1:])
        assert calls[1].args[1]["driver"]["id"] == "driver1"

        ride = gateway.db.rides[ride_id]
        assert ride["status"] == "completed"
        assert ride["driver"] == "driver1"
        assert ride_id not in gateway._rides

    @pytest.mark.asyncio
    async def test_existing_ride_is_reused(self, gateway):
        ride = gateway.db.create_ride(
            USER_ID, {"pickupLocation": PICKUP, "dropoffLocation": DROPOFF}
        )
        assert await _request(gateway, rideId=ride["_id"]) == ride["_id"]
        assert len(gateway.db.rides) == 1
        await gateway.shutdown()

    @pytest.mark.asyncio
    async def test_no_driver_nearby(self, gateway):
        gateway.db.driver_locations.clear()
        ride_id = await _request(gateway)
        task, _ = gateway._rides[ride_id]
        await task

        last = gateway.sio.emit.await_args_list[-1]
        assert last.args == (
            "ride_request_error",
            {"rideId": ride_id, "message": NO_DRIVERS_AVAILABLE},
        )
        assert gateway.db.rides[ride_id]["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_rest_cancellation_ends_simulation(self, gateway):
        ride_id = await _request(gateway)
        gateway.db.set_ride_status(ride_id, "cancelled")
        task, _ = gateway._rides[ride_id]
        await task

        assert _events(gateway) == ["ride_request"]
        assert gateway.db.rides[ride_id]["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_cancel_over_socket(self, slow_gateway):
        ride_id = await _request(slow_gateway)
        await slow_gateway.on_cancel_ride("sid1", {"rideId": ride_id})

        assert ride_id not in slow_gateway._rides
        assert slow_gateway.db.rides[ride_id]["status"] == "cancelled"
        last = slow_gateway.sio.emit.await_args_list[-1]
        assert last.args[0] == "ride_cancelled"
        assert last.kwargs["to"] == user_room(USER_ID)

    @pytest.mark.asyncio
    async def test_cancel_unknown_ride(self, gateway):
        await gateway.on_cancel_ride("sid1", {"rideId": "missing"})
        gateway.sio.emit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_shutdown_stops_rides(self, slow_gateway):
        await _request(slow_gateway)
        await _request(slow_gateway)
        assert len(slow_gateway._rides) == 2
        await slow_gateway.shutdown()
        assert slow_gateway._rides == {}


class TestRelays:
    @pytest.mark.asyncio
    async def test_message_goes_to_receiver(self, gateway):
        await gateway.on_send_message(
            "sid1", {"receiverId": "driver1", "rideId": "r1", "content": "hello"}
        )
        call = gateway.sio.emit.await_args
        assert call.args[0] == "new_message"
        assert call.args[1]["sender"] == USER_ID
        assert call.kwargs["to"] == user_room("driver1")
        assert len(gateway.db.messages) == 1

    @pytest.mark.asyncio
    async def test_read_receipt_goes_to_sender(self, gateway):
        message = gateway.db.add_message("driver1", USER_ID, "r1", "outside")
        await gateway.on_mark_message_read("sid1", {"messageId": message["_id"]})

        assert message["isRead"]
        call = gateway.sio.emit.await_args
        assert call.args == ("message_read", {"messageId": message["_id"], "readBy": USER_ID})
        assert call.kwargs["to"] == user_room("driver1")

    @pytest.mark.asyncio
    async def test_driver_location_is_broadcast(self, gateway):
        location = {"latitude": 37.7, "longitude": -122.3}
        await gateway.on_update_location(
            "sid2", {"userId": "driver1", "location": location}
        )
        assert gateway.db.driver_locations["driver1"]["location"] == location
        gateway.sio.emit.assert_awaited_once_with(
            "driver_location_update",
            {"driverId": "driver1", "location": location},
            skip_sid="sid2",
        )

    @pytest.mark.asyncio
    async def test_passenger_location_is_not_broadcast(self, gateway):
        await gateway.on_update_location(
            "sid1", {"location": {"latitude": 1.0, "longitude": 2.0}}
        )
        gateway.sio.emit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rating_notifies_rated_user(self, gateway):
        await gateway.on_submit_rating(
            "sid1", {"rideId": "r1", "ratedUserId": "driver1", "score": 4}
        )
        gateway.sio.emit.assert_awaited_once_with(
            "rating_received", {"rideId": "r1", "score": 4}, to=user_room("driver1")
        )
        assert gateway.db.ratings == []
