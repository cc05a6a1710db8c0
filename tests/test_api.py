"""
Integration tests for the mock REST API.

The app runs in-process behind ``httpx.ASGITransport`` with a fresh seeded
``MockDatabase`` per test.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient

from ishare import fixtures

RIDE_BODY = {
    "pickupLocation": {"name": "Home", "latitude": 37.7749, "longitude": -122.4194},
    "dropoffLocation": {"name": "Work", "latitude": 37.79, "longitude": -122.40},
    "rideType": "standard",
    "estimatedPrice": 12.5,
}


@pytest_asyncio.fixture
async def ride(client: AsyncClient, auth_headers) -> dict:
    resp = await client.post("/api/rides", json=RIDE_BODY, headers=auth_headers)
    return resp.json()


async def _driver_headers(client: AsyncClient) -> dict:
    resp = await client.post(
        "/api/auth/login",
        json={"email": fixtures.DRIVER_USER["email"], "password": fixtures.DEMO_PASSWORD},
    )
    return {"Authorization": f"Bearer {resp.json()['token']}"}


# ── Health / admin ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_active_rides(client: AsyncClient, auth_headers, ride):
    resp = await client.get("/api/admin/active-rides")
    assert [r["_id"] for r in resp.json()] == [ride["_id"]]

    await client.put(
        f"/api/rides/{ride['_id']}/status", json={"status": "cancelled"}, headers=auth_headers
    )
    resp = await client.get("/api/admin/active-rides")
    assert resp.json() == []


@pytest.mark.asyncio
async def test_broadcast(app, client: AsyncClient):
    app.state.gateway.sio.emit = AsyncMock()
    payload = {"areaId": "area1", "areaName": "Downtown", "demandLevel": 0.9}

    resp = await client.post("/api/admin/broadcast/high_demand_update", json=payload)

    assert resp.status_code == 200
    app.state.gateway.sio.emit.assert_awaited_once_with("high_demand_update", payload)


@pytest.mark.asyncio
async def test_broadcast_unknown_event(client: AsyncClient):
    resp = await client.post("/api/admin/broadcast/self_destruct", json={})
    assert resp.status_code == 404


# ── Auth ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_login(client: AsyncClient):
    resp = await client.post(
        "/api/auth/login",
        json={"email": fixtures.CURRENT_USER["email"], "password": fixtures.DEMO_PASSWORD},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["_id"] == fixtures.CURRENT_USER["_id"]
    assert data["token"] and data["refreshToken"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient):
    resp = await client.post(
        "/api/auth/login",
        json={"email": fixtures.CURRENT_USER["email"], "password": "nope"},
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_register_then_me(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={
            "name": "New Rider",
            "email": "new.rider@example.com",
            "phone": "+15550001",
            "password": "hunter22",
        },
    )
    assert resp.status_code == 201
    data = resp.json()
    assert "password" not in data["user"]
    assert data["user"]["role"] == "user"

    me = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"}
    )
    assert me.json()["email"] == "new.rider@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={
            "name": "Copy",
            "email": fixtures.CURRENT_USER["email"].upper(),
            "password": "hunter22",
        },
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_validation(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "X", "email": "not-an-email", "password": "123"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_missing_and_bad_token(client: AsyncClient):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"

    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_refresh_rotates_pair(client: AsyncClient):
    login = (
        await client.post(
            "/api/auth/login",
            json={"email": fixtures.CURRENT_USER["email"], "password": fixtures.DEMO_PASSWORD},
        )
    ).json()

    resp = await client.post(
        "/api/auth/refresh-token", json={"refreshToken": login["refreshToken"]}
    )
    assert resp.status_code == 200
    pair = resp.json()
    assert pair["accessToken"] != login["token"]

    old = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {login['token']}"}
    )
    assert old.status_code == 401

    reused = await client.post(
        "/api/auth/refresh-token", json={"refreshToken": login["refreshToken"]}
    )
    assert reused.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, auth_headers):
    resp = await client.post("/api/auth/logout", headers=auth_headers)
    assert resp.status_code == 200
    resp = await client.get("/api/auth/me", headers=auth_headers)
    assert resp.status_code == 401


# ── Users ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_update_profile_keeps_identity(client: AsyncClient, auth_headers):
    resp = await client.put(
        "/api/users/profile",
        json={"name": "John D.", "email": "hijack@example.com", "role": "driver"},
        headers=auth_headers,
    )
    data = resp.json()
    assert data["name"] == "John D."
    assert data["email"] == fixtures.CURRENT_USER["email"]
    assert data["role"] == fixtures.CURRENT_USER["role"]


@pytest.mark.asyncio
async def test_public_profile(client: AsyncClient, auth_headers):
    resp = await client.get("/api/users/driver1", headers=auth_headers)
    assert resp.status_code == 200
    assert "email" not in resp.json()
    assert resp.json()["driverInfo"]["licenseNumber"] == "D1234567"

    resp = await client.get("/api/users/ghost", headers=auth_headers)
    assert resp.status_code == 404


# ── Rides ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_ride(ride):
    assert ride["status"] == "searching"
    assert ride["user"] == fixtures.CURRENT_USER["_id"]
    assert ride["driver"] is None


@pytest.mark.asyncio
async def test_create_ride_validation(client: AsyncClient, auth_headers):
    body = {**RIDE_BODY, "pickupLocation": {"latitude": 123.0, "longitude": 0.0}}
    resp = await client.post("/api/rides", json=body, headers=auth_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_and_get_rides(client: AsyncClient, auth_headers, ride):
    resp = await client.get("/api/rides", headers=auth_headers)
    assert [r["_id"] for r in resp.json()] == [ride["_id"]]

    resp = await client.get(f"/api/rides/{ride['_id']}", headers=auth_headers)
    assert resp.json()["_id"] == ride["_id"]

    resp = await client.get("/api/rides", params={"status": "completed"}, headers=auth_headers)
    assert resp.json() == []


@pytest.mark.asyncio
async def test_other_users_ride_is_hidden(client: AsyncClient, ride):
    resp = await client.get(f"/api/rides/{ride['_id']}", headers=await _driver_headers(client))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_status_walk(client: AsyncClient, auth_headers, ride):
    url = f"/api/rides/{ride['_id']}/status"
    for sent, stored in (
        ("driverAccepted", "driverAssigned"),
        ("driverArrived", "driverArrived"),
        ("inProgress", "inProgress"),
        ("completed", "completed"),
    ):
        resp = await client.put(url, json={"status": sent}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == stored


@pytest.mark.asyncio
async def test_illegal_transition(client: AsyncClient, auth_headers, ride):
    url = f"/api/rides/{ride['_id']}/status"
    resp = await client.put(url, json={"status": "completed"}, headers=auth_headers)
    assert resp.status_code == 409

    await client.put(url, json={"status": "cancelled"}, headers=auth_headers)
    resp = await client.put(url, json={"status": "cancelled"}, headers=auth_headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_unknown_status(client: AsyncClient, auth_headers, ride):
    resp = await client.put(
        f"/api/rides/{ride['_id']}/status", json={"status": "flying"}, headers=auth_headers
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_schedule_ride(client: AsyncClient, auth_headers):
    resp = await client.post("/api/rides/schedule", json=RIDE_BODY, headers=auth_headers)
    assert resp.status_code == 422

    body = {**RIDE_BODY, "scheduledTime": "2030-05-01T07:30:00Z", "recurringDays": ["Mon"]}
    resp = await client.post("/api/rides/schedule", json=body, headers=auth_headers)
    assert resp.status_code == 201
    scheduled = resp.json()
    assert scheduled["status"] == "scheduled"
    assert scheduled["isScheduled"] is True

    url = f"/api/rides/{scheduled['_id']}/status"
    resp = await client.put(url, json={"status": "inProgress"}, headers=auth_headers)
    assert resp.status_code == 409
    resp = await client.put(url, json={"status": "cancelled"}, headers=auth_headers)
    assert resp.json()["status"] == "cancelled"


# ── Drivers ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_nearby_drivers(client: AsyncClient, auth_headers):
    resp = await client.get(
        "/api/drivers/nearby",
        params={"latitude": 37.7749, "longitude": -122.4194},
        headers=auth_headers,
    )
    drivers = resp.json()["drivers"]
    assert drivers
    assert all(d["distance"].endswith("min away") for d in drivers)

    resp = await client.get(
        "/api/drivers/nearby",
        params={"latitude": 0.0, "longitude": 0.0, "radius": 1},
        headers=auth_headers,
    )
    assert resp.json()["drivers"] == []


# ── Notifications ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_notification_inbox(client: AsyncClient, auth_headers):
    resp = await client.get("/api/notifications", headers=auth_headers)
    items = resp.json()["notifications"]
    assert len(items) == len(fixtures.NOTIFICATIONS)

    unread = await client.get("/api/notifications/unread/count", headers=auth_headers)
    assert unread.json()["count"] == sum(1 for n in items if not n["read"])

    await client.put("/api/notifications/read-all", headers=auth_headers)
    unread = await client.get("/api/notifications/unread/count", headers=auth_headers)
    assert unread.json()["count"] == 0


@pytest.mark.asyncio
async def test_notification_delete(client: AsyncClient, auth_headers):
    items = (await client.get("/api/notifications", headers=auth_headers)).json()[
        "notifications"
    ]
    target = items[0]["_id"]

    resp = await client.delete(f"/api/notifications/{target}", headers=auth_headers)
    assert resp.status_code == 200
    resp = await client.delete(f"/api/notifications/{target}", headers=auth_headers)
    assert resp.status_code == 404

    await client.delete("/api/notifications", headers=auth_headers)
    resp = await client.get("/api/notifications", headers=auth_headers)
    assert resp.json()["notifications"] == []


@pytest.mark.asyncio
async def test_device_token_platform(client: AsyncClient, auth_headers):
    resp = await client.post(
        "/api/notifications/device-token",
        json={"token": "abc", "platform": "android"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    resp = await client.post(
        "/api/notifications/device-token",
        json={"token": "abc", "platform": "symbian"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


# ── Messages ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_message_round(app, client: AsyncClient, auth_headers, ride):
    app.state.gateway.sio.emit = AsyncMock()
    resp = await client.post(
        "/api/messages",
        json={"receiverId": "driver1", "rideId": ride["_id"], "content": "Blue jacket"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    message = resp.json()
    assert app.state.gateway.sio.emit.await_args.kwargs["to"] == "user:driver1"

    driver = await _driver_headers(client)
    unread = await client.get("/api/messages/unread", headers=driver)
    assert unread.json()["count"] == 1

    # only the receiver can mark it read
    resp = await client.put(f"/api/messages/{message['_id']}/read", headers=auth_headers)
    assert resp.status_code == 404
    resp = await client.put(f"/api/messages/{message['_id']}/read", headers=driver)
    assert resp.json()["isRead"] is True

    thread = await client.get(
        f"/api/messages/conversation/{fixtures.CURRENT_USER['_id']}", headers=driver
    )
    assert [m["_id"] for m in thread.json()] == [message["_id"]]
    by_ride = await client.get(f"/api/messages/ride/{ride['_id']}", headers=driver)
    assert len(by_ride.json()) == 1


@pytest.mark.asyncio
async def test_message_to_unknown_user(client: AsyncClient, auth_headers):
    resp = await client.post(
        "/api/messages",
        json={"receiverId": "ghost", "rideId": "r1", "content": "hi"},
        headers=auth_headers,
    )
    assert resp.status_code == 404


# ── Payments & ratings ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_payment_intent_and_history(client: AsyncClient, auth_headers, ride):
    resp = await client.post(
        "/api/payments/create-intent",
        json={"amount": 12.5, "rideId": ride["_id"]},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["clientSecret"].startswith("pi_")

    history = await client.get("/api/payments/history", headers=auth_headers)
    assert [p["ride"] for p in history.json()] == [ride["_id"]]

    methods = await client.get("/api/payments/methods", headers=auth_headers)
    assert len(methods.json()) == len(fixtures.CURRENT_USER["paymentMethods"])


@pytest.mark.asyncio
async def test_ratings(client: AsyncClient, auth_headers, ride):
    for score in (5, 4):
        resp = await client.post(
            "/api/ratings",
            json={"rideId": ride["_id"], "ratedUserId": "driver1", "score": score},
            headers=auth_headers,
        )
        assert resp.status_code == 201

    summary = (await client.get("/api/ratings/user/driver1", headers=auth_headers)).json()
    assert summary["count"] == 2
    assert summary["average"] == 4.5


@pytest.mark.asyncio
async def test_rating_validation(client: AsyncClient, auth_headers, ride):
    resp = await client.post(
        "/api/ratings",
        json={"rideId": ride["_id"], "ratedUserId": "driver1", "score": 6},
        headers=auth_headers,
    )
    assert resp.status_code == 422
    resp = await client.post(
        "/api/ratings",
        json={"rideId": "nope", "ratedUserId": "driver1", "score": 3},
        headers=auth_headers,
    )
    assert resp.status_code == 404
