"""
In-memory data set behind the mock backend.

Seeded from ``ishare.fixtures`` on construction; every record is stored in
API wire format (camelCase, ``_id`` keys) so routes can return them as-is.
Bearer and refresh tokens are opaque random strings mapped to a user id.
Refreshing rotates both tokens and revokes the old pair.
"""

from __future__ import annotations

import copy
import logging
import secrets
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from ishare import fixtures
from ishare.domain.distance import eta_minutes, haversine_km
from ishare.domain.entities import InvalidStateTransition
from ishare.domain.enums import RIDE_TRANSITIONS, RideStatus, ScheduledRideStatus

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex[:24]


class DuplicateEmail(Exception):
    pass


class MockDatabase:
    def __init__(self) -> None:
        self.users: dict[str, dict] = {}
        self.passwords: dict[str, str] = {}  # user id -> password
        self.access_tokens: dict[str, str] = {}  # token -> user id
        self.refresh_tokens: dict[str, str] = {}  # token -> user id
        self.rides: dict[str, dict] = {}
        self.notifications: dict[str, list[dict]] = defaultdict(list)
        self.messages: dict[str, dict] = {}
        self.ratings: list[dict] = []
        self.payments: dict[str, list[dict]] = defaultdict(list)
        self.device_tokens: dict[str, dict[str, str]] = defaultdict(dict)
        self.driver_locations: dict[str, dict] = {}
        self._seed()

    def _seed(self) -> None:
        for user in (fixtures.CURRENT_USER, fixtures.DRIVER_USER):
            record = copy.deepcopy(user)
            self.users[record["_id"]] = record
            self.passwords[record["_id"]] = fixtures.DEMO_PASSWORD

        rider_id = fixtures.CURRENT_USER["_id"]
        for item in fixtures.NOTIFICATIONS:
            self.notifications[rider_id].append(
                {
                    **item,
                    "_id": item["id"],
                    "type": fixtures.notification_type_for(item["title"]).value,
                    "relatedId": None,
                }
            )

        for driver in fixtures.AVAILABLE_DRIVERS:
            self.driver_locations[driver["id"]] = copy.deepcopy(driver)
        logger.info("Mock database seeded with %d users", len(self.users))

    # ── Users & sessions ──────────────────────────────────────────────

    def find_user_by_email(self, email: str) -> Optional[dict]:
        lowered = email.lower()
        return next(
            (u for u in self.users.values() if u["email"].lower() == lowered), None
        )

    def create_user(
        self, name: str, email: str, phone: str, password: str, role: str = "user"
    ) -> dict:
        if self.find_user_by_email(email):
            raise DuplicateEmail(email)
        user = {
            "_id": _new_id(),
            "name": name,
            "email": email,
            "phone": phone,
            "profilePic": "",
            "role": role,
            "paymentMethods": [],
            "savedPlaces": [],
            "createdAt": _now(),
        }
        self.users[user["_id"]] = user
        self.passwords[user["_id"]] = password
        return user

    def check_password(self, email: str, password: str) -> Optional[dict]:
        user = self.find_user_by_email(email)
        if user and secrets.compare_digest(self.passwords[user["_id"]], password):
            return user
        return None

    def update_user(self, user_id: str, changes: dict) -> dict:
        user = self.users[user_id]
        for key, value in changes.items():
            if key not in ("_id", "role", "email"):
                user[key] = value
        return user

    def issue_tokens(self, user_id: str) -> tuple[str, str]:
        access, refresh = secrets.token_urlsafe(24), secrets.token_urlsafe(32)
        self.access_tokens[access] = user_id
        self.refresh_tokens[refresh] = user_id
        return access, refresh

    def rotate_refresh_token(self, refresh_token: str) -> Optional[tuple[str, str]]:
        user_id = self.refresh_tokens.pop(refresh_token, None)
        if user_id is None:
            return None
        # drop every access token the old pair may still hold
        for token, owner in list(self.access_tokens.items()):
            if owner == user_id:
                del self.access_tokens[token]
        return self.issue_tokens(user_id)

    def revoke(self, access_token: str) -> None:
        user_id = self.access_tokens.pop(access_token, None)
        if user_id is None:
            return
        for token, owner in list(self.refresh_tokens.items()):
            if owner == user_id:
                del self.refresh_tokens[token]

    def user_for_token(self, access_token: str) -> Optional[dict]:
        user_id = self.access_tokens.get(access_token)
        return self.users.get(user_id) if user_id else None

    # ── Rides ─────────────────────────────────────────────────────────

    def create_ride(self, user_id: str, details: dict) -> dict:
        scheduled = bool(details.get("isScheduled"))
        ride = {
            **details,
            "_id": _new_id(),
            "user": user_id,
            "driver": None,
            "isScheduled": scheduled,
            "status": (
                ScheduledRideStatus.SCHEDULED.value
                if scheduled
                else RideStatus.SEARCHING.value
            ),
            "createdAt": _now(),
        }
        self.rides[ride["_id"]] = ride
        return ride

    def rides_for(
        self, user_id: str, status: Optional[str] = None, limit: int = 10, skip: int = 0
    ) -> list[dict]:
        rides = [
            r
            for r in self.rides.values()
            if user_id in (r["user"], r.get("driver"))
            and (status is None or r["status"] == status)
        ]
        rides.sort(key=lambda r: r["createdAt"], reverse=True)
        return rides[skip : skip + limit]

    def set_ride_status(self, ride_id: str, status: str) -> dict:
        """Move a ride along its lifecycle; raises ``InvalidStateTransition``."""
        ride = self.rides[ride_id]
        if ride["isScheduled"] and ride["status"] == ScheduledRideStatus.SCHEDULED.value:
            allowed = {
                ScheduledRideStatus.CANCELLED.value,
                ScheduledRideStatus.COMPLETED.value,
            }
            if status not in allowed:
                raise InvalidStateTransition(
                    f"Cannot transition scheduled ride to {status}"
                )
            ride["status"] = status
            return ride

        current = RideStatus(ride["status"])
        new = RideStatus.from_server(status)
        if new not in RIDE_TRANSITIONS[current]:
            raise InvalidStateTransition(
                f"Cannot transition from {current.value} to {new.value}"
            )
        ride["status"] = new.value
        ride["updatedAt"] = _now()
        return ride

    def assign_driver(self, ride_id: str, driver: dict) -> dict:
        ride = self.set_ride_status(ride_id, RideStatus.DRIVER_ASSIGNED.value)
        ride["driver"] = driver["id"]
        ride["driverDetails"] = driver
        return ride

    def nearby_drivers(
        self, latitude: float, longitude: float, radius_km: float = 5.0
    ) -> list[dict]:
        """Drivers within *radius_km*, closest first, with a live ETA label."""
        found = []
        for driver in self.driver_locations.values():
            loc = driver["location"]
            km = haversine_km(latitude, longitude, loc["latitude"], loc["longitude"])
            if km <= radius_km:
                found.append((km, {**driver, "distance": f"{eta_minutes(km)} min away"}))
        found.sort(key=lambda pair: pair[0])
        return [driver for _, driver in found]

    def move_driver(self, driver_id: str, location: dict) -> None:
        if driver_id in self.driver_locations:
            self.driver_locations[driver_id]["location"] = location

    # ── Notifications ─────────────────────────────────────────────────

    def add_notification(
        self,
        user_id: str,
        title: str,
        body: str,
        type_: str = "system",
        related_id: Optional[str] = None,
    ) -> dict:
        notification_id = _new_id()
        item = {
            "_id": notification_id,
            "id": notification_id,
            "title": title,
            "body": body,
            "time": _now(),
            "read": False,
            "type": type_,
            "relatedId": related_id,
        }
        self.notifications[user_id].insert(0, item)
        return item

    def find_notification(self, user_id: str, notification_id: str) -> Optional[dict]:
        return next(
            (n for n in self.notifications[user_id] if n["_id"] == notification_id),
            None,
        )

    # ── Messages ──────────────────────────────────────────────────────

    def add_message(
        self,
        sender_id: str,
        receiver_id: str,
        ride_id: str,
        content: str,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        message = {
            "_id": _new_id(),
            "sender": sender_id,
            "receiver": receiver_id,
            "ride": ride_id,
            "content": content,
            "attachments": attachments or [],
            "isRead": False,
            "createdAt": _now(),
        }
        self.messages[message["_id"]] = message
        return message

    def conversation(
        self, user_id: str, other_id: str, limit: int = 50, skip: int = 0
    ) -> list[dict]:
        pair = {user_id, other_id}
        found = [
            m for m in self.messages.values() if {m["sender"], m["receiver"]} == pair
        ]
        found.sort(key=lambda m: m["createdAt"])
        return found[skip : skip + limit]

    def ride_messages(self, ride_id: str, limit: int = 100, skip: int = 0) -> list[dict]:
        found = [m for m in self.messages.values() if m["ride"] == ride_id]
        found.sort(key=lambda m: m["createdAt"])
        return found[skip : skip + limit]

    def unread_messages(self, user_id: str) -> int:
        return sum(
            1
            for m in self.messages.values()
            if m["receiver"] == user_id and not m["isRead"]
        )

    # ── Ratings & payments ────────────────────────────────────────────

    def add_rating(self, rater_id: str, rating: dict) -> dict:
        record = {**rating, "_id": _new_id(), "rater": rater_id, "createdAt": _now()}
        self.ratings.append(record)
        return record

    def ratings_for(self, user_id: str) -> list[dict]:
        return [r for r in self.ratings if r.get("ratedUserId") == user_id]

    def add_payment(
        self, user_id: str, amount: float, currency: str, ride_id: Optional[str]
    ) -> dict:
        payment = {
            "_id": _new_id(),
            "amount": amount,
            "currency": currency,
            "ride": ride_id,
            "status": "requires_confirmation",
            "clientSecret": f"pi_{secrets.token_hex(12)}_secret",
            "createdAt": _now(),
        }
        self.payments[user_id].insert(0, payment)
        return payment
