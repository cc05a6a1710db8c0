"""
Domain entities mirrored from the IShare API.

Patterns used
-------------
- **State Pattern** on ``CurrentRide``: enforces valid lifecycle transitions
  (searching -> driverAssigned -> driverArrived -> inProgress -> completed,
  cancelled from any unfinished state).
- ``from_api`` constructors accept the server's camelCase / ``_id`` payloads
  so the rest of the client only deals with these dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import (
    DRIVER_RIDE_TRANSITIONS,
    RIDE_TRANSITIONS,
    DriverRideStatus,
    NotificationType,
    RideStatus,
    ScheduledRideStatus,
    UserRole,
)


class InvalidStateTransition(Exception):
    """Raised when a ride status change violates the state machine."""


def _api_id(data: dict) -> str:
    return str(data.get("_id") or data.get("id") or "")


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    @classmethod
    def from_api(cls, data: dict) -> Coordinates:
        return cls(float(data["latitude"]), float(data["longitude"]))

    def to_api(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Region:
    latitude: float
    longitude: float
    latitude_delta: float = 0.0922
    longitude_delta: float = 0.0421


@dataclass
class Location:
    name: str
    address: str
    latitude: float
    longitude: float
    id: Optional[str] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    @classmethod
    def from_api(cls, data: dict) -> Location:
        return cls(
            name=data.get("name", ""),
            address=data.get("address", ""),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            id=_api_id(data) or None,
        )

    def to_api(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


# ── User ──────────────────────────────────────────────────────────────


@dataclass
class SavedPlace:
    id: str
    name: str
    address: str
    latitude: float
    longitude: float

    @classmethod
    def from_api(cls, data: dict) -> SavedPlace:
        return cls(
            id=_api_id(data),
            name=data.get("name", ""),
            address=data.get("address", ""),
            latitude=float(data.get("latitude", 0.0)),
            longitude=float(data.get("longitude", 0.0)),
        )


@dataclass
class PaymentMethod:
    id: str
    type: str
    is_default: bool = False
    last4: Optional[str] = None
    brand: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> PaymentMethod:
        return cls(
            id=_api_id(data),
            type=data.get("type", ""),
            is_default=bool(data.get("isDefault", False)),
            last4=data.get("last4"),
            brand=data.get("brand"),
            email=data.get("email"),
        )


@dataclass
class VehicleDetails:
    make: str = ""
    model: str = ""
    year: str = ""
    license_plate: str = ""
    color: str = ""
    type: str = ""


@dataclass
class RiderDocuments:
    driving_license: str = ""
    insurance_info: str = ""


@dataclass
class User:
    id: str
    name: str
    email: str
    phone: str = ""
    profile_pic: str = ""
    role: UserRole = UserRole.USER
    home_address: Optional[SavedPlace] = None
    work_address: Optional[SavedPlace] = None
    payment_methods: list[PaymentMethod] = field(default_factory=list)
    saved_places: list[SavedPlace] = field(default_factory=list)
    is_rider: bool = False
    vehicle_details: Optional[VehicleDetails] = None
    rider_documents: Optional[RiderDocuments] = None

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER

    @property
    def default_payment_method(self) -> Optional[PaymentMethod]:
        return next((m for m in self.payment_methods if m.is_default), None)

    @classmethod
    def from_api(cls, data: dict) -> User:
        home = data.get("homeAddress")
        work = data.get("workAddress")
        vehicle = (data.get("driverInfo") or {}).get("vehicleDetails")
        return cls(
            id=_api_id(data),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            profile_pic=data.get("profilePic") or "",
            role=UserRole(data.get("role", UserRole.USER.value)),
            home_address=SavedPlace.from_api(home) if home else None,
            work_address=SavedPlace.from_api(work) if work else None,
            payment_methods=[
                PaymentMethod.from_api(m) for m in data.get("paymentMethods") or []
            ],
            saved_places=[SavedPlace.from_api(p) for p in data.get("savedPlaces") or []],
            is_rider=bool(data.get("isRider", False)),
            vehicle_details=(
                VehicleDetails(
                    make=vehicle.get("make", ""),
                    model=vehicle.get("model", ""),
                    year=str(vehicle.get("year", "")),
                    license_plate=vehicle.get("licensePlate", ""),
                    color=vehicle.get("color", ""),
                )
                if vehicle
                else None
            ),
        )

    def to_api(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "profilePic": self.profile_pic,
            "role": self.role.value,
            "isRider": self.is_rider,
            "paymentMethods": [
                {
                    "_id": m.id,
                    "type": m.type,
                    "isDefault": m.is_default,
                    "last4": m.last4,
                    "brand": m.brand,
                    "email": m.email,
                }
                for m in self.payment_methods
            ],
            "savedPlaces": [
                {
                    "_id": p.id,
                    "name": p.name,
                    "address": p.address,
                    "latitude": p.latitude,
                    "longitude": p.longitude,
                }
                for p in self.saved_places
            ],
        }


# ── Drivers & ride options ────────────────────────────────────────────


@dataclass
class Car:
    make: str
    model: str
    year: int
    color: str
    license_plate: str


@dataclass
class Driver:
    id: str
    name: str
    rating: float
    car: Car
    location: Coordinates
    distance: str = ""

    @classmethod
    def from_api(cls, data: dict) -> Driver:
        car = data.get("car") or {}
        return cls(
            id=_api_id(data),
            name=data.get("name", ""),
            rating=float(data.get("rating", 0.0)),
            car=Car(
                make=car.get("make", ""),
                model=car.get("model", ""),
                year=int(car.get("year", 0)),
                color=car.get("color", ""),
                license_plate=car.get("licensePlate", ""),
            ),
            location=Coordinates.from_api(data["location"]),
            distance=data.get("distance", ""),
        )


@dataclass(frozen=True)
class RideOption:
    id: str
    name: str
    description: str
    estimated_time: str
    price: float
    image: str
    capacity: int


# ── Rides ─────────────────────────────────────────────────────────────


@dataclass
class RideRequest:
    pickup_location: Optional[Location] = None
    dropoff_location: Optional[Location] = None
    selected_ride_option: Optional[RideOption] = None
    scheduled_time: Optional[datetime] = None
    is_scheduled: bool = False
    is_recurring: bool = False
    recurring_days: list[str] = field(default_factory=list)
    estimated_price: Optional[float] = None
    estimated_duration: Optional[float] = None
    estimated_distance: Optional[float] = None
    promo_code: Optional[str] = None


@dataclass
class CurrentRide:
    id: Optional[str] = None
    status: Optional[RideStatus] = None
    driver: Optional[Any] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def transition_to(self, new_status: RideStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        if self.status is None:
            allowed = {RideStatus.SEARCHING}
        else:
            allowed = RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status} to {new_status}"
            )
        self.status = new_status


@dataclass
class ScheduledRide:
    id: str
    date: str
    time: str
    pickup: str
    destination: str
    price: float
    recurring_days: list[str] = field(default_factory=list)
    status: ScheduledRideStatus = ScheduledRideStatus.SCHEDULED


@dataclass
class RideRecord:
    """A finished ride as shown in the history list."""

    id: str
    date: str
    time: str
    pickup: str
    destination: str
    price: float
    driver_name: str
    status: str = "completed"


# ── Notifications & messages ──────────────────────────────────────────


@dataclass
class Notification:
    id: str
    title: str
    body: str
    time: str
    read: bool = False
    type: NotificationType = NotificationType.SYSTEM
    related_id: Optional[str] = None
    data: Optional[dict] = None

    @classmethod
    def from_api(cls, data: dict) -> Notification:
        return cls(
            id=_api_id(data),
            title=data.get("title", ""),
            body=data.get("body", ""),
            time=data.get("time", ""),
            read=bool(data.get("read", False)),
            type=NotificationType(data.get("type", NotificationType.SYSTEM.value)),
            related_id=data.get("relatedId"),
            data=data.get("data"),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "time": self.time,
            "read": self.read,
            "type": self.type.value,
            "relatedId": self.related_id,
            "data": self.data,
        }


@dataclass
class Message:
    id: str
    content: str
    sender: str
    receiver: str
    ride: str
    created_at: str
    is_read: bool = False
    attachments: list[dict] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> Message:
        sender = data.get("sender", "")
        receiver = data.get("receiver", "")
        return cls(
            id=_api_id(data),
            content=data.get("content", ""),
            sender=_api_id(sender) if isinstance(sender, dict) else str(sender),
            receiver=_api_id(receiver) if isinstance(receiver, dict) else str(receiver),
            ride=str(data.get("ride", "")),
            created_at=data.get("createdAt", ""),
            is_read=bool(data.get("isRead", False)),
            attachments=list(data.get("attachments") or []),
        )


# ── Map ───────────────────────────────────────────────────────────────


@dataclass
class HighDemandArea:
    id: str
    name: str
    coordinates: Coordinates
    radius: float  # km
    demand_level: float  # 0-1 scale

    @classmethod
    def from_api(cls, data: dict) -> HighDemandArea:
        return cls(
            id=str(data.get("id") or data.get("areaId")),
            name=data.get("name") or data.get("areaName", ""),
            coordinates=Coordinates.from_api(data["coordinates"]),
            radius=float(data.get("radius", 0.5)),
            demand_level=float(data.get("demandLevel", 0.0)),
        )


# ── Rider mode ────────────────────────────────────────────────────────


@dataclass
class DriverRideRequest:
    """A passenger's request as offered to a driver."""

    id: str
    passenger_name: str
    pickup: Location
    dropoff: Location
    fare: float
    passenger_rating: float = 0.0
    passenger_trips: int = 0
    estimated_distance: str = ""
    estimated_duration: str = ""
    type: str = "Standard"


@dataclass
class ActiveDriverRide:
    request: DriverRideRequest
    status: DriverRideStatus = DriverRideStatus.ACCEPTED
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None

    def transition_to(self, new_status: DriverRideStatus) -> None:
        allowed = DRIVER_RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status} to {new_status}"
            )
        self.status = new_status

    @property
    def duration_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at or datetime.now()
        return int((end - self.started_at).total_seconds())


@dataclass
class Earnings:
    today: float = 0.0
    week: float = 0.0
    month: float = 0.0
    completed_trips: int = 0
    cancelled_trips: int = 0
    hours: float = 0.0
