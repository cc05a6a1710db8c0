"""
Sample data shipped with the client.

Seeds the store's initial state (ride options, drivers on the map, demand
areas, history) and the mock backend.  Records are kept in API wire format;
the ``*_entities`` helpers return fresh domain objects on every call so no
two stores share mutable state.
"""

from __future__ import annotations

import copy

from ishare.domain.entities import (
    Car,
    Coordinates,
    Driver,
    DriverRideRequest,
    Earnings,
    HighDemandArea,
    Location,
    Notification,
    RideOption,
    RideRecord,
    ScheduledRide,
    User,
)
from ishare.domain.enums import NotificationType, ScheduledRideStatus

DEMO_PASSWORD = "password123"

CURRENT_USER = {
    "_id": "user1",
    "name": "John Doe",
    "email": "john.doe@example.com",
    "phone": "+1234567890",
    "profilePic": "https://randomuser.me/api/portraits/men/1.jpg",
    "role": "user",
    "homeAddress": {
        "_id": "home1",
        "name": "Home",
        "address": "123 Main St, Anytown, USA",
        "latitude": 37.7749,
        "longitude": -122.4194,
    },
    "workAddress": {
        "_id": "work1",
        "name": "Work",
        "address": "456 Market St, Anytown, USA",
        "latitude": 37.7900,
        "longitude": -122.4000,
    },
    "paymentMethods": [
        {"_id": "payment1", "type": "credit_card", "last4": "4242", "brand": "Visa", "isDefault": True},
        {"_id": "payment2", "type": "paypal", "email": "john.doe@example.com", "isDefault": False},
    ],
    "savedPlaces": [
        {"_id": "place1", "name": "Gym", "address": "789 Fitness Ave, Anytown, USA", "latitude": 37.7800, "longitude": -122.4100},
        {"_id": "place2", "name": "Grocery Store", "address": "101 Food St, Anytown, USA", "latitude": 37.7850, "longitude": -122.4150},
    ],
}

DRIVER_USER = {
    "_id": "driver1",
    "name": "David Smith",
    "email": "david.smith@example.com",
    "phone": "+1987654321",
    "profilePic": "",
    "role": "driver",
    "driverInfo": {
        "licenseNumber": "D1234567",
        "isActive": True,
        "isVerified": True,
        "vehicleDetails": {
            "make": "Toyota",
            "model": "Camry",
            "year": 2022,
            "color": "Silver",
            "licensePlate": "ABC123",
        },
    },
}

AVAILABLE_DRIVERS = [
    {
        "id": "driver1",
        "name": "David Smith",
        "rating": 4.8,
        "car": {"make": "Toyota", "model": "Camry", "year": 2022, "color": "Silver", "licensePlate": "ABC123"},
        "location": {"latitude": 37.7730, "longitude": -122.4190},
        "distance": "3 min away",
    },
    {
        "id": "driver2",
        "name": "Sarah Johnson",
        "rating": 4.9,
        "car": {"make": "Honda", "model": "Accord", "year": 2021, "color": "Black", "licensePlate": "XYZ789"},
        "location": {"latitude": 37.7800, "longitude": -122.4180},
        "distance": "5 min away",
    },
    {
        "id": "driver3",
        "name": "Michael Brown",
        "rating": 4.7,
        "car": {"make": "Tesla", "model": "Model 3", "year": 2023, "color": "White", "licensePlate": "EV1234"},
        "location": {"latitude": 37.7770, "longitude": -122.4150},
        "distance": "4 min away",
    },
]

RIDE_OPTIONS = [
    RideOption("rideshare", "IShare Ride", "Affordable rides for 1-4 people", "5 min", 15.99, "car", 4),
    RideOption("comfort", "IShare Comfort", "Newer cars with extra legroom", "6 min", 22.99, "car-side", 4),
    RideOption("xl", "IShare XL", "Affordable rides for up to 6 people", "8 min", 27.99, "car-estate", 6),
    RideOption("green", "IShare Green", "Electric and hybrid vehicles only", "7 min", 19.99, "leaf", 4),
]

RECENT_RIDES = [
    RideRecord("ride1", "2023-06-15", "14:30", "Home", "Work", 18.50, "David Smith"),
    RideRecord("ride2", "2023-06-10", "19:45", "Gym", "Home", 12.75, "Sarah Johnson"),
    RideRecord("ride3", "2023-06-05", "09:15", "Home", "Grocery Store", 9.99, "Michael Brown"),
]

SCHEDULED_RIDES = [
    ScheduledRide(
        "sched1", "2023-06-20", "08:00", "Home", "Work", 19.50,
        ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    ),
    ScheduledRide("sched2", "2023-06-25", "18:30", "Work", "Gym", 15.25, []),
]

HIGH_DEMAND_AREAS = [
    {"id": "area1", "name": "Downtown", "coordinates": {"latitude": 37.7800, "longitude": -122.4150}, "radius": 0.8, "demandLevel": 0.9},
    {"id": "area2", "name": "Financial District", "coordinates": {"latitude": 37.7950, "longitude": -122.4000}, "radius": 0.6, "demandLevel": 0.8},
    {"id": "area3", "name": "Marina District", "coordinates": {"latitude": 37.8030, "longitude": -122.4350}, "radius": 0.5, "demandLevel": 0.7},
]

NOTIFICATIONS = [
    {
        "id": "notif1",
        "title": "Your driver is arriving",
        "body": "David Smith is 2 minutes away in a Silver Toyota Camry (ABC123)",
        "time": "2 minutes ago",
        "read": False,
    },
    {
        "id": "notif2",
        "title": "Ride completed",
        "body": "Your ride with Sarah Johnson has been completed. Total: $15.99",
        "time": "2 days ago",
        "read": True,
    },
    {
        "id": "notif3",
        "title": "Weekend promotion",
        "body": "Enjoy 25% off rides this weekend with code WEEKEND25",
        "time": "1 week ago",
        "read": True,
    },
]

DRIVER_RIDE_REQUESTS = [
    DriverRideRequest(
        id="1",
        passenger_name="John Smith",
        passenger_rating=4.8,
        passenger_trips=42,
        pickup=Location("Pickup", "123 Main St", 23.8103, 90.4125),
        dropoff=Location("Dropoff", "456 Elm St", 23.8203, 90.4225),
        estimated_distance="3.2 km",
        estimated_duration="12 min",
        fare=15.50,
        type="Standard",
    ),
    DriverRideRequest(
        id="2",
        passenger_name="Emma Johnson",
        passenger_rating=4.9,
        passenger_trips=87,
        pickup=Location("Pickup", "789 Oak Ave", 23.8150, 90.4050),
        dropoff=Location("Dropoff", "101 Pine Blvd", 23.8243, 90.4198),
        estimated_distance="5.7 km",
        estimated_duration="18 min",
        fare=22.75,
        type="Premium",
    ),
    DriverRideRequest(
        id="3",
        passenger_name="Michael Wong",
        passenger_rating=4.7,
        passenger_trips=23,
        pickup=Location("Pickup", "555 Maple Dr", 23.8080, 90.4180),
        dropoff=Location("Dropoff", "222 Cedar Ln", 23.8190, 90.4295),
        estimated_distance="4.1 km",
        estimated_duration="15 min",
        fare=18.25,
        type="Standard",
    ),
]

DRIVER_EARNINGS = Earnings(
    today=85.50, week=435.75, month=1890.25, completed_trips=8, cancelled_trips=1, hours=6.5
)


# ── Entity builders ───────────────────────────────────────────────────


def notification_type_for(title: str) -> NotificationType:
    lowered = title.lower()
    if "ride" in lowered:
        return NotificationType.RIDE
    if "payment" in lowered:
        return NotificationType.PAYMENT
    if "promo" in lowered:
        return NotificationType.PROMO
    return NotificationType.SYSTEM


def current_user_entity() -> User:
    return User.from_api(copy.deepcopy(CURRENT_USER))


def driver_entities() -> list[Driver]:
    return [Driver.from_api(d) for d in AVAILABLE_DRIVERS]


def high_demand_area_entities() -> list[HighDemandArea]:
    return [HighDemandArea.from_api(a) for a in HIGH_DEMAND_AREAS]


def notification_entities() -> list[Notification]:
    return [
        Notification(
            id=n["id"],
            title=n["title"],
            body=n["body"],
            time=n["time"],
            read=n["read"],
            type=notification_type_for(n["title"]),
        )
        for n in NOTIFICATIONS
    ]


def ride_option_entities() -> list[RideOption]:
    return list(RIDE_OPTIONS)


def recent_ride_entities() -> list[RideRecord]:
    return copy.deepcopy(RECENT_RIDES)


def scheduled_ride_entities() -> list[ScheduledRide]:
    rides = copy.deepcopy(SCHEDULED_RIDES)
    for ride in rides:
        ride.status = ScheduledRideStatus.SCHEDULED
    return rides


def driver_ride_request_entities() -> list[DriverRideRequest]:
    return copy.deepcopy(DRIVER_RIDE_REQUESTS)


def driver_earnings() -> Earnings:
    return copy.deepcopy(DRIVER_EARNINGS)


def demo_location() -> Coordinates:
    return Coordinates(37.7749, -122.4194)
