"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    SEARCHING = "searching"
    DRIVER_ASSIGNED = "driverAssigned"
    DRIVER_ARRIVED = "driverArrived"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_server(cls, value: str) -> "RideStatus":
        """Map the server's wider status vocabulary onto the client lifecycle."""
        return _SERVER_ALIASES.get(value) or cls(value)


_SERVER_ALIASES: dict[str, RideStatus] = {
    "driverAccepted": RideStatus.DRIVER_ASSIGNED,
    "noDriverFound": RideStatus.CANCELLED,
}


# State machine: maps current status -> set of valid next statuses.
# Strictly forward; cancellation is allowed until the ride has finished.
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.SEARCHING: {RideStatus.DRIVER_ASSIGNED, RideStatus.CANCELLED},
    RideStatus.DRIVER_ASSIGNED: {RideStatus.DRIVER_ARRIVED, RideStatus.CANCELLED},
    RideStatus.DRIVER_ARRIVED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


class DriverRideStatus(str, enum.Enum):
    """Lifecycle of a ride from the driver's seat (rider mode)."""

    ACCEPTED = "ACCEPTED"
    ARRIVING = "ARRIVING"
    ARRIVED = "ARRIVED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


DRIVER_RIDE_TRANSITIONS: dict[DriverRideStatus, set[DriverRideStatus]] = {
    DriverRideStatus.ACCEPTED: {
        DriverRideStatus.ARRIVING,
        DriverRideStatus.ARRIVED,
        DriverRideStatus.CANCELLED,
    },
    DriverRideStatus.ARRIVING: {DriverRideStatus.ARRIVED, DriverRideStatus.CANCELLED},
    DriverRideStatus.ARRIVED: {DriverRideStatus.IN_PROGRESS, DriverRideStatus.CANCELLED},
    DriverRideStatus.IN_PROGRESS: {DriverRideStatus.COMPLETED, DriverRideStatus.CANCELLED},
    DriverRideStatus.COMPLETED: set(),
    DriverRideStatus.CANCELLED: set(),
}


class ScheduledRideStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationType(str, enum.Enum):
    RIDE = "ride"
    PAYMENT = "payment"
    PROMO = "promo"
    SYSTEM = "system"
    DRIVER_UPDATE = "driver_update"


class AppMode(str, enum.Enum):
    PASSENGER = "passenger"
    RIDER = "rider"


class UserRole(str, enum.Enum):
    USER = "user"
    DRIVER = "driver"
    ADMIN = "admin"


class DemandBand(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
