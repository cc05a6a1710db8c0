"""Services composing the HTTP client, the socket client and the store."""

from ishare.services.auth import AuthService
from ishare.services.maps import MapsService
from ishare.services.messages import MessageService
from ishare.services.notifications import Destination, NotificationService
from ishare.services.rides import RideService

__all__ = [
    "AuthService",
    "Destination",
    "MapsService",
    "MessageService",
    "NotificationService",
    "RideService",
]
