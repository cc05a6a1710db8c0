"""Socket.IO event client."""

from ishare.realtime.socket_client import DRIVER, PASSENGER, SocketService

__all__ = ["DRIVER", "PASSENGER", "SocketService"]
