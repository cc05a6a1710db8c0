"""In-ride chat between passenger and driver."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ishare import endpoints
from ishare.client.http import ApiClient
from ishare.domain.entities import Message
from ishare.realtime.socket_client import SocketService

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, api: ApiClient, socket: SocketService):
        self.api = api
        self.socket = socket

    async def send_message(
        self,
        receiver_id: str,
        ride_id: str,
        content: str,
        attachments: Optional[list[dict]] = None,
    ) -> Message:
        response = await self.api.post(
            endpoints.SEND_MESSAGE,
            {
                "receiverId": receiver_id,
                "rideId": ride_id,
                "content": content,
                "attachments": attachments,
            },
        )
        return Message.from_api(response)

    async def send_message_via_socket(
        self,
        sender_id: str,
        receiver_id: str,
        ride_id: str,
        content: str,
        attachments: Optional[list[dict]] = None,
    ) -> bool:
        """Immediate delivery; use alongside ``send_message`` for persistence."""
        return await self.socket.send_message(
            {
                "senderId": sender_id,
                "receiverId": receiver_id,
                "rideId": ride_id,
                "content": content,
                "attachments": attachments,
            }
        )

    async def get_conversation(
        self, user_id: str, limit: int = 50, skip: int = 0
    ) -> list[Message]:
        response = await self.api.get(
            endpoints.conversation(user_id), {"limit": limit, "skip": skip}
        )
        return [Message.from_api(m) for m in response or []]

    async def get_ride_messages(
        self, ride_id: str, limit: int = 100, skip: int = 0
    ) -> list[Message]:
        response = await self.api.get(
            endpoints.ride_messages(ride_id), {"limit": limit, "skip": skip}
        )
        return [Message.from_api(m) for m in response or []]

    async def mark_as_read(self, message_id: str) -> Message:
        response = await self.api.put(endpoints.mark_message_read(message_id))
        await self.socket.mark_message_as_read(message_id)
        return Message.from_api(response)

    async def get_unread_count(self) -> dict:
        return await self.api.get(endpoints.UNREAD_COUNT)

    def setup_message_listeners(
        self,
        on_new_message: Optional[Callable[[Message], Any]] = None,
        on_message_read: Optional[Callable[[dict], Any]] = None,
    ) -> Callable[[], None]:
        registered: list[tuple[str, Callable]] = []

        if on_new_message is not None:

            def new_message(data: dict) -> Any:
                return on_new_message(Message.from_api(data))

            registered.append(("new_message", new_message))
        if on_message_read is not None:
            registered.append(("message_read", on_message_read))

        for event, handler in registered:
            self.socket.on(event, handler)

        def cleanup() -> None:
            for event, handler in registered:
                self.socket.off(event, handler)

        return cleanup
