"""Notification inbox: REST sync plus the screen each notification opens."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from ishare import endpoints
from ishare.client.errors import ApiError
from ishare.client.http import ApiClient
from ishare.domain.entities import Notification
from ishare.domain.enums import NotificationType
from ishare.store import Store
from ishare.store import notification as notification_slice

logger = logging.getLogger(__name__)

DEVICE_PLATFORMS = ("ios", "android")


class Destination(NamedTuple):
    screen: str
    params: Optional[dict] = None


class NotificationService:
    def __init__(self, api: ApiClient, store: Store):
        self.api = api
        self.store = store

    async def get_notifications(self) -> list[Notification]:
        self.store.dispatch(notification_slice.fetch_notifications_start())
        try:
            response = await self.api.get(endpoints.GET_NOTIFICATIONS)
        except ApiError as exc:
            logger.error("[NotificationService] Error fetching notifications: %s", exc)
            self.store.dispatch(
                notification_slice.fetch_notifications_failure(exc.detail)
            )
            raise

        raw = (response or {}).get("notifications", [])
        items = [Notification.from_api(n) for n in raw]
        self.store.dispatch(notification_slice.set_notifications(items))
        return items

    async def mark_as_read(self, notification_id: str) -> None:
        await self.api.put(endpoints.mark_notification_read(notification_id))
        self.store.dispatch(notification_slice.mark_as_read(notification_id))

    async def mark_all_as_read(self) -> None:
        await self.api.put(endpoints.MARK_ALL_NOTIFICATIONS_READ)
        self.store.dispatch(notification_slice.mark_all_as_read())

    async def delete_notification(self, notification_id: str) -> None:
        await self.api.delete(endpoints.delete_notification(notification_id))
        self.store.dispatch(notification_slice.delete_notification(notification_id))

    async def clear_all_notifications(self) -> None:
        await self.api.delete(endpoints.CLEAR_NOTIFICATIONS)
        self.store.dispatch(notification_slice.clear_all_notifications())

    async def get_unread_count(self) -> int:
        response = await self.api.get(endpoints.NOTIFICATION_UNREAD_COUNT)
        return int(response["count"])

    async def register_device_token(self, token: str, platform: str) -> None:
        if platform not in DEVICE_PLATFORMS:
            raise ValueError(f"Unsupported platform: {platform}")
        await self.api.post(
            endpoints.REGISTER_DEVICE_TOKEN, {"token": token, "platform": platform}
        )
        logger.info("[NotificationService] Device token registered successfully")

    def handle_socket_notification(self, notification: Notification) -> None:
        self.store.dispatch(notification_slice.add_notification(notification))

    @staticmethod
    def destination_for(notification: Notification) -> Optional[Destination]:
        """Screen to open for *notification*; None when it leads nowhere."""
        kind = notification.type
        if kind == NotificationType.RIDE:
            if notification.related_id:
                return Destination("RideStatus", {"rideId": notification.related_id})
            return Destination("RideHistory")
        if kind == NotificationType.PAYMENT:
            return Destination("Payment")
        if kind == NotificationType.PROMO:
            return Destination("HomeScreen", {"showPromo": True})
        if kind == NotificationType.DRIVER_UPDATE:
            if notification.related_id:
                return Destination("RideStatus", {"rideId": notification.related_id})
            return None
        return Destination("HomeScreen")
