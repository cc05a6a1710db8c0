"""Notification slice: the in-app inbox and socket connection flag."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ishare import fixtures
from ishare.domain import demand
from ishare.domain.entities import Notification
from ishare.domain.enums import NotificationType
from ishare.store.core import Slice


def _initial_notifications() -> list[Notification]:
    return fixtures.notification_entities()


@dataclass
class NotificationState:
    notifications: list[Notification] = field(default_factory=_initial_notifications)
    unread_count: int = 0
    is_socket_connected: bool = False
    last_updated: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None

    def __post_init__(self) -> None:
        self.recount()

    def recount(self) -> None:
        self.unread_count = sum(1 for n in self.notifications if not n.read)


notification = Slice("notification", NotificationState)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _push(state: NotificationState, item: Notification) -> None:
    state.notifications.insert(0, item)
    state.recount()
    state.last_updated = _now()


@notification.reducer("setSocketConnected")
def set_socket_connected(state: NotificationState, connected: bool) -> None:
    state.is_socket_connected = bool(connected)


@notification.reducer("setNotifications")
def set_notifications(state: NotificationState, items: list[Notification]) -> None:
    state.notifications = list(items)
    state.recount()
    state.last_updated = _now()
    state.is_loading = False
    state.error = None


@notification.reducer("fetchNotificationsStart")
def fetch_notifications_start(state: NotificationState, _payload) -> None:
    state.is_loading = True
    state.error = None


@notification.reducer("fetchNotificationsSuccess")
def fetch_notifications_success(
    state: NotificationState, items: list[Notification]
) -> None:
    state.notifications = list(items)
    state.recount()
    state.last_updated = _now()
    state.is_loading = False


@notification.reducer("fetchNotificationsFailure")
def fetch_notifications_failure(state: NotificationState, message: str) -> None:
    state.is_loading = False
    state.error = message


@notification.reducer("addNotification")
def add_notification(state: NotificationState, item: Notification) -> None:
    _push(state, item)


@notification.reducer("markAsRead")
def mark_as_read(state: NotificationState, notification_id: str) -> None:
    for item in state.notifications:
        if item.id == notification_id:
            item.read = True
    state.recount()


@notification.reducer("markAllAsRead")
def mark_all_as_read(state: NotificationState, _payload) -> None:
    for item in state.notifications:
        item.read = True
    state.unread_count = 0


@notification.reducer("deleteNotification")
def delete_notification(state: NotificationState, notification_id: str) -> None:
    state.notifications = [n for n in state.notifications if n.id != notification_id]
    state.recount()


@notification.reducer("clearAllNotifications")
def clear_all_notifications(state: NotificationState, _payload) -> None:
    state.notifications = []
    state.unread_count = 0


# ── Socket-driven notifications ───────────────────────────────────────


@notification.reducer("receiveDriverUpdate")
def receive_driver_update(state: NotificationState, payload: dict) -> None:
    _push(
        state,
        Notification(
            id=_new_id("driver-update"),
            title="Driver Update",
            body=(
                f"Your driver's status changed to: {payload.get('status')}. "
                f"ETA: {payload.get('eta')}"
            ),
            time=_now(),
            type=NotificationType.DRIVER_UPDATE,
            related_id=payload.get("rideId"),
            data=payload,
        ),
    )


@notification.reducer("receiveHighDemandUpdate")
def receive_high_demand_update(state: NotificationState, payload: dict) -> None:
    if not demand.should_alert(float(payload.get("demandLevel", 0.0))):
        return
    _push(
        state,
        Notification(
            id=_new_id("high-demand"),
            title="High Demand Alert",
            body=(
                f"Prices may be higher in {payload.get('areaName')} "
                "due to increased demand."
            ),
            time=_now(),
            type=NotificationType.SYSTEM,
            data=payload,
        ),
    )


@notification.reducer("receivePromoNotification")
def receive_promo_notification(state: NotificationState, payload: dict) -> None:
    _push(
        state,
        Notification(
            id=_new_id("promo"),
            title="New Promotion Available",
            body=(
                f"{payload.get('description')} Use code: {payload.get('promoCode')}. "
                f"Expires: {payload.get('expiryDate')}"
            ),
            time=_now(),
            type=NotificationType.PROMO,
            data=payload,
        ),
    )
