"""
Notification endpoints
======================

GET    /api/notifications                    -- inbox, newest first
PUT    /api/notifications/read-all           -- mark everything read
GET    /api/notifications/unread/count       -- unread badge
POST   /api/notifications/device-token       -- register a push token
PUT    /api/notifications/{id}/read          -- mark one read
DELETE /api/notifications/{id}               -- delete one
DELETE /api/notifications                    -- clear the inbox
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter
from ishare.mockserver.schemas import (
    CountResponse,
    DeviceTokenRequest,
    MessageResponse,
    NotificationListResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _find(db: MockDatabase, user: dict, notification_id: str) -> dict:
    item = db.find_notification(user["_id"], notification_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return item


@router.get("", response_model=NotificationListResponse, summary="List notifications")
@limiter.limit("100/minute")
async def list_notifications(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return NotificationListResponse(notifications=db.notifications[user["_id"]])


@router.put("/read-all", response_model=MessageResponse, summary="Mark all read")
@limiter.limit("100/minute")
async def mark_all_read(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    for item in db.notifications[user["_id"]]:
        item["read"] = True
    return MessageResponse(message="All notifications marked as read")


@router.get("/unread/count", response_model=CountResponse, summary="Unread count")
@limiter.limit("100/minute")
async def unread_count(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return CountResponse(
        count=sum(1 for n in db.notifications[user["_id"]] if not n["read"])
    )


@router.post(
    "/device-token", response_model=MessageResponse, summary="Register device token"
)
@limiter.limit("100/minute")
async def register_device_token(
    request: Request,
    body: DeviceTokenRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    db.device_tokens[user["_id"]][body.platform] = body.token
    return MessageResponse(message="Device token registered")


@router.put("/{notification_id}/read", summary="Mark one read")
@limiter.limit("100/minute")
async def mark_read(
    request: Request,
    notification_id: str,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    item = _find(db, user, notification_id)
    item["read"] = True
    return item


@router.delete(
    "/{notification_id}", response_model=MessageResponse, summary="Delete one"
)
@limiter.limit("100/minute")
async def delete_notification(
    request: Request,
    notification_id: str,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    db.notifications[user["_id"]].remove(_find(db, user, notification_id))
    return MessageResponse(message="Notification deleted")


@router.delete("", response_model=MessageResponse, summary="Clear inbox")
@limiter.limit("100/minute")
async def clear_notifications(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    db.notifications[user["_id"]].clear()
    return MessageResponse(message="All notifications cleared")
