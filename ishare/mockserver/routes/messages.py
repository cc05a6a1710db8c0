"""
Message endpoints
=================

POST /api/messages                         -- send a chat message
GET  /api/messages/unread                  -- unread count
GET  /api/messages/conversation/{user_id}  -- thread with one user
GET  /api/messages/ride/{ride_id}          -- every message of a ride
PUT  /api/messages/{message_id}/read       -- mark read
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter
from ishare.mockserver.realtime import user_room
from ishare.mockserver.schemas import CountResponse, MessageCreateRequest

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", status_code=201, summary="Send a message")
@limiter.limit("100/minute")
async def send_message(
    request: Request,
    body: MessageCreateRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    if body.receiver_id not in db.users:
        raise HTTPException(status_code=404, detail="Receiver not found")
    message = db.add_message(
        user["_id"], body.receiver_id, body.ride_id, body.content, body.attachments
    )
    await request.app.state.gateway.sio.emit(
        "new_message", message, to=user_room(body.receiver_id)
    )
    return message


@router.get("/unread", response_model=CountResponse, summary="Unread messages")
@limiter.limit("100/minute")
async def unread(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return CountResponse(count=db.unread_messages(user["_id"]))


@router.get("/conversation/{user_id}", summary="Conversation with a user")
@limiter.limit("100/minute")
async def conversation(
    request: Request,
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    skip: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.conversation(user["_id"], user_id, limit, skip)


@router.get("/ride/{ride_id}", summary="Messages of a ride")
@limiter.limit("100/minute")
async def ride_messages(
    request: Request,
    ride_id: str,
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
    _: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.ride_messages(ride_id, limit, skip)


@router.put("/{message_id}/read", summary="Mark a message read")
@limiter.limit("100/minute")
async def mark_read(
    request: Request,
    message_id: str,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    message = db.messages.get(message_id)
    if message is None or message["receiver"] != user["_id"]:
        raise HTTPException(status_code=404, detail="Message not found")
    message["isRead"] = True
    return message
