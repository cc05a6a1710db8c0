"""
Admin / observability endpoints
===============================

GET  /api/admin/health             -- simple health check
GET  /api/admin/active-rides       -- rides that have not finished yet
POST /api/admin/broadcast/{event}  -- push a server event to every socket
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ishare.domain.enums import RideStatus
from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_db
from ishare.mockserver.middleware import limiter
from ishare.mockserver.schemas import HealthResponse, MessageResponse

router = APIRouter(prefix="/admin", tags=["admin"])

BROADCAST_EVENTS = (
    "notification",
    "driver_update",
    "high_demand_update",
    "promo_notification",
)
FINISHED = {RideStatus.COMPLETED.value, RideStatus.CANCELLED.value}


@router.get("/active-rides", summary="List rides that are still running")
@limiter.limit("100/minute")
async def active_rides(request: Request, db: MockDatabase = Depends(get_db)):
    return [r for r in db.rides.values() if r["status"] not in FINISHED]


@router.post(
    "/broadcast/{event}",
    response_model=MessageResponse,
    summary="Broadcast a server event",
)
@limiter.limit("100/minute")
async def broadcast(
    request: Request,
    event: str,
    payload: dict[str, Any] = Body(...),
):
    if event not in BROADCAST_EVENTS:
        raise HTTPException(status_code=404, detail=f"Unknown event: {event}")
    await request.app.state.gateway.sio.emit(event, payload)
    return MessageResponse(message=f"{event} sent")


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
