"""
Ride endpoints
==============

POST /api/rides                   -- create a ride request
GET  /api/rides                   -- the caller's rides (status, limit, skip)
POST /api/rides/schedule          -- book a ride for later
GET  /api/rides/{ride_id}         -- one ride
PUT  /api/rides/{ride_id}/status  -- move a ride along its lifecycle
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ishare.domain.entities import InvalidStateTransition
from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter
from ishare.mockserver.schemas import ErrorResponse, RideCreateRequest, RideStatusRequest

router = APIRouter(prefix="/rides", tags=["rides"])


def _own_ride(db: MockDatabase, ride_id: str, user: dict) -> dict:
    ride = db.rides.get(ride_id)
    if ride is None or user["_id"] not in (ride["user"], ride.get("driver")):
        raise HTTPException(status_code=404, detail="Ride not found")
    return ride


@router.post("", status_code=201, summary="Create a ride request")
@limiter.limit("100/minute")
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.create_ride(user["_id"], body.model_dump(by_alias=True))


@router.get("", summary="List own rides")
@limiter.limit("100/minute")
async def list_rides(
    request: Request,
    status: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.rides_for(user["_id"], status, limit, skip)


@router.post("/schedule", status_code=201, summary="Schedule a ride")
@limiter.limit("100/minute")
async def schedule_ride(
    request: Request,
    body: RideCreateRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    if not body.scheduled_time:
        raise HTTPException(status_code=422, detail="scheduledTime is required")
    details = body.model_dump(by_alias=True)
    details["isScheduled"] = True
    return db.create_ride(user["_id"], details)


@router.get(
    "/{ride_id}",
    summary="Get a ride",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit("100/minute")
async def get_ride(
    request: Request,
    ride_id: str,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return _own_ride(db, ride_id, user)


@router.put(
    "/{ride_id}/status",
    summary="Update ride status",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Illegal status change"},
    },
)
@limiter.limit("100/minute")
async def update_status(
    request: Request,
    ride_id: str,
    body: RideStatusRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    _own_ride(db, ride_id, user)
    try:
        return db.set_ride_status(ride_id, body.status)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown status: {body.status}")
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
