"""
Driver endpoints
================

GET /api/drivers/nearby -- drivers around a point, closest first
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.get("/nearby", summary="Nearby drivers")
@limiter.limit("100/minute")
async def nearby_drivers(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(5.0, gt=0, le=50, description="Search radius in km"),
    _: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return {"drivers": db.nearby_drivers(latitude, longitude, radius)}
