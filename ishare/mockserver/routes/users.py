"""
User endpoints
==============

GET /api/users/profile  -- the caller's profile
PUT /api/users/profile  -- update name, phone, picture, places...
GET /api/users/{user_id} -- public profile of another user
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter

router = APIRouter(prefix="/users", tags=["users"])

PUBLIC_FIELDS = ("_id", "name", "profilePic", "role", "driverInfo")


@router.get("/profile", summary="Own profile")
@limiter.limit("100/minute")
async def get_profile(request: Request, user: dict = Depends(get_current_user)):
    return user


@router.put("/profile", summary="Update own profile")
@limiter.limit("100/minute")
async def update_profile(
    request: Request,
    changes: dict[str, Any] = Body(...),
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.update_user(user["_id"], changes)


@router.get("/{user_id}", summary="Public profile")
@limiter.limit("100/minute")
async def get_user(
    request: Request,
    user_id: str,
    _: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    user = db.users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {key: user[key] for key in PUBLIC_FIELDS if key in user}
