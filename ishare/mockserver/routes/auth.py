"""
Auth endpoints
==============

POST /api/auth/register       -- create an account and sign in
POST /api/auth/login          -- exchange credentials for a token pair
POST /api/auth/logout         -- revoke the caller's tokens
GET  /api/auth/me             -- the signed-in user
POST /api/auth/refresh-token  -- rotate the token pair
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ishare.mockserver.db import DuplicateEmail, MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db, get_token
from ishare.mockserver.middleware import limiter
from ishare.mockserver.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _session(db: MockDatabase, user: dict) -> AuthResponse:
    access, refresh = db.issue_tokens(user["_id"])
    return AuthResponse(user=user, token=access, refresh_token=refresh)


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    summary="Register a new account",
)
@limiter.limit("100/minute")
async def register(
    request: Request,
    body: RegisterRequest,
    db: MockDatabase = Depends(get_db),
):
    try:
        user = db.create_user(body.name, body.email, body.phone, body.password, body.role)
    except DuplicateEmail:
        raise HTTPException(status_code=409, detail="Email already registered")
    logger.info("Registered %s", body.email)
    return _session(db, user)


@router.post("/login", response_model=AuthResponse, summary="Sign in")
@limiter.limit("100/minute")
async def login(
    request: Request,
    body: LoginRequest,
    db: MockDatabase = Depends(get_db),
):
    user = db.check_password(body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _session(db, user)


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
@limiter.limit("100/minute")
async def logout(
    request: Request,
    token: str = Depends(get_token),
    db: MockDatabase = Depends(get_db),
):
    db.revoke(token)
    return MessageResponse(message="Logged out")


@router.get("/me", summary="Current user")
@limiter.limit("100/minute")
async def me(request: Request, user: dict = Depends(get_current_user)):
    return user


@router.post(
    "/refresh-token",
    response_model=TokenPairResponse,
    summary="Rotate the token pair",
)
@limiter.limit("100/minute")
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: MockDatabase = Depends(get_db),
):
    pair = db.rotate_refresh_token(body.refresh_token)
    if pair is None:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    access, refresh = pair
    return TokenPairResponse(access_token=access, refresh_token=refresh)
