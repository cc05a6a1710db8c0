"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ishare.mockserver.db import MockDatabase

bearer = HTTPBearer(auto_error=False)


def get_db(request: Request) -> MockDatabase:
    return request.app.state.db


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_token),
    db: MockDatabase = Depends(get_db),
) -> dict:
    """Resolve the bearer token to a user; 401 when unknown or revoked."""
    user = db.user_for_token(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user
