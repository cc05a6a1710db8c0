"""Pydantic request / response schemas for the mock REST API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str = ""
    password: str = Field(..., min_length=6)
    role: str = Field("user", pattern="^(user|driver)$")


class LoginRequest(CamelModel):
    email: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class LocationPayload(CamelModel):
    name: str = ""
    address: str = ""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class RideCreateRequest(CamelModel):
    pickup_location: LocationPayload
    dropoff_location: LocationPayload
    ride_type: Optional[str] = None
    payment_method: Optional[str] = None
    estimated_price: Optional[float] = Field(None, ge=0)
    scheduled_time: Optional[str] = None
    is_scheduled: bool = False
    recurring_days: list[str] = []


class RideStatusRequest(CamelModel):
    status: str


class MessageCreateRequest(CamelModel):
    receiver_id: str
    ride_id: str
    content: str = Field(..., min_length=1)
    attachments: Optional[list[dict[str, Any]]] = None


class RatingCreateRequest(CamelModel):
    ride_id: str
    rated_user_id: str
    score: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    categories: Optional[dict[str, Any]] = None


class DeviceTokenRequest(CamelModel):
    token: str
    platform: str = Field(..., pattern="^(ios|android)$")


class PaymentIntentRequest(CamelModel):
    amount: float = Field(..., gt=0)
    currency: str = "usd"
    ride_id: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────


class AuthResponse(CamelModel):
    user: dict[str, Any]
    token: str
    refresh_token: str


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class CountResponse(BaseModel):
    count: int


class NotificationListResponse(BaseModel):
    notifications: list[dict[str, Any]]


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
