"""
Payment and rating endpoints
============================

POST /api/payments/create-intent   -- start a card payment
GET  /api/payments/history         -- the caller's payments
GET  /api/payments/methods         -- saved payment methods
POST /api/ratings                  -- rate the other party of a ride
GET  /api/ratings/user/{user_id}   -- ratings a user received
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ishare.mockserver.db import MockDatabase
from ishare.mockserver.dependencies import get_current_user, get_db
from ishare.mockserver.middleware import limiter
from ishare.mockserver.schemas import PaymentIntentRequest, RatingCreateRequest

payments = APIRouter(prefix="/payments", tags=["payments"])
ratings = APIRouter(prefix="/ratings", tags=["ratings"])


@payments.post("/create-intent", status_code=201, summary="Create payment intent")
@limiter.limit("100/minute")
async def create_intent(
    request: Request,
    body: PaymentIntentRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.add_payment(user["_id"], body.amount, body.currency, body.ride_id)


@payments.get("/history", summary="Payment history")
@limiter.limit("100/minute")
async def history(
    request: Request,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    return db.payments[user["_id"]]


@payments.get("/methods", summary="Saved payment methods")
@limiter.limit("100/minute")
async def methods(request: Request, user: dict = Depends(get_current_user)):
    return user.get("paymentMethods", [])


@ratings.post("", status_code=201, summary="Submit a rating")
@limiter.limit("100/minute")
async def create_rating(
    request: Request,
    body: RatingCreateRequest,
    user: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    if body.ride_id not in db.rides:
        raise HTTPException(status_code=404, detail="Ride not found")
    return db.add_rating(user["_id"], body.model_dump(by_alias=True))


@ratings.get("/user/{user_id}", summary="Ratings received by a user")
@limiter.limit("100/minute")
async def user_ratings(
    request: Request,
    user_id: str,
    _: dict = Depends(get_current_user),
    db: MockDatabase = Depends(get_db),
):
    received = db.ratings_for(user_id)
    average = (
        round(sum(r["score"] for r in received) / len(received), 2) if received else None
    )
    return {"ratings": received, "average": average, "count": len(received)}
