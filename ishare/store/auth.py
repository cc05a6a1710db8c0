"""Authentication slice: the signed-in user, their wallet and saved places."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from ishare.domain.entities import (
    PaymentMethod,
    RiderDocuments,
    SavedPlace,
    User,
    VehicleDetails,
)
from ishare.store.core import Slice


@dataclass
class AuthState:
    user: Optional[User] = None
    is_authenticated: bool = False
    is_loading: bool = False
    error: Optional[str] = None
    token: Optional[str] = None


auth = Slice("auth", AuthState)


@auth.reducer("loginStart")
def login_start(state: AuthState, _payload) -> None:
    state.is_loading = True
    state.error = None


@auth.reducer("loginSuccess")
def login_success(state: AuthState, payload: dict) -> None:
    state.is_loading = False
    state.is_authenticated = True
    state.user = payload["user"]
    state.token = payload["token"]
    state.error = None


@auth.reducer("loginFailure")
def login_failure(state: AuthState, message: str) -> None:
    state.is_loading = False
    state.error = message


@auth.reducer("logout")
def logout(state: AuthState, _payload) -> None:
    state.is_authenticated = False
    state.user = None
    state.token = None


@auth.reducer("updateUserProfile")
def update_user_profile(state: AuthState, changes: dict) -> None:
    if state.user:
        state.user = dataclasses.replace(state.user, **changes)


@auth.reducer("addSavedPlace")
def add_saved_place(state: AuthState, place: SavedPlace) -> None:
    if state.user:
        state.user.saved_places = [*state.user.saved_places, place]


@auth.reducer("removeSavedPlace")
def remove_saved_place(state: AuthState, place_id: str) -> None:
    if state.user:
        state.user.saved_places = [
            p for p in state.user.saved_places if p.id != place_id
        ]


@auth.reducer("addPaymentMethod")
def add_payment_method(state: AuthState, method: PaymentMethod) -> None:
    if not state.user:
        return
    methods = state.user.payment_methods
    if method.is_default:
        methods = [dataclasses.replace(m, is_default=False) for m in methods]
    state.user.payment_methods = [*methods, method]


@auth.reducer("removePaymentMethod")
def remove_payment_method(state: AuthState, method_id: str) -> None:
    if state.user:
        state.user.payment_methods = [
            m for m in state.user.payment_methods if m.id != method_id
        ]


@auth.reducer("setDefaultPaymentMethod")
def set_default_payment_method(state: AuthState, method_id: str) -> None:
    if state.user:
        state.user.payment_methods = [
            dataclasses.replace(m, is_default=m.id == method_id)
            for m in state.user.payment_methods
        ]


@auth.reducer("convertToRider")
def convert_to_rider(state: AuthState, payload: dict) -> None:
    if state.user:
        state.user.is_rider = True
        state.user.vehicle_details = payload.get("vehicle_details") or VehicleDetails()
        state.user.rider_documents = payload.get("rider_documents") or RiderDocuments()
