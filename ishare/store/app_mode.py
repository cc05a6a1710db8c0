"""App mode slice: passenger or rider (driver) experience."""

from __future__ import annotations

from dataclasses import dataclass

from ishare.domain.enums import AppMode
from ishare.store.core import Slice


@dataclass
class AppModeState:
    current_mode: AppMode = AppMode.PASSENGER


app_mode = Slice("appMode", AppModeState)


@app_mode.reducer("setAppMode")
def set_app_mode(state: AppModeState, mode: AppMode) -> None:
    state.current_mode = AppMode(mode)


@app_mode.reducer("toggleAppMode")
def toggle_app_mode(state: AppModeState, _payload) -> None:
    state.current_mode = (
        AppMode.RIDER if state.current_mode == AppMode.PASSENGER else AppMode.PASSENGER
    )
