"""
Minimal Redux-style store.

* A ``Slice`` owns one piece of state and the reducers that mutate it.
  ``@slice.reducer("name")`` registers a reducer under ``"<slice>/<name>"``
  and returns an ``ActionCreator`` for that type.
* ``Store.dispatch`` routes an action to its slice's reducer and then
  notifies subscribers.  Dispatches are serialized by a lock, and reducers
  may not dispatch.
* Action types listed in ``reset_on`` rebuild every slice from its initial
  state after the reducer has run (full reset on logout).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

Reducer = Callable[[Any, Any], None]
Listener = Callable[["Action"], None]


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


class ActionCreator:
    def __init__(self, type_: str, reducer: Reducer):
        self.type = type_
        self.reducer = reducer

    def __call__(self, payload: Any = None) -> Action:
        return Action(self.type, payload)

    def match(self, action: Action) -> bool:
        return action.type == self.type

    def __repr__(self) -> str:
        return f"<ActionCreator {self.type}>"


class Slice:
    def __init__(self, name: str, initial_state: Callable[[], Any]):
        self.name = name
        self.initial_state = initial_state
        self.reducers: dict[str, Reducer] = {}

    def reducer(self, action_name: str) -> Callable[[Reducer], ActionCreator]:
        def register(fn: Reducer) -> ActionCreator:
            type_ = f"{self.name}/{action_name}"
            self.reducers[type_] = fn
            return ActionCreator(type_, fn)

        return register

    def reduce(self, state: Any, action: Action) -> None:
        fn = self.reducers.get(action.type)
        if fn is not None:
            fn(state, action.payload)


class Store:
    def __init__(self, slices: Iterable[Slice], reset_on: Iterable[str] = ()):
        self._slices = {s.name: s for s in slices}
        self._reset_on = set(reset_on)
        self._state = {name: s.initial_state() for name, s in self._slices.items()}
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._dispatching = False

    # ── Public API ────────────────────────────────────────────────────

    def get_state(self) -> SimpleNamespace:
        """Snapshot of the slice states (the objects themselves are live)."""
        return SimpleNamespace(**self._state)

    def select(self, name: str) -> Any:
        return self._state[name]

    def dispatch(self, action: Action) -> Action:
        with self._lock:
            if self._dispatching:
                raise RuntimeError("Reducers may not dispatch actions.")
            self._dispatching = True
            try:
                self._reduce(action)
            finally:
                self._dispatching = False
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(action)
            except Exception:
                logger.exception("Store listener failed for %s", action.type)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self, name: Optional[str] = None) -> None:
        with self._lock:
            names = [name] if name else list(self._slices)
            for n in names:
                self._state[n] = self._slices[n].initial_state()

    # ── Internals ─────────────────────────────────────────────────────

    def _reduce(self, action: Action) -> None:
        slice_name, _, _ = action.type.partition("/")
        owner = self._slices.get(slice_name)
        if owner is None:
            logger.debug("No slice for action %s", action.type)
            return
        owner.reduce(self._state[slice_name], action)

        if action.type in self._reset_on:
            for n, s in self._slices.items():
                self._state[n] = s.initial_state()
