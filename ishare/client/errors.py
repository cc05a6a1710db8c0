"""Client-side exceptions."""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """The server answered with a non-2xx status (or an unusable body)."""

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.payload = payload

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class ApiConnectionError(ApiError):
    """The server could not be reached (network failure or timeout)."""


class RideRequestTimeout(Exception):
    """No driver was assigned within the request deadline."""
