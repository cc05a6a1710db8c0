"""Canned responses used when the client runs against no server at all."""

from __future__ import annotations

import copy
import logging
from typing import Any

from ishare import endpoints

logger = logging.getLogger(__name__)

MOCK_TOKEN = "mock-token-xyz"
MOCK_REFRESH_TOKEN = "mock-refresh-token-xyz"

MOCK_USER = {
    "_id": "mock-user-123",
    "name": "Mock User",
    "email": "mock@example.com",
    "phone": "+1234567890",
    "role": "user",
    "profilePic": "",
}


def mock_response(method: str, url: str) -> Any:
    method = method.lower()
    logger.info("[MOCK] Generating mock response for %s %s", method, url)

    if method == "post" and endpoints.LOGIN in url:
        return {
            "user": copy.deepcopy(MOCK_USER),
            "token": MOCK_TOKEN,
            "refreshToken": MOCK_REFRESH_TOKEN,
        }
    if method == "get" and endpoints.CURRENT_USER in url:
        return copy.deepcopy(MOCK_USER)
    return {}
