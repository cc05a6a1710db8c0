"""
HTTP client wrapper
===================

Thin layer over ``httpx.AsyncClient`` that every service talks through.

Per request
-----------
1. Assign a call id (``X-Call-ID``) and log method, URL and the JSON body
   with ``password`` masked.
2. Attach ``Authorization: Bearer <authToken>`` when a token is stored.
3. On **401** (and not already a retry) exchange the stored refresh token at
   ``/api/auth/refresh-token``, store the new pair, and replay the request
   once with ``X-Retry: true``.  Refreshes are serialized; a request that
   waited on another one's refresh reuses the token it stored.  A failed
   refresh drops both tokens and the original 401 is raised.
4. Network failures raise ``ApiConnectionError``, or resolve to a canned
   mock response when ``use_mock_api`` is on.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import Any, Optional

import httpx

from ishare import endpoints
from ishare.client.errors import ApiConnectionError, ApiError
from ishare.client.mocks import mock_response
from ishare.client.storage import AUTH_TOKEN, REFRESH_TOKEN, Storage
from ishare.config import settings

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}
MAX_LOGGED_BODY = 500


def _sanitize(data: Any) -> Any:
    if isinstance(data, dict) and data.get("password"):
        return {**data, "password": "********"}
    return data


def _truncate(text: str) -> str:
    return text[:MAX_LOGGED_BODY] + "..." if len(text) > MAX_LOGGED_BODY else text


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    def __init__(
        self,
        storage: Storage,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        use_mock: Optional[bool] = None,
        mock_on_failure: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage
        self.base_url = base_url or settings.api_url
        self.use_mock = settings.use_mock_api if use_mock is None else use_mock
        self.mock_on_failure = (
            settings.use_mock_api if mock_on_failure is None else mock_on_failure
        )
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers=DEFAULT_HEADERS,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )
        self._call_ids = itertools.count(1)
        self._refresh_lock = asyncio.Lock()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # ── Verbs ─────────────────────────────────────────────────────────

    async def get(self, url: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", url, params=params)

    async def post(self, url: str, data: Any = None) -> Any:
        return await self.request("POST", url, data=data)

    async def put(self, url: str, data: Any = None) -> Any:
        return await self.request("PUT", url, data=data)

    async def patch(self, url: str, data: Any = None) -> Any:
        return await self.request("PATCH", url, data=data)

    async def delete(self, url: str, params: Optional[dict] = None) -> Any:
        return await self.request("DELETE", url, params=params)

    # ── Core ──────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        data: Any = None,
    ) -> Any:
        if self.use_mock:
            logger.info("[MOCK] %s %s", method, url)
            return mock_response(method, url)

        call_id = next(self._call_ids)
        headers = {"X-Call-ID": str(call_id)}
        logger.info("[API-%s] REQUEST: %s %s", call_id, method, url)
        if data is not None:
            logger.debug(
                "[API-%s] Request Body: %s",
                call_id,
                json.dumps(_sanitize(data), default=str),
            )

        token = await self.storage.get_item(AUTH_TOKEN)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.debug("[API-%s] No authorization token available", call_id)

        try:
            response = await self._send(method, url, params, data, headers)
            if response.status_code == 401:
                new_token = await self._refresh_token(call_id, token)
                if new_token:
                    headers["Authorization"] = f"Bearer {new_token}"
                    headers["X-Retry"] = "true"
                    logger.info(
                        "[API-%s] Token refresh successful, retrying original request",
                        call_id,
                    )
                    response = await self._send(method, url, params, data, headers)
        except httpx.TransportError as exc:
            logger.error("[API-%s] NETWORK ERROR: %s %s (%s)", call_id, method, url, exc)
            if self.mock_on_failure:
                logger.warning(
                    "[API-%s] Using mock response due to connection error", call_id
                )
                return mock_response(method, url)
            raise ApiConnectionError(
                f"Unable to connect to the server ({self.base_url}). "
                "Please check your network connection."
            ) from exc

        return self._handle_response(call_id, method, url, response)

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict],
        data: Any,
        headers: dict,
    ) -> httpx.Response:
        return await self._http.request(
            method, url, params=params, json=data, headers=headers
        )

    async def _refresh_token(
        self, call_id: int, stale_token: Optional[str]
    ) -> Optional[str]:
        """Swap the stored refresh token for a new pair; None when that fails."""
        async with self._refresh_lock:
            current = await self.storage.get_item(AUTH_TOKEN)
            if current and current != stale_token:
                logger.info("[API-%s] Token already refreshed, reusing it", call_id)
                return current

            refresh_token = await self.storage.get_item(REFRESH_TOKEN)
            if not refresh_token:
                logger.info("[API-%s] No refresh token available", call_id)
                return None

            logger.info("[API-%s] Calling refresh token API", call_id)
            try:
                response = await self._http.post(
                    endpoints.REFRESH_TOKEN, json={"refreshToken": refresh_token}
                )
                response.raise_for_status()
                body = response.json()
                access_token = body["accessToken"]
            except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
                logger.error("[API-%s] Token refresh failed: %s", call_id, exc)
                await self.storage.remove_items(AUTH_TOKEN, REFRESH_TOKEN)
                return None

            await self.storage.set_item(AUTH_TOKEN, access_token)
            await self.storage.set_item(
                REFRESH_TOKEN, body.get("refreshToken") or refresh_token
            )
            return access_token

    def _handle_response(
        self, call_id: int, method: str, url: str, response: httpx.Response
    ) -> Any:
        body = _decode(response)
        if response.is_success:
            logger.info(
                "[API-%s] RESPONSE: %s for %s %s",
                call_id,
                response.status_code,
                method,
                url,
            )
            logger.debug(
                "[API-%s] Response Body: %s", call_id, _truncate(json.dumps(body))
            )
            return body

        logger.error(
            "[API-%s] ERROR %s: %s %s", call_id, response.status_code, method, url
        )
        detail = response.reason_phrase or "Request failed"
        if isinstance(body, dict):
            detail = body.get("message") or body.get("detail") or detail
        raise ApiError(str(detail), status_code=response.status_code, payload=body)
