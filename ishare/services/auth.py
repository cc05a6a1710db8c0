"""
Authentication service.

A session is the pair of tokens plus the cached user record in storage.
Establishing one also signs the socket in (as ``driver`` for driver
accounts, ``passenger`` otherwise) and publishes ``auth/loginSuccess``.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from ishare import endpoints
from ishare.client.errors import ApiError
from ishare.client.http import ApiClient
from ishare.client.storage import AUTH_TOKEN, REFRESH_TOKEN, USER_DATA, Storage
from ishare.domain.entities import User
from ishare.realtime.socket_client import DRIVER, PASSENGER, SocketService
from ishare.store import Store
from ishare.store import auth as auth_slice

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        api: ApiClient,
        storage: Storage,
        socket: SocketService,
        store: Store,
    ):
        self.api = api
        self.storage = storage
        self.socket = socket
        self.store = store
        self._current_user: Optional[User] = None

    # ── Sign in / out ─────────────────────────────────────────────────

    async def register(
        self,
        name: str,
        email: str,
        phone: str,
        password: str,
        role: str = "user",
    ) -> User:
        logger.info("[Auth] Registering new user: %s", email)
        payload = {
            "name": name,
            "email": email,
            "phone": phone,
            "password": password,
            "role": role,
        }
        return await self._authenticate(endpoints.REGISTER, payload, "Registration")

    async def login(self, email: str, password: str) -> User:
        logger.info("[Auth] Attempting login for: %s", email)
        payload = {"email": email, "password": password}
        return await self._authenticate(endpoints.LOGIN, payload, "Login")

    async def _authenticate(self, url: str, payload: dict, label: str) -> User:
        self.store.dispatch(auth_slice.login_start())
        try:
            response = await self.api.post(url, payload)
            if not (
                isinstance(response, dict)
                and response.get("user")
                and response.get("token")
            ):
                logger.error("[Auth] Invalid %s response: %s", label.lower(), response)
                raise ApiError("Invalid response from server", payload=response)
        except ApiError as exc:
            logger.error("[Auth] %s failed: %s", label, exc)
            self.store.dispatch(auth_slice.login_failure(exc.detail))
            raise

        user = User.from_api(response["user"])
        logger.info("[Auth] %s successful for: %s", label, user.email)
        await self._set_session(response, user)
        return user

    async def logout(self) -> None:
        logger.info("[Auth] Logging out user")
        try:
            if await self.get_token():
                try:
                    await self.api.post(endpoints.LOGOUT)
                    logger.info("[Auth] API logout successful")
                except ApiError as exc:
                    logger.error("[Auth] Error during API logout: %s", exc)
        finally:
            await self._clear_session()
            self.store.dispatch(auth_slice.logout())
            logger.info("[Auth] Local session cleared")

    # ── Session queries ───────────────────────────────────────────────

    async def get_token(self) -> Optional[str]:
        return await self.storage.get_item(AUTH_TOKEN)

    async def verify_token(self) -> bool:
        """Only an explicit 401 counts as invalid; other failures keep the token."""
        try:
            await self.api.get(endpoints.CURRENT_USER)
            return True
        except ApiError as exc:
            if exc.status_code == 401:
                logger.info("[Auth] Token verification failed: Token invalid")
                return False
            logger.warning("[Auth] Token verification error: %s", exc)
            return True

    async def get_current_user(self) -> Optional[User]:
        if self._current_user is not None:
            return self._current_user

        token = await self.storage.get_item(AUTH_TOKEN)
        if not token:
            logger.info("[Auth] No auth token found")
            return None

        user_data = await self.storage.get_item(USER_DATA)
        if user_data:
            try:
                self._current_user = User.from_api(json.loads(user_data))
                logger.info(
                    "[Auth] User loaded from storage: %s", self._current_user.name
                )
                return self._current_user
            except (ValueError, KeyError, TypeError) as exc:
                logger.error("[Auth] Error parsing user data: %s", exc)
                await self.storage.remove_item(USER_DATA)

        logger.info("[Auth] Token exists, fetching current user from API")
        try:
            response = await self.api.get(endpoints.CURRENT_USER)
            if not isinstance(response, dict) or not response.get("_id"):
                raise ApiError(
                    "Invalid user data received from server", payload=response
                )
        except ApiError as exc:
            logger.error("[Auth] Error fetching current user from API: %s", exc)
            if exc.status_code == 401:
                logger.info("[Auth] Token invalid, clearing session")
                await self._clear_session()
            return None

        self._current_user = User.from_api(response)
        await self.storage.set_item(USER_DATA, json.dumps(response))
        return self._current_user

    async def is_authenticated(self) -> bool:
        token = await self.storage.get_item(AUTH_TOKEN)
        return bool(token and await self.get_current_user())

    # ── Profile ───────────────────────────────────────────────────────

    async def update_profile(self, changes: dict) -> User:
        response = await self.api.put(endpoints.UPDATE_PROFILE, changes)
        user = User.from_api(response)
        self._current_user = user
        await self.storage.set_item(USER_DATA, json.dumps(response))
        self.store.dispatch(auth_slice.update_user_profile(dict(vars(user))))
        return user

    async def get_user_by_id(self, user_id: str) -> User:
        return User.from_api(await self.api.get(endpoints.user_details(user_id)))

    # ── Internals ─────────────────────────────────────────────────────

    async def _set_session(self, response: dict, user: User) -> None:
        logger.info("[Auth] Setting session data")
        await self.storage.set_item(AUTH_TOKEN, response["token"])
        if response.get("refreshToken"):
            await self.storage.set_item(REFRESH_TOKEN, response["refreshToken"])
        await self.storage.set_item(USER_DATA, json.dumps(response["user"]))
        self._current_user = user

        self.store.dispatch(
            auth_slice.login_success({"user": user, "token": response["token"]})
        )
        await self.socket.authenticate_user(
            user.id, DRIVER if user.is_driver else PASSENGER
        )

    async def _clear_session(self) -> None:
        logger.info("[Auth] Clearing session data")
        await self.socket.disconnect()
        await self.storage.clear()
        self._current_user = None
