"""
Shared test fixtures.

The mock backend runs in-process behind ``httpx.ASGITransport`` so the HTTP
client, services and routes are exercised without a network.  The Socket.IO
client is replaced by ``FakeSocketClient``, which records handlers and emits
and lets a test fire server events by hand.
"""

from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ishare import fixtures
from ishare.client.http import ApiClient
from ishare.client.storage import MemoryStorage
from ishare.mockserver.app import create_app
from ishare.mockserver.middleware import limiter
from ishare.realtime.socket_client import SocketService
from ishare.store import create_store


class FakeSocketClient:
    """Stands in for ``socketio.AsyncClient``."""

    def __init__(self) -> None:
        self.connected = False
        self.url = None
        self.handlers: dict[str, Any] = {}
        self.emit = AsyncMock()
        self.connect = AsyncMock(side_effect=self._connect)
        self.disconnect = AsyncMock(side_effect=self._disconnect)

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def _connect(self, url, **kwargs):
        self.url = url
        self.connected = True

    async def _disconnect(self):
        self.connected = False

    async def trigger(self, event, *args):
        await self.handlers[event](*args)

    def emitted(self, event):
        return [c.args[1] for c in self.emit.await_args_list if c.args[0] == event]


# ── Client side ───────────────────────────────────────────────────────


@pytest.fixture
def store():
    return create_store()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def fake_sio():
    return FakeSocketClient()


@pytest.fixture
def socket(store, fake_sio):
    return SocketService(store, url="http://test", client_factory=lambda: fake_sio)


@pytest_asyncio.fixture
async def connected_socket(socket):
    await socket.initialize(fixtures.CURRENT_USER["_id"])
    return socket


# ── Mock backend ──────────────────────────────────────────────────────


@pytest.fixture
def app():
    limiter.reset()
    return create_app(step_seconds=0.01)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_headers(client) -> dict:
    resp = await client.post(
        "/api/auth/login",
        json={
            "email": fixtures.CURRENT_USER["email"],
            "password": fixtures.DEMO_PASSWORD,
        },
    )
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest_asyncio.fixture
async def api(app, storage) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient(
        storage,
        base_url="http://test",
        transport=ASGITransport(app=app),
        use_mock=False,
        mock_on_failure=False,
    ) as client:
        yield client
