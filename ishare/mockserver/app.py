"""
FastAPI application factory for the mock backend.

* Registers the REST routers under ``/api``.
* Mounts the Socket.IO gateway next to them (``create_asgi_app``).
* Stops running ride simulations via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

import socketio
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ishare import __version__
from ishare.config import settings
from ishare.mockserver.db import MockDatabase
from ishare.mockserver.middleware import limiter
from ishare.mockserver.realtime import RealtimeGateway
from ishare.mockserver.routes import (
    admin,
    auth,
    drivers,
    messages,
    notifications,
    payments,
    rides,
    users,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Mock backend ready")
    yield
    await app.state.gateway.shutdown()


def create_app(
    db: Optional[MockDatabase] = None, step_seconds: Optional[float] = None
) -> FastAPI:
    app = FastAPI(
        title="IShare Mock API",
        description=(
            "In-memory stand-in for the IShare backend.  Serves the REST "
            "contract the mobile client talks to and fakes ride progress "
            "over Socket.IO."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.db = db or MockDatabase()
    app.state.gateway = RealtimeGateway(app.state.db, step_seconds)

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    for router in (
        auth.router,
        users.router,
        rides.router,
        drivers.router,
        notifications.router,
        messages.router,
        payments.payments,
        payments.ratings,
        admin.router,
    ):
        app.include_router(router, prefix="/api")

    return app


def create_asgi_app(app: Optional[FastAPI] = None) -> socketio.ASGIApp:
    """Wrap *app* so ``/socket.io`` is served by its realtime gateway."""
    app = app or create_app()
    return socketio.ASGIApp(app.state.gateway.sio, other_asgi_app=app)
