from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import socketio
import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from relay.rooms.handlers import RelayHandlers
from relay.rooms.manager import RelayRoomManager
from relay.server.settings import RelayServerSettings
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def status(request: Request) -> JSONResponse:
    rooms: RelayRoomManager = request.app.state.rooms
    settings: RelayServerSettings = request.app.state.settings
    return JSONResponse(
        {
            "status": "ok",
            "rooms": rooms.room_count,
            "connections": rooms.connection_count,
            "max_rooms": settings.max_rooms,
        },
    )


def create_http_app(settings: RelayServerSettings, rooms: RelayRoomManager) -> Starlette:
    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        rooms.start_reaper()
        try:
            yield
        finally:
            await rooms.stop_reaper()

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
    ]
    app = Starlette(routes=routes, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
    )
    app.state.settings = settings
    app.state.rooms = rooms
    return app


def create_app(
    settings: RelayServerSettings | None = None,
    rooms: RelayRoomManager | None = None,
) -> socketio.ASGIApp:
    """Socket.IO relay mounted in front of the Starlette health/status app."""
    if settings is None:  # pragma: no cover
        settings = RelayServerSettings()

    if rooms is None:
        rooms = RelayRoomManager(
            snapshot_ttl_seconds=settings.snapshot_ttl_seconds,
            max_rooms=settings.max_rooms,
        )

    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.cors_origins)
    RelayHandlers(sio, rooms).register()

    http_app = create_http_app(settings, rooms)
    logger.info("relay server ready", max_rooms=settings.max_rooms)
    return socketio.ASGIApp(sio, other_asgi_app=http_app, socketio_path=settings.socketio_path)


def get_app() -> socketio.ASGIApp:  # pragma: no cover
    """ASGI application factory for production use (e.g., uvicorn --factory)."""
    settings = RelayServerSettings()
    setup_logging(log_dir=settings.log_dir, service="relay")
    return create_app(settings=settings)
