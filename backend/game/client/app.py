"""Wiring for one participant's view of a room: bus, router and lifecycle manager."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.messaging.router import BusRouter
from game.messaging.socketio_bus import SocketIOBus
from game.session.context import SessionContext
from game.session.lifecycle import GameLifecycleManager
from shared.logging import bind_session

if TYPE_CHECKING:
    from collections.abc import Callable

    from game.client.settings import GameClientSettings
    from game.logic.types import Participant, Viewport
    from game.messaging.protocol import BusProtocol
    from game.session.view import GameView

logger = structlog.get_logger()


class GameClient:
    """
    A participant joined to one room.

    With no bus supplied a SocketIOBus is created and connected to the relay
    named in settings on start(); an injected bus is used as-is (tests pass an
    in-memory one).
    """

    def __init__(
        self,
        settings: GameClientSettings,
        room_id: str,
        participant: Participant,
        *,
        bus: BusProtocol | None = None,
        on_resize: Callable[[Viewport], None] | None = None,
        on_render: Callable[[GameView], None] | None = None,
    ) -> None:
        self._settings = settings
        self._owns_bus = bus is None
        self.bus: BusProtocol = bus if bus is not None else SocketIOBus()
        context = SessionContext(
            room_id=room_id,
            participant=participant,
            bus=self.bus,
            apply_locally=settings.apply_locally,
            reset_delay_scale=settings.reset_delay_scale,
        )
        if on_resize is not None:
            context.on_resize = on_resize
        if on_render is not None:
            context.on_render = on_render
        self.context = context
        self.lifecycle = GameLifecycleManager(context)
        self.router = BusRouter(self.bus, self.lifecycle)

    async def start(self) -> None:
        bind_session(self.context.room_id, self.context.participant.id)
        self.router.attach()
        if isinstance(self.bus, SocketIOBus) and self._owns_bus:
            await self.bus.connect(
                self._settings.server_url,
                socketio_path=self._settings.socketio_path,
                transports=self._settings.transports,
            )
            await self.bus.join(self.context.room_id, self.context.participant)
        logger.info("client started", server_url=self._settings.server_url)

    async def stop(self) -> None:
        await self.lifecycle.close()
        self.router.detach()
        if isinstance(self.bus, SocketIOBus) and self._owns_bus:
            await self.bus.disconnect()
        logger.info("client stopped")
