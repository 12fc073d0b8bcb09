"""Socket.IO transport for the room message bus."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import socketio
import structlog

from game.messaging.protocol import BusHandler, BusProtocol, Unsubscribe
from game.messaging.types import BusEvent, JoinRoomPayload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from game.logic.types import Participant

logger = structlog.get_logger()


class SocketIOBus(BusProtocol):
    """
    Bus backed by a python-socketio AsyncClient.

    Socket.IO keeps a single handler per event, so the bus registers one
    dispatcher per event name and fans out to its own handler list. After a
    reconnect the room join is replayed so the relay puts the connection back
    in the room.
    """

    def __init__(self, client: socketio.AsyncClient | None = None) -> None:
        self._client = client or socketio.AsyncClient(reconnection=True)
        self._handlers: dict[str, list[BusHandler]] = {}
        self._join: JoinRoomPayload | None = None
        self._client.on("connect", self._on_connect)

    @property
    def connected(self) -> bool:
        return self._client.connected

    async def connect(
        self,
        url: str,
        *,
        socketio_path: str = "socket.io",
        transports: Sequence[str] = ("websocket",),
    ) -> None:
        await self._client.connect(url, socketio_path=socketio_path, transports=list(transports))

    async def join(self, room_id: str, user: Participant) -> None:
        """Join a relay room; remembered and replayed on reconnect."""
        self._join = JoinRoomPayload(room_id=room_id, user=user)
        await self.emit(BusEvent.ROOM_JOIN, self._join.to_wire())

    async def disconnect(self) -> None:
        self._join = None
        await self._client.disconnect()

    async def wait(self) -> None:
        await self._client.wait()

    async def emit(self, event: str, data: dict[str, Any]) -> None:
        if not self._client.connected:
            logger.warning("bus not connected, dropping event", bus_event=event)
            return
        await self._client.emit(str(event), data)

    def on(self, event: str, handler: BusHandler) -> Unsubscribe:
        event = str(event)
        handlers = self._handlers.get(event)
        if handlers is None:
            handlers = self._handlers[event] = []
            self._client.on(event, self._make_dispatcher(event))
        handlers.append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: BusHandler) -> None:
        handlers = self._handlers.get(str(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def _make_dispatcher(self, event: str) -> BusHandler:
        async def dispatch(data: Any = None) -> None:  # noqa: ANN401
            # copy: handlers may unsubscribe while being called
            for handler in list(self._handlers.get(event, [])):
                await handler(data)

        return dispatch

    async def _on_connect(self) -> None:
        logger.info("bus connected", sid=self._client.sid)
        if self._join is not None:
            await self._client.emit(str(BusEvent.ROOM_JOIN), self._join.to_wire())
