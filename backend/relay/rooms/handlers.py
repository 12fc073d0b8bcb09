"""Socket.IO event handlers for the room relay.

The relay never inspects game rules. It scopes traffic to rooms, echoes
game:action to every member (the sender included), keeps the latest
game:persist_state snapshot per room, and reports presence as user:ghost.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from game.messaging.types import (
    BusEvent,
    GhostPayload,
    JoinRoomPayload,
    PersistPayload,
    parse_envelope,
)
from relay.rooms.manager import RoomCapacityError

if TYPE_CHECKING:
    import socketio

    from relay.rooms.manager import RelayRoomManager
    from relay.rooms.models import LeaveResult

logger = structlog.get_logger()


class RelayHandlers:
    def __init__(self, server: socketio.AsyncServer, rooms: RelayRoomManager) -> None:
        self._server = server
        self._rooms = rooms

    def register(self) -> None:
        self._server.on("connect", self.connect)
        self._server.on("disconnect", self.disconnect)
        self._server.on(BusEvent.ROOM_JOIN.value, self.room_join)
        self._server.on(BusEvent.GAME_ACTION.value, self.game_action)
        self._server.on(BusEvent.PERSIST_STATE.value, self.persist_state)

    async def connect(self, sid: str, _environ: dict[str, Any], _auth: Any = None) -> None:  # noqa: ANN401
        logger.debug("connection opened", sid=sid)

    async def disconnect(self, sid: str, reason: Any = None) -> None:  # noqa: ANN401
        left = self._rooms.leave(sid)
        logger.debug("connection closed", sid=sid, reason=str(reason) if reason is not None else None)
        if left is not None:
            await self._announce_departure(left)

    async def room_join(self, sid: str, data: Any) -> None:  # noqa: ANN401
        try:
            payload = JoinRoomPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("invalid room join", sid=sid, error_count=e.error_count())
            return
        try:
            result = self._rooms.join(sid, payload.room_id, payload.user)
        except RoomCapacityError as e:
            logger.warning("room join refused", sid=sid, room_id=payload.room_id, reason=str(e))
            return

        if result.previous is not None:
            await self._server.leave_room(sid, result.previous.room_id)
            await self._announce_departure(result.previous)
        await self._server.enter_room(sid, payload.room_id)
        logger.info("joined room", room_id=payload.room_id, user_id=payload.user.id)

        if result.returned_from_ghost:
            ghost = GhostPayload(user_id=payload.user.id, is_ghost=False)
            await self._server.emit(BusEvent.USER_GHOST.value, ghost.to_wire(), room=payload.room_id)
        snapshot = result.room.snapshot
        if snapshot is not None:
            await self._server.emit(BusEvent.GAME_RESTORE.value, snapshot, to=sid)

    async def game_action(self, sid: str, data: Any) -> None:  # noqa: ANN401
        room_id = self._rooms.room_of(sid)
        if room_id is None:
            logger.debug("action from connection outside any room", sid=sid)
            return
        try:
            envelope = parse_envelope(data)
        except ValidationError as e:
            logger.warning("invalid action envelope", sid=sid, error_count=e.error_count())
            return
        if envelope.room_id != room_id:
            logger.warning("action for another room", sid=sid, room_id=room_id, envelope_room=envelope.room_id)
            return
        await self._server.emit(BusEvent.GAME_ACTION.value, envelope.to_wire(), room=room_id)

    async def persist_state(self, sid: str, data: Any) -> None:  # noqa: ANN401
        room_id = self._rooms.room_of(sid)
        if room_id is None:
            return
        try:
            payload = PersistPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("invalid persist payload", sid=sid, error_count=e.error_count())
            return
        if payload.room_id != room_id:
            logger.warning("persist for another room", sid=sid, room_id=room_id)
            return
        self._rooms.store_snapshot(room_id, payload.full_state.to_wire())
        logger.debug("snapshot stored", room_id=room_id, game_type=payload.full_state.active_game_id)

    async def _announce_departure(self, left: LeaveResult) -> None:
        if not left.last_connection:
            return
        ghost = GhostPayload(user_id=left.user.id, is_ghost=True)
        await self._server.emit(BusEvent.USER_GHOST.value, ghost.to_wire(), room=left.room_id)
        logger.info("user away", room_id=left.room_id, user_id=left.user.id)
