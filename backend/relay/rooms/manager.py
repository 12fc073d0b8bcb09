"""Room membership and snapshot bookkeeping for the relay."""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING

import structlog

from relay.rooms.models import JoinResult, LeaveResult, RelayRoom

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from game.logic.types import Participant

logger = structlog.get_logger()

_ROOM_REAPER_INTERVAL = 30  # seconds between reaper checks


class RoomCapacityError(Exception):
    """The relay already tracks max_rooms rooms and none has expired."""


class RelayRoomManager:
    """Track which connection sits in which room and each room's latest snapshot.

    Holds no game rules: snapshots are stored exactly as the room's authority
    pushed them. Empty rooms keep their snapshot for snapshot_ttl_seconds so a
    returning player can resume.
    """

    def __init__(
        self,
        *,
        snapshot_ttl_seconds: int = 3600,
        max_rooms: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._snapshot_ttl_seconds = snapshot_ttl_seconds
        self._max_rooms = max_rooms
        self._clock = clock
        self._rooms: dict[str, RelayRoom] = {}
        self._sid_room: dict[str, str] = {}  # sid -> room_id
        self._reaper_task: asyncio.Task[None] | None = None

    # --- Public API ---

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def connection_count(self) -> int:
        return len(self._sid_room)

    def get_room(self, room_id: str) -> RelayRoom | None:
        return self._rooms.get(room_id)

    def room_of(self, sid: str) -> str | None:
        return self._sid_room.get(sid)

    def member(self, sid: str) -> Participant | None:
        room_id = self._sid_room.get(sid)
        if room_id is None:
            return None
        return self._rooms[room_id].members.get(sid)

    def join(self, sid: str, room_id: str, user: Participant) -> JoinResult:
        """Add a connection to a room, leaving its previous room first.

        Raises RoomCapacityError when a new room would exceed max_rooms.
        """
        previous: LeaveResult | None = None
        current = self._sid_room.get(sid)
        if current == room_id:
            room = self._rooms[room_id]
            room.members[sid] = user
            return JoinResult(room=room)
        if current is not None:
            previous = self.leave(sid)

        room = self._rooms.get(room_id)
        if room is None:
            if len(self._rooms) >= self._max_rooms:
                self.purge_expired()
            if len(self._rooms) >= self._max_rooms:
                raise RoomCapacityError(f"relay is tracking {self._max_rooms} rooms")
            room = self._rooms[room_id] = RelayRoom(room_id=room_id)
            logger.info("room opened", room_id=room_id)

        returned = user.id in room.ghosts
        room.ghosts.discard(user.id)
        room.members[sid] = user
        room.emptied_at = None
        self._sid_room[sid] = room_id
        return JoinResult(room=room, previous=previous, returned_from_ghost=returned)

    def leave(self, sid: str) -> LeaveResult | None:
        """Remove a connection from its room. None if it never joined one."""
        room_id = self._sid_room.pop(sid, None)
        if room_id is None:
            return None
        room = self._rooms[room_id]
        user = room.members.pop(sid)
        last_connection = room.connections_of(user.id) == 0
        if last_connection:
            room.ghosts.add(user.id)
        if room.is_empty:
            room.emptied_at = self._clock()
        return LeaveResult(room_id=room_id, user=user, last_connection=last_connection)

    def store_snapshot(self, room_id: str, snapshot: dict[str, Any]) -> None:
        room = self._rooms.get(room_id)
        if room is not None:
            room.snapshot = snapshot

    def snapshot(self, room_id: str) -> dict[str, Any] | None:
        room = self._rooms.get(room_id)
        return room.snapshot if room is not None else None

    def purge_expired(self) -> list[str]:
        """Drop rooms that have been empty for longer than the snapshot TTL."""
        now = self._clock()
        expired = [
            room.room_id
            for room in self._rooms.values()
            if room.is_empty and room.emptied_at is not None and now - room.emptied_at > self._snapshot_ttl_seconds
        ]
        for room_id in expired:
            del self._rooms[room_id]
            logger.info("room expired", room_id=room_id, ttl_seconds=self._snapshot_ttl_seconds)
        return expired

    # --- Room reaper ---

    def start_reaper(self) -> None:
        """Start the periodic room reaper task. Idempotent."""
        if self._reaper_task is not None and not self._reaper_task.done():
            return
        self._reaper_task = asyncio.create_task(self._reaper_loop())

    async def stop_reaper(self) -> None:
        if self._reaper_task is not None:
            self._reaper_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reaper_task
            self._reaper_task = None

    async def _reaper_loop(self) -> None:
        while True:
            await asyncio.sleep(_ROOM_REAPER_INTERVAL)
            try:
                self.purge_expired()
            except Exception:
                logger.exception("room reaper encountered an error")
