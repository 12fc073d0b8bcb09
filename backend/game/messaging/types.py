"""Bus event names and the payload models carried by each event."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from game.logic.definition import SEAT_COUNT
from game.logic.types import DEFAULT_COLOR, GameState, Participant, Seat, TableState, WireModel

_ROOM_ID_FIELD = Field(min_length=1, max_length=100)


class BusEvent(StrEnum):
    GAME_ACTION = "game:action"
    GAME_RESTORE = "game:restore"
    PERSIST_STATE = "game:persist_state"
    USER_GHOST = "user:ghost"
    ROOM_JOIN = "room:join"


class ActionEnvelope(WireModel):
    """One game action as broadcast on game:action.

    kind is namespaced by the game prefix (C4_MOVE, TTT_SIT, ...). Envelopes
    carry no sequence number; duplicates and reordering are tolerated by the
    receiving synchronizer.
    """

    room_id: str = _ROOM_ID_FIELD
    actor_id: str = Field(min_length=1, max_length=100)
    actor_name: str = Field(default="User", max_length=50)
    actor_color: str = Field(default=DEFAULT_COLOR, max_length=32)
    kind: str = Field(min_length=1, max_length=64)
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def build(cls, room_id: str, actor: Participant, kind: str, payload: dict[str, Any] | None = None) -> ActionEnvelope:
        return cls(
            room_id=room_id,
            actor_id=actor.id,
            actor_name=actor.name,
            actor_color=actor.color,
            kind=kind,
            payload=payload or {},
        )

    @property
    def actor(self) -> Participant:
        return Participant(id=self.actor_id, name=self.actor_name, color=self.actor_color)


class SitPayload(WireModel):
    seat: int = Field(ge=1, le=SEAT_COUNT)


class StateSyncPayload(WireModel):
    """Full table snapshot sent by the authority in reply to STATE_REQUEST."""

    seats: tuple[Seat, ...]
    game_state: GameState

    @classmethod
    def from_table(cls, table: TableState) -> StateSyncPayload:
        return cls(seats=table.seats, game_state=table.game_state)

    def to_table(self) -> TableState:
        return TableState(seats=self.seats, game_state=self.game_state)


class RestorePayload(StateSyncPayload):
    """Persisted snapshot of a room's active game, as stored by the relay."""

    active_game_id: str = Field(min_length=1, max_length=32)

    @classmethod
    def from_game(cls, active_game_id: str, table: TableState) -> RestorePayload:
        return cls(active_game_id=active_game_id, seats=table.seats, game_state=table.game_state)


class PersistPayload(WireModel):
    room_id: str = _ROOM_ID_FIELD
    full_state: RestorePayload


class GhostPayload(WireModel):
    user_id: str = Field(min_length=1, max_length=100)
    is_ghost: bool


class JoinRoomPayload(WireModel):
    room_id: str = _ROOM_ID_FIELD
    user: Participant


def parse_envelope(data: Any) -> ActionEnvelope:  # noqa: ANN401
    """Validate a raw game:action payload. Raises ValidationError."""
    return ActionEnvelope.model_validate(data)
