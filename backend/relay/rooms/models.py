from dataclasses import dataclass, field
from typing import Any

from game.logic.types import Participant


@dataclass
class RelayRoom:
    """Connections currently joined to a room plus its last persisted snapshot.

    A user may hold several connections (tabs) in the same room; they count as
    present while at least one remains. Users whose last connection dropped are
    kept in ghosts until they come back.
    """

    room_id: str
    members: dict[str, Participant] = field(default_factory=dict)  # sid -> participant
    ghosts: set[str] = field(default_factory=set)  # user ids
    snapshot: dict[str, Any] | None = None  # wire-form {activeGameId, seats, gameState}
    emptied_at: float | None = None  # time.monotonic() when the last member left

    @property
    def is_empty(self) -> bool:
        return not self.members

    def connections_of(self, user_id: str) -> int:
        return sum(1 for member in self.members.values() if member.id == user_id)


@dataclass(frozen=True)
class LeaveResult:
    room_id: str
    user: Participant
    # the user has no connection left in the room
    last_connection: bool


@dataclass(frozen=True)
class JoinResult:
    room: RelayRoom
    previous: LeaveResult | None = None
    returned_from_ghost: bool = False
