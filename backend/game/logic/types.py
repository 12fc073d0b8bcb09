"""
Pydantic models for turn-game data structures.

All models are frozen. State transitions build new instances with
model_copy(update=...) and never mutate the input. Field names are snake_case in
Python and camelCase on the wire (see WireModel).
"""

from __future__ import annotations

from typing import Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from game.logic.enums import OutcomeKind

EMPTY_CELL = 0
DEFAULT_COLOR = "#3b82f6"

# row-major grid of seat indices (or game-specific codes), EMPTY_CELL when free
Board = tuple[tuple[int, ...], ...]
Cell = tuple[int, int]


class WireModel(BaseModel):
    """Base for models that cross the bus: frozen, camelCase aliases, name or alias accepted."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Participant(WireModel):
    """A connected user as seen by the game core."""

    id: str = Field(min_length=1, max_length=100)
    name: str = Field(default="User", max_length=50)
    color: str = Field(
        default=DEFAULT_COLOR,
        max_length=32,
        validation_alias=AliasChoices("color", "mouseColor"),
    )


class Seat(WireModel):
    index: int = Field(ge=1)
    occupant: Participant | None = None

    @property
    def is_empty(self) -> bool:
        return self.occupant is None


class GameState(WireModel):
    """Board and turn bookkeeping for one game instance."""

    board: Board
    turn: int = Field(default=1, ge=1)
    terminal: bool = False
    winner: int | None = None
    draw: bool = False
    last_move: Cell | None = None


class TableState(WireModel):
    """The synchronized unit: seats plus game state.

    This is exactly what a STATE_SYNC carries and what the authority persists.
    """

    seats: tuple[Seat, ...]
    game_state: GameState

    def occupant(self, index: int) -> Participant | None:
        for seat in self.seats:
            if seat.index == index:
                return seat.occupant
        return None

    def seat_of(self, participant_id: str) -> int | None:
        """Return the seat index held by the participant, or None if unseated."""
        for seat in self.seats:
            if seat.occupant is not None and seat.occupant.id == participant_id:
                return seat.index
        return None

    @property
    def is_full(self) -> bool:
        return all(not seat.is_empty for seat in self.seats)


class Outcome(BaseModel):
    """Terminal check result: no decision, a winning seat, or a draw."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    seat: int | None = None

    @classmethod
    def undecided(cls) -> Self:
        return cls(kind=OutcomeKind.NONE)

    @classmethod
    def win(cls, seat: int) -> Self:
        return cls(kind=OutcomeKind.WIN, seat=seat)

    @classmethod
    def drawn(cls) -> Self:
        return cls(kind=OutcomeKind.DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.kind != OutcomeKind.NONE


class Viewport(BaseModel):
    """Pixel size the hosting panel should take for a game or the menu."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
