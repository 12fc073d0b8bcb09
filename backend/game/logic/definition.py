"""Per-game plugin record.

A concrete game is data plus a few pure functions registered with the shared
state machine, not a subclass. The machine looks the record up by type id and
calls its functions; nothing else about a game is special.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from game.logic.enums import ActionKind
from game.logic.types import EMPTY_CELL, Board, GameState

if TYPE_CHECKING:
    from collections.abc import Callable

    from game.logic.types import Cell, Outcome, Viewport

SEAT_COUNT = 2
STARTING_SEAT = 1


class MovePayload(BaseModel):
    """Fields every MOVE payload carries. Games extend it with their target."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    seat: int = Field(ge=1, le=SEAT_COUNT, validation_alias=AliasChoices("seat", "player"))


@dataclass(frozen=True)
class GameDefinition:
    """Everything the engine needs to know about one game type.

    place() returns the new board and the cell it filled, raising a
    GameRuleError when the target has no room. check_terminal() inspects a state
    whose last_move has just been set. render() is a plain-text drawing used for
    diagnostics and console clients. conceal(), when set, masks the cells a
    viewer in the given seat (None for spectators) may not see before the game
    ends.
    """

    type_id: str
    prefix: str
    title: str
    rows: int
    cols: int
    move_model: type[MovePayload]
    place: Callable[[Board, MovePayload], tuple[Board, Cell]]
    check_terminal: Callable[[GameState], Outcome]
    render: Callable[[GameState], str]
    viewport: Viewport
    reset_delay: float
    conceal: Callable[[Board, int | None], Board] | None = None

    @property
    def seat_indices(self) -> tuple[int, ...]:
        return tuple(range(1, SEAT_COUNT + 1))

    def new_board(self) -> Board:
        return tuple((EMPTY_CELL,) * self.cols for _ in range(self.rows))

    def new_game_state(self) -> GameState:
        return GameState(board=self.new_board(), turn=STARTING_SEAT)

    def other_seat(self, seat: int) -> int:
        return STARTING_SEAT if seat == SEAT_COUNT else seat + 1

    def kind(self, action: ActionKind) -> str:
        """Wire kind for an action in this game's namespace, e.g. C4_MOVE."""
        return f"{self.prefix}_{action.value}"

    def parse_kind(self, kind: str) -> ActionKind | None:
        """Strip this game's prefix from a wire kind. None if it belongs elsewhere."""
        head, sep, tail = kind.partition("_")
        if not sep or head != self.prefix:
            return None
        try:
            return ActionKind(tail)
        except ValueError:
            return None


def replace_cell(board: Board, cell: Cell, value: int) -> Board:
    """Return a copy of board with one cell set."""
    row, col = cell
    updated = list(board[row])
    updated[col] = value
    return (*board[:row], tuple(updated), *board[row + 1 :])


def is_board_full(board: Board) -> bool:
    return all(value != EMPTY_CELL for row in board for value in row)
