"""
Rock-Paper-Scissors played as a two-turn game.

The board is a single row with one cell per seat holding that seat's RpsChoice.
Seat 1 chooses first, then seat 2; the game resolves as soon as both cells are
set. Every peer's table holds both choices (client-trusted, like everything
else); the render and the view hide the other seat's choice until the end.
"""

from typing import Any

from pydantic import field_validator

from game.logic.definition import GameDefinition, MovePayload, replace_cell
from game.logic.enums import RpsChoice
from game.logic.exceptions import CellOccupiedError
from game.logic.types import EMPTY_CELL, Board, Cell, GameState, Outcome, Viewport

# a choice that is made but not yet revealed to this viewer
HIDDEN_CHOICE = -1


class RockPaperScissorsMove(MovePayload):
    choice: RpsChoice

    @field_validator("choice", mode="before")
    @classmethod
    def _parse_choice_name(cls, v: Any) -> Any:  # noqa: ANN401
        if isinstance(v, str) and not v.strip().isdigit():
            try:
                return RpsChoice[v.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown choice {v!r}") from None
        return v


def place(board: Board, move: RockPaperScissorsMove) -> tuple[Board, Cell]:
    cell = (0, move.seat - 1)
    if board[0][move.seat - 1] != EMPTY_CELL:
        raise CellOccupiedError(f"seat {move.seat} already chose")
    return replace_cell(board, cell, int(move.choice)), cell


def conceal(board: Board, viewer_seat: int | None) -> Board:
    """Hide every choice except the viewer's own."""
    row = tuple(
        value if value == EMPTY_CELL or seat == viewer_seat else HIDDEN_CHOICE
        for seat, value in enumerate(board[0], start=1)
    )
    return (row,)


def check_terminal(state: GameState) -> Outcome:
    first, second = state.board[0]
    if EMPTY_CELL in (first, second):
        return Outcome.undecided()
    if first == second:
        return Outcome.drawn()
    return Outcome.win(1 if RpsChoice(first).beats(RpsChoice(second)) else 2)


def render(state: GameState) -> str:
    parts = []
    for seat, value in enumerate(state.board[0], start=1):
        if value == EMPTY_CELL:
            label = "..."
        elif state.terminal:
            label = RpsChoice(value).name.lower()
        else:
            label = "ready"
        parts.append(f"seat {seat}: {label}")
    return " | ".join(parts)


ROCK_PAPER_SCISSORS = GameDefinition(
    type_id="rps",
    prefix="RPS",
    title="Rock Paper Scissors",
    rows=1,
    cols=2,
    move_model=RockPaperScissorsMove,
    place=place,
    check_terminal=check_terminal,
    render=render,
    viewport=Viewport(width=420, height=550),
    reset_delay=3.0,
    conceal=conceal,
)
