"""
Connect Four: 7 columns by 6 rows, pieces drop to the lowest free row.

A game is won by a run of WIN_LENGTH same-seat pieces through the piece just
played, along any of the four axes.
"""

from pydantic import Field

from game.logic.definition import GameDefinition, MovePayload, is_board_full, replace_cell
from game.logic.exceptions import CellOccupiedError
from game.logic.types import EMPTY_CELL, Board, Cell, GameState, Outcome, Viewport

ROWS = 6
COLS = 7
WIN_LENGTH = 4

# (row step, col step): horizontal, vertical, and the two diagonals
AXES: tuple[Cell, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))

_SYMBOLS = {EMPTY_CELL: ".", 1: "X", 2: "O"}


class ConnectFourMove(MovePayload):
    col: int = Field(ge=0, lt=COLS)


def drop_row(board: Board, col: int) -> int | None:
    """Return the lowest empty row in a column, or None if the column is full."""
    for row in range(len(board) - 1, -1, -1):
        if board[row][col] == EMPTY_CELL:
            return row
    return None


def place(board: Board, move: ConnectFourMove) -> tuple[Board, Cell]:
    row = drop_row(board, move.col)
    if row is None:
        raise CellOccupiedError(f"column {move.col} is full")
    cell = (row, move.col)
    return replace_cell(board, cell, move.seat), cell


def count_run(board: Board, cell: Cell, axis: Cell) -> int:
    """Count contiguous same-seat pieces through cell along one axis, both directions."""
    row, col = cell
    seat = board[row][col]
    count = 1
    for direction in (1, -1):
        step_row, step_col = axis[0] * direction, axis[1] * direction
        r, c = row + step_row, col + step_col
        while 0 <= r < len(board) and 0 <= c < len(board[r]) and board[r][c] == seat:
            count += 1
            r, c = r + step_row, c + step_col
    return count


def check_terminal(state: GameState) -> Outcome:
    if state.last_move is not None:
        row, col = state.last_move
        seat = state.board[row][col]
        if seat != EMPTY_CELL and any(count_run(state.board, state.last_move, axis) >= WIN_LENGTH for axis in AXES):
            return Outcome.win(seat)
    if is_board_full(state.board):
        return Outcome.drawn()
    return Outcome.undecided()


def render(state: GameState) -> str:
    lines = [" ".join(_SYMBOLS.get(value, "?") for value in row) for row in state.board]
    lines.append(" ".join(str(col) for col in range(COLS)))
    return "\n".join(lines)


CONNECT_FOUR = GameDefinition(
    type_id="connect4",
    prefix="C4",
    title="Connect 4",
    rows=ROWS,
    cols=COLS,
    move_model=ConnectFourMove,
    place=place,
    check_terminal=check_terminal,
    render=render,
    viewport=Viewport(width=520, height=600),
    reset_delay=5.0,
)
