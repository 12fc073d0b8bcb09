"""Tic-Tac-Toe on a 3x3 grid, cells addressed 0-8 in row-major order."""

from pydantic import Field

from game.logic.definition import GameDefinition, MovePayload, is_board_full, replace_cell
from game.logic.exceptions import CellOccupiedError
from game.logic.types import EMPTY_CELL, Board, Cell, GameState, Outcome, Viewport

SIZE = 3

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

_SYMBOLS = {EMPTY_CELL: ".", 1: "X", 2: "O"}


class TicTacToeMove(MovePayload):
    index: int = Field(ge=0, lt=SIZE * SIZE)


def index_to_cell(index: int) -> Cell:
    return divmod(index, SIZE)


def place(board: Board, move: TicTacToeMove) -> tuple[Board, Cell]:
    cell = index_to_cell(move.index)
    row, col = cell
    if board[row][col] != EMPTY_CELL:
        raise CellOccupiedError(f"cell {move.index} is taken")
    return replace_cell(board, cell, move.seat), cell


def check_terminal(state: GameState) -> Outcome:
    cells = [value for row in state.board for value in row]
    for a, b, c in WINNING_LINES:
        if cells[a] != EMPTY_CELL and cells[a] == cells[b] == cells[c]:
            return Outcome.win(cells[a])
    if is_board_full(state.board):
        return Outcome.drawn()
    return Outcome.undecided()


def render(state: GameState) -> str:
    return "\n".join(" ".join(_SYMBOLS.get(value, "?") for value in row) for row in state.board)


TIC_TAC_TOE = GameDefinition(
    type_id="tictactoe",
    prefix="TTT",
    title="Tic Tac Toe",
    rows=SIZE,
    cols=SIZE,
    move_model=TicTacToeMove,
    place=place,
    check_terminal=check_terminal,
    render=render,
    viewport=Viewport(width=380, height=500),
    reset_delay=3.0,
)
