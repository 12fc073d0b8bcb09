"""
Shared two-seat turn-game state machine.

Every function is pure: it takes frozen models and returns new ones, raising a
GameRuleError subclass when the requested transition is illegal. Game-specific
behavior (board shape, move target, win predicate) comes from the
GameDefinition passed in.
"""

from pydantic import ValidationError

from game.logic.definition import GameDefinition, MovePayload
from game.logic.enums import OutcomeKind, TablePhase
from game.logic.exceptions import (
    AlreadySeatedError,
    GameOverError,
    InvalidMoveError,
    InvalidSeatError,
    InvalidTableError,
    NotYourTurnError,
    SeatTakenError,
    UnseatedActorError,
    WaitingForPlayersError,
)
from game.logic.registry import get_definition
from game.logic.types import GameState, Outcome, Participant, Seat, TableState


def new_table(definition: GameDefinition) -> TableState:
    """Empty seats, fresh board, starting seat to move."""
    return TableState(
        seats=tuple(Seat(index=index) for index in definition.seat_indices),
        game_state=definition.new_game_state(),
    )


def create(type_id: str) -> TableState:
    """Create a table for a registered game type. Raises UnknownGameError."""
    return new_table(get_definition(type_id))


def phase(table: TableState) -> TablePhase:
    if table.game_state.terminal:
        return TablePhase.TERMINAL
    if not table.is_full:
        return TablePhase.AWAITING_PLAYERS
    return TablePhase.IN_PROGRESS


def _replace_seat(table: TableState, index: int, occupant: Participant | None) -> TableState:
    seats = tuple(
        seat.model_copy(update={"occupant": occupant}) if seat.index == index else seat for seat in table.seats
    )
    return table.model_copy(update={"seats": seats})


def sit(table: TableState, seat: int, participant: Participant) -> TableState:
    """Place a participant in an empty seat.

    A participant holds at most one seat, so sitting while already seated is
    rejected rather than treated as a move between seats.
    """
    if all(existing.index != seat for existing in table.seats):
        raise InvalidSeatError(f"no seat {seat}")
    occupant = table.occupant(seat)
    if occupant is not None:
        raise SeatTakenError(seat=seat, occupant_id=occupant.id)
    held = table.seat_of(participant.id)
    if held is not None:
        raise AlreadySeatedError(f"{participant.id} already holds seat {held}")
    return _replace_seat(table, seat, participant)


def leave(table: TableState, participant_id: str) -> TableState:
    """Clear every seat held by the participant. A no-op when unseated."""
    if table.seat_of(participant_id) is None:
        return table
    seats = tuple(
        seat.model_copy(update={"occupant": None})
        if seat.occupant is not None and seat.occupant.id == participant_id
        else seat
        for seat in table.seats
    )
    return table.model_copy(update={"seats": seats})


def check_terminal(definition: GameDefinition, game_state: GameState) -> Outcome:
    return definition.check_terminal(game_state)


def validate_move(
    definition: GameDefinition,
    table: TableState,
    actor_id: str,
    payload: dict,
) -> tuple[int, MovePayload]:
    """Run every legality check for a MOVE without applying it.

    Returns the moving seat and the parsed move. Check order: game over,
    actor owns the named seat, both seats filled, turn.
    """
    try:
        move = definition.move_model.model_validate(payload)
    except ValidationError as e:
        raise InvalidMoveError(f"bad {definition.type_id} move: {e.error_count()} error(s)") from e

    state = table.game_state
    if state.terminal:
        raise GameOverError("game is over, waiting for reset")
    occupant = table.occupant(move.seat)
    if occupant is None or occupant.id != actor_id:
        raise UnseatedActorError(f"{actor_id} does not hold seat {move.seat}")
    if not table.is_full:
        raise WaitingForPlayersError("both seats must be filled")
    if move.seat != state.turn:
        raise NotYourTurnError(seat=move.seat, turn=state.turn)
    return move.seat, move


def apply_action(
    definition: GameDefinition,
    table: TableState,
    actor_id: str,
    payload: dict,
) -> TableState:
    """Apply a MOVE for actor_id and return the resulting table.

    The turn passes to the other seat only when the move did not end the game.
    """
    seat, move = validate_move(definition, table, actor_id, payload)
    board, cell = definition.place(table.game_state.board, move)

    placed = table.game_state.model_copy(update={"board": board, "last_move": cell})
    outcome = definition.check_terminal(placed)
    if outcome.is_terminal:
        updated = placed.model_copy(
            update={
                "terminal": True,
                "winner": outcome.seat,
                "draw": outcome.kind == OutcomeKind.DRAW,
            },
        )
    else:
        updated = placed.model_copy(update={"turn": definition.other_seat(seat)})
    return table.model_copy(update={"game_state": updated})


def reset(definition: GameDefinition, table: TableState) -> TableState:
    """Fresh board and starting turn. Seats are preserved."""
    return table.model_copy(update={"game_state": definition.new_game_state()})


def check_table(definition: GameDefinition, table: TableState) -> TableState:
    """Verify a received table fits this game's seats and board shape."""
    indices = tuple(seat.index for seat in table.seats)
    if indices != definition.seat_indices:
        raise InvalidTableError(f"expected seats {definition.seat_indices}, got {indices}")
    board = table.game_state.board
    if len(board) != definition.rows or any(len(row) != definition.cols for row in board):
        raise InvalidTableError(f"board does not match {definition.rows}x{definition.cols}")
    state = table.game_state
    if state.turn not in definition.seat_indices:
        raise InvalidTableError(f"turn {state.turn} is not a seat")
    return table

