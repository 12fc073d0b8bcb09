"""
Render model handed to the host UI after every state change.

The view is derived entirely from the table plus the local participant id and
presence markers; nothing in it feeds back into game state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from game.logic.enums import TablePhase
from game.logic.machine import phase
from game.logic.types import Board

if TYPE_CHECKING:
    from game.logic.definition import GameDefinition
    from game.logic.types import TableState
    from game.session.presence import PresenceMonitor

WAITING_STATUS = "Waiting for players..."
YOUR_TURN_STATUS = "YOUR TURN"
DRAW_STATUS = "Draw!"
EMPTY_SEAT_LABEL = "Empty"
LOCAL_SEAT_LABEL = "You"


class SeatView(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    label: str
    color: str | None = None
    active: bool = False
    away: bool = False
    is_local: bool = False


class GameView(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_id: str
    title: str
    status: str
    seats: tuple[SeatView, ...]
    board: Board
    board_text: str
    turn: int
    terminal: bool
    winner: int | None = None
    draw: bool = False
    local_seat: int | None = None


def _display_name(table: TableState, seat: int) -> str:
    occupant = table.occupant(seat)
    return occupant.name if occupant is not None else f"Seat {seat}"


def status_text(table: TableState, participant_id: str) -> str:
    state = table.game_state
    current = phase(table)
    if current == TablePhase.TERMINAL:
        if state.winner is None:
            return DRAW_STATUS
        return f"{_display_name(table, state.winner)} Wins!"
    if current == TablePhase.AWAITING_PLAYERS:
        return WAITING_STATUS
    occupant = table.occupant(state.turn)
    if occupant is not None and occupant.id == participant_id:
        return YOUR_TURN_STATUS
    return f"{_display_name(table, state.turn)}'s Turn"


def build_view(
    definition: GameDefinition,
    table: TableState,
    participant_id: str,
    presence: PresenceMonitor | None = None,
) -> GameView:
    state = table.game_state
    in_progress = phase(table) == TablePhase.IN_PROGRESS
    local_seat = table.seat_of(participant_id)
    board = state.board
    if definition.conceal is not None and not state.terminal:
        board = definition.conceal(board, local_seat)
    seats = []
    for seat in table.seats:
        occupant = seat.occupant
        is_local = occupant is not None and occupant.id == participant_id
        if occupant is None:
            label = EMPTY_SEAT_LABEL
        elif is_local:
            label = LOCAL_SEAT_LABEL
        else:
            label = occupant.name
        seats.append(
            SeatView(
                index=seat.index,
                label=label,
                color=occupant.color if occupant is not None else None,
                active=in_progress and seat.index == state.turn,
                away=presence is not None and presence.is_away(table, seat.index),
                is_local=is_local,
            ),
        )
    return GameView(
        type_id=definition.type_id,
        title=definition.title,
        status=status_text(table, participant_id),
        seats=tuple(seats),
        board=board,
        board_text=definition.render(state),
        turn=state.turn,
        terminal=state.terminal,
        winner=state.winner,
        draw=state.draw,
        local_seat=local_seat,
    )
