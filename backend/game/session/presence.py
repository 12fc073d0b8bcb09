"""Display-only away markers for seated participants."""

import structlog

from game.logic.types import TableState

logger = structlog.get_logger()


class PresenceMonitor:
    """
    Track which seat occupants the relay reported as ghosted.

    A marker belongs to the participant it was set for, not to the seat, so it
    vanishes once the seat changes hands. Away markers never affect move
    legality.
    """

    def __init__(self) -> None:
        self._away: set[str] = set()

    def set_ghost(self, table: TableState, participant_id: str, *, is_ghost: bool) -> bool:
        """Apply a ghost report. Returns True when a seated participant's marker changed.

        Reports about participants who hold no seat are ignored.
        """
        if not is_ghost:
            if participant_id not in self._away:
                return False
            self._away.discard(participant_id)
            return table.seat_of(participant_id) is not None
        seat = table.seat_of(participant_id)
        if seat is None or participant_id in self._away:
            return False
        self._away.add(participant_id)
        logger.debug("seat occupant away", seat=seat, participant_id=participant_id)
        return True

    def is_away(self, table: TableState, seat: int) -> bool:
        occupant = table.occupant(seat)
        return occupant is not None and occupant.id in self._away

    def clear(self) -> None:
        self._away.clear()
