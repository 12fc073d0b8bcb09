"""
Authority resolution for a table.

The occupant of seat 1 is the authority: it answers state requests, schedules
the post-game reset and pushes snapshots for persistence. With seat 1 empty
there is no authority and state requests go unanswered.
"""

from game.logic.types import Participant, TableState

AUTHORITY_SEAT = 1


def authority_of(table: TableState) -> Participant | None:
    return table.occupant(AUTHORITY_SEAT)


def is_authority(table: TableState, participant_id: str) -> bool:
    authority = authority_of(table)
    return authority is not None and authority.id == participant_id


def seat_of(table: TableState, participant_id: str) -> int | None:
    return table.seat_of(participant_id)
