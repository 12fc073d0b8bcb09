"""Typed domain exceptions for turn-game rule violations.

Every rule violation is a subclass of GameRuleError rather than a raw
ValueError. The state machine raises them; the session synchronizer catches
GameRuleError at its boundary and drops the offending action, so none of these
ever reach the bus subscriber.
"""


class GameRuleError(Exception):
    """Base exception for game rule violations."""


class GameOverError(GameRuleError):
    """The game is terminal; only a reset may change the board."""


class UnseatedActorError(GameRuleError):
    """The actor does not occupy the seat named in the move."""


class WaitingForPlayersError(GameRuleError):
    """A move was attempted before both seats were filled."""


class NotYourTurnError(GameRuleError):
    """The moving seat is not the seat whose turn it is."""

    def __init__(self, *, seat: int, turn: int) -> None:
        self.seat = seat
        self.turn = turn
        super().__init__(f"seat {seat} moved on seat {turn}'s turn")


class CellOccupiedError(GameRuleError):
    """The target cell (or column) has no room for the move."""


class InvalidMoveError(GameRuleError):
    """The move payload is structurally invalid for this game."""


class InvalidSeatError(GameRuleError):
    """The seat index does not exist for this table."""


class SeatTakenError(GameRuleError):
    """SIT targeted a seat that already has an occupant."""

    def __init__(self, *, seat: int, occupant_id: str) -> None:
        self.seat = seat
        self.occupant_id = occupant_id
        super().__init__(f"seat {seat} is already held by {occupant_id}")


class AlreadySeatedError(GameRuleError):
    """The participant already holds a seat in this game."""


class InvalidTableError(GameRuleError):
    """A received snapshot does not fit the game's seats or board shape."""


class UnknownGameError(LookupError):
    """No game definition is registered under the requested type id."""

    def __init__(self, type_id: str) -> None:
        self.type_id = type_id
        super().__init__(f"unknown game type: {type_id!r}")
