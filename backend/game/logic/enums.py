"""
String enum definitions for turn-game concepts.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class ActionKind(StrEnum):
    """Action kinds carried by an envelope, without the game prefix."""

    SIT = "SIT"
    MOVE = "MOVE"
    RESET = "RESET"
    STATE_REQUEST = "STATE_REQUEST"
    STATE_SYNC = "STATE_SYNC"
    LEAVE = "LEAVE"


class TablePhase(StrEnum):
    """Lifecycle phase of a two-seat table, derived from seats and game state."""

    AWAITING_PLAYERS = "awaiting_players"
    IN_PROGRESS = "in_progress"
    TERMINAL = "terminal"


class OutcomeKind(StrEnum):
    """Result of a terminal check."""

    NONE = "none"
    WIN = "win"
    DRAW = "draw"


class RpsChoice(IntEnum):
    """Rock-paper-scissors hands as stored on the board (0 means no choice yet)."""

    ROCK = 1
    PAPER = 2
    SCISSORS = 3

    def beats(self, other: RpsChoice) -> bool:
        return (self, other) in _RPS_WINS


_RPS_WINS = frozenset(
    {
        (RpsChoice.ROCK, RpsChoice.SCISSORS),
        (RpsChoice.SCISSORS, RpsChoice.PAPER),
        (RpsChoice.PAPER, RpsChoice.ROCK),
    },
)
