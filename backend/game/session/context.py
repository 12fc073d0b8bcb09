"""Explicit per-room session context handed to every game instance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from game.logic.types import Participant, Viewport
    from game.messaging.protocol import BusProtocol
    from game.session.view import GameView


def _ignore(_: object) -> None:
    return None


@dataclass
class SessionContext:
    """Who we are, where we are, and how to reach the host UI.

    One context per room. on_resize receives the Viewport the hosting panel
    should take; on_render receives a fresh GameView after every state change.
    apply_locally is set when the bus does not echo events back to their
    sender. reset_delay_scale multiplies each game's post-game reset delay.
    """

    room_id: str
    participant: Participant
    bus: BusProtocol
    on_resize: Callable[[Viewport], None] = _ignore
    on_render: Callable[[GameView], None] = _ignore
    apply_locally: bool = False
    reset_delay_scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.room_id:
            raise ValueError("room_id must not be empty")
        if self.reset_delay_scale < 0:
            raise ValueError(f"reset_delay_scale must be >= 0, got {self.reset_delay_scale}")
