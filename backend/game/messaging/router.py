from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from game.logic.exceptions import UnknownGameError
from game.messaging.types import BusEvent, GhostPayload, RestorePayload

if TYPE_CHECKING:
    from game.messaging.protocol import BusHandler, BusProtocol, Unsubscribe
    from game.session.lifecycle import GameLifecycleManager

logger = structlog.get_logger()


def guarded(event: str, handler: BusHandler) -> BusHandler:
    """Wrap a bus handler so one bad delivery never stops the subscriber."""

    async def run(data: Any) -> None:  # noqa: ANN401
        try:
            await handler(data)
        except Exception:
            logger.exception("bus handler failed", bus_event=str(event))

    return run


class BusRouter:
    """
    Routes room-level bus events to the lifecycle manager.

    game:action is not routed here: each game instance subscribes its own
    synchronizer so a torn-down instance stops receiving envelopes as soon as
    it unsubscribes.
    """

    def __init__(self, bus: BusProtocol, lifecycle: GameLifecycleManager) -> None:
        self._bus = bus
        self._lifecycle = lifecycle
        self._subscriptions: list[Unsubscribe] = []

    def attach(self) -> None:
        if self._subscriptions:
            return
        self._subscriptions = [
            self._bus.on(BusEvent.GAME_RESTORE, guarded(BusEvent.GAME_RESTORE, self.handle_restore)),
            self._bus.on(BusEvent.USER_GHOST, guarded(BusEvent.USER_GHOST, self.handle_ghost)),
        ]

    def detach(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []

    async def handle_restore(self, raw: Any) -> None:  # noqa: ANN401
        try:
            payload = RestorePayload.model_validate(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("invalid restore payload", error=str(e))
            return
        try:
            await self._lifecycle.handle_restore(payload)
        except UnknownGameError as e:
            logger.warning("restore for unknown game", game_type=e.type_id)

    async def handle_ghost(self, raw: Any) -> None:  # noqa: ANN401
        try:
            payload = GhostPayload.model_validate(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("invalid ghost payload", error=str(e))
            return
        self._lifecycle.handle_ghost(payload)
