"""
Game session lifecycle for one room.

Owns at most one active game instance (a SessionSynchronizer). Selecting a
game tears the previous instance down first, so envelopes addressed to it can
no longer be applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.logic.exceptions import GameRuleError
from game.logic.registry import MENU_VIEWPORT, get_definition, list_definitions
from game.session.synchronizer import SessionSynchronizer

if TYPE_CHECKING:
    from game.logic.definition import GameDefinition
    from game.messaging.types import GhostPayload, RestorePayload
    from game.session.context import SessionContext

logger = structlog.get_logger()


class GameLifecycleManager:
    def __init__(self, context: SessionContext) -> None:
        self._context = context
        self._active: SessionSynchronizer | None = None
        self._visible = True

    @property
    def active(self) -> SessionSynchronizer | None:
        return self._active

    @property
    def visible(self) -> bool:
        return self._visible

    def menu(self) -> list[GameDefinition]:
        """Games offered in the room's game menu, in display order."""
        return list_definitions()

    async def select_game(self, type_id: str, restore: RestorePayload | None = None) -> SessionSynchronizer:
        """
        Start a fresh instance of the named game.

        With a restore snapshot the table is seeded from it and nothing is
        sent; otherwise the room is asked for the current state.
        Raises UnknownGameError for an unregistered type id.
        """
        definition = get_definition(type_id)
        await self._teardown()

        instance = SessionSynchronizer(self._context, definition)
        instance.attach()
        self._active = instance
        self._visible = True
        self._context.on_resize(definition.viewport)
        logger.info("game selected", game_type=type_id, restored=restore is not None)

        if restore is not None:
            try:
                instance.restore(restore.to_table())
            except GameRuleError as e:
                logger.warning("restore snapshot rejected", game_type=type_id, reason=str(e))
            else:
                return instance
        await instance.request_state()
        return instance

    async def exit_to_menu(self) -> None:
        await self._teardown()
        self._context.on_resize(MENU_VIEWPORT)

    def enable(self) -> None:
        """Panel reopened: re-signal the current size without asking for state."""
        self._visible = True
        if self._active is not None:
            self._context.on_resize(self._active.definition.viewport)
        else:
            self._context.on_resize(MENU_VIEWPORT)

    def hide(self) -> None:
        self._visible = False

    async def handle_restore(self, payload: RestorePayload) -> None:
        """Resume a persisted game, but only from the menu of a visible panel."""
        if not self._visible or self._active is not None:
            logger.debug("restore skipped", game_type=payload.active_game_id, visible=self._visible)
            return
        await self.select_game(payload.active_game_id, restore=payload)

    def handle_ghost(self, payload: GhostPayload) -> None:
        if self._active is not None:
            self._active.set_ghost(payload.user_id, is_ghost=payload.is_ghost)

    async def close(self) -> None:
        await self._teardown()

    async def _teardown(self) -> None:
        instance = self._active
        if instance is None:
            return
        self._active = None
        try:
            await instance.on_leave()
        finally:
            instance.destroy()
        logger.info("game closed", game_type=instance.definition.type_id)
