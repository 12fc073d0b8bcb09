"""
Per-instance game session synchronizer.

Every peer in a room runs one synchronizer for the active game. Actions are
broadcast as envelopes on game:action and applied by each peer to its own copy
of the table through the shared state machine. Peers converge because they
apply the same deterministic transitions, and the seat-1 authority re-seeds
late joiners with a full snapshot on request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from game.logic import machine
from game.logic.enums import ActionKind
from game.logic.exceptions import GameRuleError
from game.logic.timer import ResetTimer
from game.messaging.router import guarded
from game.messaging.types import (
    ActionEnvelope,
    BusEvent,
    PersistPayload,
    RestorePayload,
    SitPayload,
    StateSyncPayload,
    parse_envelope,
)
from game.session.authority import is_authority
from game.session.presence import PresenceMonitor
from game.session.view import build_view

if TYPE_CHECKING:
    from game.logic.definition import GameDefinition
    from game.logic.types import TableState
    from game.messaging.protocol import Unsubscribe
    from game.session.context import SessionContext
    from game.session.view import GameView

logger = structlog.get_logger()


class SessionSynchronizer:
    """Keeps one game instance's table in step with the rest of the room."""

    def __init__(
        self,
        context: SessionContext,
        definition: GameDefinition,
        table: TableState | None = None,
    ) -> None:
        self._context = context
        self._definition = definition
        self._table = table if table is not None else machine.new_table(definition)
        self._presence = PresenceMonitor()
        self._timer = ResetTimer()
        self._unsubscribe: Unsubscribe | None = None
        self._closed = False

    @property
    def definition(self) -> GameDefinition:
        return self._definition

    @property
    def table(self) -> TableState:
        return self._table

    @property
    def presence(self) -> PresenceMonitor:
        return self._presence

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reset_pending(self) -> bool:
        return self._timer.pending

    @property
    def is_authority(self) -> bool:
        return is_authority(self._table, self._context.participant.id)

    @property
    def local_seat(self) -> int | None:
        return self._table.seat_of(self._context.participant.id)

    def view(self) -> GameView:
        return build_view(self._definition, self._table, self._context.participant.id, self._presence)

    def attach(self) -> None:
        """Subscribe to game:action on the context's bus."""
        if self._closed:
            raise RuntimeError("synchronizer is destroyed")
        if self._unsubscribe is None:
            self._unsubscribe = self._context.bus.on(
                BusEvent.GAME_ACTION,
                guarded(BusEvent.GAME_ACTION, self._on_bus_action),
            )

    def destroy(self) -> None:
        """Stop receiving envelopes and drop any pending reset. Irreversible."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._timer.cancel()
        self._presence.clear()
        self._closed = True

    # --- outbound ---

    async def on_local_action(self, action: ActionKind | str, payload: dict[str, Any] | None = None) -> bool:
        """
        Broadcast an action by the local participant.

        SIT and MOVE are checked against local state first; an action that
        would be rejected is dropped without reaching the bus. Returns whether
        the envelope was sent.
        """
        if self._closed:
            return False
        action = ActionKind(action)
        payload = payload or {}
        participant = self._context.participant
        try:
            if action == ActionKind.SIT:
                seat = SitPayload.model_validate(payload).seat
                machine.sit(self._table, seat, participant)
            elif action == ActionKind.MOVE:
                machine.apply_action(self._definition, self._table, participant.id, payload)
        except GameRuleError as e:
            logger.info("local action rejected", game=self._definition.prefix, action=action.value, reason=str(e))
            return False
        except ValidationError as e:
            logger.info("local action malformed", game=self._definition.prefix, action=action.value, error=str(e))
            return False

        envelope = ActionEnvelope.build(self._context.room_id, participant, self._definition.kind(action), payload)
        await self._context.bus.emit(BusEvent.GAME_ACTION, envelope.to_wire())
        if self._context.apply_locally:
            await self.on_remote_action(envelope)
        return True

    async def request_state(self) -> None:
        await self.on_local_action(ActionKind.STATE_REQUEST)

    async def on_leave(self) -> None:
        """Give up the local participant's seat, if any.

        A departing authority also persists the table without its seat. The
        LEAVE echo may only come back after this instance is torn down, and
        later joiners are restored from the last snapshot.
        """
        if self.local_seat is None:
            return
        was_authority = self.is_authority
        await self.on_local_action(ActionKind.LEAVE)
        if was_authority and self.local_seat is not None:
            await self._persist(machine.leave(self._table, self._context.participant.id))

    def restore(self, table: TableState) -> None:
        """Seed the table from a persisted snapshot. Nothing is sent right away."""
        if self._closed:
            return
        self._table = machine.check_table(self._definition, table)
        self._render()
        self._schedule_reset()

    def set_ghost(self, participant_id: str, *, is_ghost: bool) -> None:
        if self._closed:
            return
        if self._presence.set_ghost(self._table, participant_id, is_ghost=is_ghost):
            self._render()

    # --- inbound ---

    async def _on_bus_action(self, raw: Any) -> None:  # noqa: ANN401
        if self._closed:
            return
        try:
            envelope = parse_envelope(raw)
        except ValidationError as e:
            logger.warning("invalid action envelope", error_count=e.error_count())
            return
        await self.on_remote_action(envelope)

    async def on_remote_action(self, envelope: ActionEnvelope) -> None:
        """Apply an envelope from the bus. Foreign, malformed or illegal envelopes are ignored."""
        if self._closed:
            return
        if envelope.room_id != self._context.room_id:
            logger.debug("ignoring envelope for another room", envelope_room=envelope.room_id)
            return
        action = self._definition.parse_kind(envelope.kind)
        if action is None:
            logger.debug("ignoring envelope for another game", kind=envelope.kind)
            return

        log = logger.bind(game=self._definition.prefix, action=action.value, actor_id=envelope.actor_id)
        try:
            if action == ActionKind.SIT:
                await self._apply_sit(envelope)
            elif action == ActionKind.MOVE:
                await self._apply_move(envelope)
            elif action == ActionKind.RESET:
                await self._apply_reset()
            elif action == ActionKind.STATE_REQUEST:
                await self._answer_state_request()
            elif action == ActionKind.STATE_SYNC:
                self._apply_state_sync(envelope)
            elif action == ActionKind.LEAVE:
                await self._apply_leave(envelope)
        except GameRuleError as e:
            log.info("remote action rejected", reason=str(e))
        except ValidationError as e:
            log.warning("remote action payload invalid", error_count=e.error_count())

    async def _apply_sit(self, envelope: ActionEnvelope) -> None:
        seat = SitPayload.model_validate(envelope.payload).seat
        self._table = machine.sit(self._table, seat, envelope.actor)
        logger.info("seat taken", game=self._definition.prefix, seat=seat, participant_id=envelope.actor_id)
        self._render()
        if self.is_authority:
            await self._persist()
            self._schedule_reset()

    async def _apply_move(self, envelope: ActionEnvelope) -> None:
        self._table = machine.apply_action(self._definition, self._table, envelope.actor_id, envelope.payload)
        self._render()
        if not self.is_authority:
            return
        await self._persist()
        state = self._table.game_state
        if state.terminal:
            logger.info(
                "game finished",
                game=self._definition.prefix,
                winner=state.winner,
                draw=state.draw,
            )
            self._schedule_reset()

    async def _apply_reset(self) -> None:
        self._timer.cancel()
        self._table = machine.reset(self._definition, self._table)
        self._render()
        if self.is_authority:
            await self._persist()

    async def _answer_state_request(self) -> None:
        if not self.is_authority:
            return
        payload = StateSyncPayload.from_table(self._table).to_wire()
        await self.on_local_action(ActionKind.STATE_SYNC, payload)

    def _apply_state_sync(self, envelope: ActionEnvelope) -> None:
        snapshot = StateSyncPayload.model_validate(envelope.payload).to_table()
        self._table = machine.check_table(self._definition, snapshot)
        self._render()
        self._schedule_reset()

    async def _apply_leave(self, envelope: ActionEnvelope) -> None:
        # the authority may be the one leaving, so check before the seat is cleared
        was_authority = self.is_authority
        self._table = machine.leave(self._table, envelope.actor_id)
        self._render()
        if was_authority:
            await self._persist()

    def _schedule_reset(self) -> None:
        """Start the post-game delay when this peer is the authority of a finished game.

        Covers a seat-1 handoff after the previous authority left a finished
        game before its reset fired.
        """
        if not self._table.game_state.terminal or not self.is_authority or self._timer.pending:
            return
        delay = self._definition.reset_delay * self._context.reset_delay_scale
        self._timer.start(delay, self._send_reset)

    async def _send_reset(self) -> None:
        if self._closed or not self.is_authority:
            return
        await self.on_local_action(ActionKind.RESET)

    async def _persist(self, table: TableState | None = None) -> None:
        snapshot = RestorePayload.from_game(self._definition.type_id, table if table is not None else self._table)
        payload = PersistPayload(room_id=self._context.room_id, full_state=snapshot)
        await self._context.bus.emit(BusEvent.PERSIST_STATE, payload.to_wire())

    def _render(self) -> None:
        self._context.on_render(self.view())
