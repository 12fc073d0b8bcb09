from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from game.logic.connect_four import CONNECT_FOUR
from game.logic.machine import apply_action, new_table, sit
from game.logic.types import Participant
from game.tests.helpers.peers import Peer
from game.tests.mocks.bus import MemoryBusHub

if TYPE_CHECKING:
    from collections.abc import Sequence

    from game.logic.definition import GameDefinition
    from game.logic.types import TableState


# ============================================================================
# Test State Builder Helpers
# ============================================================================

ALICE = Participant(id="alice", name="Alice", color="#ef4444")
BOB = Participant(id="bob", name="Bob", color="#22c55e")
CAROL = Participant(id="carol", name="Carol")


def seated_table(
    definition: GameDefinition = CONNECT_FOUR,
    players: Sequence[Participant | None] = (ALICE, BOB),
) -> TableState:
    """Create a table with the given participants in seats 1, 2 (None leaves a seat empty)."""
    table = new_table(definition)
    for index, participant in enumerate(players, start=1):
        if participant is not None:
            table = sit(table, index, participant)
    return table


def about_to_win() -> TableState:
    """Connect 4 table where alice (seat 1, to move) wins by dropping into column 3."""
    table = seated_table()
    for actor_id, seat, col in [("alice", 1, 3), ("bob", 2, 4)] * 3:
        table = apply_action(CONNECT_FOUR, table, actor_id, {"seat": seat, "col": col})
    return table


def finished_game() -> TableState:
    """about_to_win() after alice's winning drop: terminal, winner seat 1."""
    return apply_action(CONNECT_FOUR, about_to_win(), "alice", {"seat": 1, "col": 3})


def board_from_rows(*rows: str) -> tuple[tuple[int, ...], ...]:
    """Build a board from strings like "1.2" ("." is empty)."""
    return tuple(tuple(0 if ch == "." else int(ch) for ch in row) for row in rows)


@pytest.fixture
def hub():
    return MemoryBusHub()


@pytest.fixture
async def make_peer(hub):
    """Factory for room peers; every peer created is stopped at teardown."""
    peers: list[Peer] = []

    async def factory(user_id: str, **kwargs) -> Peer:
        peer = Peer(hub, user_id, **kwargs)
        await peer.client.start()
        peers.append(peer)
        return peer

    yield factory
    for peer in peers:
        await peer.client.stop()
