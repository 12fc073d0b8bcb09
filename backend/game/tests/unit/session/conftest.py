from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from game.logic.connect_four import CONNECT_FOUR
from game.session.context import SessionContext
from game.session.synchronizer import SessionSynchronizer
from game.tests.conftest import ALICE
from game.tests.helpers.peers import ROOM_ID

if TYPE_CHECKING:
    from game.session.view import GameView


class Recorder:
    """Collects render and resize callbacks."""

    def __init__(self) -> None:
        self.renders: list[GameView] = []
        self.resizes: list = []


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_context(hub, recorder):
    def factory(participant=ALICE, *, bus=None, **kwargs) -> SessionContext:
        return SessionContext(
            room_id=ROOM_ID,
            participant=participant,
            bus=bus or hub.connect(participant.id),
            on_resize=recorder.resizes.append,
            on_render=recorder.renders.append,
            **kwargs,
        )

    return factory


@pytest.fixture
def make_sync(make_context):
    def factory(participant=ALICE, table=None, definition=CONNECT_FOUR, **kwargs) -> SessionSynchronizer:
        sync = SessionSynchronizer(make_context(participant, **kwargs), definition, table)
        sync.attach()
        return sync

    return factory
