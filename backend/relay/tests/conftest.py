import pytest

from game.logic.types import Participant
from relay.rooms.handlers import RelayHandlers
from relay.rooms.manager import RelayRoomManager

ALICE = Participant(id="alice", name="Alice", color="#ef4444")
BOB = Participant(id="bob", name="Bob", color="#22c55e")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeServer:
    """Records what RelayHandlers asks of socketio.AsyncServer."""

    def __init__(self) -> None:
        self.handlers: dict[str, object] = {}
        self.emitted: list[dict] = []
        self.rooms: dict[str, set[str]] = {}

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None, to=None, room=None, **kwargs):
        self.emitted.append({"event": event, "data": data, "to": to, "room": room})

    async def enter_room(self, sid, room, namespace=None):
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid, room, namespace=None):
        self.rooms.get(room, set()).discard(sid)

    def events(self, event: str) -> list[dict]:
        return [item for item in self.emitted if item["event"] == event]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rooms(clock):
    return RelayRoomManager(snapshot_ttl_seconds=60, max_rooms=2, clock=clock)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def handlers(server, rooms):
    handlers = RelayHandlers(server, rooms)
    handlers.register()
    return handlers
