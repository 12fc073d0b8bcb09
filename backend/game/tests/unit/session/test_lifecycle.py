import pytest

from game.logic.connect_four import CONNECT_FOUR
from game.logic.exceptions import UnknownGameError
from game.logic.registry import MENU_VIEWPORT
from game.logic.tic_tac_toe import TIC_TAC_TOE
from game.messaging.types import BusEvent, GhostPayload, RestorePayload
from game.session.lifecycle import GameLifecycleManager
from game.tests.conftest import ALICE, BOB, about_to_win, seated_table


@pytest.fixture
def bus(hub):
    return hub.connect("alice")


@pytest.fixture
def lifecycle(make_context, bus):
    return GameLifecycleManager(make_context(ALICE, bus=bus))


def _kinds(hub):
    return [event["kind"] for event in hub.events(BusEvent.GAME_ACTION)]


class TestSelectGame:
    def test_menu_order(self, lifecycle):
        assert [definition.type_id for definition in lifecycle.menu()] == ["connect4", "tictactoe", "rps"]

    async def test_select_resizes_and_requests_state(self, hub, lifecycle, recorder):
        sync = await lifecycle.select_game("connect4")

        assert lifecycle.active is sync
        assert sync.definition is CONNECT_FOUR
        assert recorder.resizes == [CONNECT_FOUR.viewport]
        assert _kinds(hub) == ["C4_STATE_REQUEST"]

    async def test_unknown_game_keeps_current_instance(self, lifecycle):
        sync = await lifecycle.select_game("connect4")
        with pytest.raises(UnknownGameError):
            await lifecycle.select_game("chess")
        assert lifecycle.active is sync
        assert sync.closed is False

    async def test_switching_destroys_previous_instance(self, hub, bus, lifecycle):
        first = await lifecycle.select_game("connect4")
        await first.on_local_action("SIT", {"seat": 1})

        second = await lifecycle.select_game("tictactoe")

        assert first.closed is True
        assert second.definition is TIC_TAC_TOE
        assert bus.handler_count(BusEvent.GAME_ACTION) == 1
        assert _kinds(hub) == ["C4_STATE_REQUEST", "C4_SIT", "C4_LEAVE", "TTT_STATE_REQUEST"]

    async def test_exit_to_menu(self, hub, lifecycle, recorder):
        sync = await lifecycle.select_game("connect4")
        await lifecycle.exit_to_menu()

        assert lifecycle.active is None
        assert sync.closed is True
        assert recorder.resizes[-1] == MENU_VIEWPORT


class TestRestore:
    async def test_select_with_snapshot_seeds_without_request(self, hub, lifecycle):
        snapshot = RestorePayload.from_game("connect4", about_to_win())
        sync = await lifecycle.select_game("connect4", restore=snapshot)

        assert sync.table == about_to_win()
        assert hub.events(BusEvent.GAME_ACTION) == []

    async def test_bad_snapshot_falls_back_to_state_request(self, hub, lifecycle):
        snapshot = RestorePayload.from_game("connect4", seated_table(TIC_TAC_TOE))
        sync = await lifecycle.select_game("connect4", restore=snapshot)

        assert sync.table == seated_table(CONNECT_FOUR, players=(None, None))
        assert _kinds(hub) == ["C4_STATE_REQUEST"]

    async def test_restore_from_menu(self, lifecycle):
        await lifecycle.handle_restore(RestorePayload.from_game("tictactoe", seated_table(TIC_TAC_TOE)))

        assert lifecycle.active is not None
        assert lifecycle.active.definition is TIC_TAC_TOE
        assert lifecycle.active.table.occupant(2) == BOB

    async def test_restore_ignored_while_playing(self, lifecycle):
        sync = await lifecycle.select_game("connect4")
        await lifecycle.handle_restore(RestorePayload.from_game("tictactoe", seated_table(TIC_TAC_TOE)))
        assert lifecycle.active is sync

    async def test_restore_ignored_while_hidden(self, lifecycle):
        lifecycle.hide()
        await lifecycle.handle_restore(RestorePayload.from_game("connect4", seated_table()))
        assert lifecycle.active is None


class TestVisibility:
    async def test_enable_resignals_size_without_request(self, hub, lifecycle, recorder):
        await lifecycle.select_game("connect4")
        lifecycle.hide()
        lifecycle.enable()

        assert lifecycle.visible is True
        assert recorder.resizes == [CONNECT_FOUR.viewport, CONNECT_FOUR.viewport]
        assert _kinds(hub) == ["C4_STATE_REQUEST"]

    def test_enable_from_menu(self, lifecycle, recorder):
        lifecycle.enable()
        assert recorder.resizes == [MENU_VIEWPORT]


class TestGhostAndClose:
    async def test_ghost_forwarded_to_active_game(self, lifecycle):
        sync = await lifecycle.select_game("connect4", restore=RestorePayload.from_game("connect4", seated_table()))
        lifecycle.handle_ghost(GhostPayload(user_id="bob", is_ghost=True))
        assert sync.presence.is_away(sync.table, 2) is True

    def test_ghost_without_game_is_ignored(self, lifecycle):
        lifecycle.handle_ghost(GhostPayload(user_id="bob", is_ghost=True))
        assert lifecycle.active is None

    async def test_close_leaves_seat(self, hub, lifecycle):
        await lifecycle.select_game("connect4", restore=RestorePayload.from_game("connect4", seated_table()))
        await lifecycle.close()

        assert lifecycle.active is None
        assert _kinds(hub) == ["C4_LEAVE"]
