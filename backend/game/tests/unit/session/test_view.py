from game.logic import machine
from game.logic.connect_four import CONNECT_FOUR
from game.logic.enums import RpsChoice
from game.logic.rock_paper_scissors import HIDDEN_CHOICE, ROCK_PAPER_SCISSORS
from game.logic.tic_tac_toe import TIC_TAC_TOE
from game.session.authority import authority_of, is_authority, seat_of
from game.session.presence import PresenceMonitor
from game.session.view import DRAW_STATUS, WAITING_STATUS, YOUR_TURN_STATUS, build_view, status_text
from game.tests.conftest import ALICE, BOB, about_to_win, seated_table


class TestStatusText:
    def test_waiting_for_players(self):
        assert status_text(seated_table(players=(ALICE, None)), "alice") == WAITING_STATUS

    def test_your_turn(self):
        assert status_text(seated_table(), "alice") == YOUR_TURN_STATUS

    def test_other_players_turn(self):
        assert status_text(seated_table(), "bob") == "Alice's Turn"

    def test_winner(self):
        table = machine.apply_action(CONNECT_FOUR, about_to_win(), "alice", {"seat": 1, "col": 3})
        assert status_text(table, "bob") == "Alice Wins!"

    def test_draw(self):
        table = seated_table()
        table = table.model_copy(
            update={"game_state": table.game_state.model_copy(update={"terminal": True, "draw": True})},
        )
        assert status_text(table, "alice") == DRAW_STATUS


class TestBuildView:
    def test_seat_labels_and_active_marker(self):
        view = build_view(CONNECT_FOUR, seated_table(), "bob")

        first, second = view.seats
        assert (first.label, first.active, first.color) == ("Alice", True, "#ef4444")
        assert (second.label, second.active, second.is_local) == ("You", False, True)
        assert view.local_seat == 2
        assert view.title == "Connect 4"

    def test_empty_seat(self):
        view = build_view(TIC_TAC_TOE, seated_table(TIC_TAC_TOE, players=(None, BOB)), "carol")

        assert view.seats[0].label == "Empty"
        assert view.seats[0].color is None
        assert view.local_seat is None
        assert not any(seat.active for seat in view.seats)

    def test_board_text_follows_state(self):
        table = machine.apply_action(TIC_TAC_TOE, seated_table(TIC_TAC_TOE), "alice", {"seat": 1, "index": 0})
        assert build_view(TIC_TAC_TOE, table, "alice").board_text.splitlines()[0] == "X . ."

    def test_unrevealed_choice_masked_for_opponent(self):
        table = machine.apply_action(
            ROCK_PAPER_SCISSORS,
            seated_table(ROCK_PAPER_SCISSORS),
            "alice",
            {"seat": 1, "choice": "rock"},
        )

        assert build_view(ROCK_PAPER_SCISSORS, table, "bob").board == ((HIDDEN_CHOICE, 0),)
        assert build_view(ROCK_PAPER_SCISSORS, table, "alice").board == ((RpsChoice.ROCK, 0),)

    def test_choices_revealed_at_the_end(self):
        table = seated_table(ROCK_PAPER_SCISSORS)
        table = machine.apply_action(ROCK_PAPER_SCISSORS, table, "alice", {"seat": 1, "choice": "rock"})
        table = machine.apply_action(ROCK_PAPER_SCISSORS, table, "bob", {"seat": 2, "choice": "paper"})

        view = build_view(ROCK_PAPER_SCISSORS, table, "carol")
        assert view.board == ((RpsChoice.ROCK, RpsChoice.PAPER),)
        assert view.winner == 2

    def test_grid_games_are_not_masked(self):
        table = machine.apply_action(CONNECT_FOUR, seated_table(), "alice", {"seat": 1, "col": 0})
        assert build_view(CONNECT_FOUR, table, "bob").board == table.game_state.board


class TestPresence:
    def test_ghost_marks_seated_participant(self):
        presence = PresenceMonitor()
        table = seated_table()

        assert presence.set_ghost(table, "bob", is_ghost=True) is True
        assert presence.is_away(table, 2) is True
        assert presence.set_ghost(table, "bob", is_ghost=True) is False

    def test_return_clears_marker(self):
        presence = PresenceMonitor()
        table = seated_table()
        presence.set_ghost(table, "bob", is_ghost=True)

        assert presence.set_ghost(table, "bob", is_ghost=False) is True
        assert presence.is_away(table, 2) is False

    def test_unseated_participant_ignored(self):
        presence = PresenceMonitor()
        assert presence.set_ghost(seated_table(), "carol", is_ghost=True) is False
        assert presence.set_ghost(seated_table(), "carol", is_ghost=False) is False

    def test_marker_does_not_follow_seat(self):
        presence = PresenceMonitor()
        presence.set_ghost(seated_table(), "bob", is_ghost=True)

        assert presence.is_away(seated_table(players=(ALICE, None)), 2) is False

    def test_away_flag_in_view(self):
        presence = PresenceMonitor()
        table = seated_table()
        presence.set_ghost(table, "alice", is_ghost=True)

        assert build_view(CONNECT_FOUR, table, "bob", presence).seats[0].away is True


class TestAuthority:
    def test_seat_one_is_authority(self):
        table = seated_table()
        assert authority_of(table) == ALICE
        assert is_authority(table, "alice") is True
        assert is_authority(table, "bob") is False

    def test_no_authority_without_seat_one(self):
        table = seated_table(players=(None, BOB))
        assert authority_of(table) is None
        assert is_authority(table, "bob") is False
        assert seat_of(table, "bob") == 2
