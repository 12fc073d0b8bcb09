import pytest
from pydantic import ValidationError

from game.client.__main__ import _handle_command, parse_move_args
from game.client.settings import GameClientSettings
from game.messaging.types import BusEvent


class TestGameClientSettings:
    def test_defaults(self):
        settings = GameClientSettings()
        assert settings.transports == ["websocket"]
        assert settings.apply_locally is False
        assert settings.reset_delay_scale == 1.0

    def test_transports_csv(self, monkeypatch):
        monkeypatch.setenv("GAME_TRANSPORTS", "websocket,polling")
        assert GameClientSettings().transports == ["websocket", "polling"]

    def test_transports_json_array(self, monkeypatch):
        monkeypatch.setenv("GAME_TRANSPORTS", '["polling"]')
        assert GameClientSettings().transports == ["polling"]

    def test_transports_empty_rejected(self, monkeypatch):
        monkeypatch.setenv("GAME_TRANSPORTS", "")
        with pytest.raises(ValidationError, match="transports"):
            GameClientSettings()

    def test_unsupported_transport_rejected(self, monkeypatch):
        monkeypatch.setenv("GAME_TRANSPORTS", "websocket,smoke-signal")
        with pytest.raises(ValidationError, match="Unsupported value"):
            GameClientSettings()

    def test_apply_locally_from_env(self, monkeypatch):
        monkeypatch.setenv("GAME_APPLY_LOCALLY", "true")
        assert GameClientSettings().apply_locally is True

    def test_negative_reset_delay_scale_rejected(self):
        with pytest.raises(ValidationError, match="reset_delay_scale"):
            GameClientSettings(reset_delay_scale=-1)

    def test_server_url_empty_rejected(self):
        with pytest.raises(ValidationError, match="server_url"):
            GameClientSettings(server_url="")


class TestParseMoveArgs:
    def test_integers_and_names(self):
        assert parse_move_args(["col=3", "choice=rock"]) == {"col": 3, "choice": "rock"}

    def test_missing_separator_raises(self):
        with pytest.raises(ValueError, match="field=value"):
            parse_move_args(["3"])

    def test_empty_key_raises(self):
        with pytest.raises(ValueError, match="field=value"):
            parse_move_args(["=3"])


class TestConsoleCommands:
    async def test_play_sit_and_move(self, hub, make_peer, capsys):
        alice = await make_peer("alice")
        bob = await make_peer("bob")
        assert await _handle_command(alice.client, ["play", "tictactoe"]) is True
        await bob.play("tictactoe")
        await bob.sit(2)

        await _handle_command(alice.client, ["sit", "1"])
        await _handle_command(alice.client, ["move", "index=4"])

        assert alice.table.game_state.board[1][1] == 1
        assert bob.table == alice.table
        assert "cannot" not in capsys.readouterr().out

    async def test_commands_need_a_game(self, make_peer, capsys):
        alice = await make_peer("alice")
        await _handle_command(alice.client, ["sit", "1"])
        assert "no game selected" in capsys.readouterr().out

    async def test_unknown_game(self, make_peer, capsys):
        alice = await make_peer("alice")
        await _handle_command(alice.client, ["play", "chess"])
        assert "unknown game type: 'chess'" in capsys.readouterr().out

    async def test_illegal_move_reported(self, hub, make_peer, capsys):
        alice = await make_peer("alice")
        await _handle_command(alice.client, ["play", "connect4"])
        await _handle_command(alice.client, ["move", "col=3"])

        assert "illegal move" in capsys.readouterr().out
        assert [event["kind"] for event in hub.events(BusEvent.GAME_ACTION)] == ["C4_STATE_REQUEST"]

    async def test_menu_lists_games(self, make_peer, capsys):
        alice = await make_peer("alice")
        await _handle_command(alice.client, ["menu"])
        out = capsys.readouterr().out
        assert "connect4" in out
        assert "Rock Paper Scissors" in out

    async def test_quit(self, make_peer):
        alice = await make_peer("alice")
        assert await _handle_command(alice.client, ["quit"]) is False
