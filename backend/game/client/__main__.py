"""Console game client.

Usage: python -m game.client --room <room_id> --user-id <id> [--name <name>]

Commands: menu, play <game>, sit <seat>, move <field>=<value> ..., reset,
sync, exit, quit.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING, Any

from game.client.app import GameClient
from game.client.settings import GameClientSettings
from game.logic.enums import ActionKind
from game.logic.exceptions import UnknownGameError
from game.logic.types import DEFAULT_COLOR, Participant
from shared.logging import setup_logging

if TYPE_CHECKING:
    from game.logic.types import Viewport
    from game.session.view import GameView


def _print_view(view: GameView) -> None:
    seats = "  ".join(f"[{seat.index}] {seat.label}{' (away)' if seat.away else ''}" for seat in view.seats)
    print(f"\n== {view.title} ==\n{seats}\n{view.board_text}\n{view.status}")


def _print_resize(viewport: Viewport) -> None:
    print(f"(panel {viewport.width}x{viewport.height})")


def parse_move_args(args: list[str]) -> dict[str, Any]:
    """Turn ["col=3", "choice=rock"] into {"col": 3, "choice": "rock"}."""
    payload: dict[str, Any] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or not key:
            raise ValueError(f"expected field=value, got {arg!r}")
        payload[key] = int(value) if value.lstrip("-").isdigit() else value
    return payload


async def _handle_command(client: GameClient, words: list[str]) -> bool:
    """Run one console command. Returns False when the client should quit."""
    command, args = words[0].lower(), words[1:]
    lifecycle = client.lifecycle
    active = lifecycle.active

    if command == "quit":
        return False
    if command == "menu":
        for definition in lifecycle.menu():
            print(f"  {definition.type_id:<10} {definition.title}")
    elif command == "play" and args:
        try:
            await lifecycle.select_game(args[0])
        except UnknownGameError as e:
            print(e)
    elif command == "exit":
        await lifecycle.exit_to_menu()
    elif active is None:
        print("no game selected; try 'menu' and 'play <game>'")
    elif command == "sit" and args and args[0].isdigit():
        if not await active.on_local_action(ActionKind.SIT, {"seat": int(args[0])}):
            print("cannot sit there")
    elif command == "move":
        payload = parse_move_args(args)
        payload.setdefault("seat", active.local_seat)
        if not await active.on_local_action(ActionKind.MOVE, payload):
            print("illegal move")
    elif command == "reset":
        await active.on_local_action(ActionKind.RESET)
    elif command == "sync":
        await active.request_state()
    else:
        print(f"unknown command: {' '.join(words)}")
    return True


async def run(settings: GameClientSettings, room_id: str, participant: Participant) -> None:
    client = GameClient(settings, room_id, participant, on_resize=_print_resize, on_render=_print_view)
    await client.start()
    try:
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            words = line.split()
            if not words:
                continue
            try:
                if not await _handle_command(client, words):
                    break
            except ValueError as e:
                print(e)
    finally:
        await client.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="Console client for room games")
    parser.add_argument("--room", required=True, help="Room id to join")
    parser.add_argument("--user-id", required=True, help="Participant id, unique per connection")
    parser.add_argument("--name", default="User", help="Display name")
    parser.add_argument("--color", default=DEFAULT_COLOR, help="Seat color")
    args = parser.parse_args()

    settings = GameClientSettings()
    setup_logging(log_dir=settings.log_dir, service="client")
    participant = Participant(id=args.user_id, name=args.name, color=args.color)
    asyncio.run(run(settings, args.room, participant))


if __name__ == "__main__":
    main()
