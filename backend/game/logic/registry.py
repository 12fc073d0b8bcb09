"""Lookup table of playable games, keyed by type id."""

from game.logic.connect_four import CONNECT_FOUR
from game.logic.definition import GameDefinition
from game.logic.exceptions import UnknownGameError
from game.logic.rock_paper_scissors import ROCK_PAPER_SCISSORS
from game.logic.tic_tac_toe import TIC_TAC_TOE
from game.logic.types import Viewport

MENU_VIEWPORT = Viewport(width=480, height=260)

# menu order
GAMES: dict[str, GameDefinition] = {
    definition.type_id: definition for definition in (CONNECT_FOUR, TIC_TAC_TOE, ROCK_PAPER_SCISSORS)
}


def get_definition(type_id: str) -> GameDefinition:
    """Return the registered game for type_id. Raises UnknownGameError."""
    try:
        return GAMES[type_id]
    except KeyError:
        raise UnknownGameError(type_id) from None


def list_definitions() -> list[GameDefinition]:
    return list(GAMES.values())
