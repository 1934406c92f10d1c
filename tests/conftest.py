import pytest

from wumpus.config import GameRules
from wumpus.game import Board, WumpusGame


@pytest.fixture
def classic_rules():
    return GameRules()


@pytest.fixture
def make_game():
    """Build a game on a fixed layout: make_game(rules, treasures=[...], wumpuses=[...], pits=[...])."""

    def _make(rules=None, *, treasures=(), wumpuses=(), pits=()):
        rules = rules or GameRules()
        board = Board.from_layout(rules, treasures=treasures, wumpuses=wumpuses, pits=pits)
        return WumpusGame(rules=rules, board=board)

    return _make


@pytest.fixture
def tiny_rules():
    """2x2 board with a single treasure and no hazards."""
    return GameRules(size=2, treasures=1, wumpuses=0, pits=0)
