import random

import pytest

from wumpus.config import GameRules
from wumpus.game import (
    START,
    Action,
    Board,
    Cell,
    Direction,
    GameOverError,
    GameState,
    InvalidActionError,
    InvalidLayoutError,
    UndiscoveredCellError,
    WumpusGame,
    all_cells,
    neighbors,
)


def test_generated_boards_keep_counts_and_empty_start(classic_rules):
    for seed in range(200):
        board = Board.generate(classic_rules, random.Random(seed))
        assert board[START] is Cell.EMPTY
        assert board.count(Cell.TREASURE) == 2
        assert board.count(Cell.WUMPUS) == 1
        assert board.count(Cell.PIT) == 3


def test_percepts_are_or_over_orthogonal_neighbors(classic_rules):
    for seed in range(100):
        board = Board.generate(classic_rules, random.Random(seed))
        for cell in all_cells(board.size):
            x, y = cell
            around = [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
            around = [c for c in around if 0 <= c[0] < board.size and 0 <= c[1] < board.size]
            percept = board.percept_for(cell)
            assert percept.breeze == any(board[c] is Cell.PIT for c in around)
            assert percept.stench == any(board[c] is Cell.WUMPUS for c in around)
            assert percept.glitter == any(board[c] is Cell.TREASURE for c in around)


def test_diagonal_items_do_not_leak_into_percepts(classic_rules):
    board = Board.from_layout(classic_rules, treasures=[(3, 3), (2, 3)], wumpuses=[(1, 1)], pits=[(3, 0), (0, 3), (3, 2)])
    # (1,1) is diagonal to (0,0)
    assert board.percept_for((0, 0)).stench is False
    assert board.percept_for((1, 0)).stench is True


def test_percept_requires_discovered_cell(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(1, 1)], pits=[(3, 0), (0, 3), (2, 3)])
    assert game.percept_at((0, 0)).stench is False
    with pytest.raises(UndiscoveredCellError):
        game.percept_at((1, 0))


@pytest.mark.parametrize(
    "layout",
    [
        dict(treasures=[(0, 0), (1, 1)], wumpuses=[(2, 2)], pits=[(3, 3), (3, 2), (3, 1)]),
        dict(treasures=[(1, 1)], wumpuses=[(2, 2)], pits=[(3, 3), (3, 2), (3, 1)]),
        dict(treasures=[(1, 1), (1, 2)], wumpuses=[(1, 1)], pits=[(3, 3), (3, 2), (3, 1)]),
        dict(treasures=[(1, 1), (9, 9)], wumpuses=[(2, 2)], pits=[(3, 3), (3, 2), (3, 1)]),
    ],
)
def test_invalid_layouts_are_rejected(classic_rules, layout):
    with pytest.raises(InvalidLayoutError):
        Board.from_layout(classic_rules, **layout)


def test_walking_into_wumpus_loses_and_stops_the_game(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(1, 0)], pits=[(3, 0), (0, 3), (2, 3)])
    before = game.score
    result = game.do_action(Action.WALK)
    assert result.events.wumpus
    assert result.status is GameState.LOST
    assert result.score == before + game.rules.score_action + game.rules.score_wumpus
    assert game.score == -201
    with pytest.raises(GameOverError):
        game.do_action(Action.TURN_LEFT)


def test_falling_into_pit_is_fatal(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(3, 1)], pits=[(1, 0), (0, 3), (2, 3)])
    result = game.do_action(Action.WALK)
    assert result.events.pit
    assert result.status is GameState.LOST
    assert game.score == -101


def test_walking_into_a_wall_bumps(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(3, 1)], pits=[(1, 2), (0, 3), (2, 3)])
    game.do_action(Action.TURN_RIGHT)
    assert game.direction is Direction.SOUTH
    result = game.do_action(Action.WALK)
    assert result.events.bump
    assert result.cell == (0, 0)
    assert game.score == -2


def test_digging_every_treasure_wins(make_game):
    game = make_game(treasures=[(1, 0), (2, 0)], wumpuses=[(3, 3)], pits=[(0, 3), (1, 3), (3, 0)])
    game.do_action(Action.WALK)
    first = game.do_action(Action.DIG)
    assert first.events.treasure
    assert first.status is GameState.PLAYING
    game.do_action(Action.WALK)
    last = game.do_action(Action.DIG)
    assert last.status is GameState.WON
    assert game.score == 396
    with pytest.raises(GameOverError):
        game.do_action(Action.WALK)


def test_dug_treasure_stops_glittering(make_game):
    game = make_game(treasures=[(1, 0), (3, 3)], wumpuses=[(2, 2)], pits=[(0, 3), (1, 3), (3, 0)])
    assert game.percept_at((0, 0)).glitter
    game.do_action(Action.WALK)
    game.do_action(Action.DIG)
    assert game.percept_at((0, 0)).glitter is False


def test_dig_miss_costs_without_feedback(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(3, 1)], pits=[(1, 2), (0, 3), (2, 3)])
    result = game.do_action(Action.DIG)
    assert result.events.names() == []
    assert result.reward == -51
    assert result.status is GameState.PLAYING


def test_arrow_kills_wumpus_in_front_once(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(1, 0)], pits=[(1, 2), (0, 3), (2, 3)])
    assert game.percept_at((0, 0)).stench
    result = game.do_action(Action.SHOOT)
    assert result.events.scream
    assert result.arrows == 0
    assert result.score == -11
    assert result.percept.stench is False
    with pytest.raises(InvalidActionError):
        game.do_action(Action.SHOOT)
    # The dead wumpus is harmless.
    assert game.do_action(Action.WALK).status is GameState.PLAYING


def test_arrow_miss_has_no_scream(make_game):
    game = make_game(treasures=[(2, 2), (3, 3)], wumpuses=[(0, 1)], pits=[(1, 2), (0, 3), (2, 3)])
    result = game.do_action(Action.SHOOT)
    assert not result.events.scream
    assert game.percept_at((0, 0)).stench


def test_reset_reuses_fixed_board(make_game):
    game = make_game(treasures=[(1, 0), (2, 0)], wumpuses=[(3, 3)], pits=[(0, 3), (1, 3), (3, 0)])
    game.do_action(Action.WALK)
    game.do_action(Action.DIG)
    game.reset()
    assert game.position == (0, 0)
    assert game.score == 0
    assert game.layout()["treasures"] == [[1, 0], [2, 0]]


def test_seeded_games_are_reproducible():
    assert WumpusGame(seed=11).layout() == WumpusGame(seed=11).layout()


def test_action_parse():
    assert Action.parse(" Walk ") is Action.WALK
    assert Action.parse("left") is Action.TURN_LEFT
    with pytest.raises(ValueError):
        Action.parse("jump")


def test_direction_rotations():
    assert Direction.EAST.left() is Direction.NORTH
    assert Direction.EAST.right() is Direction.SOUTH
    assert Direction.NORTH.back() is Direction.SOUTH
    assert Direction.between((1, 1), (1, 2)) is Direction.NORTH
    assert Direction.between((1, 1), (2, 2)) is None


def test_neighbors_stay_on_board():
    assert neighbors((0, 0), 4) == [(1, 0), (0, 1)]
    assert len(neighbors((1, 1), 4)) == 4


def test_rules_validation():
    with pytest.raises(ValueError):
        GameRules(size=1)
    with pytest.raises(ValueError):
        GameRules(size=2, treasures=2, wumpuses=1, pits=1)
