import numpy as np

from wumpus.game import Action
from wumpus.render import SEPARATOR_X, render_belief, render_game

LAYOUT = dict(treasures=[(1, 0), (3, 3)], wumpuses=[(0, 1)], pits=[(2, 2), (3, 0), (2, 3)])


def test_player_view_hides_undiscovered_cells(make_game):
    game = make_game(**LAYOUT)
    lines = render_game(game).split("\n")
    assert len(lines) == 11
    assert lines[2] == lines[5] == lines[8] == ""
    hidden = SEPARATOR_X.join(["xxxx"] * 3)
    assert lines[9] == SEPARATOR_X + ">---" + SEPARATOR_X + hidden
    assert lines[10] == SEPARATOR_X + ">GS-" + SEPARATOR_X + hidden
    assert lines[0] == SEPARATOR_X + SEPARATOR_X.join(["xxxx"] * 4)


def test_revealed_view_shows_every_item(make_game):
    game = make_game(**LAYOUT)
    lines = render_game(game, show_undiscovered=True).split("\n")
    # Row y=0: start, treasure, empty, pit.
    assert lines[9].split() == [">---", "-T--", "----", "---P"]
    # Row y=1 starts with the wumpus.
    assert lines[6].split()[0] == "--W-"


def test_marker_follows_the_player(make_game):
    game = make_game(**LAYOUT)
    game.do_action(Action.WALK)
    row = render_game(game).split("\n")[9].split()
    assert row[0] == "----"
    assert row[1] == ">---"


def test_render_belief_north_up():
    grid = np.array([[0.0, 0.25], [0.5, 1.0]])
    text = render_belief(grid, title="pit")
    assert text.split("\n") == ["pit", "0.25 1.00", "0.00 0.50"]
