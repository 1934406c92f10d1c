import json

import pytest

from wumpus.bayes_bot import BayesBot
from wumpus.game import Action
from wumpus.state_collector import ACTION_CODES, StateCollector


def play_recorded(tmp_path, make_game, tiny_rules):
    game = make_game(tiny_rules, treasures=[(1, 0)])
    collector = StateCollector(str(tmp_path))
    collector.start_game(mode="bayes", rules=tiny_rules, seed=None, layout=game.initial_layout())
    BayesBot(game).play(collector=collector)
    return collector


def test_capture_requires_start_game(tmp_path):
    collector = StateCollector(str(tmp_path))
    with pytest.raises(RuntimeError):
        collector.capture_state(None)


def test_game_log_records_every_step(tmp_path, make_game, tiny_rules):
    collector = play_recorded(tmp_path, make_game, tiny_rules)
    filename = collector.current_filename
    assert filename.startswith("game_") and "_bayes_" in filename

    data = collector.load_game(filename)
    assert data["total_states"] == 3
    meta = data["metadata"]
    assert meta["game_state"] == "WON"
    assert meta["score"] == 198
    assert meta["size"] == 2
    assert meta["layout_initial"]["treasures"] == [[1, 0]]

    spawn, walk, dig = data["states"]
    assert spawn["action"] is None
    assert "belief" not in spawn
    assert spawn["percept"]["glitter"] is True
    assert walk["action"] == "walk"
    assert walk["cell"] == [1, 0]
    assert dig["events"] == ["treasure"]
    assert dig["reward"] == 199
    assert dig["belief"]["treasure"][1][0] == pytest.approx(0.5)


def test_belief_dataset_round_trip(tmp_path, make_game, tiny_rules):
    collector = play_recorded(tmp_path, make_game, tiny_rules)
    assert collector.has_beliefs
    collector.save_belief_dataset("beliefs.npz")
    data = collector.load_belief_dataset("beliefs.npz")
    assert data["beliefs"].shape == (2, 3, 2, 2)
    assert data["actions"].tolist() == [ACTION_CODES[Action.WALK], ACTION_CODES[Action.DIG]]
    assert data["metadata"]["game_state"] == "WON"


def test_belief_dataset_needs_beliefs(tmp_path):
    collector = StateCollector(str(tmp_path))
    with pytest.raises(ValueError):
        collector.save_belief_dataset()


def test_same_layout_gets_distinct_files(tmp_path, make_game, tiny_rules):
    first = play_recorded(tmp_path, make_game, tiny_rules)
    second = play_recorded(tmp_path, make_game, tiny_rules)
    assert first.current_filename != second.current_filename
    assert len(list(tmp_path.glob("game_*.json"))) == 2


def test_save_game_with_custom_name(tmp_path, make_game, tiny_rules):
    collector = play_recorded(tmp_path, make_game, tiny_rules)
    path = collector.save_game("custom.json")
    with open(path) as f:
        assert json.load(f)["total_states"] == 3
