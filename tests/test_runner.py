import importlib.util
import json
from pathlib import Path

import pytest

from wumpus.config import GameRules
from wumpus.runner import play_game, run_games
from wumpus.state_collector import StateCollector

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "play_games.py"


def load_cli():
    spec = importlib.util.spec_from_file_location("play_games", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_play_game_with_collector(tmp_path, make_game, tiny_rules):
    game = make_game(tiny_rules, treasures=[(1, 0)])
    result = play_game("bayes", game=game, collector=StateCollector(str(tmp_path)))
    assert result["status"] == "WON"
    assert (tmp_path / result["log_file"]).exists()
    assert result["belief_file"].endswith(".npz")
    assert (tmp_path / result["belief_file"]).exists()


def test_run_games_summary_is_reproducible():
    a = run_games("bayes", games=4, seed=3)
    b = run_games("bayes", games=4, seed=3)
    assert a["games"] == 4
    assert a["wins"] + a["losses"] + a["stuck"] == 4
    assert a["bot"] == "bayes"
    assert [r["score"] for r in a["results"]] == [r["score"] for r in b["results"]]
    assert [r["seed"] for r in a["results"]] == [r["seed"] for r in b["results"]]


def test_run_games_random_bot_with_save_dir(tmp_path):
    summary = run_games("random", games=3, seed=1, rules=GameRules(size=3, treasures=1, wumpuses=1, pits=1),
                        max_steps=20, save_dir=str(tmp_path))
    assert summary["games"] == 3
    assert len(list(tmp_path.glob("game_*.json"))) == 3
    assert not list(tmp_path.glob("*.npz"))


def test_unknown_bot_is_rejected():
    with pytest.raises(KeyError):
        run_games("oracle", games=1)


def test_cli_json_summary(capsys):
    cli = load_cli()
    assert cli.main(["--bot", "random", "--games", "2", "--seed", "5", "--max-steps", "15", "--json"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["games"] == 2
    assert summary["bot"] == "random"


def test_cli_text_summary(capsys):
    cli = load_cli()
    assert cli.main(["--games", "1", "--seed", "2", "--preset", "Sparse", "--risk-aversion", "4"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("bayes: 1 games |")


def test_cli_rejects_unknown_preset():
    cli = load_cli()
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--preset", "Huge"])


def test_run_games_seeds_the_random_bot():
    a = run_games("random", games=3, seed=8, max_steps=25)
    b = run_games("random", games=3, seed=8, max_steps=25)
    assert a["results"] == b["results"]
