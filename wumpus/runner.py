"""
Batch runner: play many games with one bot and summarize the results.

`scripts/play_games.py` is the command-line front end for this module.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, Optional

from .board_metrics import summarize_results
from .bot_catalog import get_bot_spec, load_bot
from .config import AgentConfig, GameRules
from .game import WumpusGame
from .render import render_game
from .state_collector import StateCollector

log = logging.getLogger(__name__)


def play_game(bot_id: str = "bayes", *, seed: Optional[int] = None, rules: Optional[GameRules] = None,
              config: Optional[AgentConfig] = None, max_steps: int = 200,
              collector: Optional[StateCollector] = None, game: Optional[WumpusGame] = None,
              **bot_kwargs: Any) -> Dict[str, Any]:
    """Play one game and return the bot's run summary plus the seed."""
    game = game or WumpusGame(rules=rules, seed=seed)
    if collector is not None:
        collector.start_game(mode=get_bot_spec(bot_id).bot_id, rules=game.rules, seed=seed,
                             layout=game.initial_layout())
    bot = load_bot(bot_id, game, config=config, **bot_kwargs)
    result = bot.play(max_steps=max_steps, collector=collector)
    result["seed"] = seed
    if collector is not None:
        result["log_file"] = collector.current_filename
        if collector.has_beliefs:
            stem = Path(collector.current_filename).stem
            result["belief_file"] = collector.save_belief_dataset(f"{stem}.npz").name
    return result


def run_games(bot_id: str = "bayes", games: int = 10, seed: Optional[int] = None,
              rules: Optional[GameRules] = None, config: Optional[AgentConfig] = None,
              max_steps: int = 200, save_dir: Optional[str] = None,
              render: bool = False) -> Dict[str, Any]:
    """
    Play `games` games and aggregate them.

    Per-game seeds are drawn from `seed`, so a whole batch is reproducible.
    """
    spec = get_bot_spec(bot_id)
    rng = random.Random(seed)
    collector = StateCollector(save_dir) if save_dir else None

    results = []
    for i in range(int(games)):
        game_seed = rng.randrange(2 ** 31)
        game = WumpusGame(rules=rules, seed=game_seed)
        kwargs = {"seed": game_seed} if spec.seeded else {}
        result = play_game(bot_id, seed=game_seed, config=config, max_steps=max_steps,
                           collector=collector, game=game, **kwargs)
        results.append(result)
        log.info("game %d/%d: %s score=%d steps=%d", i + 1, games, result["status"],
                 result["score"], result["steps"])
        if render:
            print(render_game(game, show_undiscovered=True))
            print()

    summary = summarize_results(results)
    summary["bot"] = bot_id
    summary["results"] = results
    return summary
