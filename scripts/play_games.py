"""
I use this script to play batches of Wumpus World games from the terminal.

Usage:
  .venv/bin/python scripts/play_games.py --bot bayes --games 100 --seed 7
  .venv/bin/python scripts/play_games.py --bot manual --games 1
  .venv/bin/python scripts/play_games.py --bot bayes --games 5 --save-dir data/game_states

With `--save-dir`, every game is written as a JSON log (and Bayes runs also get a
matching `.npz` with the belief grids they decided from).
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace

from wumpus.bot_catalog import bot_ids
from wumpus.config import PRESETS, AgentConfig, rules_from_preset
from wumpus.runner import run_games


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Wumpus World games with a bot.")
    p.add_argument("--bot", default="bayes", choices=bot_ids(), help="Which bot plays")
    p.add_argument("--games", type=int, default=10, help="Number of games")
    p.add_argument("--seed", type=int, default=None, help="Seed for the whole batch")
    p.add_argument("--preset", default="Classic", choices=sorted(PRESETS), help="Board preset")
    p.add_argument("--max-steps", type=int, default=200, help="Step cap per game")
    p.add_argument("--save-dir", default=None, help="Directory for JSON game logs")
    p.add_argument("--render", action="store_true", help="Print the revealed map after each game")
    p.add_argument("--risk-aversion", type=float, default=None, help="Override AgentConfig.risk_aversion")
    p.add_argument("--safety-threshold", type=float, default=None, help="Override AgentConfig.safety_threshold")
    p.add_argument("--json", action="store_true", help="Print the summary as JSON")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s | %(levelname)s | %(message)s")

    config = AgentConfig()
    if args.risk_aversion is not None:
        config = replace(config, risk_aversion=args.risk_aversion)
    if args.safety_threshold is not None:
        config = replace(config, safety_threshold=args.safety_threshold)

    summary = run_games(
        bot_id=args.bot,
        games=args.games,
        seed=args.seed,
        rules=rules_from_preset(args.preset),
        config=config,
        max_steps=args.max_steps,
        save_dir=args.save_dir,
        render=args.render,
    )

    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    print(
        f"{summary['bot']}: {summary['games']} games | "
        f"won={summary['wins']} lost={summary['losses']} stuck={summary['stuck']} | "
        f"win_rate={summary['win_rate']:.2%} avg_score={summary['avg_score']:.1f} "
        f"avg_steps={summary['avg_steps']:.1f} best={summary['best_score']}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
