"""
Small shared helpers for bots that play a `WumpusGame` directly.

I keep these in one place so the Bayes bot and the baseline bots don't have to
duplicate the same "play until the game ends or we run out of steps" loop, and so
every bot reports its run with the same dict shape.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from .board_metrics import exploration_percent
from .game import GameState, StepResult

if TYPE_CHECKING:
    from .state_collector import StateCollector

log = logging.getLogger(__name__)


def step_code(result: StepResult) -> str:
    """Map a step to the short codes `play_step()` returns: Win, Lost or Cont."""
    if result.status is GameState.WON:
        return "Win"
    if result.status is GameState.LOST:
        return "Lost"
    return "Cont"


def play_loop(bot: Any, *, max_steps: int = 200, collector: Optional["StateCollector"] = None) -> Dict[str, Any]:
    """
    Drive `bot.play_step()` until the game ends, the bot has nothing to do, or `max_steps`.

    The bot needs `game`, `play_step()` and `last_result`; a `decision_belief` attribute
    is recorded alongside each step when present.
    """
    game = bot.game
    if collector is not None:
        collector.capture_state(game.initial_result())

    steps = 0
    code = "Cont"
    while steps < max_steps:
        code, action = bot.play_step()
        if action is None:
            break
        steps += 1
        if collector is not None and bot.last_result is not None:
            collector.capture_state(bot.last_result, belief=getattr(bot, "decision_belief", None))
        if code in ("Win", "Lost"):
            break

    stats = game.get_statistics()
    result = {
        "status": game.status.value,
        "score": stats["score"],
        "steps": steps,
        "treasures_found": stats["treasures_found"],
        "cells_discovered": stats["cells_discovered"],
        "explored_percent": exploration_percent(discovered=stats["cells_discovered"], size=game.size),
        "stopped": code if code in ("Stuck", "Done") else ("max_steps" if steps >= max_steps and not game.is_over() else None),
    }
    if collector is not None:
        collector.end_game(status=game.status.value, score=game.score)
    log.debug("bot run finished: %s", result)
    return result
