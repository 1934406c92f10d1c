"""
Bot catalog.

This file defines which bots exist, what they are, and where to load them from. I keep it
as plain Python data so the runner and the CLI share one list (and adding a bot is one
entry here).
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import AgentConfig
from .game import WumpusGame


@dataclass(frozen=True)
class BotSpec:
    bot_id: str
    name: str
    kind: str  # "inference" | "baseline" | "human"
    # Import path like "wumpus.bayes_bot.BayesBot".
    impl_path: str
    description: Optional[str] = None
    # Whether the bot takes an AgentConfig.
    configurable: bool = False
    # Whether the bot takes a `seed` for its own randomness.
    seeded: bool = False

    def load_class(self) -> type:
        module_name, _, class_name = self.impl_path.rpartition(".")
        module = importlib.import_module(module_name)
        return getattr(module, class_name)


BOTS: List[BotSpec] = [
    BotSpec(
        bot_id="bayes",
        name="Bayes bot",
        kind="inference",
        impl_path="wumpus.bayes_bot.BayesBot",
        description="Exact constraint-consistent marginals plus risk-weighted Dijkstra routing.",
        configurable=True,
    ),
    BotSpec(
        bot_id="random",
        name="Random bot",
        kind="baseline",
        impl_path="wumpus.simple_bots.RandomBot",
        description="Uniformly random legal actions.",
        seeded=True,
    ),
    BotSpec(
        bot_id="manual",
        name="Manual",
        kind="human",
        impl_path="wumpus.simple_bots.ManualBot",
        description="Type actions on stdin: walk, left, right, dig, shoot.",
    ),
]

_BY_ID: Dict[str, BotSpec] = {b.bot_id: b for b in BOTS}


def get_bot_spec(bot_id: str) -> BotSpec:
    try:
        return _BY_ID[str(bot_id).lower()]
    except KeyError:
        raise KeyError(f"Unknown bot {bot_id!r}; choose one of {sorted(_BY_ID)}") from None


def bot_ids() -> List[str]:
    return [b.bot_id for b in BOTS]


def load_bot(bot_id: str, game: WumpusGame, config: Optional[AgentConfig] = None, **kwargs: Any):
    """Instantiate the bot registered as `bot_id`, bound to `game`."""
    spec = get_bot_spec(bot_id)
    cls = spec.load_class()
    if spec.configurable:
        return cls(game, config=config, **kwargs)
    return cls(game, **kwargs)
