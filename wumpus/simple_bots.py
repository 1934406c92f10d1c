"""
Baseline players I compare the Bayes bot against.

- `RandomBot` picks uniformly among the actions that are legal right now.
- `ManualBot` asks a human on stdin, showing the map after every step.
"""

from __future__ import annotations

import random
from typing import Any, Callable, Optional, Tuple

from .bot_common import play_loop, step_code
from .game import Action, StepResult, WumpusGame
from .render import render_game


class _GameBot:
    """Shared `play_step()`/`play()` plumbing; subclasses only choose actions."""

    def __init__(self, game: WumpusGame):
        self.game = game
        self.last_result: Optional[StepResult] = None

    def choose(self) -> Optional[Action]:
        raise NotImplementedError

    def play_step(self) -> Tuple[str, Optional[Any]]:
        if self.game.is_over():
            return ("Done", None)
        action = self.choose()
        if action is None:
            return ("Stuck", None)
        self.last_result = self.game.do_action(action)
        return (step_code(self.last_result), action)

    def play(self, max_steps: int = 200, collector=None) -> dict:
        return play_loop(self, max_steps=max_steps, collector=collector)


class RandomBot(_GameBot):
    def __init__(self, game: WumpusGame, seed: Optional[int] = None, **_ignored):
        super().__init__(game)
        self.rng = random.Random(seed)

    def choose(self) -> Optional[Action]:
        legal = [a for a in Action if a is not Action.SHOOT or self.game.arrows > 0]
        return self.rng.choice(legal)


class ManualBot(_GameBot):
    PROMPT = "What do you want to do? "

    def __init__(self, game: WumpusGame, input_fn: Callable[[str], str] = input,
                 output_fn: Callable[[str], None] = print, **_ignored):
        super().__init__(game)
        self.input_fn = input_fn
        self.output_fn = output_fn

    def choose(self) -> Optional[Action]:
        self.output_fn(render_game(self.game))
        self.output_fn(
            f"Position: {self.game.position} facing {self.game.direction.value}, "
            f"arrows: {self.game.arrows}, score: {self.game.score}"
        )
        while True:
            try:
                line = self.input_fn(self.PROMPT)
            except EOFError:
                return None
            if line.strip().lower() in ("quit", "exit"):
                return None
            try:
                return Action.parse(line)
            except ValueError:
                self.output_fn("Unrecognized action. Try again.")
