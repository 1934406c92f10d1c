"""
This is my Bayes bot for Wumpus World: the policy controller on top of the belief
engine and the planner.

Interface (the same one a remote session would drive):
- `observe(percept, for_cell, ...)` after every action's result
- `next_action()` -> one `Action`, or None once the game is over or nothing is worth doing
- `report_status()` / `report_score()`

When bound to a `WumpusGame`, `play_step()` and `play()` run the loop locally.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .belief import BeliefEngine, BeliefState, PERCEPT_FLAG
from .bot_common import play_loop, step_code
from .config import AgentConfig, GameRules
from .game import (
    START,
    Action,
    Cell,
    Coord,
    Direction,
    Events,
    GameState,
    InvalidActionError,
    Percept,
    StepResult,
    WumpusGame,
    all_cells,
    in_bounds,
    neighbors,
)
from .planner import Planner, Pose, Unreachable

log = logging.getLogger(__name__)


class PolicyState(Enum):
    EXPLORING = "exploring"
    TARGETING_TREASURE = "targeting_treasure"
    TARGETING_SHOT = "targeting_shot"
    DIGGING = "digging"
    DONE = "done"


class BayesBot:
    """
    High-level loop, one decision per tick:
    - refresh the belief from every percept gathered so far
    - dig, or walk toward the most likely treasure above the commit threshold
    - otherwise line up and spend the arrow on a near-certain wumpus
    - otherwise walk toward the least hazardous unexplored cell

    I never keep a route between ticks: every percept can change the belief, so
    the route is recomputed from scratch after each step.
    """

    def __init__(self, game: Optional[WumpusGame] = None, config: Optional[AgentConfig] = None,
                 rules: Optional[GameRules] = None):
        self.game = game
        self.rules = rules or (game.rules if game is not None else GameRules())
        self.config = config or AgentConfig()
        self.engine = BeliefEngine(self.rules)

        self.position: Coord = START
        self.direction = Direction.EAST
        self.arrows = self.rules.arrows
        self.score = 0
        self.status = GameState.PLAYING
        self.treasures_found = 0

        self.discovered = set()
        self.percepts: Dict[Coord, Percept] = {}

        self.state = PolicyState.EXPLORING
        self.target: Optional[Coord] = None
        self.route: List[Action] = []
        self.belief: Optional[BeliefState] = None
        # Belief the latest action was chosen from (for recording).
        self.decision_belief: Optional[BeliefState] = None
        self.last_result: Optional[StepResult] = None
        self._pending: Optional[Action] = None

        if game is not None:
            first = game.initial_result()
            self.observe(first.percept, first.cell, direction=first.direction,
                         score=first.score, status=first.status)

    # --- external interface ---

    def report_status(self) -> GameState:
        return self.status

    def report_score(self) -> int:
        return self.score

    def observe(self, percept: Percept, for_cell: Coord, direction: Optional[Direction] = None,
                events: Optional[Events] = None, score: Optional[int] = None,
                status: Optional[GameState] = None):
        """
        Take in the result of the last action.

        `direction`, `events`, `score` and `status` are optional: without them I track
        them myself from the actions I emitted. Missing events are read off the score
        change when a score is given.
        """
        action, self._pending = self._pending, None
        if events is None:
            events = self._events_from_score(action, score)
        cell = tuple(for_cell)

        if direction is not None:
            self.direction = direction
        elif action is Action.TURN_LEFT:
            self.direction = self.direction.left()
        elif action is Action.TURN_RIGHT:
            self.direction = self.direction.right()

        if action is Action.SHOOT:
            self.arrows = max(0, self.arrows - 1)
            front = self.direction.front_of(self.position)
            if events.scream:
                log.info("wumpus killed at %s", front)
                self._forget_flags(Cell.WUMPUS, front)
                self.engine.record_removal(Cell.WUMPUS, front)
            elif in_bounds(front, self.rules.size):
                self.engine.exclude(Cell.WUMPUS, front)

        if action is Action.DIG:
            if events.treasure:
                log.info("treasure dug up at %s", self.position)
                self.treasures_found += 1
                self._forget_flags(Cell.TREASURE, self.position)
                self.engine.record_removal(Cell.TREASURE, self.position)
            else:
                self.engine.exclude(Cell.TREASURE, self.position)

        self.position = cell
        self.discovered.add(cell)
        if not events.hazard:
            self.percepts[cell] = percept

        if score is not None:
            self.score = int(score)
        elif action is not None:
            self.score += self._estimate_reward(action, events)

        if status is not None:
            self.status = status
        elif events.hazard:
            self.status = GameState.LOST
        elif self.treasures_found >= self.rules.treasures:
            self.status = GameState.WON

        # Any route planned before this percept is stale.
        self.route = []
        self.belief = None
        if self.status is not GameState.PLAYING:
            self.state = PolicyState.DONE
            self.target = None

    def next_action(self) -> Optional[Action]:
        """Decide the next action, or None when the game is over or nothing is worth doing."""
        if self.status is not GameState.PLAYING:
            self.state = PolicyState.DONE
            return None

        belief = self.refresh_belief()
        self.decision_belief = belief
        action = (
            self._treasure_step(belief, self.config.commit_threshold)
            or self._shot_step(belief)
            or self._explore_step(belief)
            # Endgame: nothing left to explore, dig the best remaining guess.
            or self._treasure_step(belief, 0.0)
        )
        if action is None:
            log.info("no reachable objective left at %s", self.position)
            return None

        self._validate(action)
        self._pending = action
        log.debug("%s at %s facing %s -> %s (target %s)", self.state.value, self.position,
                  self.direction.value, action.value, self.target)
        return action

    def refresh_belief(self) -> BeliefState:
        if self.belief is None:
            self.belief = self.engine.update(self.discovered, self.percepts)
        return self.belief

    # --- local play ---

    def play_step(self) -> Tuple[str, Optional[Any]]:
        """
        Play a single action against the bound game.

        Returns:
            (result, action) where result is "Cont", "Win", "Lost", "Done" or "Stuck"
        """
        if self.game is None:
            raise RuntimeError("play_step() needs a bound WumpusGame")
        if self.game.is_over() or self.status is not GameState.PLAYING:
            return ("Done", None)

        action = self.next_action()
        if action is None:
            return ("Stuck", None)

        result = self.game.do_action(action)
        self.last_result = result
        self.observe(result.percept, result.cell, direction=result.direction,
                     events=result.events, score=result.score, status=result.status)
        return (step_code(result), action)

    def play(self, max_steps: int = 200, collector=None) -> dict:
        """Play until the game ends; returns the run summary dict."""
        return play_loop(self, max_steps=max_steps, collector=collector)

    # --- decisions ---

    @property
    def pose(self) -> Pose:
        return (self.position, self.direction)

    def _planner(self, safety_threshold: Optional[float] = None) -> Planner:
        return Planner.from_config(self.rules.size, self.config, safety_threshold=safety_threshold)

    def _follow(self, state: PolicyState, target: Coord, route: List[Action]) -> Action:
        self.state = state
        self.target = target
        self.route = route
        return route[0]

    def _treasure_step(self, belief: BeliefState, threshold: float) -> Optional[Action]:
        grid = belief.treasure
        candidates = [c for c in all_cells(self.rules.size) if grid[c[0], c[1]] > threshold]
        if not candidates:
            return None

        hazard = belief.hazard_grid()
        planner = self._planner()
        costs = planner.route_costs(self.pose, hazard)
        candidates.sort(key=lambda c: (-grid[c[0], c[1]], costs.get(c, float("inf")), c))

        for cell in candidates:
            if cell == self.position:
                self.state = PolicyState.DIGGING
                self.target = cell
                return Action.DIG
            if cell not in costs:
                continue
            try:
                route = planner.plan(self.pose, cell, hazard)
            except Unreachable:
                continue
            return self._follow(PolicyState.TARGETING_TREASURE, cell, route)
        return None

    def _shot_step(self, belief: BeliefState) -> Optional[Action]:
        if self.arrows <= 0:
            return None
        grid = belief.wumpus
        targets = [
            c for c in all_cells(self.rules.size)
            if c not in self.discovered and grid[c[0], c[1]] >= self.config.shoot_confidence
        ]
        if not targets:
            return None

        hazard = belief.hazard_grid()
        planner = self._planner()
        for cell in sorted(targets, key=lambda c: (-grid[c[0], c[1]], c)):
            try:
                route = planner.plan_to_face(self.pose, cell, hazard)
            except Unreachable:
                continue
            if planner.plan_cost(self.pose, route, hazard) > self.config.shoot_budget:
                continue
            if not route:
                self.state = PolicyState.TARGETING_SHOT
                self.target = cell
                return Action.SHOOT
            return self._follow(PolicyState.TARGETING_SHOT, cell, route)
        return None

    def _explore_step(self, belief: BeliefState) -> Optional[Action]:
        hazard = belief.hazard_grid()
        for threshold in (self.config.safety_threshold, self.config.fallback_threshold):
            planner = self._planner(threshold)
            costs = planner.route_costs(self.pose, hazard, accept=lambda c: c not in self.discovered)
            if not costs:
                continue
            target = min(costs, key=lambda c: (hazard[c[0], c[1]], costs[c], c))
            if threshold != self.config.safety_threshold:
                log.info("nothing safe left; risking %s (hazard %.2f)", target, hazard[target[0], target[1]])
            try:
                route = planner.plan(self.pose, target, hazard)
            except Unreachable:
                continue
            return self._follow(PolicyState.EXPLORING, target, route)
        return None

    # --- bookkeeping ---

    def _validate(self, action: Action):
        if self.status is not GameState.PLAYING:
            raise InvalidActionError(f"game already {self.status.value}")
        if action is Action.SHOOT and self.arrows <= 0:
            raise InvalidActionError("no arrow left")
        if action is Action.DIG and self.position not in self.discovered:
            raise InvalidActionError(f"cannot dig on undiscovered cell {self.position}")

    def _forget_flags(self, kind: Cell, removed_at: Coord):
        """Positive flags around a removed item may have been caused by it alone."""
        flag = PERCEPT_FLAG[kind]
        for cell in neighbors(removed_at, self.rules.size):
            percept = self.percepts.get(cell)
            if percept is not None and getattr(percept, flag):
                self.percepts[cell] = replace(percept, **{flag: None})

    def _events_from_score(self, action: Optional[Action], score: Optional[int]) -> Events:
        """Without an events report, the score change still tells a dig hit or a fatal walk apart."""
        if action is None or score is None:
            return Events()
        if action is Action.DIG:
            outcomes = [Events(treasure=True)]
        elif action is Action.WALK:
            outcomes = [Events(wumpus=True), Events(pit=True)]
        else:
            return Events()
        delta = int(score) - self.score
        for events in outcomes:
            if self._estimate_reward(action, events) == delta:
                return events
        return Events()

    def _estimate_reward(self, action: Action, events: Events) -> int:
        reward = self.rules.score_action
        if action is Action.SHOOT:
            reward += self.rules.score_shot
        if action is Action.DIG:
            reward += self.rules.score_dig
            if events.treasure:
                reward += self.rules.score_treasure
        if events.wumpus:
            reward += self.rules.score_wumpus
        if events.pit:
            reward += self.rules.score_pit
        return reward
