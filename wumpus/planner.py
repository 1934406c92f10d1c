"""
Route planning over (cell, orientation) states.

Turning costs 1 and keeps the cell. Walking forward costs 1 plus a risk penalty
proportional to the hazard probability of the destination, and is not allowed at all
into a cell above the safety threshold. Dijkstra labels are `(cost, turns)` so routes
of equal cost prefer fewer turns.
"""

from __future__ import annotations

import heapq
import logging
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .config import AgentConfig
from .game import Action, Coord, Direction, in_bounds, neighbors

log = logging.getLogger(__name__)

Pose = Tuple[Coord, Direction]
Label = Tuple[float, int]

# Fixed expansion and goal order keeps plans deterministic.
_DIRECTION_ORDER = [Direction.EAST, Direction.NORTH, Direction.WEST, Direction.SOUTH]


class Unreachable(Exception):
    """No route reaches the target without entering a cell above the safety threshold."""

    def __init__(self, target: Coord, message: str = ""):
        super().__init__(message or f"{target} is unreachable")
        self.target = target


class Planner:
    def __init__(self, size: int, risk_aversion: float = 8.0, safety_threshold: float = 0.45):
        self.size = size
        self.risk_aversion = float(risk_aversion)
        self.safety_threshold = float(safety_threshold)

    @classmethod
    def from_config(cls, size: int, config: AgentConfig, safety_threshold: Optional[float] = None) -> "Planner":
        return cls(
            size,
            risk_aversion=config.risk_aversion,
            safety_threshold=config.safety_threshold if safety_threshold is None else safety_threshold,
        )

    def _hazard(self, hazard: Optional[np.ndarray]) -> np.ndarray:
        if hazard is None:
            return np.zeros((self.size, self.size), dtype=np.float64)
        return np.asarray(hazard, dtype=np.float64)

    def passable(self, cell: Coord, hazard: np.ndarray) -> bool:
        return in_bounds(cell, self.size) and hazard[cell[0], cell[1]] <= self.safety_threshold

    def _successors(self, pose: Pose, hazard: np.ndarray) -> List[Tuple[Action, Pose, float, int]]:
        cell, facing = pose
        out = [
            (Action.TURN_LEFT, (cell, facing.left()), 1.0, 1),
            (Action.TURN_RIGHT, (cell, facing.right()), 1.0, 1),
        ]
        front = facing.front_of(cell)
        if self.passable(front, hazard):
            cost = 1.0 + self.risk_aversion * float(hazard[front[0], front[1]])
            out.append((Action.WALK, (front, facing), cost, 0))
        return out

    def search(self, start: Pose, hazard: Optional[np.ndarray] = None
               ) -> Tuple[Dict[Pose, Label], Dict[Pose, Tuple[Pose, Action]]]:
        """Single-source Dijkstra from `start` over every reachable pose."""
        hazard = self._hazard(hazard)
        start = (tuple(start[0]), start[1])
        best: Dict[Pose, Label] = {start: (0.0, 0)}
        parent: Dict[Pose, Tuple[Pose, Action]] = {}
        done = set()
        count = 0
        heap = [(0.0, 0, count, start)]

        while heap:
            cost, turns, _, pose = heapq.heappop(heap)
            if pose in done:
                continue
            done.add(pose)
            for action, nxt, step, turned in self._successors(pose, hazard):
                label = (cost + step, turns + turned)
                if nxt not in best or label < best[nxt]:
                    best[nxt] = label
                    parent[nxt] = (pose, action)
                    count += 1
                    heapq.heappush(heap, (label[0], label[1], count, nxt))
        return best, parent

    @staticmethod
    def _unwind(goal: Pose, parent: Dict[Pose, Tuple[Pose, Action]]) -> List[Action]:
        actions: List[Action] = []
        pose = goal
        while pose in parent:
            pose, action = parent[pose]
            actions.append(action)
        actions.reverse()
        return actions

    def _best_goal(self, start: Pose, hazard: Optional[np.ndarray], target: Coord,
                   goals: List[Pose]) -> Tuple[List[Action], Label]:
        best, parent = self.search(start, hazard)
        reached = [g for g in goals if g in best]
        if not reached:
            raise Unreachable(target)
        goal = min(reached, key=lambda g: best[g])
        return self._unwind(goal, parent), best[goal]

    def plan(self, start: Pose, target: Coord, hazard: Optional[np.ndarray] = None) -> List[Action]:
        """Cheapest action sequence that ends standing on `target` (any orientation)."""
        target = tuple(target)
        if not in_bounds(target, self.size):
            raise Unreachable(target, f"{target} is off the board")
        if tuple(start[0]) == target:
            return []
        goals = [(target, d) for d in _DIRECTION_ORDER]
        actions, label = self._best_goal(start, hazard, target, goals)
        log.debug("plan %s -> %s: %d actions, cost %.2f", start[0], target, len(actions), label[0])
        return actions

    def plan_to_face(self, start: Pose, target: Coord, hazard: Optional[np.ndarray] = None) -> List[Action]:
        """
        Cheapest action sequence that ends on a neighbor of `target`, facing it.

        The target itself is never entered, so it may be above the safety threshold.
        """
        target = tuple(target)
        goals: List[Pose] = []
        for cell in neighbors(target, self.size):
            goals.append((cell, Direction.between(cell, target)))
        start = (tuple(start[0]), start[1])
        if start in goals:
            return []
        actions, _ = self._best_goal(start, hazard, target, goals)
        return actions

    def plan_cost(self, start: Pose, actions: List[Action], hazard: Optional[np.ndarray] = None) -> float:
        """Cost of replaying `actions` from `start` with this planner's edge weights."""
        hazard = self._hazard(hazard)
        cell, facing = tuple(start[0]), start[1]
        total = 0.0
        for action in actions:
            if action is Action.WALK:
                cell = facing.front_of(cell)
                total += 1.0 + self.risk_aversion * float(hazard[cell[0], cell[1]])
            elif action is Action.TURN_LEFT:
                facing = facing.left()
                total += 1.0
            elif action is Action.TURN_RIGHT:
                facing = facing.right()
                total += 1.0
        return total

    def route_costs(self, start: Pose, hazard: Optional[np.ndarray] = None,
                    accept: Optional[Callable[[Coord], bool]] = None) -> Dict[Coord, float]:
        """Minimum cost to stand on each reachable cell, optionally filtered by `accept`."""
        best, _ = self.search(start, hazard)
        costs: Dict[Coord, float] = {}
        for (cell, _facing), (cost, _turns) in best.items():
            if accept is not None and not accept(cell):
                continue
            if cell not in costs or cost < costs[cell]:
                costs[cell] = cost
        return costs
