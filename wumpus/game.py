"""
This is the core Wumpus World game logic I use throughout the project.

The board is a square grid of `Cell` values addressed as `(x, y)`: `x` grows to the
East, `y` grows to the North, and the player spawns at `(0, 0)` facing East.

The key design choice is that a *player* (or bot) never reads the board directly.
`WumpusGame` keeps the ground truth private and only hands out `Percept` bundles for
cells that have already been discovered, so any inference has to work from percepts.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .config import GameRules
from .board_metrics import status_code

log = logging.getLogger(__name__)

Coord = Tuple[int, int]

START: Coord = (0, 0)


class InvalidLayoutError(ValueError):
    """A fixed layout breaks the board invariants (counts, bounds, empty start)."""


class InvalidActionError(RuntimeError):
    """An action that the rules do not allow in the current state (no arrow, undiscovered dig)."""


class GameOverError(InvalidActionError):
    """An action was requested after the game reached WON or LOST."""


class UndiscoveredCellError(LookupError):
    """A percept was requested for a cell the player has never stood on."""


class Cell(Enum):
    EMPTY = "empty"
    TREASURE = "treasure"
    WUMPUS = "wumpus"
    PIT = "pit"


class GameState(Enum):
    """I use these small status codes to track whether the game is ongoing or finished."""
    PLAYING = "PLAYING"
    WON = "WON"
    LOST = "LOST"


class Direction(Enum):
    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    NORTH = "north"

    @property
    def delta(self) -> Coord:
        return _DELTAS[self]

    def left(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) - 1) % 4]

    def right(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 1) % 4]

    def back(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 2) % 4]

    def front_of(self, cell: Coord) -> Coord:
        dx, dy = self.delta
        return (cell[0] + dx, cell[1] + dy)

    @staticmethod
    def between(src: Coord, dst: Coord) -> Optional["Direction"]:
        """Direction of `dst` as seen from `src`, or None if they are not orthogonal neighbors."""
        for d in _CLOCKWISE:
            if d.front_of(src) == dst:
                return d
        return None


_CLOCKWISE = [Direction.EAST, Direction.SOUTH, Direction.WEST, Direction.NORTH]
_DELTAS = {
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, -1),
    Direction.WEST: (-1, 0),
    Direction.NORTH: (0, 1),
}


class Action(Enum):
    TURN_LEFT = "left"
    TURN_RIGHT = "right"
    WALK = "walk"
    SHOOT = "shoot"
    DIG = "dig"

    @classmethod
    def parse(cls, text: str) -> "Action":
        """Parse `"walk"`, `"LEFT"`, `" dig "`... Raises ValueError on anything else."""
        return cls(str(text).strip().lower())


@dataclass(frozen=True)
class Percept:
    """
    What the player senses on a cell: the OR over its orthogonal neighbors.

    Flags are plain booleans when they come from the game. The Bayes bot may replace a flag
    with None in its own history once the flag stops carrying information.
    """
    glitter: Optional[bool] = False
    stench: Optional[bool] = False
    breeze: Optional[bool] = False


@dataclass(frozen=True)
class Events:
    bump: bool = False      # walked into a wall
    scream: bool = False    # the arrow killed a wumpus
    treasure: bool = False  # the dig found a treasure
    wumpus: bool = False    # walked into a live wumpus
    pit: bool = False       # fell into a pit

    @property
    def hazard(self) -> bool:
        return self.wumpus or self.pit

    def names(self) -> List[str]:
        return [name for name in ("bump", "scream", "treasure", "wumpus", "pit") if getattr(self, name)]


@dataclass(frozen=True)
class StepResult:
    action: Optional[Action]
    cell: Coord
    direction: Direction
    percept: Percept
    events: Events
    reward: int
    score: int
    status: GameState
    arrows: int


def in_bounds(cell: Coord, size: int) -> bool:
    return 0 <= cell[0] < size and 0 <= cell[1] < size


def neighbors(cell: Coord, size: int) -> List[Coord]:
    """Orthogonal in-bounds neighbors, always in East, South, West, North order."""
    return [d.front_of(cell) for d in _CLOCKWISE if in_bounds(d.front_of(cell), size)]


def all_cells(size: int) -> Iterator[Coord]:
    for x in range(size):
        for y in range(size):
            yield (x, y)


class Board:
    """
    Ground truth: one `Cell` per coordinate, stored as `grid[x][y]`.

    The only mutations after generation are removing a dug treasure and removing a
    wumpus killed by the arrow.
    """

    def __init__(self, rules: GameRules, grid: List[List[Cell]]):
        self.rules = rules
        self.size = rules.size
        self.grid = grid

    @classmethod
    def generate(cls, rules: GameRules, rng: Optional[random.Random] = None) -> "Board":
        """Place every item on a distinct random cell, never on the start cell."""
        rng = rng or random.Random()
        candidates = [c for c in all_cells(rules.size) if c != START]
        picked = rng.sample(candidates, rules.treasures + rules.wumpuses + rules.pits)
        treasures = picked[:rules.treasures]
        wumpuses = picked[rules.treasures:rules.treasures + rules.wumpuses]
        pits = picked[rules.treasures + rules.wumpuses:]
        return cls.from_layout(rules, treasures=treasures, wumpuses=wumpuses, pits=pits)

    @classmethod
    def from_layout(cls, rules: GameRules, *, treasures, wumpuses, pits) -> "Board":
        """Build a fixed board, e.g. for tests or replays."""
        placements = {
            Cell.TREASURE: [tuple(c) for c in treasures],
            Cell.WUMPUS: [tuple(c) for c in wumpuses],
            Cell.PIT: [tuple(c) for c in pits],
        }
        expected = {Cell.TREASURE: rules.treasures, Cell.WUMPUS: rules.wumpuses, Cell.PIT: rules.pits}
        grid = [[Cell.EMPTY for _ in range(rules.size)] for _ in range(rules.size)]
        for kind, cells in placements.items():
            if len(cells) != expected[kind]:
                raise InvalidLayoutError(f"expected {expected[kind]} {kind.value} cells, got {len(cells)}")
            for cell in cells:
                if not in_bounds(cell, rules.size):
                    raise InvalidLayoutError(f"{kind.value} at {cell} is off the board")
                if cell == START:
                    raise InvalidLayoutError("the start cell must be empty")
                x, y = cell
                if grid[x][y] is not Cell.EMPTY:
                    raise InvalidLayoutError(f"{cell} holds more than one item")
                grid[x][y] = kind
        return cls(rules, grid)

    def __getitem__(self, cell: Coord) -> Cell:
        return self.grid[cell[0]][cell[1]]

    def cells_of(self, kind: Cell) -> Set[Coord]:
        return {c for c in all_cells(self.size) if self[c] is kind}

    def count(self, kind: Cell) -> int:
        return len(self.cells_of(kind))

    def remove(self, cell: Coord) -> Cell:
        previous = self[cell]
        self.grid[cell[0]][cell[1]] = Cell.EMPTY
        return previous

    def percept_for(self, cell: Coord) -> Percept:
        around = [self[n] for n in neighbors(cell, self.size)]
        return Percept(
            glitter=Cell.TREASURE in around,
            stench=Cell.WUMPUS in around,
            breeze=Cell.PIT in around,
        )


class WumpusGame:
    """
    This is my Wumpus World session: one board, one player, one score.

    Only `percept_at`, the player pose, arrows, score and status are meant for
    decision code. `layout()` exists for rendering and recording.
    """

    def __init__(self, rules: Optional[GameRules] = None, seed: Optional[int] = None,
                 board: Optional[Board] = None):
        self.rules = rules or (board.rules if board is not None else GameRules())
        self.seed = seed
        self._rng = random.Random(seed)
        self._initial_board = board
        self.reset()

    def reset(self):
        """Start over; a fixed board passed at construction is reused as-is."""
        if self._initial_board is not None:
            self._board = Board(self.rules, [row[:] for row in self._initial_board.grid])
        else:
            self._board = Board.generate(self.rules, self._rng)
        self._layout_initial = self.layout()
        self.position: Coord = START
        self.direction = Direction.EAST
        self.arrows = self.rules.arrows
        self.score = 0
        self.status = GameState.PLAYING
        self.treasures_found = 0
        self.steps = 0
        self.discovered: Set[Coord] = {START}
        self.last_events = Events()

    @property
    def size(self) -> int:
        return self.rules.size

    def percept_at(self, cell: Coord) -> Percept:
        """Percept bundle of a discovered cell, computed from the current board."""
        cell = tuple(cell)
        if cell not in self.discovered:
            raise UndiscoveredCellError(f"{cell} has not been discovered")
        return self._board.percept_for(cell)

    def is_over(self) -> bool:
        return self.status is not GameState.PLAYING

    def do_action(self, action: Action) -> StepResult:
        """Apply one action to the authoritative state and report what the player senses."""
        if self.is_over():
            raise GameOverError(f"game already {self.status.value}")
        if action is Action.SHOOT and self.arrows <= 0:
            raise InvalidActionError("no arrow left")

        reward = self.rules.score_action
        events: Dict[str, bool] = {}

        if action is Action.TURN_LEFT:
            self.direction = self.direction.left()

        elif action is Action.TURN_RIGHT:
            self.direction = self.direction.right()

        elif action is Action.WALK:
            front = self.direction.front_of(self.position)
            if not in_bounds(front, self.size):
                events["bump"] = True
            else:
                self.position = front
                self.discovered.add(front)
                here = self._board[front]
                if here is Cell.WUMPUS:
                    events["wumpus"] = True
                    reward += self.rules.score_wumpus
                elif here is Cell.PIT:
                    events["pit"] = True
                    reward += self.rules.score_pit

        elif action is Action.SHOOT:
            self.arrows -= 1
            reward += self.rules.score_shot
            front = self.direction.front_of(self.position)
            if in_bounds(front, self.size) and self._board[front] is Cell.WUMPUS:
                self._board.remove(front)
                events["scream"] = True

        elif action is Action.DIG:
            reward += self.rules.score_dig
            if self._board[self.position] is Cell.TREASURE:
                self._board.remove(self.position)
                self.treasures_found += 1
                reward += self.rules.score_treasure
                events["treasure"] = True

        else:
            raise InvalidActionError(f"unknown action {action!r}")

        self.steps += 1
        self.score += reward
        self.last_events = Events(**events)
        self.status = GameState(status_code(
            treasures_found=self.treasures_found,
            total_treasures=self.rules.treasures,
            hazard_hit=self.last_events.hazard,
        ))
        if self.is_over():
            log.info("game over: %s with score %d after %d steps", self.status.value, self.score, self.steps)

        return StepResult(
            action=action,
            cell=self.position,
            direction=self.direction,
            percept=self._board.percept_for(self.position),
            events=self.last_events,
            reward=reward,
            score=self.score,
            status=self.status,
            arrows=self.arrows,
        )

    def initial_result(self) -> StepResult:
        """The observation a player gets at spawn, before any action."""
        return StepResult(
            action=None,
            cell=self.position,
            direction=self.direction,
            percept=self.percept_at(self.position),
            events=Events(),
            reward=0,
            score=self.score,
            status=self.status,
            arrows=self.arrows,
        )

    def layout(self) -> Dict[str, List[List[int]]]:
        """Ground-truth item positions as JSON-friendly lists (for rendering/recording only)."""
        return {
            "treasures": sorted([list(c) for c in self._board.cells_of(Cell.TREASURE)]),
            "wumpuses": sorted([list(c) for c in self._board.cells_of(Cell.WUMPUS)]),
            "pits": sorted([list(c) for c in self._board.cells_of(Cell.PIT)]),
        }

    def initial_layout(self) -> Dict[str, List[List[int]]]:
        return self._layout_initial

    def get_statistics(self) -> dict:
        return {
            "score": self.score,
            "steps": self.steps,
            "treasures_found": self.treasures_found,
            "arrows": self.arrows,
            "cells_discovered": len(self.discovered),
            "game_won": self.status is GameState.WON,
            "game_lost": self.status is GameState.LOST,
        }
