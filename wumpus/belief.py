"""
This is the belief engine behind the Bayes bot.

For each kind of item (treasure, wumpus, pit) I treat placement as a uniformly random
subset of fixed size among the cells that could still hold it. A subset is *consistent*
when, for every discovered cell, "some neighbor is in the subset" matches the percept
flag for that kind. The marginal of a cell is the share of consistent subsets that
contain it.

Three things keep the enumeration cheap:
- a negative flag removes all its neighbors from the candidates before enumerating
- a positive flag becomes a "hit at least one of these" group, and a branch dies as
  soon as it walks past the last member of an unhit group
- cells outside every group are never enumerated; they are counted with binomials
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from math import comb
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np

from .board_metrics import remaining_counts
from .config import GameRules
from .game import START, Cell, Coord, Percept, all_cells, neighbors

log = logging.getLogger(__name__)

KINDS = (Cell.TREASURE, Cell.WUMPUS, Cell.PIT)
HAZARDS = (Cell.WUMPUS, Cell.PIT)

# Which percept flag reports which kind of neighbor.
PERCEPT_FLAG = {
    Cell.TREASURE: "glitter",
    Cell.WUMPUS: "stench",
    Cell.PIT: "breeze",
}


class BeliefContradiction(RuntimeError):
    """
    No placement agrees with the recorded evidence.

    This never happens with correct bookkeeping, so it is a bug signal, not a game outcome.
    """

    def __init__(self, kind: Cell, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind


@dataclass
class BeliefState:
    """Per-cell marginals, one `[x, y]` float grid per kind."""

    size: int
    treasure: np.ndarray
    wumpus: np.ndarray
    pit: np.ndarray
    consistent: Dict[Cell, int] = field(default_factory=dict)

    def grid(self, kind: Cell) -> np.ndarray:
        if kind is Cell.TREASURE:
            return self.treasure
        if kind is Cell.WUMPUS:
            return self.wumpus
        if kind is Cell.PIT:
            return self.pit
        raise ValueError(f"no belief grid for {kind}")

    def probability(self, kind: Cell, cell: Coord) -> float:
        return float(self.grid(kind)[cell[0], cell[1]])

    def hazard_grid(self) -> np.ndarray:
        return np.clip(self.wumpus + self.pit, 0.0, 1.0)

    def hazard(self, cell: Coord) -> float:
        return float(min(1.0, self.wumpus[cell[0], cell[1]] + self.pit[cell[0], cell[1]]))

    def total(self, kind: Cell) -> float:
        return float(self.grid(kind).sum())

    def safe_cells(self) -> Set[Coord]:
        hazard = self.hazard_grid()
        return {c for c in all_cells(self.size) if hazard[c[0], c[1]] == 0.0}

    def stacked(self) -> np.ndarray:
        """(3, N, N) array in treasure, wumpus, pit order, handy for datasets."""
        return np.stack([self.treasure, self.wumpus, self.pit]).astype(np.float32)


def count_placements(candidates: Sequence[Coord], groups: Sequence[Iterable[Coord]],
                     k: int) -> Tuple[int, np.ndarray]:
    """
    Count the size-`k` subsets of `candidates` that hit every group at least once.

    Returns the number of such subsets and, per candidate, how many of them contain it.

    Only cells that belong to some group are enumerated. A partial choice of `j` of them
    stands for `comb(free, k - j)` full subsets, and every free cell sits in
    `comb(free - 1, k - j - 1)` of those.
    """
    n = len(candidates)
    counts = np.zeros(n, dtype=np.int64)
    index = {c: i for i, c in enumerate(candidates)}
    members = [sorted({index[c] for c in g if c in index}) for g in groups]
    if k < 0 or k > n or any(not m for m in members):
        return 0, counts

    in_group = {i for m in members for i in m}
    constrained = sorted(in_group)
    free = [i for i in range(n) if i not in in_group]
    slot = {i: s for s, i in enumerate(constrained)}
    nc, nf = len(constrained), len(free)

    covers: List[List[int]] = [[] for _ in range(nc)]
    due: List[List[int]] = [[] for _ in range(nc)]
    for g, m in enumerate(members):
        for i in m:
            covers[slot[i]].append(g)
        due[slot[m[-1]]].append(g)

    hits = [0] * len(members)
    unsatisfied = len(members)
    chosen: List[int] = []
    total = 0
    free_hits = 0

    def visit(s: int):
        nonlocal total, unsatisfied, free_hits
        rest = k - len(chosen)
        if rest > nf + (nc - s):
            return
        if s == nc:
            if unsatisfied == 0:
                weight = comb(nf, rest)
                total += weight
                for i in chosen:
                    counts[i] += weight
                if rest > 0:
                    free_hits += comb(nf - 1, rest - 1)
            return

        # Branch 1: the s-th constrained cell is in the subset.
        if rest > 0:
            chosen.append(constrained[s])
            for g in covers[s]:
                if hits[g] == 0:
                    unsatisfied -= 1
                hits[g] += 1
            visit(s + 1)
            for g in covers[s]:
                hits[g] -= 1
                if hits[g] == 0:
                    unsatisfied += 1
            chosen.pop()

        # Branch 2: it is left out, impossible if it was the last chance for a group.
        if any(hits[g] == 0 for g in due[s]):
            return
        visit(s + 1)

    visit(0)
    for i in free:
        counts[i] = free_hits
    return total, counts


class BeliefEngine:
    """
    I own everything the bot has learned *besides* percepts: which items were removed
    (dug treasures, killed wumpus) and which cells were ruled out by a dig or a shot.

    Percepts and discovered cells are passed in on every `update()` so the engine can
    never see the ground truth.
    """

    def __init__(self, rules: Optional[GameRules] = None):
        self.rules = rules or GameRules()
        self.size = self.rules.size
        self.totals = {
            Cell.TREASURE: self.rules.treasures,
            Cell.WUMPUS: self.rules.wumpuses,
            Cell.PIT: self.rules.pits,
        }
        self.removed = {kind: 0 for kind in KINDS}
        # The start cell is empty by construction.
        self.excluded: Dict[Cell, Set[Coord]] = {kind: {START} for kind in KINDS}
        self.last: Optional[BeliefState] = None

    def remaining(self, kind: Cell) -> int:
        counts = remaining_counts(
            treasures=self.totals[Cell.TREASURE],
            wumpuses=self.totals[Cell.WUMPUS],
            pits=self.totals[Cell.PIT],
            treasures_found=self.removed[Cell.TREASURE],
            wumpuses_killed=self.removed[Cell.WUMPUS],
        )
        return counts[kind.value]

    def exclude(self, kind: Cell, cell: Coord):
        """Rule `cell` out for `kind` (a dig that found nothing, an arrow without a scream)."""
        self.excluded[kind].add(tuple(cell))

    def record_removal(self, kind: Cell, cell: Coord):
        """An item of `kind` at `cell` is gone for good (treasure dug up, wumpus shot)."""
        if kind is Cell.PIT:
            raise ValueError("pits cannot be removed")
        if self.removed[kind] >= self.totals[kind]:
            raise BeliefContradiction(kind, f"removal at {cell} exceeds the total of {self.totals[kind]}")
        self.removed[kind] += 1
        self.excluded[kind].add(tuple(cell))

    def candidates(self, kind: Cell, discovered: Set[Coord]) -> List[Coord]:
        """
        Cells that may still hold `kind`.

        Standing on a cell proves it holds no hazard, but says nothing about a treasure
        buried under it.
        """
        out = []
        for cell in all_cells(self.size):
            if cell in self.excluded[kind]:
                continue
            if kind in HAZARDS and cell in discovered:
                continue
            out.append(cell)
        return out

    def _marginals(self, kind: Cell, discovered: Set[Coord],
                   percept_history: Mapping[Coord, Percept]) -> Tuple[np.ndarray, int]:
        flag = PERCEPT_FLAG[kind]
        candidates = self.candidates(kind, discovered)

        cleared: Set[Coord] = set()
        positives: List[Tuple[Coord, Set[Coord]]] = []
        for cell in sorted(percept_history):
            value = getattr(percept_history[cell], flag)
            if value is None:
                continue
            around = set(neighbors(cell, self.size))
            if value:
                positives.append((cell, around))
            else:
                cleared |= around

        candidates = [c for c in candidates if c not in cleared]
        live = set(candidates)
        for cell, around in positives:
            if not around & live:
                raise BeliefContradiction(kind, f"{flag} at {cell} but no neighbor can hold one")
        groups = [around for _, around in positives]

        k = self.remaining(kind)
        total, counts = count_placements(candidates, groups, k)
        if total == 0:
            raise BeliefContradiction(
                kind, f"no placement of {k} among {len(candidates)} candidates fits {len(groups)} {flag} readings"
            )

        grid = np.zeros((self.size, self.size), dtype=np.float64)
        for (x, y), hits in zip(candidates, counts):
            grid[x, y] = hits / total
        return grid, total

    def update(self, discovered_cells: Iterable[Coord],
               percept_history: Mapping[Coord, Percept]) -> BeliefState:
        """Recompute every marginal from scratch from the evidence gathered so far."""
        discovered = {tuple(c) for c in discovered_cells} | {tuple(c) for c in percept_history}
        history = {tuple(c): p for c, p in percept_history.items()}

        grids: Dict[Cell, np.ndarray] = {}
        consistent: Dict[Cell, int] = {}
        for kind in KINDS:
            grids[kind], consistent[kind] = self._marginals(kind, discovered, history)

        state = BeliefState(
            size=self.size,
            treasure=grids[Cell.TREASURE],
            wumpus=grids[Cell.WUMPUS],
            pit=grids[Cell.PIT],
            consistent=consistent,
        )
        log.debug(
            "belief update: %d discovered, placements treasure=%d wumpus=%d pit=%d",
            len(discovered), consistent[Cell.TREASURE], consistent[Cell.WUMPUS], consistent[Cell.PIT],
        )
        self.last = state
        return state
