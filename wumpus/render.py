"""
Text minimap for the terminal.

Every cell is drawn as two 4-character rows:
- row 1: player marker (`> ^ < v` or `-`), then `T`/`W`/`P` for what the cell holds
- row 2: player marker again, then `G`/`S`/`B` for the percepts on that cell
Undiscovered cells show `xxxx` unless `show_undiscovered` is set. North is up.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

import numpy as np

from .game import Coord, Direction, WumpusGame, neighbors

SEPARATOR_X = "    "

_ARROWS = {
    Direction.NORTH: "^",
    Direction.EAST: ">",
    Direction.SOUTH: "v",
    Direction.WEST: "<",
}


def _cells(layout: Dict[str, List[List[int]]], key: str) -> Set[Coord]:
    return {tuple(c) for c in layout.get(key, [])}


def render_layout(size: int, layout: Dict[str, List[List[int]]], position: Coord, direction: Direction,
                  discovered: Iterable[Coord], show_undiscovered: bool = False) -> str:
    """Render a ground-truth layout (as returned by `WumpusGame.layout()`)."""
    treasures = _cells(layout, "treasures")
    wumpuses = _cells(layout, "wumpuses")
    pits = _cells(layout, "pits")
    discovered = {tuple(c) for c in discovered}
    position = tuple(position)

    def marker(cell: Coord) -> str:
        return _ARROWS[direction] if cell == position else "-"

    lines: List[str] = []
    for y in reversed(range(size)):
        top: List[str] = []
        bottom: List[str] = []
        for x in range(size):
            cell = (x, y)
            if not show_undiscovered and cell not in discovered:
                top.append("xxxx")
                bottom.append("xxxx")
                continue
            around = set(neighbors(cell, size))
            # Buried treasures stay hidden from the player's view.
            top.append(
                marker(cell)
                + ("T" if show_undiscovered and cell in treasures else "-")
                + ("W" if cell in wumpuses else "-")
                + ("P" if cell in pits else "-")
            )
            bottom.append(
                marker(cell)
                + ("G" if around & treasures else "-")
                + ("S" if around & wumpuses else "-")
                + ("B" if around & pits else "-")
            )
        lines.append(SEPARATOR_X + SEPARATOR_X.join(top))
        lines.append(SEPARATOR_X + SEPARATOR_X.join(bottom))
        lines.append("")
    return "\n".join(lines[:-1])


def render_game(game: WumpusGame, show_undiscovered: bool = False) -> str:
    return render_layout(game.size, game.layout(), game.position, game.direction,
                         game.discovered, show_undiscovered=show_undiscovered)


def render_belief(grid: np.ndarray, title: Optional[str] = None) -> str:
    """One probability grid (indexed `[x, y]`) as a table, North up."""
    size = grid.shape[0]
    lines = [title] if title else []
    for y in reversed(range(size)):
        lines.append(" ".join(f"{grid[x, y]:.2f}" for x in range(size)))
    return "\n".join(lines)
