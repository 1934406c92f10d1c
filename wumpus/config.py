"""
These are the tunables I share between the game session, the bots and the runner.

`GameRules` fixes the world (size, item counts, scoring) and `AgentConfig` holds the
knobs of the Bayes bot. Both are frozen so a running game can never see them change;
use `dataclasses.replace` to derive a variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

# Belief enumeration grows with the number of cells next to positive percepts, so I cap the grid.
MAX_SIZE = 6


@dataclass(frozen=True)
class GameRules:
    """World size, fixed item counts and the score table."""

    size: int = field(default=4, metadata={"help": "Side length of the square grid."})
    treasures: int = field(default=2, metadata={"help": "Number of buried treasures."})
    wumpuses: int = field(default=1, metadata={"help": "Number of wumpuses."})
    pits: int = field(default=3, metadata={"help": "Number of pits."})

    # --- Scores ---
    score_action: int = field(default=-1, metadata={"help": "Applied to every action."})
    score_shot: int = field(default=-10, metadata={"help": "Shooting the arrow."})
    score_dig: int = field(default=-50, metadata={"help": "Digging, hit or miss."})
    score_treasure: int = field(default=250, metadata={"help": "Digging up a treasure."})
    score_wumpus: int = field(default=-200, metadata={"help": "Walking into a live wumpus."})
    score_pit: int = field(default=-100, metadata={"help": "Falling into a pit."})

    arrows: int = field(default=1, metadata={"help": "Arrows at spawn."})

    def __post_init__(self):
        if not 2 <= self.size <= MAX_SIZE:
            raise ValueError(f"size must be in [2, {MAX_SIZE}], got {self.size}")
        counts = (self.treasures, self.wumpuses, self.pits)
        if any(c < 0 for c in counts):
            raise ValueError(f"item counts must be non-negative, got {counts}")
        if sum(counts) > self.size * self.size - 1:
            raise ValueError(f"{sum(counts)} items do not fit on a {self.size}x{self.size} board")

    @property
    def cells(self) -> int:
        return self.size * self.size


@dataclass(frozen=True)
class AgentConfig:
    """Decision thresholds for the Bayes bot and its planner."""

    risk_aversion: float = field(
        default=8.0,
        metadata={"help": "Extra walk cost per unit of hazard probability on the destination cell."},
    )
    safety_threshold: float = field(
        default=0.45,
        metadata={"help": "Cells with a higher combined hazard probability are impassable."},
    )
    fallback_threshold: float = field(
        default=0.99,
        metadata={"help": "Relaxed threshold used when nothing is reachable under the safety threshold."},
    )
    commit_threshold: float = field(
        default=0.25,
        metadata={"help": "Minimum treasure probability worth walking to and digging."},
    )
    shoot_confidence: float = field(
        default=0.99,
        metadata={"help": "Minimum wumpus probability of a cell before the arrow is spent on it."},
    )
    shoot_budget: float = field(
        default=12.0,
        metadata={"help": "Maximum route cost accepted to line up a shot."},
    )

    def __post_init__(self):
        for name in ("safety_threshold", "fallback_threshold", "commit_threshold", "shoot_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be a probability, got {value}")
        if self.risk_aversion < 0 or self.shoot_budget < 0:
            raise ValueError("risk_aversion and shoot_budget must be non-negative")


# Named rule sets for the CLI and the runner.
PRESETS: Dict[str, Dict[str, int]] = {
    "Classic": {"size": 4, "treasures": 2, "wumpuses": 1, "pits": 3},
    "Roomy": {"size": 5, "treasures": 2, "wumpuses": 1, "pits": 4},
    "Sparse": {"size": 4, "treasures": 1, "wumpuses": 1, "pits": 2},
}


def rules_from_preset(name: str) -> GameRules:
    """Build `GameRules` from a preset name (case-insensitive)."""
    for key, preset in PRESETS.items():
        if key.lower() == str(name).lower():
            return GameRules(**preset)
    raise KeyError(f"Unknown preset {name!r}; choose one of {sorted(PRESETS)}")
