"""
This is the top-level Wumpus World package I use for the project.

The game session, the belief engine, the planner and the Bayes bot are all importable
from here; the CLI lives in `scripts/play_games.py`.
"""

from .bayes_bot import BayesBot, PolicyState
from .belief import BeliefContradiction, BeliefEngine, BeliefState
from .config import AgentConfig, GameRules, PRESETS, rules_from_preset
from .game import (
    Action,
    Board,
    Cell,
    Direction,
    Events,
    GameOverError,
    GameState,
    InvalidActionError,
    InvalidLayoutError,
    Percept,
    StepResult,
    UndiscoveredCellError,
    WumpusGame,
)
from .planner import Planner, Unreachable
from .state_collector import StateCollector

__all__ = [
    'Action', 'AgentConfig', 'BayesBot', 'BeliefContradiction', 'BeliefEngine', 'BeliefState',
    'Board', 'Cell', 'Direction', 'Events', 'GameOverError', 'GameRules', 'GameState',
    'InvalidActionError', 'InvalidLayoutError', 'PRESETS', 'Percept', 'Planner', 'PolicyState',
    'StateCollector', 'StepResult', 'UndiscoveredCellError', 'Unreachable', 'WumpusGame',
    'rules_from_preset',
]
