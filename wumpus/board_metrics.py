"""
I keep "board metrics" here so the project has one source of truth for:
- how I map treasures found + hazard encounters to status codes (PLAYING/WON/LOST)
- how many items of each kind are still unresolved
- how I summarize a batch of finished games

This avoids subtly different implementations across the game session, the bots,
the state collector and the runner.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable


def status_code(*, treasures_found: int, total_treasures: int, hazard_hit: bool) -> str:
    """
    Single source of truth for status codes:
    - LOST    if the player walked into a wumpus or a pit
    - WON     if every treasure has been dug up
    - PLAYING otherwise
    """
    if hazard_hit:
        return "LOST"
    if int(treasures_found) >= int(total_treasures):
        return "WON"
    return "PLAYING"


def remaining_counts(*, treasures: int, wumpuses: int, pits: int,
                     treasures_found: int = 0, wumpuses_killed: int = 0) -> Dict[str, int]:
    """Items not yet conclusively resolved. Pits never resolve: walking into one ends the game."""
    return {
        "treasure": max(0, int(treasures) - int(treasures_found)),
        "wumpus": max(0, int(wumpuses) - int(wumpuses_killed)),
        "pit": max(0, int(pits)),
    }


def exploration_percent(*, discovered: int, size: int) -> int:
    """Share of the board the player has stood on, as an integer percentage."""
    total = max(1, int(size) * int(size))
    return max(0, min(100, int(100.0 * int(discovered) / total)))


def summarize_results(results: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate per-game dicts (as returned by the bots' `play()`) into batch statistics.

    Each result needs `status`, `score` and `steps`; a game still PLAYING when it stopped
    counts as stuck.
    """
    results = list(results)
    n = len(results)
    wins = sum(1 for r in results if r.get("status") == "WON")
    losses = sum(1 for r in results if r.get("status") == "LOST")
    scores = [int(r.get("score", 0)) for r in results]
    steps = [int(r.get("steps", 0)) for r in results]
    return {
        "games": n,
        "wins": wins,
        "losses": losses,
        "stuck": n - wins - losses,
        "win_rate": (wins / n) if n else 0.0,
        "avg_score": (sum(scores) / n) if n else 0.0,
        "avg_steps": (sum(steps) / n) if n else 0.0,
        "best_score": max(scores) if scores else 0,
    }
