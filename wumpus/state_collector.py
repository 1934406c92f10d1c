"""
This is the state collector I use to save Wumpus World runs for inspection and analysis.

Every action is logged as one JSON record (action, pose, percept, events, score). When the
Bayes bot plays, I also keep the belief grids it decided from, and those can be exported
as a compact `.npz` dataset.
"""

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from .belief import BeliefState
from .config import GameRules
from .game import Action, StepResult

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Integer codes for actions in the npz export; -1 marks the spawn observation.
ACTION_CODES = {action: i for i, action in enumerate(Action)}


class StateCollector:
    """
    I use this class to collect and store game states on disk.
    """

    def __init__(self, output_dir: str = "data/game_states", auto_save: bool = True):
        """
        Initialize the state collector.

        Args:
            output_dir: Directory to save collected states
            auto_save: If True, rewrite the game file after each capture
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.auto_save = auto_save
        self.states: List[Dict] = []
        self.game_metadata: Optional[Dict] = None
        self.current_filename: Optional[str] = None
        self.current_filepath: Optional[Path] = None
        self._belief_frames: List[np.ndarray] = []
        self._belief_actions: List[int] = []

    def start_game(self, *, mode: str = "bayes", rules: Optional[GameRules] = None,
                   seed: Optional[int] = None, layout: Optional[Dict] = None,
                   game_id: Optional[int] = None):
        """
        Start collecting states for a new game.

        Args:
            mode: Which bot (or "manual") is playing
            rules: The game rules in force
            seed: Random seed (if any)
            layout: Initial ground-truth layout, used for the file name hash
            game_id: Optional ID for this game
        """
        rules = rules or GameRules()
        now = datetime.now()
        self.game_metadata = {
            "schema_version": SCHEMA_VERSION,
            "created_at": now.isoformat(),
            "last_updated": now.isoformat(),
            "mode": mode,
            "game_id": game_id,
            "seed": seed,
            "size": rules.size,
            "treasures": rules.treasures,
            "wumpuses": rules.wumpuses,
            "pits": rules.pits,
            "layout_initial": layout,
            "game_state": "PLAYING",
            "score": 0,
        }
        self.states = []
        self._belief_frames = []
        self._belief_actions = []
        self.current_filename = None
        self.current_filepath = None

    @property
    def has_beliefs(self) -> bool:
        return bool(self._belief_frames)

    def capture_state(self, result: StepResult, belief: Optional[BeliefState] = None):
        """Record one step (or the spawn observation when `result.action` is None)."""
        if self.game_metadata is None:
            raise RuntimeError("start_game() must be called before capture_state()")
        record = {
            "step": len(self.states),
            "action": result.action.value if result.action is not None else None,
            "cell": list(result.cell),
            "direction": result.direction.value,
            "percept": {
                "glitter": bool(result.percept.glitter),
                "stench": bool(result.percept.stench),
                "breeze": bool(result.percept.breeze),
            },
            "events": result.events.names(),
            "reward": int(result.reward),
            "score": int(result.score),
            "arrows": int(result.arrows),
        }
        if belief is not None:
            record["belief"] = {
                "treasure": np.round(belief.treasure, 6).tolist(),
                "wumpus": np.round(belief.wumpus, 6).tolist(),
                "pit": np.round(belief.pit, 6).tolist(),
            }
            self._belief_frames.append(belief.stacked())
            self._belief_actions.append(ACTION_CODES[result.action] if result.action is not None else -1)
        self.states.append(record)
        self.game_metadata["game_state"] = result.status.value
        self.game_metadata["score"] = int(result.score)
        if self.auto_save:
            self._save_to_file()

    def end_game(self, *, status: str, score: int) -> Optional[Path]:
        """Stamp the final result and write the file."""
        if self.game_metadata is None:
            return None
        self.game_metadata["game_state"] = str(status)
        self.game_metadata["score"] = int(score)
        return self._save_to_file()

    def _board_hash(self, layout: Dict) -> str:
        """
        Compute a stable hash for a unique game based ONLY on the initial layout.
        """
        payload = json.dumps(layout, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def _ensure_filepath(self):
        """
        Pick the file name once per game:
          game_<hash>_<mode>_<timestamp>.json
        """
        if self.current_filepath is not None:
            return
        meta = self.game_metadata or {}
        layout = meta.get("layout_initial")
        h = self._board_hash(layout) if layout else "nolayout"
        mode = str(meta.get("mode") or "bayes")
        try:
            ts = datetime.fromisoformat(meta["created_at"]).strftime("%Y%m%d_%H%M%S")
        except (KeyError, TypeError, ValueError):
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")

        base = f"game_{h}_{mode}_{ts}.json"
        bump = 1
        while (self.output_dir / base).exists():
            # Same layout, same second: bump a counter.
            base = f"game_{h}_{mode}_{ts}_{bump}.json"
            bump += 1
        self.current_filename = base
        self.current_filepath = self.output_dir / base

    def _save_to_file(self) -> Optional[Path]:
        """Save current states to file (internal method for auto-save)."""
        if self.game_metadata is None:
            return None
        self._ensure_filepath()
        now_iso = datetime.now().isoformat()
        self.game_metadata["last_updated"] = now_iso
        game_data = {
            "metadata": self.game_metadata,
            "states": self.states,
            "total_states": len(self.states),
            "last_updated": now_iso,
        }
        with open(self.current_filepath, "w") as f:
            json.dump(game_data, f, indent=2)
        return self.current_filepath

    def save_game(self, filename: Optional[str] = None) -> Optional[Path]:
        """
        Save all collected states for the current game.

        Args:
            filename: Optional custom filename (if None, uses the hashed name)
        """
        if not self.states:
            return None
        if filename:
            self.current_filename = filename
            self.current_filepath = self.output_dir / filename
        path = self._save_to_file()
        log.info("saved %d states to %s", len(self.states), path)
        return path

    def load_game(self, filename: str) -> Dict:
        """
        Load a saved game's states.

        Returns:
            Dictionary with 'metadata', 'states', 'total_states', 'last_updated'
        """
        with open(self.output_dir / filename, "r") as f:
            return json.load(f)

    def save_belief_dataset(self, filename: str = "belief_dataset.npz") -> Path:
        """Save the captured belief grids as a numpy dataset."""
        if not self._belief_frames:
            raise ValueError("No belief snapshots collected. Capture states with a belief first.")
        filepath = self.output_dir / filename
        np.savez_compressed(
            filepath,
            beliefs=np.stack(self._belief_frames),                      # float32, [N,3,S,S]
            actions=np.asarray(self._belief_actions, dtype=np.int16),   # int16, [N]
            meta_json=np.array(json.dumps(self.game_metadata)),
        )
        log.info("saved belief dataset with %d samples to %s", len(self._belief_frames), filepath)
        return filepath

    def load_belief_dataset(self, filename: str = "belief_dataset.npz") -> Dict:
        """Load a saved belief dataset."""
        data = np.load(self.output_dir / filename)
        return {
            "beliefs": data["beliefs"],
            "actions": data["actions"],
            "metadata": json.loads(str(data["meta_json"])),
        }
