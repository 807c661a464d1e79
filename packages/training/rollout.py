"""
Episode collection and batch evaluation.

Runs games headlessly and records (state, action, legal-mask) triples for
training, or aggregates scores over many seeds.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from packages.scoundrel.game import (
    DecisionFn,
    GameRunner,
    RunResult,
    first_action,
    run_headless,
    run_parallel,
)

from .encoding import NUM_ACTIONS, encode_action, encode_state, get_state_dim, legal_action_mask

logger = logging.getLogger(__name__)


@dataclass
class Episode:
    """One recorded game."""
    seed: Union[str, int]
    states: np.ndarray   # (steps, state_dim) float32
    actions: np.ndarray  # (steps,) int64
    masks: np.ndarray    # (steps, NUM_ACTIONS) bool
    score: int
    victory: bool
    stats: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.actions)


def collect_episode(
    seed: Union[str, int],
    decision_fn: Optional[DecisionFn] = None,
    max_actions: int = 1000,
) -> Episode:
    """Play one game and record every decision."""
    if decision_fn is None:
        decision_fn = first_action

    runner = GameRunner(seed=seed, verbose=False)
    states: List[np.ndarray] = []
    actions: List[int] = []
    masks: List[np.ndarray] = []

    while not runner.game_over and len(actions) < max_actions:
        legal = runner.get_available_actions()
        if not legal:
            break
        state = encode_state(runner)
        action = decision_fn(runner.snapshot(), legal)
        result = runner.take_action(action)
        if not result.success:
            logger.warning("Policy chose a rejected action %s: %s", action, result.rejection)
            break
        states.append(state)
        actions.append(encode_action(action))
        masks.append(legal_action_mask(legal))

    return Episode(
        seed=seed,
        states=np.stack(states) if states else np.zeros((0, get_state_dim()), dtype=np.float32),
        actions=np.array(actions, dtype=np.int64),
        masks=np.stack(masks) if masks else np.zeros((0, NUM_ACTIONS), dtype=bool),
        score=runner.result.score if runner.result else 0,
        victory=runner.game_won,
        stats=runner.get_run_statistics(),
    )


def evaluate_policy(
    seeds: Sequence[Union[str, int]],
    decision_fn: Optional[DecisionFn] = None,
    max_workers: int = 1,
) -> Dict[str, Any]:
    """
    Score a policy over many seeds.

    Returns:
        Dict with games, win_rate, mean/min/max score and score std
    """
    if max_workers > 1:
        results = run_parallel(list(seeds), decision_fn, max_workers=max_workers)
    else:
        results = [run_headless(seed, decision_fn) for seed in seeds]
    return summarize_results(results)


def summarize_results(results: Sequence[RunResult]) -> Dict[str, Any]:
    """Aggregate headless results into win rate and score statistics."""
    if not results:
        return {"games": 0, "win_rate": 0.0, "mean_score": 0.0,
                "std_score": 0.0, "min_score": 0, "max_score": 0}

    scores = np.array([r.score for r in results], dtype=np.float64)
    wins = np.array([r.victory for r in results], dtype=bool)
    return {
        "games": len(results),
        "win_rate": float(wins.mean()),
        "mean_score": float(scores.mean()),
        "std_score": float(scores.std()),
        "min_score": int(scores.min()),
        "max_score": int(scores.max()),
    }
