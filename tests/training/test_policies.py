"""
Unit tests for the baseline policies and episode collection.
"""

import numpy as np
import pytest

from packages.scoundrel.game import (
    ChooseWeaponUse, Face, GameRunner, RunResult, SelectCard, Skip,
)
from packages.training.encoding import NUM_ACTIONS, get_state_dim
from packages.training.policies import (
    MaskedPolicy, RandomPolicy, greedy_policy, make_policy,
)
from packages.training.rollout import collect_episode, evaluate_policy, summarize_results


def play_out(runner, policy):
    chosen = []
    while not runner.game_over:
        action = policy(runner.snapshot(), runner.get_available_actions())
        assert runner.take_action(action).success, action
        chosen.append(action)
    return chosen


class TestRandomPolicy:

    def test_same_seed_same_game(self):
        a = play_out(GameRunner(seed="RP", verbose=False), RandomPolicy(5))
        b = play_out(GameRunner(seed="RP", verbose=False), RandomPolicy(5))
        assert a == b

    def test_only_legal_choices(self):
        policy = RandomPolicy("ANY")
        for seed in range(5):
            play_out(GameRunner(seed=seed, verbose=False), policy)


class TestGreedyPolicy:

    def test_skips_deadly_room(self, make_runner):
        runner = make_runner("KS QC JS 10C 2S 3S 4S 5S")
        assert greedy_policy(runner.snapshot(), runner.get_available_actions()) == Skip()

    def test_faces_when_skip_locked(self, make_runner):
        runner = make_runner("KS QC JS 10C AS AC 9S 9C")
        runner.take_action(Skip())
        assert greedy_policy(runner.snapshot(), runner.get_available_actions()) == Face()

    def test_takes_weapon_first(self, scenario_a_runner):
        scenario_a_runner.take_action(Face())
        snapshot = scenario_a_runner.snapshot()
        assert greedy_policy(snapshot, scenario_a_runner.get_available_actions()) == SelectCard(2)

    def test_uses_weapon_on_big_monster(self, scenario_a_runner):
        scenario_a_runner.take_action(Face())
        scenario_a_runner.take_action(SelectCard(2))
        scenario_a_runner.take_action(SelectCard(1))
        choice = greedy_policy(scenario_a_runner.snapshot(), scenario_a_runner.get_available_actions())
        assert choice == ChooseWeaponUse(True)

    @pytest.mark.parametrize("seed", ["G1", "G2", "G3", 7, 8])
    def test_never_rejected(self, seed):
        play_out(GameRunner(seed=seed, verbose=False), greedy_policy)


class TestMaskedPolicy:

    def test_argmax_over_legal(self, seeded_runner):
        policy = MaskedPolicy(lambda snapshot: np.arange(NUM_ACTIONS, dtype=np.float32))
        # select/weapon/continue score higher but are illegal in room choice
        assert policy(seeded_runner.snapshot(), seeded_runner.get_available_actions()) == Skip()

    def test_wrong_score_shape(self, seeded_runner):
        policy = MaskedPolicy(lambda snapshot: np.zeros(3))
        with pytest.raises(ValueError):
            policy(seeded_runner.snapshot(), seeded_runner.get_available_actions())


class TestMakePolicy:

    def test_lookup(self):
        assert make_policy("first") is None
        assert make_policy("greedy") is greedy_policy
        assert isinstance(make_policy("random", seed=3), RandomPolicy)

    def test_unknown(self):
        with pytest.raises(ValueError):
            make_policy("telepathic")


# =============================================================================
# Rollouts
# =============================================================================


class TestRollout:

    def test_episode_shapes(self):
        episode = collect_episode("EP1", greedy_policy)
        steps = len(episode)
        assert steps > 0
        assert episode.states.shape == (steps, get_state_dim())
        assert episode.actions.shape == (steps,)
        assert episode.masks.shape == (steps, NUM_ACTIONS)
        # every recorded action was legal at the time
        assert episode.masks[np.arange(steps), episode.actions].all()

    def test_episode_outcome_matches_stats(self):
        episode = collect_episode("EP2", greedy_policy)
        assert episode.score == episode.stats["score"]
        assert episode.victory == episode.stats["game_won"]
        assert (episode.score > 0) == episode.victory

    def test_evaluate_policy(self):
        summary = evaluate_policy(["1", "2", "3"], greedy_policy)
        assert summary["games"] == 3
        assert 0.0 <= summary["win_rate"] <= 1.0
        assert summary["min_score"] <= summary["mean_score"] <= summary["max_score"]

    def test_summarize_empty(self):
        assert summarize_results([])["games"] == 0

    def test_summarize_values(self):
        results = [
            RunResult(seed="A", victory=True, score=10, hp_remaining=10,
                      rooms_faced=12, rooms_skipped=1, actions_taken=60),
            RunResult(seed="B", victory=False, score=-30, hp_remaining=0,
                      rooms_faced=5, rooms_skipped=2, actions_taken=25),
        ]
        summary = summarize_results(results)
        assert summary["win_rate"] == 0.5
        assert summary["mean_score"] == -10.0
        assert summary["std_score"] == 20.0
        assert (summary["min_score"], summary["max_score"]) == (-30, 10)
