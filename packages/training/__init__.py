"""Training-side utilities: observation encoding, baseline policies, rollouts."""

from .encoding import (
    ACTION_SPACE,
    NUM_ACTIONS,
    decode_action,
    encode_action,
    encode_snapshot,
    encode_state,
    get_action_dim,
    get_state_dim,
    legal_action_mask,
)
from .policies import POLICY_NAMES, MaskedPolicy, RandomPolicy, greedy_policy, make_policy
from .rollout import Episode, collect_episode, evaluate_policy, summarize_results

__all__ = [
    "ACTION_SPACE",
    "Episode",
    "MaskedPolicy",
    "NUM_ACTIONS",
    "POLICY_NAMES",
    "RandomPolicy",
    "collect_episode",
    "decode_action",
    "encode_action",
    "encode_snapshot",
    "encode_state",
    "evaluate_policy",
    "get_action_dim",
    "get_state_dim",
    "greedy_policy",
    "legal_action_mask",
    "make_policy",
    "summarize_results",
]
