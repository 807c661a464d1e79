"""
Baseline decision functions for headless runs.

Every policy has the ``decision_fn(snapshot, actions) -> action`` shape
accepted by ``run_headless`` and ``run_parallel``; all of them are picklable.
"""

from typing import List, Optional, Union

import numpy as np

from packages.scoundrel.calc.damage import damage
from packages.scoundrel.content.cards import Card, CardKind
from packages.scoundrel.game import (
    ChooseWeaponUse,
    Continue,
    Face,
    GameAction,
    GamePhase,
    GameSnapshot,
    SelectCard,
    Skip,
)
from packages.scoundrel.state.rng import Random, seed_to_long

from .encoding import NUM_ACTIONS, decode_action, legal_action_mask


class RandomPolicy:
    """Uniform choice among the legal actions, from a seeded stream."""

    def __init__(self, seed: Union[str, int] = 0):
        self.rng = Random(seed_to_long(seed))

    def __call__(self, snapshot: GameSnapshot, actions: List[GameAction]) -> GameAction:
        return actions[self.rng.random_int(len(actions) - 1)]


class MaskedPolicy:
    """
    Picks the highest-scoring legal action from a score vector.

    ``score_fn(snapshot)`` returns NUM_ACTIONS scores (logits, Q-values...);
    illegal entries are masked out before the argmax.
    """

    def __init__(self, score_fn):
        self.score_fn = score_fn

    def __call__(self, snapshot: GameSnapshot, actions: List[GameAction]) -> GameAction:
        scores = np.asarray(self.score_fn(snapshot), dtype=np.float64)
        if scores.shape != (NUM_ACTIONS,):
            raise ValueError(f"Expected {NUM_ACTIONS} scores, got shape {scores.shape}")
        mask = legal_action_mask(actions)
        if not mask.any():
            return actions[0]
        masked = np.where(mask, scores, -np.inf)
        return decode_action(int(np.argmax(masked)))


def _weapon_usable(snapshot: GameSnapshot, card: Card) -> bool:
    if snapshot.weapon is None:
        return False
    return snapshot.weapon_ceiling is None or card.rank < snapshot.weapon_ceiling


def _fight_cost(snapshot: GameSnapshot, card: Card) -> int:
    if _weapon_usable(snapshot, card):
        return damage(card.rank, snapshot.weapon.rank)
    return damage(card.rank)


def _selection_priority(snapshot: GameSnapshot, card: Card) -> float:
    """Lower is resolved first."""
    if card.kind == CardKind.WEAPON:
        current = snapshot.weapon.rank if snapshot.weapon else 0
        # An unused, stronger weapon goes first; a worse one last
        return -10.0 if card.rank > current else 20.0 + card.rank
    if card.kind == CardKind.POTION:
        if snapshot.potion_used_this_room:
            return 30.0
        missing = snapshot.max_hp - snapshot.hp
        return -5.0 if missing >= card.rank else 5.0
    cost = _fight_cost(snapshot, card)
    if cost >= snapshot.hp:
        return 40.0 + cost
    # Kill big monsters while the weapon still reaches them
    return cost - card.rank / 14.0


def greedy_policy(snapshot: GameSnapshot, actions: List[GameAction]) -> GameAction:
    """
    Simple hand-written heuristic.

    - Skip a full room whose fights would cost at least the current HP
    - Take a better weapon first, drink potions when they are not wasted,
      then fight the cheapest monster
    - Use the weapon unless the monster is tiny and the weapon is still fresh
    """
    if snapshot.phase == GamePhase.ROOM_CHOICE:
        if Skip() in actions:
            cards = [c for c in snapshot.room if c is not None]
            cost = sum(_fight_cost(snapshot, c) for c in cards if c.is_monster)
            heals = [c.rank for c in cards if c.is_potion]
            if cost - (max(heals) if heals else 0) >= snapshot.hp:
                return Skip()
        return Face()

    if snapshot.phase == GamePhase.CARD_SELECTION:
        selections = [a for a in actions if isinstance(a, SelectCard)]
        if selections:
            return min(selections, key=lambda a: _selection_priority(snapshot, snapshot.slot(a.slot)))

    if snapshot.phase == GamePhase.WEAPON_PROMPT and snapshot.pending_slot is not None:
        monster = snapshot.slot(snapshot.pending_slot)
        bare_cost = damage(monster.rank)
        fresh = snapshot.weapon_ceiling is None or snapshot.weapon_ceiling > 10
        if monster.rank <= 4 and fresh and bare_cost < snapshot.hp:
            return ChooseWeaponUse(False)
        return ChooseWeaponUse(True)

    if snapshot.phase == GamePhase.AWAIT_CONTINUE:
        return Continue()

    return actions[0]


def make_policy(name: str, seed: Optional[Union[str, int]] = None):
    """Look up a policy by name (``first``, ``random``, ``greedy``)."""
    if name == "first":
        return None
    if name == "random":
        return RandomPolicy(seed if seed is not None else 0)
    if name == "greedy":
        return greedy_policy
    raise ValueError(f"Unknown policy: {name}")


POLICY_NAMES = ["first", "random", "greedy"]
