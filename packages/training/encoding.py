"""
State and action encoding for Scoundrel.

Converts runner snapshots to fixed-length float vectors and decisions to
indices in a fixed action space, for learning agents.
"""

from typing import Iterable, List, Optional, Sequence

import numpy as np

from packages.scoundrel.content.cards import (
    Card,
    CardKind,
    MAX_HP,
    MAX_MONSTER_RANK,
    MAX_RED_RANK,
    RESOLUTIONS_PER_ROOM,
    ROOM_SIZE,
    build_dungeon_cards,
)
from packages.scoundrel.game import (
    ChooseWeaponUse,
    Continue,
    Face,
    GameAction,
    GamePhase,
    GameRunner,
    GameSnapshot,
    SelectCard,
    Skip,
)

# === CARDS ===
ALL_CARDS = build_dungeon_cards()
CARD_TO_IDX = {card: i for i, card in enumerate(ALL_CARDS)}
NUM_CARDS = len(ALL_CARDS)

KINDS = [CardKind.MONSTER, CardKind.WEAPON, CardKind.POTION]
KIND_TO_IDX = {k: i for i, k in enumerate(KINDS)}

PHASES = list(GamePhase)
PHASE_TO_IDX = {p: i for i, p in enumerate(PHASES)}

# Total strength of every monster in the canonical deck
MAX_THREAT = sum(c.rank for c in ALL_CARDS if c.is_monster)

# === ACTIONS ===
ACTION_SPACE = [
    "face",
    "skip",
    "select_1",
    "select_2",
    "select_3",
    "select_4",
    "weapon_yes",
    "weapon_no",
    "continue",
]
ACTION_TO_IDX = {a: i for i, a in enumerate(ACTION_SPACE)}
NUM_ACTIONS = len(ACTION_SPACE)

# Per-slot features: present, kind one-hot, rank
SLOT_FEATURES = 1 + len(KINDS) + 1


def encode_card_slot(card: Optional[Card]) -> np.ndarray:
    """Encode one room slot."""
    encoding = np.zeros(SLOT_FEATURES, dtype=np.float32)
    if card is None:
        return encoding
    encoding[0] = 1.0
    encoding[1 + KIND_TO_IDX[card.kind]] = 1.0
    encoding[-1] = card.rank / MAX_MONSTER_RANK
    return encoding


def encode_deck(cards: Iterable[Card]) -> np.ndarray:
    """Multi-hot of the cards still in the deck (order is hidden, contents are not)."""
    encoding = np.zeros(NUM_CARDS, dtype=np.float32)
    for card in cards:
        idx = CARD_TO_IDX.get(card)
        if idx is not None:
            encoding[idx] = 1.0
    return encoding


def encode_snapshot(snapshot: GameSnapshot, deck_cards: Sequence[Card] = ()) -> np.ndarray:
    """
    Encode a snapshot as a fixed-length vector.

    Returns a feature vector containing:
    - HP ratio
    - Weapon (present, value, ceiling, has-ceiling)
    - Potion flag, skip availability
    - The four room slots
    - Deck size, remaining threat, room progress
    - Phase one-hot
    - Deck contents (multi-hot over the canonical 40 cards)
    """
    features = []

    features.append(np.array([snapshot.hp / MAX_HP], dtype=np.float32))

    weapon = np.zeros(4, dtype=np.float32)
    if snapshot.weapon is not None:
        weapon[0] = 1.0
        weapon[1] = snapshot.weapon.rank / MAX_RED_RANK
        if snapshot.weapon_ceiling is not None:
            weapon[2] = snapshot.weapon_ceiling / MAX_MONSTER_RANK
            weapon[3] = 1.0
    features.append(weapon)

    features.append(np.array([
        float(snapshot.potion_used_this_room),
        float(snapshot.can_skip),
    ], dtype=np.float32))

    for card in snapshot.room:
        features.append(encode_card_slot(card))

    threat = sum(c.rank for c in deck_cards if c.is_monster)
    threat += sum(c.rank for c in snapshot.room if c is not None and c.is_monster)
    features.append(np.array([
        snapshot.deck_size / NUM_CARDS,
        min(threat / MAX_THREAT, 1.0),
        snapshot.resolved_count / RESOLUTIONS_PER_ROOM,
        snapshot.resolutions_required / RESOLUTIONS_PER_ROOM,
    ], dtype=np.float32))

    phase = np.zeros(len(PHASES), dtype=np.float32)
    phase[PHASE_TO_IDX[snapshot.phase]] = 1.0
    features.append(phase)

    features.append(encode_deck(deck_cards))

    return np.concatenate(features)


def encode_state(runner: GameRunner) -> np.ndarray:
    """Encode the runner's current state."""
    deck_cards = runner.run_state.deck.cards if runner.run_state else []
    return encode_snapshot(runner.snapshot(), deck_cards)


def get_state_dim() -> int:
    """Return the dimension of the state vector."""
    # hp + weapon + flags + slots + progress + phase + deck
    return 1 + 4 + 2 + ROOM_SIZE * SLOT_FEATURES + 4 + len(PHASES) + NUM_CARDS


def get_action_dim() -> int:
    """Return number of possible actions."""
    return NUM_ACTIONS


def encode_action(action: GameAction) -> int:
    """
    Index of an in-game action in ACTION_SPACE.

    Raises:
        ValueError: For session actions (StartGame, Restart, Quit) and
            SelectCard with a pre-answered weapon choice
    """
    if isinstance(action, Face):
        return ACTION_TO_IDX["face"]
    if isinstance(action, Skip):
        return ACTION_TO_IDX["skip"]
    if isinstance(action, SelectCard) and action.use_weapon is None:
        return ACTION_TO_IDX[f"select_{action.slot}"]
    if isinstance(action, ChooseWeaponUse):
        return ACTION_TO_IDX["weapon_yes" if action.use_weapon else "weapon_no"]
    if isinstance(action, Continue):
        return ACTION_TO_IDX["continue"]
    raise ValueError(f"Action has no index in the action space: {action!r}")


def decode_action(index: int) -> GameAction:
    """Inverse of ``encode_action``."""
    name = ACTION_SPACE[index]
    if name == "face":
        return Face()
    if name == "skip":
        return Skip()
    if name.startswith("select_"):
        return SelectCard(slot=int(name.split("_")[1]))
    if name == "weapon_yes":
        return ChooseWeaponUse(True)
    if name == "weapon_no":
        return ChooseWeaponUse(False)
    return Continue()


def legal_action_mask(actions: List[GameAction]) -> np.ndarray:
    """Boolean mask over ACTION_SPACE for the given legal actions."""
    mask = np.zeros(NUM_ACTIONS, dtype=bool)
    for action in actions:
        try:
            mask[encode_action(action)] = True
        except ValueError:
            continue
    return mask
