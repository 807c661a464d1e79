"""
Agent API - JSON-serializable action and observation interfaces for agents.

This module provides the model-facing API surface for agents to interact with
the game engine. All actions and observations are JSON-serializable dicts.

Key types:
- ActionDict: JSON-serializable action with id, type, label, params, phase
- ActionResultDict: Result of executing an action dict
- ObservationDict: Complete observable game state

Usage:
    runner = GameRunner(seed="TEST", verbose=False)

    # Get current observation
    obs = runner.get_observation()

    # Get available actions as dicts
    actions = runner.get_available_action_dicts()

    # Execute action dict
    result = runner.take_action_dict(actions[0])
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

from .content.cards import Card
from .game import (
    ACTION_TYPE_NAMES,
    PHASE_NAMES,
    ChooseWeaponUse,
    GameAction,
    GameRunner,
    SelectCard,
    action_from_dict,
    action_to_dict,
)


# =============================================================================
# Type Definitions
# =============================================================================

class ActionDict(TypedDict, total=False):
    """JSON-serializable action dict."""
    id: str  # Stable identifier for the action
    type: str  # Action type string
    label: str  # Human-readable summary
    params: Dict[str, Any]  # Required parameters
    phase: str  # Current phase


class ActionResultDict(TypedDict, total=False):
    """Result of executing an action dict."""
    success: bool
    error: Optional[str]
    reason: Optional[str]
    events: List[Dict[str, Any]]
    observation: "ObservationDict"


class ObservationDict(TypedDict, total=False):
    """Complete observable game state."""
    phase: str
    seed: Optional[str]
    player: Dict[str, Any]
    room: Dict[str, Any]
    deck_size: int
    remaining_threat: int
    result: Optional[Dict[str, Any]]
    message: str
    session_closed: bool


# =============================================================================
# Serialization helpers
# =============================================================================

def card_to_dict(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    if card is None:
        return None
    return {
        "code": card.code,
        "suit": card.suit.value,
        "rank": card.rank,
        "kind": card.kind.value,
    }


def generate_action_id(action_type: str, *args) -> str:
    """
    Generate a deterministic action ID from type and parameters.

    IDs are stable for identical state + phase.
    """
    parts = [action_type]
    for arg in args:
        if arg is not None:
            parts.append(str(arg).lower())
    return "_".join(parts)


def _action_label(runner: GameRunner, action: GameAction) -> str:
    if isinstance(action, SelectCard):
        card = runner.run_state.room.slots[action.slot - 1]
        return f"Resolve slot {action.slot}: {card.describe()}"
    if isinstance(action, ChooseWeaponUse):
        return "Fight with weapon" if action.use_weapon else "Fight bare-handed"
    return ACTION_TYPE_NAMES[type(action)].replace("_", " ").capitalize()


def describe_action(runner: GameRunner, action: GameAction) -> ActionDict:
    """Full ActionDict for an action that is legal in the runner's current phase."""
    base = action_to_dict(action)
    params = base["params"]
    if isinstance(action, SelectCard):
        action_id = generate_action_id(base["type"], action.slot)
    elif isinstance(action, ChooseWeaponUse):
        action_id = generate_action_id(base["type"], "yes" if action.use_weapon else "no")
    else:
        action_id = generate_action_id(base["type"])
    return {
        "id": action_id,
        "type": base["type"],
        "label": _action_label(runner, action),
        "params": params,
        "phase": PHASE_NAMES[runner.phase],
    }


# =============================================================================
# Observations
# =============================================================================

def generate_player_observation(runner: GameRunner) -> Dict[str, Any]:
    snapshot = runner.snapshot()
    return {
        "hp": snapshot.hp,
        "max_hp": snapshot.max_hp,
        "weapon": card_to_dict(snapshot.weapon),
        "weapon_ceiling": snapshot.weapon_ceiling,
        "potion_used_this_room": snapshot.potion_used_this_room,
    }


def generate_room_observation(runner: GameRunner) -> Dict[str, Any]:
    snapshot = runner.snapshot()
    faced = runner.run_state.room.faced if runner.run_state else False
    return {
        "number": snapshot.room_number,
        "slots": [card_to_dict(c) for c in snapshot.room],
        "carried_over": card_to_dict(snapshot.carried_over),
        "faced": faced,
        "resolved_count": snapshot.resolved_count,
        "resolutions_required": snapshot.resolutions_required,
        "can_skip": snapshot.can_skip,
        "pending_slot": snapshot.pending_slot,
    }


def get_observation(runner: GameRunner) -> ObservationDict:
    """
    Get the complete observable game state as a JSON-serializable dict.

    Returns:
        ObservationDict with all relevant game state
    """
    snapshot = runner.snapshot()
    result = None
    if snapshot.result is not None:
        result = {
            "outcome": snapshot.result.outcome.value,
            "score": snapshot.result.score,
        }
    return {
        "phase": PHASE_NAMES[snapshot.phase],
        "seed": runner.seed_string,
        "player": generate_player_observation(runner),
        "room": generate_room_observation(runner),
        "deck_size": snapshot.deck_size,
        "remaining_threat": runner.remaining_threat(),
        "result": result,
        "message": snapshot.message,
        "session_closed": snapshot.session_closed,
    }


# =============================================================================
# Actions
# =============================================================================

def get_available_action_dicts(runner: GameRunner) -> List[ActionDict]:
    """
    Get all valid actions for the current game state as JSON-serializable dicts.

    Returns:
        List of ActionDict objects
    """
    return [describe_action(runner, a) for a in runner.get_available_actions()]


def take_action_dict(runner: GameRunner, action: ActionDict) -> ActionResultDict:
    """
    Execute a JSON action dict and return the result.

    Only ``type`` and ``params`` are read; ``id``, ``label`` and ``phase`` are
    informational.

    Args:
        action: ActionDict with type and params

    Returns:
        ActionResultDict with success status and any error message
    """
    try:
        game_action = action_from_dict(action)
    except (KeyError, TypeError, ValueError) as e:
        return {
            "success": False,
            "error": f"Malformed action: {e}",
            "reason": "invalid_action",
            "events": [],
            "observation": get_observation(runner),
        }

    result = runner.take_action(game_action)
    return {
        "success": result.success,
        "error": result.rejection.message if result.rejection else None,
        "reason": result.rejection.reason.value if result.rejection else None,
        "events": [e.to_dict() for e in result.events],
        "observation": get_observation(runner),
    }


__all__ = [
    "ActionDict",
    "ActionResultDict",
    "ObservationDict",
    "card_to_dict",
    "describe_action",
    "generate_action_id",
    "get_available_action_dicts",
    "get_observation",
    "take_action_dict",
]
