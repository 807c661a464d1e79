"""Combat math and final scoring."""

from .damage import (
    strength,
    damage,
    weapon_can_be_used,
    heal,
    apply_hp_loss,
    is_weapon_spent,
)
from .score import GameResult, Outcome, ScoreCalculator, remaining_threat

__all__ = [
    "strength", "damage", "weapon_can_be_used", "heal", "apply_hp_loss",
    "is_weapon_spent",
    "GameResult", "Outcome", "ScoreCalculator", "remaining_threat",
]
