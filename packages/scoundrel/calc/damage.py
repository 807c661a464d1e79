"""
Combat math - pure functions for fights and healing.

Design principles:
1. No side effects; callers own all state
2. HP is always kept inside [0, MAX_HP]
3. A weapon's degradation ceiling only ever goes down

Fight order:
1. Is the weapon usable? (no ceiling yet, or monster strength < ceiling)
2. Damage = strength, minus weapon value when the weapon is used (floor 0)
3. HP loss floors at 0
4. A used weapon's ceiling becomes the monster's strength
"""

from typing import Optional

from ..content.cards import Card, MAX_HP, MIN_RANK

__all__ = [
    "strength",
    "damage",
    "weapon_can_be_used",
    "heal",
    "apply_hp_loss",
    "is_weapon_spent",
]


def strength(card: Card) -> int:
    """Combat strength of a monster card (its rank, 2..14)."""
    if not card.is_monster:
        raise ValueError(f"{card.code} is not a monster")
    return card.rank


def damage(monster_strength: int, weapon_value: Optional[int] = None) -> int:
    """
    Damage the player takes from a fight.

    Args:
        monster_strength: Strength of the monster being fought
        weapon_value: Value of the weapon used, or None when bare-handed

    Returns:
        Non-negative damage
    """
    if weapon_value is None:
        return monster_strength
    return max(monster_strength - weapon_value, 0)


def weapon_can_be_used(weapon, monster_strength: int) -> bool:
    """
    True iff ``weapon`` may be used against a monster of this strength.

    ``weapon`` is anything with a ``ceiling`` attribute (``WeaponState``) or
    None. A fresh weapon has no ceiling; after a kill it can only be used on
    monsters strictly weaker than the last one it killed.
    """
    if weapon is None:
        return False
    if weapon.ceiling is None:
        return True
    return monster_strength < weapon.ceiling


def heal(current_hp: int, potion_value: int) -> int:
    """HP after drinking a potion, capped at MAX_HP."""
    return min(current_hp + potion_value, MAX_HP)


def apply_hp_loss(current_hp: int, amount: int) -> int:
    """HP after taking ``amount`` damage, floored at 0."""
    return max(current_hp - amount, 0)


def is_weapon_spent(ceiling: Optional[int]) -> bool:
    """A ceiling at the lowest rank means no monster can be fought with it."""
    return ceiling is not None and ceiling <= MIN_RANK
