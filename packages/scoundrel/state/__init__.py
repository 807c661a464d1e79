"""
State subsystem: deterministic RNG and the run aggregate.

``state.run`` (RunState, PlayerState, RoomState, WeaponState) is imported
from its module directly since it depends on the card content package.
"""

from .rng import XorShift128, Random, seed_to_long, long_to_seed

__all__ = ["XorShift128", "Random", "seed_to_long", "long_to_seed"]
