"""Card content: suits, kinds, the dungeon deck and player-facing strings."""

from .cards import (
    Card,
    CardKind,
    Suit,
    MAX_HP,
    ROOM_SIZE,
    RESOLUTIONS_PER_ROOM,
    DECK_SIZE,
    POTION_RANKS,
    WEAPON_RANKS,
    MONSTER_RANKS,
    build_dungeon_cards,
    parse_cards,
)
from .deck import Deck, shuffle_cards

__all__ = [
    "Card", "CardKind", "Suit",
    "MAX_HP", "ROOM_SIZE", "RESOLUTIONS_PER_ROOM", "DECK_SIZE",
    "POTION_RANKS", "WEAPON_RANKS", "MONSTER_RANKS",
    "build_dungeon_cards", "parse_cards",
    "Deck", "shuffle_cards",
]
