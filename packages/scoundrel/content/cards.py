"""
Card definitions for the Scoundrel dungeon deck.

A card is an immutable (suit, rank) pair. Its kind follows from the suit:

- Spades and Clubs are MONSTERS; strength = rank (2..14, J=11 Q=12 K=13 A=14)
- Diamonds are WEAPONS; value = rank (2..10)
- Hearts are POTIONS; heal = rank (2..10)

The dungeon deck is a standard deck with the red face cards, red Aces and
Jokers removed, trimmed to 40 cards: both black suits in full, the nine
Diamond weapons and the five lowest Hearts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


# =============================================================================
# Rule constants
# =============================================================================

MAX_HP = 20
ROOM_SIZE = 4
RESOLUTIONS_PER_ROOM = 3

MIN_RANK = 2
MAX_MONSTER_RANK = 14
MAX_RED_RANK = 10

POTION_RANKS: Tuple[int, ...] = (2, 3, 4, 5, 6)
WEAPON_RANKS: Tuple[int, ...] = tuple(range(MIN_RANK, MAX_RED_RANK + 1))
MONSTER_RANKS: Tuple[int, ...] = tuple(range(MIN_RANK, MAX_MONSTER_RANK + 1))

DECK_SIZE = 2 * len(MONSTER_RANKS) + len(WEAPON_RANKS) + len(POTION_RANKS)


class Suit(Enum):
    """Card suits, valued by their one-letter code."""
    SPADE = "S"
    CLUB = "C"
    DIAMOND = "D"
    HEART = "H"


class CardKind(Enum):
    """What a card does when it is resolved."""
    MONSTER = "MONSTER"
    WEAPON = "WEAPON"
    POTION = "POTION"


SUIT_KINDS: Dict[Suit, CardKind] = {
    Suit.SPADE: CardKind.MONSTER,
    Suit.CLUB: CardKind.MONSTER,
    Suit.DIAMOND: CardKind.WEAPON,
    Suit.HEART: CardKind.POTION,
}

SUIT_SYMBOLS: Dict[Suit, str] = {
    Suit.SPADE: "♠",
    Suit.CLUB: "♣",
    Suit.DIAMOND: "♦",
    Suit.HEART: "♥",
}

RANK_LABELS: Dict[int, str] = {11: "J", 12: "Q", 13: "K", 14: "A"}
LABEL_RANKS: Dict[str, int] = {label: rank for rank, label in RANK_LABELS.items()}


@dataclass(frozen=True)
class Card:
    """A single dungeon card."""
    suit: Suit
    rank: int

    def __post_init__(self):
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Unknown suit: {self.suit!r}")
        max_rank = MAX_MONSTER_RANK if SUIT_KINDS[self.suit] == CardKind.MONSTER else MAX_RED_RANK
        if not isinstance(self.rank, int) or not MIN_RANK <= self.rank <= max_rank:
            raise ValueError(
                f"Rank {self.rank!r} out of range for {self.suit.name} "
                f"({MIN_RANK}..{max_rank})"
            )

    @property
    def kind(self) -> CardKind:
        return SUIT_KINDS[self.suit]

    @property
    def is_monster(self) -> bool:
        return self.kind == CardKind.MONSTER

    @property
    def is_weapon(self) -> bool:
        return self.kind == CardKind.WEAPON

    @property
    def is_potion(self) -> bool:
        return self.kind == CardKind.POTION

    @property
    def label(self) -> str:
        return RANK_LABELS.get(self.rank, str(self.rank))

    @property
    def code(self) -> str:
        """Short ASCII form, e.g. ``"8S"`` or ``"AC"``."""
        return f"{self.label}{self.suit.value}"

    @property
    def symbol(self) -> str:
        """Display form with the suit glyph, e.g. ``"8♠"``."""
        return f"{self.label}{SUIT_SYMBOLS[self.suit]}"

    def describe(self) -> str:
        """Human-readable summary used in prompts and tooltips."""
        if self.kind == CardKind.MONSTER:
            return f"Monster {self.symbol} (strength {self.rank})"
        if self.kind == CardKind.WEAPON:
            return f"Weapon {self.symbol} (value {self.rank})"
        return f"Potion {self.symbol} (heals {self.rank})"

    @classmethod
    def parse(cls, code: str) -> "Card":
        """Parse the short form produced by ``code`` (case-insensitive)."""
        text = code.strip().upper()
        if len(text) < 2:
            raise ValueError(f"Cannot parse card: {code!r}")
        label, suit_letter = text[:-1], text[-1]
        try:
            suit = Suit(suit_letter)
        except ValueError:
            raise ValueError(f"Unknown suit in card: {code!r}") from None
        if label in LABEL_RANKS:
            rank = LABEL_RANKS[label]
        elif label.isdigit():
            rank = int(label)
        else:
            raise ValueError(f"Unknown rank in card: {code!r}")
        return cls(suit, rank)

    def __str__(self) -> str:
        return self.code


def build_dungeon_cards() -> List[Card]:
    """
    The canonical, unshuffled 40-card dungeon.

    Order: Spades 2..A, Clubs 2..A, Diamonds 2..10, Hearts 2..6.
    """
    cards = [Card(Suit.SPADE, r) for r in MONSTER_RANKS]
    cards += [Card(Suit.CLUB, r) for r in MONSTER_RANKS]
    cards += [Card(Suit.DIAMOND, r) for r in WEAPON_RANKS]
    cards += [Card(Suit.HEART, r) for r in POTION_RANKS]
    return cards


def parse_cards(codes: str) -> List[Card]:
    """Parse a whitespace or comma separated list such as ``"8S 5D 3H 2C"``."""
    return [Card.parse(token) for token in codes.replace(",", " ").split()]
