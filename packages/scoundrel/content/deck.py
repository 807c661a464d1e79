"""
Dungeon deck: an ordered pile drawn from the top, refilled at the bottom.

Index 0 is the top of the deck (the next card drawn). Every operation is
total: drawing from an exhausted deck simply returns fewer cards.
"""

from typing import Iterable, Iterator, List, Optional, Union

from .cards import Card, build_dungeon_cards
from ..state.rng import Random, seed_to_long


class Deck:
    """Ordered sequence of cards with draw-from-top semantics."""

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self._cards: List[Card] = list(cards) if cards is not None else []

    @classmethod
    def shuffle(cls, seed: Union[str, int]) -> "Deck":
        """
        Build the canonical 40-card dungeon and shuffle it.

        Uses a Fisher-Yates pass driven by ``Random(seed_to_long(seed))``, so
        the same seed always yields the same order.
        """
        rng = Random(seed_to_long(seed))
        return cls(shuffle_cards(build_dungeon_cards(), rng))

    def draw(self, n: int = 1) -> List[Card]:
        """Remove and return up to ``n`` cards from the top."""
        if n <= 0:
            return []
        drawn = self._cards[:n]
        del self._cards[:n]
        return drawn

    def return_to_bottom(self, cards: Iterable[Card]) -> None:
        """Append cards to the bottom, keeping their relative order."""
        self._cards.extend(cards)

    def peek(self, n: int = 1) -> List[Card]:
        return self._cards[:n]

    def monsters(self) -> List[Card]:
        return [c for c in self._cards if c.is_monster]

    @property
    def is_empty(self) -> bool:
        return not self._cards

    @property
    def cards(self) -> List[Card]:
        """A copy of the remaining cards, top first."""
        return list(self._cards)

    def copy(self) -> "Deck":
        return Deck(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Deck):
            return NotImplemented
        return self._cards == other._cards

    def __repr__(self) -> str:
        return f"Deck({len(self._cards)} cards)"


def shuffle_cards(cards: List[Card], rng: Random) -> List[Card]:
    """Fisher-Yates shuffle into a new list."""
    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = rng.random_int(i)
        result[i], result[j] = result[j], result[i]
    return result
