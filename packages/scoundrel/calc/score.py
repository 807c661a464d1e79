"""
Final scoring.

- Victory: score = remaining HP
- Defeat: score = -(total strength of every monster still in the deck and the
  room); the monster whose fight ended the run has already left the room
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..content.cards import Card


class Outcome(Enum):
    VICTORY = "VICTORY"
    DEFEAT = "DEFEAT"


@dataclass(frozen=True)
class GameResult:
    """Terminal value of a finished game."""
    outcome: Outcome
    score: int

    @property
    def victory(self) -> bool:
        return self.outcome == Outcome.VICTORY


def remaining_threat(cards: Iterable[Card]) -> int:
    """Total strength of the monsters among ``cards``."""
    return sum(c.rank for c in cards if c.is_monster)


class ScoreCalculator:
    """Builds the GameResult from a terminal state."""

    @staticmethod
    def victory(hp: int) -> GameResult:
        if hp <= 0:
            raise ValueError(f"Victory requires HP > 0, got {hp}")
        return GameResult(Outcome.VICTORY, hp)

    @staticmethod
    def defeat(deck_cards: Iterable[Card], room_cards: Iterable[Card]) -> GameResult:
        """
        Args:
            deck_cards: Cards still in the deck
            room_cards: Cards still face-up in the room
        """
        threat = remaining_threat(deck_cards) + remaining_threat(room_cards)
        return GameResult(Outcome.DEFEAT, -threat)
