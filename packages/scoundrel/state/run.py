"""
Run State - the single owned aggregate for one game of Scoundrel.

Everything the engine mutates lives here:
1. The dungeon deck (top first)
2. The current room's four stable slots and its interaction counters
3. The player (HP, equipped weapon, potion flag)
4. Where every resolved card went (slain, drunk, discarded)

``RunState.check_invariants`` verifies the card accounting after every
accepted action: deck + room + equipped weapon + discards + slain monsters +
used potions is always exactly the starting deck.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from ..calc.damage import weapon_can_be_used
from ..content.cards import Card, MAX_HP, MAX_MONSTER_RANK, MIN_RANK, ROOM_SIZE, RESOLUTIONS_PER_ROOM
from ..content.deck import Deck
from ..errors import InvariantViolation
from .rng import seed_to_long


@dataclass
class WeaponState:
    """
    An equipped weapon.

    ``ceiling`` is the strength of the last monster this weapon killed; None
    until its first kill. It is lost when the weapon is replaced.
    """
    card: Card
    ceiling: Optional[int] = None
    kills: int = 0

    @property
    def value(self) -> int:
        return self.card.rank

    def can_fight(self, monster_strength: int) -> bool:
        return weapon_can_be_used(self, monster_strength)

    def copy(self) -> "WeaponState":
        return WeaponState(card=self.card, ceiling=self.ceiling, kills=self.kills)

    def __repr__(self) -> str:
        limit = f"<{self.ceiling}" if self.ceiling is not None else "fresh"
        return f"Weapon({self.card.code}, {limit})"


@dataclass
class PlayerState:
    """The adventurer."""
    hp: int = MAX_HP
    max_hp: int = MAX_HP
    weapon: Optional[WeaponState] = None
    potion_used_this_room: bool = False

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    def copy(self) -> "PlayerState":
        return PlayerState(
            hp=self.hp,
            max_hp=self.max_hp,
            weapon=self.weapon.copy() if self.weapon else None,
            potion_used_this_room=self.potion_used_this_room,
        )


@dataclass
class RoomState:
    """
    The face-up cards of the current room.

    Slots keep their position for the life of the room so that "slot 3"
    always means the same card. Indices are 0-based here; the action API
    uses 1..4.
    """
    slots: List[Optional[Card]] = field(default_factory=lambda: [None] * ROOM_SIZE)
    number: int = 0
    faced: bool = False
    resolved_count: int = 0
    resolutions_required: int = 0
    carried_over: Optional[Card] = None

    @property
    def cards(self) -> List[Card]:
        """Present cards in slot order."""
        return [c for c in self.slots if c is not None]

    def occupied_slots(self) -> List[int]:
        return [i for i, c in enumerate(self.slots) if c is not None]

    def empty_slots(self) -> List[int]:
        return [i for i, c in enumerate(self.slots) if c is None]

    @property
    def card_count(self) -> int:
        return sum(1 for c in self.slots if c is not None)

    @property
    def is_full(self) -> bool:
        return self.card_count == ROOM_SIZE

    @property
    def is_empty(self) -> bool:
        return self.card_count == 0

    @property
    def resolutions_left(self) -> int:
        return max(self.resolutions_required - self.resolved_count, 0)

    def take(self, index: int) -> Card:
        card = self.slots[index]
        if card is None:
            raise InvariantViolation(f"Slot {index + 1} is empty")
        self.slots[index] = None
        return card

    def clear(self) -> List[Card]:
        """Remove and return every card in slot order."""
        cards = self.cards
        self.slots = [None] * ROOM_SIZE
        return cards

    def copy(self) -> "RoomState":
        return RoomState(
            slots=list(self.slots),
            number=self.number,
            faced=self.faced,
            resolved_count=self.resolved_count,
            resolutions_required=self.resolutions_required,
            carried_over=self.carried_over,
        )


@dataclass
class RunState:
    """
    Complete state of one game.

    ``initial_cards`` is the deck as dealt at the start; scripted runs used in
    tests may start from any card order, not only the canonical 40.
    """
    seed: int
    seed_string: str
    deck: Deck
    player: PlayerState = field(default_factory=PlayerState)
    room: RoomState = field(default_factory=RoomState)
    last_action_was_skip: bool = False

    # Where resolved cards went
    slain_monsters: List[Card] = field(default_factory=list)
    used_potions: List[Card] = field(default_factory=list)
    discarded_weapons: List[Card] = field(default_factory=list)

    # Counters
    rooms_faced: int = 0
    rooms_skipped: int = 0
    cards_resolved: int = 0

    initial_cards: Tuple[Card, ...] = ()

    def __post_init__(self):
        if not self.initial_cards:
            self.initial_cards = tuple(self.deck.cards)

    @property
    def can_skip(self) -> bool:
        return not self.last_action_was_skip

    def remaining_monsters(self) -> List[Card]:
        """Unresolved monsters: the room (slot order) then the deck (top first)."""
        return [c for c in self.room.cards if c.is_monster] + self.deck.monsters()

    def all_cards(self) -> List[Card]:
        """Every card accounted for, wherever it currently is."""
        cards = list(self.deck.cards)
        cards += self.room.cards
        if self.player.weapon is not None:
            cards.append(self.player.weapon.card)
        cards += self.discarded_weapons
        cards += self.slain_monsters
        cards += self.used_potions
        return cards

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the state is corrupted."""
        if not 0 <= self.player.hp <= self.player.max_hp:
            raise InvariantViolation(f"HP out of bounds: {self.player.hp}")

        if len(self.room.slots) != ROOM_SIZE:
            raise InvariantViolation(f"Room has {len(self.room.slots)} slots")

        if not 0 <= self.room.resolved_count <= self.room.resolutions_required <= RESOLUTIONS_PER_ROOM:
            raise InvariantViolation(
                f"Room counters corrupt: {self.room.resolved_count}/"
                f"{self.room.resolutions_required}"
            )

        weapon = self.player.weapon
        if weapon is not None:
            if not weapon.card.is_weapon:
                raise InvariantViolation(f"{weapon.card.code} equipped as a weapon")
            if weapon.ceiling is not None and not MIN_RANK <= weapon.ceiling <= MAX_MONSTER_RANK:
                raise InvariantViolation(f"Weapon ceiling out of range: {weapon.ceiling}")

        if Counter(self.all_cards()) != Counter(self.initial_cards):
            raise InvariantViolation(
                f"Card accounting broken: {len(self.all_cards())} cards tracked, "
                f"{len(self.initial_cards)} expected"
            )

    def copy(self) -> "RunState":
        return RunState(
            seed=self.seed,
            seed_string=self.seed_string,
            deck=self.deck.copy(),
            player=self.player.copy(),
            room=self.room.copy(),
            last_action_was_skip=self.last_action_was_skip,
            slain_monsters=list(self.slain_monsters),
            used_potions=list(self.used_potions),
            discarded_weapons=list(self.discarded_weapons),
            rooms_faced=self.rooms_faced,
            rooms_skipped=self.rooms_skipped,
            cards_resolved=self.cards_resolved,
            initial_cards=self.initial_cards,
        )


def create_run(seed: Union[str, int]) -> RunState:
    """Fresh run with the canonical deck shuffled from ``seed``."""
    seed_string = seed.upper() if isinstance(seed, str) else str(seed)
    return RunState(
        seed=seed_to_long(seed),
        seed_string=seed_string,
        deck=Deck.shuffle(seed),
    )


def create_run_from_cards(
    cards: Sequence[Card],
    hp: int = MAX_HP,
    seed: Union[str, int] = 0,
) -> RunState:
    """
    Run over an explicit deck order (top first).

    Used for scripted scenarios and replays of recorded decks.
    """
    if not 0 < hp <= MAX_HP:
        raise ValueError(f"Starting HP must be in 1..{MAX_HP}, got {hp}")
    run = RunState(
        seed=seed_to_long(seed),
        seed_string=str(seed),
        deck=Deck(cards),
    )
    run.player.hp = hp
    return run
