"""
Game Runner - the Scoundrel turn state machine.

This module provides the GameRunner class that owns one game from the first
deal to victory or defeat. It handles:
- Run initialization from a seed (string or int)
- Room dealing with carry-over, face/skip decisions and the skip lockout
- Card-by-card resolution (monsters, weapons, potions)
- Weapon degradation, the one-potion-per-room cap, final scoring
- Decision logging and deterministic replay
- Abstract action interface for scripted drivers and agents

Usage:
    runner = GameRunner(seed="TEST123", verbose=False)
    while not runner.game_over:
        actions = runner.get_available_actions()
        result = runner.take_action(actions[0])

    runner.result  # GameResult(outcome=..., score=...)

Every action either succeeds (new snapshot + events) or is rejected with a
reason and leaves the state untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import logging
import random

from .calc.damage import apply_hp_loss, damage, heal, is_weapon_spent, strength
from .calc.score import GameResult, ScoreCalculator, remaining_threat
from .content import messages as msg
from .content.cards import Card, CardKind, MAX_HP, RESOLUTIONS_PER_ROOM, ROOM_SIZE
from .errors import ActionRejectedError, InvariantViolation, Rejection, RejectionReason
from .state.rng import Random, seed_to_long
from .state.run import RunState, WeaponState, create_run


logger = logging.getLogger(__name__)

# Offset between a game seed and the stream that picks seeds for restarts
SESSION_SEED_OFFSET = 1000


# =============================================================================
# Game Phase Enumeration
# =============================================================================

class GamePhase(Enum):
    """Current phase of the game."""
    MAIN_MENU = auto()        # No game started yet
    ROOM_CHOICE = auto()      # Room dealt; face it or skip it
    CARD_SELECTION = auto()   # Facing; pick the next card to resolve
    WEAPON_PROMPT = auto()    # Monster selected; use the weapon or not
    AWAIT_CONTINUE = auto()   # Fight resolved; waiting for acknowledgement
    GAME_OVER = auto()        # Victory or defeat


PHASE_NAMES = {
    GamePhase.MAIN_MENU: "menu",
    GamePhase.ROOM_CHOICE: "room",
    GamePhase.CARD_SELECTION: "select",
    GamePhase.WEAPON_PROMPT: "weapon_prompt",
    GamePhase.AWAIT_CONTINUE: "continue",
    GamePhase.GAME_OVER: "game_over",
}


# =============================================================================
# Action Types
# =============================================================================

@dataclass(frozen=True)
class StartGame:
    """Start a new game. A missing seed draws one from the session stream."""
    seed: Optional[Union[str, int]] = None


@dataclass(frozen=True)
class Face:
    """Face the current room."""


@dataclass(frozen=True)
class Skip:
    """Send the whole room to the bottom of the deck and deal a new one."""


@dataclass(frozen=True)
class SelectCard:
    """
    Resolve the card in ``slot`` (1..4).

    For monsters, ``use_weapon`` answers the weapon question up front;
    leave it None to be prompted. It is ignored for weapons and potions.
    """
    slot: int
    use_weapon: Optional[bool] = None


@dataclass(frozen=True)
class ChooseWeaponUse:
    """Answer the weapon prompt for the selected monster."""
    use_weapon: bool


@dataclass(frozen=True)
class Continue:
    """Acknowledge a resolved fight."""


@dataclass(frozen=True)
class Restart:
    """Throw the current game away and start a fresh one."""
    seed: Optional[Union[str, int]] = None


@dataclass(frozen=True)
class Quit:
    """Close the session. Every later action is rejected."""


GameAction = Union[StartGame, Face, Skip, SelectCard, ChooseWeaponUse, Continue, Restart, Quit]

ACTION_TYPES: Dict[str, type] = {
    "start_game": StartGame,
    "face": Face,
    "skip": Skip,
    "select_card": SelectCard,
    "choose_weapon": ChooseWeaponUse,
    "continue": Continue,
    "restart": Restart,
    "quit": Quit,
}
ACTION_TYPE_NAMES: Dict[type, str] = {cls: name for name, cls in ACTION_TYPES.items()}

# JSON action dictionary shape for the agent-facing API.
ActionDict = Dict[str, Any]


def action_to_dict(action: GameAction) -> ActionDict:
    """Convert an action dataclass to its JSON dict (without label/phase)."""
    action_type = ACTION_TYPE_NAMES[type(action)]
    params: Dict[str, Any] = {}
    if isinstance(action, (StartGame, Restart)) and action.seed is not None:
        params["seed"] = action.seed
    elif isinstance(action, SelectCard):
        params["slot"] = action.slot
        if action.use_weapon is not None:
            params["use_weapon"] = action.use_weapon
    elif isinstance(action, ChooseWeaponUse):
        params["use_weapon"] = action.use_weapon
    return {"type": action_type, "params": params}


def action_from_dict(action_dict: ActionDict) -> GameAction:
    """
    Convert a JSON action dict to an action dataclass.

    Raises:
        ValueError: Unknown type or malformed params
        KeyError: Missing required param
    """
    if not isinstance(action_dict, dict):
        raise ValueError(f"Action must be a dict, got {type(action_dict).__name__}")
    action_type = action_dict.get("type")
    if action_type not in ACTION_TYPES:
        raise ValueError(f"Unknown action type: {action_type}")
    params = action_dict.get("params") or {}
    if not isinstance(params, dict):
        raise ValueError("Action params must be a dict")

    if action_type in ("start_game", "restart"):
        return ACTION_TYPES[action_type](seed=params.get("seed"))
    if action_type == "select_card":
        slot = params["slot"]
        if isinstance(slot, bool) or not isinstance(slot, int):
            raise ValueError(f"Slot must be an int, got {slot!r}")
        use_weapon = params.get("use_weapon")
        if use_weapon is not None and not isinstance(use_weapon, bool):
            raise ValueError(f"use_weapon must be a bool, got {use_weapon!r}")
        return SelectCard(slot=slot, use_weapon=use_weapon)
    if action_type == "choose_weapon":
        use_weapon = params["use_weapon"]
        if not isinstance(use_weapon, bool):
            raise ValueError(f"use_weapon must be a bool, got {use_weapon!r}")
        return ChooseWeaponUse(use_weapon=use_weapon)
    return ACTION_TYPES[action_type]()


# =============================================================================
# Events, Snapshots and Results
# =============================================================================

class EventType(Enum):
    """Things that happened while an action was applied."""
    GAME_STARTED = "game_started"
    ROOM_DEALT = "room_dealt"
    ROOM_SKIPPED = "room_skipped"
    ROOM_FACED = "room_faced"
    MONSTER_FOUGHT = "monster_fought"
    WEAPON_DEGRADED = "weapon_degraded"
    WEAPON_SPENT = "weapon_spent"
    WEAPON_EQUIPPED = "weapon_equipped"
    WEAPON_DISCARDED = "weapon_discarded"
    POTION_USED = "potion_used"
    POTION_WASTED = "potion_wasted"
    ROOM_CLEARED = "room_cleared"
    PLAYER_DEFEATED = "player_defeated"
    DUNGEON_CLEARED = "dungeon_cleared"
    SESSION_QUIT = "session_quit"


@dataclass
class GameEvent:
    """A single game event."""
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.event_type.value, **self.data}


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the game after an action."""
    phase: GamePhase
    hp: int
    max_hp: int
    weapon: Optional[Card]
    weapon_ceiling: Optional[int]
    room: Tuple[Optional[Card], ...]
    carried_over: Optional[Card]
    deck_size: int
    room_number: int
    resolved_count: int
    resolutions_required: int
    can_skip: bool
    potion_used_this_room: bool
    pending_slot: Optional[int]  # 1-based slot awaiting the weapon prompt
    result: Optional[GameResult]
    message: str
    session_closed: bool = False

    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def weapon_value(self) -> Optional[int]:
        return self.weapon.rank if self.weapon is not None else None

    def slot(self, slot: int) -> Optional[Card]:
        """Card in a 1-based slot."""
        return self.room[slot - 1]


@dataclass
class ActionResult:
    """Outcome of ``GameRunner.take_action``."""
    success: bool
    snapshot: GameSnapshot
    events: List[GameEvent] = field(default_factory=list)
    rejection: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def reason(self) -> Optional[RejectionReason]:
        return self.rejection.reason if self.rejection else None

    def event_types(self) -> List[EventType]:
        return [e.event_type for e in self.events]

    def raise_for_rejection(self) -> "ActionResult":
        """Raise ActionRejectedError if the action was rejected."""
        if self.rejection is not None:
            raise ActionRejectedError(self.rejection)
        return self


@dataclass
class DecisionLogEntry:
    """
    Record of an action submitted to the runner.

    The log belongs to the session, not to one game: it keeps growing across
    StartGame and Restart, so replaying it from the first seed rebuilds the
    whole session.
    """
    room_number: int
    phase: GamePhase
    action_taken: GameAction
    available_actions: List[GameAction]
    state_snapshot: GameSnapshot
    result: Optional[ActionResult] = None


# =============================================================================
# Game Runner
# =============================================================================

class GameRunner:
    """
    Orchestrator for a Scoundrel session.

    Owns the RunState exclusively; drivers only submit actions and read
    snapshots. Without a seed the runner waits in MAIN_MENU for StartGame.
    """

    def __init__(
        self,
        seed: Optional[Union[str, int]] = None,
        verbose: bool = True,
        run_state: Optional[RunState] = None,
    ):
        """
        Args:
            seed: Seed string (e.g., "TEST123") or int; starts a game at once
            verbose: If True, print game messages
            run_state: Pre-built state (scripted decks); takes precedence over seed
        """
        self.verbose = verbose

        self.run_state: Optional[RunState] = None
        self.phase = GamePhase.MAIN_MENU
        self.result: Optional[GameResult] = None
        self.message = msg.NEED_START
        self.pending_slot: Optional[int] = None
        self.session_closed = False
        self.games_started = 0

        # Session-wide; not cleared by Restart
        self.decision_log: List[DecisionLogEntry] = []
        self._session_rng: Optional[Random] = None

        if run_state is not None:
            self._seed_session(run_state.seed)
            self._begin(run_state, [])
        elif seed is not None:
            self._start(seed, [])

    def _log(self, message: str) -> None:
        """Record a message; print it if verbose mode is enabled."""
        logger.debug(message)
        if self.verbose:
            print(message)

    def _say(self, message: str) -> None:
        self.message = message
        self._log(message)

    # =========================================================================
    # Status
    # =========================================================================

    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def game_won(self) -> bool:
        return self.result is not None and self.result.victory

    @property
    def game_lost(self) -> bool:
        return self.result is not None and not self.result.victory

    @property
    def seed_string(self) -> Optional[str]:
        return self.run_state.seed_string if self.run_state else None

    def snapshot(self) -> GameSnapshot:
        """Read-only view of the current state."""
        run = self.run_state
        if run is None:
            return GameSnapshot(
                phase=self.phase,
                hp=MAX_HP,
                max_hp=MAX_HP,
                weapon=None,
                weapon_ceiling=None,
                room=(None,) * ROOM_SIZE,
                carried_over=None,
                deck_size=0,
                room_number=0,
                resolved_count=0,
                resolutions_required=0,
                can_skip=False,
                potion_used_this_room=False,
                pending_slot=None,
                result=None,
                message=self.message,
                session_closed=self.session_closed,
            )

        weapon = run.player.weapon
        return GameSnapshot(
            phase=self.phase,
            hp=run.player.hp,
            max_hp=run.player.max_hp,
            weapon=weapon.card if weapon else None,
            weapon_ceiling=weapon.ceiling if weapon else None,
            room=tuple(run.room.slots),
            carried_over=run.room.carried_over,
            deck_size=len(run.deck),
            room_number=run.room.number,
            resolved_count=run.room.resolved_count,
            resolutions_required=run.room.resolutions_required,
            can_skip=self._skip_rejection() is None,
            potion_used_this_room=run.player.potion_used_this_room,
            pending_slot=self.pending_slot + 1 if self.pending_slot is not None else None,
            result=self.result,
            message=self.message,
            session_closed=self.session_closed,
        )

    def remaining_threat(self) -> int:
        """Total strength of every unresolved monster (deck and room)."""
        if self.run_state is None:
            return 0
        return remaining_threat(self.run_state.remaining_monsters())

    # =========================================================================
    # Action Interface
    # =========================================================================

    def get_available_actions(self) -> List[GameAction]:
        """
        Get the in-game actions that are legal right now.

        Restart and Quit are always legal and are not listed, except that a
        finished game offers Restart. A closed session offers nothing.
        """
        if self.session_closed:
            return []
        if self.phase == GamePhase.MAIN_MENU:
            return [StartGame()]
        if self.phase == GamePhase.GAME_OVER:
            return [Restart()]

        actions: List[GameAction] = []
        if self.phase == GamePhase.ROOM_CHOICE:
            actions.append(Face())
            if self._skip_rejection() is None:
                actions.append(Skip())
        elif self.phase == GamePhase.CARD_SELECTION:
            for index in self.run_state.room.occupied_slots():
                actions.append(SelectCard(slot=index + 1))
        elif self.phase == GamePhase.WEAPON_PROMPT:
            actions = [ChooseWeaponUse(True), ChooseWeaponUse(False)]
        elif self.phase == GamePhase.AWAIT_CONTINUE:
            actions = [Continue()]
        return actions

    def take_action(self, action: Union[GameAction, ActionDict]) -> ActionResult:
        """
        Validate and apply one action.

        Args:
            action: An action dataclass, or its JSON dict form

        Returns:
            ActionResult; truthy iff the action was accepted
        """
        if isinstance(action, dict):
            try:
                action = action_from_dict(action)
            except (KeyError, TypeError, ValueError) as exc:
                rejection = Rejection(RejectionReason.INVALID_ACTION, f"Malformed action: {exc}")
                return ActionResult(False, self.snapshot(), [], rejection)

        log_entry = DecisionLogEntry(
            room_number=self.run_state.room.number if self.run_state else 0,
            phase=self.phase,
            action_taken=action,
            available_actions=self.get_available_actions(),
            state_snapshot=self.snapshot(),
        )

        rejection = self._validate(action)
        if rejection is not None:
            logger.debug("Rejected %s: %s", action, rejection)
            result = ActionResult(False, self.snapshot(), [], rejection)
        else:
            events: List[GameEvent] = []
            self._apply(action, events)
            if self.run_state is not None:
                self.run_state.check_invariants()
            result = ActionResult(True, self.snapshot(), events, None)

        log_entry.result = result
        self.decision_log.append(log_entry)
        return result

    def get_observation(self) -> Dict[str, Any]:
        """JSON-serializable observation of the current state."""
        from .agent_api import get_observation
        return get_observation(self)

    def get_available_action_dicts(self) -> List[ActionDict]:
        """All legal actions as JSON-serializable dicts."""
        from .agent_api import get_available_action_dicts
        return get_available_action_dicts(self)

    def take_action_dict(self, action_dict: ActionDict) -> Dict[str, Any]:
        """Execute a JSON action dict and report the outcome as a dict."""
        from .agent_api import take_action_dict
        return take_action_dict(self, action_dict)

    # =========================================================================
    # Validation (never mutates)
    # =========================================================================

    def _reject(self, reason: RejectionReason, message: str) -> Rejection:
        return Rejection(reason, message)

    def _phase_guidance(self) -> str:
        return {
            GamePhase.MAIN_MENU: msg.NEED_START,
            GamePhase.ROOM_CHOICE: msg.NEED_FACE_OR_SKIP,
            GamePhase.CARD_SELECTION: msg.HINT_CARD_SELECTION,
            GamePhase.WEAPON_PROMPT: msg.NEED_WEAPON_CHOICE,
            GamePhase.AWAIT_CONTINUE: msg.NEED_CONTINUE,
            GamePhase.GAME_OVER: msg.GAME_IS_OVER,
        }[self.phase]

    def _skip_rejection(self) -> Optional[Rejection]:
        if self.phase != GamePhase.ROOM_CHOICE:
            return self._reject(RejectionReason.INVALID_ACTION, self._phase_guidance())
        if self.run_state.last_action_was_skip:
            return self._reject(RejectionReason.INVALID_ACTION, msg.SKIP_LOCKED)
        if not self.run_state.room.is_full:
            return self._reject(RejectionReason.INVALID_ACTION, msg.SKIP_PARTIAL_ROOM)
        return None

    def _validate(self, action: GameAction) -> Optional[Rejection]:
        if self.session_closed:
            return self._reject(RejectionReason.INVALID_ACTION, msg.SESSION_CLOSED)
        if isinstance(action, (StartGame, Restart)):
            if action.seed is not None:
                try:
                    seed_to_long(action.seed)
                except ValueError as e:
                    return self._reject(RejectionReason.INVALID_ACTION, str(e))
            return None
        if isinstance(action, Quit):
            return None
        if self.phase in (GamePhase.MAIN_MENU, GamePhase.GAME_OVER):
            return self._reject(RejectionReason.INVALID_ACTION, self._phase_guidance())

        if isinstance(action, Face):
            if self.phase != GamePhase.ROOM_CHOICE:
                return self._reject(RejectionReason.INVALID_ACTION, self._phase_guidance())
            return None

        if isinstance(action, Skip):
            return self._skip_rejection()

        if isinstance(action, SelectCard):
            return self._validate_select(action)

        if isinstance(action, ChooseWeaponUse):
            if self.phase != GamePhase.WEAPON_PROMPT:
                return self._reject(RejectionReason.INVALID_ACTION, msg.NO_PENDING_MONSTER)
            if not isinstance(action.use_weapon, bool):
                return self._reject(RejectionReason.INVALID_ACTION, msg.INVALID_WEAPON_ANSWER)
            if action.use_weapon:
                monster = self.run_state.room.slots[self.pending_slot]
                return self._weapon_rejection(monster)
            return None

        if isinstance(action, Continue):
            if self.phase != GamePhase.AWAIT_CONTINUE:
                return self._reject(RejectionReason.INVALID_ACTION, msg.NOTHING_TO_CONTINUE)
            return None

        return self._reject(RejectionReason.INVALID_ACTION, f"Unknown action: {action!r}")

    def _validate_select(self, action: SelectCard) -> Optional[Rejection]:
        if self.phase == GamePhase.ROOM_CHOICE:
            return self._reject(RejectionReason.INVALID_ACTION, msg.MUST_FACE_FIRST)
        if self.phase != GamePhase.CARD_SELECTION:
            return self._reject(RejectionReason.INVALID_ACTION, self._phase_guidance())

        slot = action.slot
        if isinstance(slot, bool) or not isinstance(slot, int) or not 1 <= slot <= ROOM_SIZE:
            return self._reject(RejectionReason.OUT_OF_RANGE, msg.INVALID_CARD_SELECTION)
        card = self.run_state.room.slots[slot - 1]
        if card is None:
            return self._reject(RejectionReason.OUT_OF_RANGE, msg.EMPTY_SLOT)
        if action.use_weapon is not None and not isinstance(action.use_weapon, bool):
            return self._reject(RejectionReason.INVALID_ACTION, msg.INVALID_WEAPON_ANSWER)

        if card.is_monster and action.use_weapon:
            return self._weapon_rejection(card)
        return None

    def _weapon_rejection(self, monster: Card) -> Optional[Rejection]:
        weapon = self.run_state.player.weapon
        if weapon is None:
            return self._reject(RejectionReason.WEAPON_UNUSABLE, msg.NO_WEAPON)
        if not weapon.can_fight(strength(monster)):
            return self._reject(RejectionReason.WEAPON_UNUSABLE, msg.WEAPON_TOO_DULL)
        return None

    # =========================================================================
    # Action Handlers
    # =========================================================================

    def _apply(self, action: GameAction, events: List[GameEvent]) -> None:
        if isinstance(action, StartGame):
            self._start(action.seed, events)
        elif isinstance(action, Restart):
            self._log("=== Restarting ===")
            self._start(action.seed, events)
        elif isinstance(action, Quit):
            self.session_closed = True
            events.append(GameEvent(EventType.SESSION_QUIT))
            self._say(msg.SESSION_CLOSED)
        elif isinstance(action, Face):
            self._handle_face(events)
        elif isinstance(action, Skip):
            self._handle_skip(events)
        elif isinstance(action, SelectCard):
            self._handle_select(action, events)
        elif isinstance(action, ChooseWeaponUse):
            self._handle_weapon_choice(action, events)
        elif isinstance(action, Continue):
            self._advance(events)

    def _seed_session(self, seed: int) -> None:
        if self._session_rng is None:
            self._session_rng = Random(seed + SESSION_SEED_OFFSET)

    def _next_seed(self) -> int:
        if self._session_rng is None:
            self._session_rng = Random(random.getrandbits(63))
        return self._session_rng.random_long()

    def _start(self, seed: Optional[Union[str, int]], events: List[GameEvent]) -> None:
        if seed is None:
            seed = self._next_seed()
        else:
            self._seed_session(seed_to_long(seed))
        self._begin(create_run(seed), events)

    def _begin(self, run_state: RunState, events: List[GameEvent]) -> None:
        self.run_state = run_state
        self.result = None
        self.pending_slot = None
        self.games_started += 1

        self._log("=== Game Started ===")
        self._log(f"Seed: {run_state.seed_string}")
        self._log(f"Starting HP: {run_state.player.hp}/{run_state.player.max_hp}")
        events.append(GameEvent(EventType.GAME_STARTED, {
            "seed": run_state.seed_string,
            "deck_size": len(run_state.deck),
        }))

        self._deal_room(events)
        if not self.game_over:
            self._say(msg.ENTERED_DUNGEON)

    def _deal_room(self, events: List[GameEvent]) -> None:
        """Fill empty slots from the top of the deck; end the game if nothing is left."""
        run = self.run_state
        room = run.room

        for index in room.empty_slots():
            drawn = run.deck.draw(1)
            if not drawn:
                break
            room.slots[index] = drawn[0]

        room.number += 1
        room.faced = False
        room.resolved_count = 0
        room.resolutions_required = 0
        run.player.potion_used_this_room = False

        if room.is_empty and run.deck.is_empty:
            self._victory(events)
            return

        self.phase = GamePhase.ROOM_CHOICE
        events.append(GameEvent(EventType.ROOM_DEALT, {
            "room": room.number,
            "cards": [c.code if c else None for c in room.slots],
            "carried_over": room.carried_over.code if room.carried_over else None,
            "deck_size": len(run.deck),
        }))
        self._log(f"Room {room.number}: {' '.join(c.symbol for c in room.cards)}")

    def _handle_face(self, events: List[GameEvent]) -> None:
        run = self.run_state
        room = run.room
        room.faced = True
        room.resolutions_required = min(RESOLUTIONS_PER_ROOM, room.card_count)
        run.rooms_faced += 1
        self.phase = GamePhase.CARD_SELECTION
        events.append(GameEvent(EventType.ROOM_FACED, {
            "room": room.number,
            "resolutions_required": room.resolutions_required,
        }))
        self._say(msg.FACE_ROOM)

    def _handle_skip(self, events: List[GameEvent]) -> None:
        run = self.run_state
        skipped = run.room.clear()
        run.room.carried_over = None
        run.deck.return_to_bottom(skipped)
        run.last_action_was_skip = True
        run.rooms_skipped += 1
        events.append(GameEvent(EventType.ROOM_SKIPPED, {
            "room": run.room.number,
            "cards": [c.code for c in skipped],
        }))
        self._deal_room(events)
        self._say(msg.SKIPPED_ROOM)

    def _handle_select(self, action: SelectCard, events: List[GameEvent]) -> None:
        run = self.run_state
        index = action.slot - 1
        card = run.room.slots[index]

        if card.kind == CardKind.MONSTER:
            weapon = run.player.weapon
            usable = weapon is not None and weapon.can_fight(strength(card))
            if usable and action.use_weapon is None:
                self.pending_slot = index
                self.phase = GamePhase.WEAPON_PROMPT
                self._say(
                    f"{card.describe()}: use weapon {weapon.card.symbol}? (y/n)"
                )
                return
            run.room.take(index)
            if self._fight(card, bool(usable and action.use_weapon), events):
                return
            if usable:
                self.phase = GamePhase.AWAIT_CONTINUE
            else:
                self._advance(events)
        elif card.kind == CardKind.WEAPON:
            run.room.take(index)
            self._equip(card, events)
            self._advance(events)
        elif card.kind == CardKind.POTION:
            run.room.take(index)
            self._drink(card, events)
            self._advance(events)
        else:
            raise InvariantViolation(f"Unhandled card kind: {card.kind}")

    def _handle_weapon_choice(self, action: ChooseWeaponUse, events: List[GameEvent]) -> None:
        index = self.pending_slot
        self.pending_slot = None
        card = self.run_state.room.take(index)
        if self._fight(card, action.use_weapon, events):
            return
        self.phase = GamePhase.AWAIT_CONTINUE

    # =========================================================================
    # Card Resolution
    # =========================================================================

    def _fight(self, monster: Card, with_weapon: bool, events: List[GameEvent]) -> bool:
        """
        Resolve a monster already taken out of the room.

        Returns:
            True if the fight ended the game
        """
        run = self.run_state
        player = run.player
        monster_strength = strength(monster)
        weapon = player.weapon if with_weapon else None

        taken = damage(monster_strength, weapon.value if weapon else None)
        hp_before = player.hp
        player.hp = apply_hp_loss(player.hp, taken)
        run.slain_monsters.append(monster)
        run.room.resolved_count += 1
        run.cards_resolved += 1

        events.append(GameEvent(EventType.MONSTER_FOUGHT, {
            "monster": monster.code,
            "strength": monster_strength,
            "with_weapon": weapon is not None,
            "damage": taken,
            "hp_before": hp_before,
            "hp": player.hp,
        }))

        if weapon is not None:
            self._degrade(weapon, monster_strength, events)
            self._say(f"Fought {monster.symbol} with weapon! Took {taken} damage.")
        else:
            self._say(f"Fought {monster.symbol} bare-handed! Took {taken} damage.")

        if player.is_dead:
            self._defeat(monster, events)
            return True
        return False

    def _degrade(self, weapon: WeaponState, monster_strength: int, events: List[GameEvent]) -> None:
        if weapon.ceiling is not None and monster_strength >= weapon.ceiling:
            raise InvariantViolation(
                f"Weapon used at strength {monster_strength} with ceiling {weapon.ceiling}"
            )
        weapon.ceiling = monster_strength
        weapon.kills += 1
        events.append(GameEvent(EventType.WEAPON_DEGRADED, {
            "weapon": weapon.card.code,
            "ceiling": weapon.ceiling,
        }))
        if is_weapon_spent(weapon.ceiling):
            events.append(GameEvent(EventType.WEAPON_SPENT, {"weapon": weapon.card.code}))

    def _equip(self, card: Card, events: List[GameEvent]) -> None:
        run = self.run_state
        old = run.player.weapon
        if old is not None:
            run.discarded_weapons.append(old.card)
            events.append(GameEvent(EventType.WEAPON_DISCARDED, {
                "weapon": old.card.code,
                "ceiling": old.ceiling,
            }))
        run.player.weapon = WeaponState(card=card)
        run.room.resolved_count += 1
        run.cards_resolved += 1
        events.append(GameEvent(EventType.WEAPON_EQUIPPED, {
            "weapon": card.code,
            "value": card.rank,
        }))
        self._say(f"Equipped {card.symbol}!")

    def _drink(self, card: Card, events: List[GameEvent]) -> None:
        run = self.run_state
        player = run.player
        run.used_potions.append(card)
        run.room.resolved_count += 1
        run.cards_resolved += 1

        if player.potion_used_this_room:
            events.append(GameEvent(EventType.POTION_WASTED, {"potion": card.code}))
            self._say(msg.POTION_WASTED)
            return

        hp_before = player.hp
        player.hp = heal(player.hp, card.rank)
        player.potion_used_this_room = True
        events.append(GameEvent(EventType.POTION_USED, {
            "potion": card.code,
            "healed": player.hp - hp_before,
            "hp": player.hp,
        }))
        self._say(f"Healed for {player.hp - hp_before} HP.")

    def _advance(self, events: List[GameEvent]) -> None:
        """Move on after a resolution: next selection, or the next room."""
        room = self.run_state.room
        if room.resolutions_left > 0:
            self.phase = GamePhase.CARD_SELECTION
            return

        remaining = room.cards
        room.carried_over = remaining[0] if remaining else None
        self.run_state.last_action_was_skip = False
        events.append(GameEvent(EventType.ROOM_CLEARED, {
            "room": room.number,
            "carried_over": room.carried_over.code if room.carried_over else None,
        }))
        self._deal_room(events)
        if not self.game_over:
            self._say(msg.ROOM_RESOLVED)

    # =========================================================================
    # Termination
    # =========================================================================

    def _victory(self, events: List[GameEvent]) -> None:
        run = self.run_state
        run.room.carried_over = None
        self.result = ScoreCalculator.victory(run.player.hp)
        self.phase = GamePhase.GAME_OVER
        events.append(GameEvent(EventType.DUNGEON_CLEARED, {"score": self.result.score}))
        self._say(msg.YOU_SURVIVED)
        self._log(f"Final score: {self.result.score}")

    def _defeat(self, fatal_monster: Card, events: List[GameEvent]) -> None:
        run = self.run_state
        self.result = ScoreCalculator.defeat(run.deck.cards, run.room.cards)
        self.pending_slot = None
        self.phase = GamePhase.GAME_OVER
        events.append(GameEvent(EventType.PLAYER_DEFEATED, {
            "monster": fatal_monster.code,
            "score": self.result.score,
        }))
        self._say(msg.YOU_DIED)
        self._log(f"Final score: {self.result.score}")

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_run_statistics(self) -> Dict[str, Any]:
        """Get statistics for the current run."""
        run = self.run_state
        if run is None:
            return {"seed": None, "game_won": False, "game_lost": False,
                    "decisions_made": len(self.decision_log)}
        return {
            "seed": run.seed_string,
            "game_won": self.game_won,
            "game_lost": self.game_lost,
            "score": self.result.score if self.result else None,
            "final_hp": run.player.hp,
            "rooms_dealt": run.room.number,
            "rooms_faced": run.rooms_faced,
            "rooms_skipped": run.rooms_skipped,
            "cards_resolved": run.cards_resolved,
            "monsters_slain": len(run.slain_monsters),
            "deck_remaining": len(run.deck),
            "remaining_threat": self.remaining_threat(),
            "decisions_made": len(self.decision_log),
        }


# =============================================================================
# Replay
# =============================================================================

def replay(seed: Union[str, int], actions: List[Union[GameAction, ActionDict]]) -> GameRunner:
    """
    Rebuild a game by applying ``actions`` to a fresh runner for ``seed``.

    Rejected actions are replayed as rejections, so the decision log of the
    returned runner matches the original one entry for entry.
    """
    runner = GameRunner(seed=seed, verbose=False)
    for action in actions:
        runner.take_action(action)
    return runner


# =============================================================================
# Headless Mode
# =============================================================================

DecisionFn = Callable[[GameSnapshot, List[GameAction]], GameAction]


def first_action(snapshot: GameSnapshot, actions: List[GameAction]) -> GameAction:
    return actions[0]


@dataclass
class RunResult:
    """Result of a headless game run."""
    seed: Union[str, int]
    victory: bool
    score: int
    hp_remaining: int
    rooms_faced: int
    rooms_skipped: int
    actions_taken: int
    stats: Dict[str, Any] = field(default_factory=dict)


def run_headless(
    seed: Union[str, int],
    decision_fn: Optional[DecisionFn] = None,
    max_actions: int = 1000,
) -> RunResult:
    """
    Play a complete game with a decision function.

    Args:
        seed: Game seed
        decision_fn: Callable(snapshot, actions) -> action.
                     If None, picks the first available action.
        max_actions: Safety limit to prevent infinite loops

    Returns:
        RunResult with game outcome
    """
    if decision_fn is None:
        decision_fn = first_action

    runner = GameRunner(seed=seed, verbose=False)
    actions_taken = 0

    while not runner.game_over and actions_taken < max_actions:
        actions = runner.get_available_actions()
        if not actions:
            break
        runner.take_action(decision_fn(runner.snapshot(), actions))
        actions_taken += 1

    if not runner.game_over:
        logger.warning("Seed %s did not finish within %d actions", seed, max_actions)

    stats = runner.get_run_statistics()
    return RunResult(
        seed=seed,
        victory=runner.game_won,
        score=runner.result.score if runner.result else 0,
        hp_remaining=runner.run_state.player.hp,
        rooms_faced=runner.run_state.rooms_faced,
        rooms_skipped=runner.run_state.rooms_skipped,
        actions_taken=actions_taken,
        stats=stats,
    )


def run_parallel(
    seeds: List[Union[str, int]],
    decision_fn: Optional[DecisionFn] = None,
    max_workers: int = 4,
) -> List[RunResult]:
    """
    Run several games in parallel using ProcessPoolExecutor.

    ``decision_fn`` must be picklable (a module-level function or a policy
    instance), not a lambda. Results come back in the order of ``seeds``.
    """
    from concurrent.futures import ProcessPoolExecutor

    run_one = partial(run_headless, decision_fn=decision_fn)
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(run_one, seeds))
