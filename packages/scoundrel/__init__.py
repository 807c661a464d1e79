"""
Scoundrel Engine

A deterministic rules engine for Scoundrel, the single-player dungeon crawl
played with a trimmed deck of cards. Black cards are monsters, Diamonds are
weapons and Hearts are potions; the player survives the deck room by room.

Core subsystems:
- state: RNG (XorShift128), run state (deck, room, player)
- content: Cards, the dungeon deck, player-facing messages
- calc: Damage/heal formulas, final scoring
- game: Turn state machine, actions, events, headless runs

Usage:
    from packages.scoundrel import GameRunner, Face, SelectCard

    runner = GameRunner(seed="SEED123", verbose=False)
    while not runner.game_over:
        actions = runner.get_available_actions()
        runner.take_action(actions[0])

    print(runner.result.score)
"""

__version__ = "0.1.0"

# RNG System
from .state.rng import XorShift128, Random, seed_to_long, long_to_seed

# Cards and deck
from .content.cards import (
    Card, CardKind, Suit,
    MAX_HP, ROOM_SIZE, RESOLUTIONS_PER_ROOM, DECK_SIZE,
    build_dungeon_cards, parse_cards,
)
from .content.deck import Deck

# Combat math and scoring
from .calc.damage import strength, damage, weapon_can_be_used, heal, apply_hp_loss
from .calc.score import GameResult, Outcome, ScoreCalculator, remaining_threat

# Errors
from .errors import (
    ActionRejectedError, InvariantViolation, Rejection, RejectionReason, ScoundrelError,
)

# State objects
from .state.run import PlayerState, RoomState, RunState, WeaponState, create_run, create_run_from_cards

# Game Runner
from .game import (
    GameRunner, GamePhase,
    StartGame, Face, Skip, SelectCard, ChooseWeaponUse, Continue, Restart, Quit,
    GameAction, GameEvent, EventType, GameSnapshot, ActionResult, DecisionLogEntry,
    RunResult, replay, run_headless, run_parallel,
)

# Agent API (JSON-serializable action/observation interface)
from . import agent_api
from .agent_api import ActionDict, ActionResultDict, ObservationDict
