"""
Shared pytest fixtures for the Scoundrel test suite.

This module provides reusable fixtures for:
- RNG with known seeds
- Runners over scripted deck orders (top card first)
- Fresh seeded runners
"""

import pytest
import sys

# Ensure project root is in path
import os
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.scoundrel.content.cards import parse_cards
from packages.scoundrel.game import GameRunner
from packages.scoundrel.state.rng import Random, seed_to_long
from packages.scoundrel.state.run import create_run_from_cards


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return Random(42)


@pytest.fixture
def known_seeds():
    """Collection of seed strings used across the suite."""
    return {
        "ABC": seed_to_long("ABC"),
        "TEST123": seed_to_long("TEST123"),
        "0": seed_to_long("0"),
        "ZZZZZ": seed_to_long("ZZZZZ"),
    }


# =============================================================================
# Runner Fixtures
# =============================================================================


def scripted_runner(codes: str, hp: int = 20) -> GameRunner:
    """Runner whose deck is exactly ``codes`` in order, first room already dealt."""
    run_state = create_run_from_cards(parse_cards(codes), hp=hp)
    return GameRunner(run_state=run_state, verbose=False)


@pytest.fixture
def make_runner():
    """Factory fixture: make_runner("8S 5D 3H 2C ...", hp=20)."""
    return scripted_runner


@pytest.fixture
def scenario_a_runner():
    """Room 1 is [8S, 5D, 3H, 2C]; the next room draws 9S 4H 7D."""
    return scripted_runner("8S 5D 3H 2C 9S 4H 7D KC")


@pytest.fixture
def seeded_runner():
    """Fresh game from the canonical shuffled deck."""
    return GameRunner(seed="TEST123", verbose=False)


@pytest.fixture
def menu_runner():
    """Runner waiting in the main menu."""
    return GameRunner(verbose=False)
