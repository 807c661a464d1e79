"""
Unit tests for state and action encoding.

These run full runners but never a learning model; they only pin the vector
layout and the action index mapping.
"""

import numpy as np
import pytest

from packages.scoundrel.game import (
    ChooseWeaponUse, Continue, Face, GamePhase, GameRunner, Quit, Restart,
    SelectCard, Skip, StartGame,
)
from packages.training.encoding import (
    ACTION_SPACE,
    NUM_ACTIONS,
    NUM_CARDS,
    PHASE_TO_IDX,
    SLOT_FEATURES,
    decode_action,
    encode_action,
    encode_card_slot,
    encode_deck,
    encode_state,
    get_action_dim,
    get_state_dim,
    legal_action_mask,
)
from packages.training.policies import greedy_policy

# Offsets into the state vector
PHASE_OFFSET = 1 + 4 + 2 + 4 * SLOT_FEATURES + 4
DECK_OFFSET = PHASE_OFFSET + len(PHASE_TO_IDX)


class TestStateEncoding:

    def test_dimensions(self):
        assert get_state_dim() == 77
        assert get_action_dim() == NUM_ACTIONS == len(ACTION_SPACE) == 9
        assert NUM_CARDS == 40

    def test_fresh_game(self, seeded_runner):
        state = encode_state(seeded_runner)
        assert state.shape == (get_state_dim(),)
        assert state.dtype == np.float32
        assert state[0] == pytest.approx(1.0)
        # deck multi-hot holds the 36 undealt cards
        assert state[DECK_OFFSET:].sum() == pytest.approx(36.0)
        assert state[PHASE_OFFSET + PHASE_TO_IDX[GamePhase.ROOM_CHOICE]] == 1.0

    def test_menu_runner_encodes(self, menu_runner):
        state = encode_state(menu_runner)
        assert state.shape == (get_state_dim(),)
        assert state[PHASE_OFFSET + PHASE_TO_IDX[GamePhase.MAIN_MENU]] == 1.0
        assert state[DECK_OFFSET:].sum() == 0.0

    def test_values_bounded_through_a_game(self):
        runner = GameRunner(seed="ENC", verbose=False)
        while not runner.game_over:
            state = encode_state(runner)
            assert state.shape == (get_state_dim(),)
            assert np.all(state >= 0.0) and np.all(state <= 1.0)
            runner.take_action(greedy_policy(runner.snapshot(), runner.get_available_actions()))
        assert encode_state(runner).shape == (get_state_dim(),)

    def test_weapon_features(self, scenario_a_runner):
        scenario_a_runner.take_action(Face())
        scenario_a_runner.take_action(SelectCard(2))
        state = encode_state(scenario_a_runner)
        assert state[1] == 1.0
        assert state[2] == pytest.approx(5 / 10)
        assert state[4] == 0.0  # no ceiling yet

    def test_empty_slot(self):
        assert not encode_card_slot(None).any()

    def test_deck_ignores_unknown_cards(self):
        assert encode_deck([]).sum() == 0.0


class TestActionEncoding:

    @pytest.mark.parametrize("action", [
        Face(), Skip(), SelectCard(1), SelectCard(4),
        ChooseWeaponUse(True), ChooseWeaponUse(False), Continue(),
    ])
    def test_decode_inverts_encode(self, action):
        assert decode_action(encode_action(action)) == action

    @pytest.mark.parametrize("action", [
        StartGame(), Restart(), Quit(), SelectCard(1, use_weapon=True),
    ])
    def test_actions_outside_space(self, action):
        with pytest.raises(ValueError):
            encode_action(action)

    def test_room_choice_mask(self, seeded_runner):
        mask = legal_action_mask(seeded_runner.get_available_actions())
        assert mask.dtype == bool
        assert mask[ACTION_SPACE.index("face")]
        assert mask[ACTION_SPACE.index("skip")]
        assert mask.sum() == 2

    def test_selection_mask(self, scenario_a_runner):
        scenario_a_runner.take_action(Face())
        mask = legal_action_mask(scenario_a_runner.get_available_actions())
        assert [ACTION_SPACE[i] for i in np.flatnonzero(mask)] == [
            "select_1", "select_2", "select_3", "select_4",
        ]

    def test_menu_mask_is_empty(self, menu_runner):
        assert not legal_action_mask(menu_runner.get_available_actions()).any()
