"""
Tests for Agent API - JSON-serializable action and observation interfaces.

Tests cover:
1. Action dict generation for each phase
2. Action execution with valid/invalid params
3. Observation schema completeness
4. Determinism (same seed + actions = same results)
"""

import pytest
import json

from packages.scoundrel import GameRunner, GamePhase
from packages.scoundrel.agent_api import (
    card_to_dict, generate_action_id, get_available_action_dicts,
    get_observation, take_action_dict,
)
from packages.scoundrel.content.cards import Card, Suit


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def runner():
    """Create a fresh GameRunner for testing."""
    return GameRunner(seed="AGENTTEST", verbose=False)


# =============================================================================
# Action Dict Generation Tests
# =============================================================================

class TestActionDictGeneration:
    """Test get_available_action_dicts() for each phase."""

    def test_room_choice_actions(self, runner):
        actions = runner.get_available_action_dicts()
        assert [a["type"] for a in actions] == ["face", "skip"]
        for action in actions:
            assert set(action) == {"id", "type", "label", "params", "phase"}
            assert action["phase"] == "room"

    def test_card_selection_actions(self, scenario_a_runner):
        scenario_a_runner.take_action_dict({"type": "face"})
        actions = scenario_a_runner.get_available_action_dicts()
        assert [a["id"] for a in actions] == [
            "select_card_1", "select_card_2", "select_card_3", "select_card_4",
        ]
        assert actions[0]["params"] == {"slot": 1}
        assert "8♠" in actions[0]["label"]
        assert all(a["phase"] == "select" for a in actions)

    def test_weapon_prompt_actions(self, scenario_a_runner):
        for action in ({"type": "face"},
                       {"type": "select_card", "params": {"slot": 2}},
                       {"type": "select_card", "params": {"slot": 1}}):
            assert scenario_a_runner.take_action_dict(action)["success"]
        actions = scenario_a_runner.get_available_action_dicts()
        assert [a["id"] for a in actions] == ["choose_weapon_yes", "choose_weapon_no"]
        assert actions[0]["params"] == {"use_weapon": True}

    def test_menu_actions(self, menu_runner):
        actions = get_available_action_dicts(menu_runner)
        assert actions[0]["type"] == "start_game"
        assert actions[0]["phase"] == "menu"

    def test_ids_are_stable(self, runner):
        other = GameRunner(seed="AGENTTEST", verbose=False)
        assert runner.get_available_action_dicts() == other.get_available_action_dicts()

    def test_generate_action_id(self):
        assert generate_action_id("select_card", 3) == "select_card_3"
        assert generate_action_id("face") == "face"
        assert generate_action_id("restart", None) == "restart"


# =============================================================================
# Action Execution Tests
# =============================================================================

class TestTakeActionDict:

    def test_success_result_shape(self, runner):
        result = runner.take_action_dict({"type": "face"})
        assert result["success"]
        assert result["error"] is None
        assert result["reason"] is None
        assert result["events"][0]["type"] == "room_faced"
        assert result["observation"]["phase"] == "select"

    def test_rejection_reported(self, runner):
        result = runner.take_action_dict({"type": "continue"})
        assert not result["success"]
        assert result["reason"] == "invalid_action"
        assert result["error"]
        assert result["events"] == []

    def test_out_of_range_reported(self, runner):
        runner.take_action_dict({"type": "face"})
        result = runner.take_action_dict({"type": "select_card", "params": {"slot": 9}})
        assert result["reason"] == "out_of_range"

    @pytest.mark.parametrize("bad", [
        {"type": "dance"},
        {},
        {"type": "select_card"},
        {"type": "select_card", "params": {"slot": "1"}},
        {"type": "select_card", "params": {"slot": True}},
        {"type": "choose_weapon", "params": {"use_weapon": "yes"}},
        {"type": "face", "params": ["nope"]},
    ])
    def test_malformed_dicts(self, runner, bad):
        before = runner.snapshot()
        result = take_action_dict(runner, bad)
        assert result["success"] is False
        assert result["error"].startswith("Malformed action")
        assert runner.snapshot() == before

    def test_non_dict_action(self, runner):
        result = take_action_dict(runner, "face")
        assert result["success"] is False

    def test_start_with_seed_param(self, menu_runner):
        result = menu_runner.take_action_dict({"type": "start_game", "params": {"seed": "ABC"}})
        assert result["success"]
        assert result["observation"]["seed"] == "ABC"

    def test_every_listed_action_is_accepted(self):
        runner = GameRunner(seed="LISTED", verbose=False)
        steps = 0
        while not runner.game_over:
            actions = runner.get_available_action_dicts()
            assert actions
            for action in actions:
                probe = GameRunner(seed="LISTED", verbose=False)
                for entry in runner.decision_log:
                    probe.take_action(entry.action_taken)
                assert probe.take_action_dict(action)["success"], action
            assert runner.take_action_dict(actions[-1])["success"]
            steps += 1
            assert steps < 500


# =============================================================================
# Observation Tests
# =============================================================================

class TestObservation:

    def test_schema(self, runner):
        obs = runner.get_observation()
        assert set(obs) == {
            "phase", "seed", "player", "room", "deck_size", "remaining_threat",
            "result", "message", "session_closed",
        }
        assert obs["player"]["hp"] == 20
        assert len(obs["room"]["slots"]) == 4
        assert obs["deck_size"] == 36
        assert obs["result"] is None

    def test_json_serializable_throughout_a_game(self):
        runner = GameRunner(seed="JSON", verbose=False)
        json.dumps(runner.get_observation())
        while not runner.game_over:
            result = runner.take_action_dict(runner.get_available_action_dicts()[0])
            json.dumps(result)
        obs = get_observation(runner)
        assert obs["phase"] == "game_over"
        assert obs["result"]["outcome"] in ("VICTORY", "DEFEAT")
        json.dumps(obs)

    def test_menu_observation(self, menu_runner):
        obs = menu_runner.get_observation()
        assert obs["phase"] == "menu"
        assert obs["seed"] is None
        assert obs["remaining_threat"] == 0
        json.dumps(obs)

    def test_remaining_threat_full_deck(self, runner):
        # 2..14 in both black suits
        assert runner.get_observation()["remaining_threat"] == 2 * sum(range(2, 15))

    def test_weapon_observation(self, scenario_a_runner):
        for action in ({"type": "face"},
                       {"type": "select_card", "params": {"slot": 2}},
                       {"type": "select_card", "params": {"slot": 1, "use_weapon": True}}):
            scenario_a_runner.take_action_dict(action)
        player = scenario_a_runner.get_observation()["player"]
        assert player["weapon"] == card_to_dict(Card(Suit.DIAMOND, 5))
        assert player["weapon_ceiling"] == 8
        assert player["hp"] == 17

    def test_card_to_dict(self):
        assert card_to_dict(Card(Suit.SPADE, 12)) == {
            "code": "QS", "suit": "S", "rank": 12, "kind": "MONSTER",
        }
        assert card_to_dict(None) is None

    def test_determinism(self):
        a = GameRunner(seed="SAME", verbose=False)
        b = GameRunner(seed="SAME", verbose=False)
        for _ in range(10):
            if a.game_over:
                break
            action = a.get_available_action_dicts()[0]
            assert a.take_action_dict(action) == b.take_action_dict(action)
