"""
Invariant Tests

Plays many full games with seeded random and heuristic policies and checks,
after every action, that no card is created or lost, HP stays in bounds,
skips never come back to back, and weapon ceilings only go down.
"""

from collections import Counter

import pytest

from packages.scoundrel.content.cards import Card, Suit, build_dungeon_cards, parse_cards
from packages.scoundrel.errors import InvariantViolation
from packages.scoundrel.game import GameRunner, GamePhase, Skip, EventType
from packages.scoundrel.state.run import RoomState, WeaponState, create_run_from_cards
from packages.training.policies import RandomPolicy, greedy_policy

MAX_STEPS = 500


def play(runner, policy, on_step):
    steps = 0
    while not runner.game_over:
        actions = runner.get_available_actions()
        action = policy(runner.snapshot(), actions)
        result = runner.take_action(action)
        assert result.success, (action, result.rejection)
        on_step(runner, action, result)
        steps += 1
        assert steps < MAX_STEPS


class TestCardAccounting:

    @pytest.mark.parametrize("seed", range(25))
    def test_forty_cards_always_accounted_for(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        expected = Counter(build_dungeon_cards())

        def check(runner, action, result):
            cards = runner.run_state.all_cards()
            assert len(cards) == 40
            assert Counter(cards) == expected

        play(runner, RandomPolicy(seed), check)

    @pytest.mark.parametrize("seed", ["G1", "G2", "G3", "G4", "G5"])
    def test_greedy_games_keep_invariants(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        play(runner, greedy_policy, lambda r, a, res: r.run_state.check_invariants())


class TestBehaviouralProperties:

    @pytest.mark.parametrize("seed", range(25))
    def test_hp_bounds_and_skip_lockout(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        history = []

        def check(runner, action, result):
            assert 0 <= result.snapshot.hp <= 20
            if history and isinstance(history[-1], Skip):
                assert not isinstance(action, Skip)
            history.append(action)

        play(runner, RandomPolicy(1000 + seed), check)

    @pytest.mark.parametrize("seed", range(25))
    def test_ceiling_non_increasing_per_weapon(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        ceilings = {}

        def check(runner, action, result):
            for event in result.events:
                if event.event_type == EventType.WEAPON_EQUIPPED:
                    ceilings[event.data["weapon"]] = None
                elif event.event_type == EventType.WEAPON_DEGRADED:
                    previous = ceilings.get(event.data["weapon"])
                    if previous is not None:
                        assert event.data["ceiling"] < previous
                    ceilings[event.data["weapon"]] = event.data["ceiling"]

        play(runner, RandomPolicy(2000 + seed), check)

    @pytest.mark.parametrize("seed", range(10))
    def test_second_potion_in_room_never_heals(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        hp = [runner.snapshot().hp]

        def check(runner, action, result):
            types = result.event_types()
            if EventType.POTION_WASTED in types:
                assert EventType.POTION_USED not in types
                assert result.snapshot.hp <= hp[0]
            hp[0] = result.snapshot.hp

        play(runner, RandomPolicy(3000 + seed), check)

    @pytest.mark.parametrize("seed", range(10))
    def test_score_sign_matches_outcome(self, seed):
        runner = GameRunner(seed=seed, verbose=False)
        play(runner, RandomPolicy(seed), lambda r, a, res: None)
        assert runner.phase == GamePhase.GAME_OVER
        if runner.game_won:
            assert runner.result.score == runner.run_state.player.hp > 0
        else:
            assert runner.result.score <= 0
            assert runner.run_state.player.hp == 0


class TestInvariantViolations:
    """Corrupted state is reported as an assertion failure, not a rejection."""

    def test_lost_card_detected(self):
        run = create_run_from_cards(parse_cards("8S 5D 3H 2C"))
        run.deck.draw(1)
        with pytest.raises(InvariantViolation):
            run.check_invariants()

    def test_hp_out_of_bounds_detected(self):
        run = create_run_from_cards(parse_cards("8S"))
        run.player.hp = 21
        with pytest.raises(InvariantViolation):
            run.check_invariants()

    def test_non_weapon_equipped_detected(self):
        run = create_run_from_cards(parse_cards("8S"))
        run.deck.draw(1)
        run.player.weapon = WeaponState(card=Card(Suit.SPADE, 8))
        with pytest.raises(InvariantViolation):
            run.check_invariants()

    def test_taking_empty_slot(self):
        with pytest.raises(InvariantViolation):
            RoomState().take(0)

    def test_invariant_violation_is_assertion(self):
        assert issubclass(InvariantViolation, AssertionError)

    def test_bad_starting_hp(self):
        with pytest.raises(ValueError):
            create_run_from_cards(parse_cards("8S"), hp=0)
        with pytest.raises(ValueError):
            create_run_from_cards(parse_cards("8S"), hp=21)
