#!/usr/bin/env python3
"""
Scoundrel - Command Line Interface

Text driver for playing Scoundrel and tools for inspecting seeds and running
headless batches.

Usage:
    python cli.py play --seed ABC123
    python cli.py run --games 100 --policy greedy --workers 4
    python cli.py run --seed ABC123 --seed XYZ --json
    python cli.py deck --seed ABC123
    python cli.py seed ABC123

Environment (also read from a .env file):
    SCOUNDREL_LOG_LEVEL   default for --log-level (WARNING)
    SCOUNDREL_SEED        default seed for play/run/deck
"""

import argparse
import json
import logging
import os
import sys
from typing import Callable, List, Optional

from dotenv import load_dotenv

from packages.scoundrel import (
    ChooseWeaponUse,
    Continue,
    Deck,
    Face,
    GameAction,
    GamePhase,
    GameRunner,
    GameSnapshot,
    Quit,
    Restart,
    SelectCard,
    Skip,
    StartGame,
    long_to_seed,
    seed_to_long,
)
from packages.scoundrel.content import messages as msg
from packages.scoundrel.game import run_headless, run_parallel
from packages.training.policies import POLICY_NAMES, make_policy
from packages.training.rollout import summarize_results

logger = logging.getLogger("scoundrel.cli")


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_seed_info(seed_string: str, numeric_seed: int) -> str:
    """Format seed information header."""
    return f"Seed: {seed_string} (numeric: {numeric_seed})"


def format_weapon(snapshot: GameSnapshot) -> str:
    if snapshot.weapon is None:
        return "none"
    if snapshot.weapon_ceiling is None:
        return f"{snapshot.weapon.symbol} (fresh)"
    return f"{snapshot.weapon.symbol} (< {snapshot.weapon_ceiling})"


def format_room(snapshot: GameSnapshot) -> str:
    """Format the four room slots."""
    parts = []
    for i, card in enumerate(snapshot.room, 1):
        parts.append(f"[{i}] {card.symbol if card else '--'}")
    return "  ".join(parts)


def format_snapshot(snapshot: GameSnapshot, threat: int) -> str:
    """Format the status block shown after every action."""
    lines = [
        f"HP: {snapshot.hp}/{snapshot.max_hp} | Weapon: {format_weapon(snapshot)} | "
        f"Deck: {snapshot.deck_size} | Remaining monsters total threat: {threat}",
    ]
    if snapshot.phase not in (GamePhase.MAIN_MENU, GamePhase.GAME_OVER):
        lines.append(f"Room {snapshot.room_number}: {format_room(snapshot)}")
        if snapshot.phase != GamePhase.ROOM_CHOICE:
            lines.append(
                f"Resolved {snapshot.resolved_count}/{snapshot.resolutions_required}"
                + (" | potion used" if snapshot.potion_used_this_room else "")
            )
    if snapshot.result is not None:
        lines.append(f"Final score: {snapshot.result.score}")
    return "\n".join(lines)


def phase_hint(snapshot: GameSnapshot) -> str:
    if snapshot.phase == GamePhase.ROOM_CHOICE:
        return msg.HINT_ROOM_CHOICE_CAN_SKIP if snapshot.can_skip else msg.HINT_ROOM_CHOICE_NO_SKIP
    return {
        GamePhase.MAIN_MENU: msg.HINT_MAIN,
        GamePhase.CARD_SELECTION: msg.HINT_CARD_SELECTION,
        GamePhase.WEAPON_PROMPT: msg.HINT_PROMPT_WEAPON,
        GamePhase.AWAIT_CONTINUE: msg.HINT_INTERACTION_ACK,
        GamePhase.GAME_OVER: msg.HINT_GAME_OVER,
    }[snapshot.phase]


# =============================================================================
# COMMAND PARSING
# =============================================================================

def parse_command(text: str, phase: GamePhase, default_seed: Optional[str] = None) -> Optional[GameAction]:
    """
    Map a line of player input to an action.

    Returns None for input that names no action. Legality is left to the
    engine, which rejects out-of-phase actions with a message.
    """
    parts = text.strip().lower().split()
    if not parts:
        return Continue() if phase == GamePhase.AWAIT_CONTINUE else None

    cmd, rest = parts[0], parts[1:]
    seed = rest[0].upper() if rest else default_seed

    if cmd in ("start", "new"):
        return StartGame(seed=seed)
    if cmd in ("restart", "r"):
        return Restart(seed=rest[0].upper() if rest else None)
    if cmd in ("quit", "q", "exit"):
        return Quit()
    if cmd in ("f", "face"):
        return Face()
    if cmd in ("s", "skip"):
        return Skip()
    if cmd in ("y", "yes"):
        return ChooseWeaponUse(True)
    if cmd in ("n", "no"):
        return ChooseWeaponUse(False)
    if cmd in ("c", "continue"):
        return Continue()

    # "3" selects slot 3; "3y" / "3n" also answers the weapon question
    if cmd[0].isdigit():
        digits = cmd.rstrip("yn")
        if not digits.isdigit():
            return None
        use_weapon = None
        if cmd.endswith("y"):
            use_weapon = True
        elif cmd.endswith("n"):
            use_weapon = False
        return SelectCard(slot=int(digits), use_weapon=use_weapon)

    return None


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_play(args, input_fn: Callable[[str], str] = input) -> int:
    """Interactive text game."""
    runner = GameRunner(verbose=False)

    print("=" * 60)
    print("Scoundrel")
    print("=" * 60)
    print("Commands: start [seed], f, s, 1-4 (or 1y/1n), y, n, enter, restart [seed], quit")
    print()

    if args.seed:
        result = runner.take_action(StartGame(seed=args.seed))
        print(result.snapshot.message)

    while not runner.session_closed:
        snapshot = runner.snapshot()
        print(format_snapshot(snapshot, runner.remaining_threat()))
        print(phase_hint(snapshot))

        try:
            line = input_fn("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            runner.take_action(Quit())
            break

        if line.strip().lower() in ("help", "h", "?"):
            print("Commands: start [seed], f, s, 1-4 (or 1y/1n), y, n, enter, restart [seed], quit")
            continue

        action = parse_command(line, snapshot.phase, args.seed)
        if action is None:
            print(f"Unknown command: {line.strip()!r}")
            continue

        result = runner.take_action(action)
        if result.success:
            print(result.snapshot.message)
        else:
            print(result.rejection.message)
        print()

    print(msg.SESSION_CLOSED)
    return 0


def cmd_run(args) -> int:
    """Run headless games."""
    if args.seed:
        seeds = list(args.seed)
    else:
        seeds = [str(args.start_seed + i) for i in range(args.games)]

    decision_fn = make_policy(args.policy, args.policy_seed)
    logger.info("Running %d games with policy %s", len(seeds), args.policy)

    if args.workers > 1:
        results = run_parallel(seeds, decision_fn, max_workers=args.workers)
    else:
        results = [run_headless(seed, decision_fn) for seed in seeds]

    summary = summarize_results(results)

    if args.json:
        print(json.dumps({
            "policy": args.policy,
            "summary": summary,
            "games": [
                {
                    "seed": r.seed,
                    "victory": r.victory,
                    "score": r.score,
                    "hp_remaining": r.hp_remaining,
                    "rooms_faced": r.rooms_faced,
                    "rooms_skipped": r.rooms_skipped,
                    "actions": r.actions_taken,
                }
                for r in results
            ],
        }, indent=2))
        return 0

    for r in results:
        outcome = "WIN " if r.victory else "LOSS"
        print(f"{str(r.seed):>12}  {outcome}  score {r.score:>5}  "
              f"faced {r.rooms_faced:>2}  skipped {r.rooms_skipped:>2}")
    print()
    print(f"Games: {summary['games']}  Win rate: {summary['win_rate']:.1%}  "
          f"Mean score: {summary['mean_score']:.2f} (std {summary['std_score']:.2f})  "
          f"Range: {summary['min_score']}..{summary['max_score']}")
    return 0


def cmd_deck(args) -> int:
    """Show the shuffled deck for a seed."""
    if not args.seed:
        print("A seed is required (--seed or SCOUNDREL_SEED)", file=sys.stderr)
        return 1
    seed_string = args.seed.upper()
    deck = Deck.shuffle(seed_string)

    if args.json:
        print(json.dumps({
            "seed": seed_string,
            "numeric_seed": seed_to_long(seed_string),
            "cards": [c.code for c in deck],
        }, indent=2))
        return 0

    print(format_seed_info(seed_string, seed_to_long(seed_string)))
    cards = list(deck)
    for room_start in range(0, len(cards), 4):
        chunk = cards[room_start:room_start + 4]
        print(f"  {room_start + 1:>2}-{room_start + len(chunk):>2}: "
              + " ".join(c.symbol.rjust(3) for c in chunk))
    return 0


def cmd_seed(args) -> int:
    """Convert between seed strings and numeric seeds."""
    try:
        numeric = seed_to_long(args.value)
    except ValueError as e:
        print(f"Invalid seed: {e}", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps({"input": args.value, "numeric": numeric, "string": long_to_seed(numeric)}))
    else:
        print(format_seed_info(args.value.upper(), numeric))
        print(f"Canonical string: {long_to_seed(numeric)}")
    return 0


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    default_seed = os.environ.get("SCOUNDREL_SEED")

    parser = argparse.ArgumentParser(
        description="Scoundrel - play, inspect seeds and run headless batches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s play --seed ABC123
  %(prog)s run --games 200 --policy greedy --workers 4
  %(prog)s deck --seed ABC123
  %(prog)s seed ABC123
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SCOUNDREL_LOG_LEVEL", "WARNING"),
        help="Logging level (default: SCOUNDREL_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play interactively")
    play_parser.add_argument("--seed", "-s", default=default_seed, help="Game seed (e.g., ABC123)")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run headless games")
    run_parser.add_argument("--seed", "-s", action="append",
                            help="Game seed; repeat for several games")
    run_parser.add_argument("--games", "-g", type=int, default=10,
                            help="Number of games when no seed is given")
    run_parser.add_argument("--start-seed", type=int, default=1,
                            help="First numeric seed when no seed is given")
    run_parser.add_argument("--policy", "-p", choices=POLICY_NAMES, default="greedy",
                            help="Decision policy")
    run_parser.add_argument("--policy-seed", default=None, help="Seed for the random policy")
    run_parser.add_argument("--workers", "-w", type=int, default=1,
                            help="Parallel worker processes")
    run_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Deck command
    deck_parser = subparsers.add_parser("deck", help="Show the shuffled deck for a seed")
    deck_parser.add_argument("--seed", "-s", default=default_seed, help="Game seed")
    deck_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Convert a seed string or number")
    seed_parser.add_argument("value", help="Seed string (e.g., ABC123) or number")
    seed_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level)
    except ValueError as e:
        parser.error(str(e))

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "play": cmd_play,
        "run": cmd_run,
        "deck": cmd_deck,
        "seed": cmd_seed,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
