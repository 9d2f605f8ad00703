"""Label Tycoon — dev launcher. Advances a stored game from the command line."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from label_tycoon.balance import load_balance
from label_tycoon.demo import create_demo_game, demo_actions
from label_tycoon.engine import CampaignCompletedError, advance_turn
from label_tycoon.storage import JsonStorage

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

DATA_DIR = os.getenv("DATA_DIR", "data")
BALANCE_PATH = os.getenv("BALANCE_PATH")
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Label Tycoon dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: $DATA_DIR or ./data)")
    parser.add_argument("--balance", type=Path, default=None,
                        help="Balance override JSON (default: $BALANCE_PATH)")
    parser.add_argument("--demo", action="store_true",
                        help="Create a fresh demo label before running")
    parser.add_argument("--game-id", default="demo",
                        help="Game to advance (default: demo)")
    parser.add_argument("--turns", type=int, default=1,
                        help="Number of turns to advance (default: 1)")
    parser.add_argument("--seed", default=None,
                        help="Explicit RNG seed (default: derived from game id and turn)")
    parser.add_argument("--json", action="store_true",
                        help="Print each turn result as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")

    data_dir = args.data_dir or Path(DATA_DIR)
    balance_path = args.balance or (Path(BALANCE_PATH) if BALANCE_PATH else None)
    balance = load_balance(balance_path)
    store = JsonStorage(data_dir)

    if args.demo:
        state = create_demo_game(store, balance, args.game_id)
    else:
        state = store.get_game_state(args.game_id)
        if state is None:
            print(f"No game '{args.game_id}' in {data_dir}. Run with --demo first.", file=sys.stderr)
            return 1

    for _ in range(args.turns):
        try:
            result = advance_turn(state, demo_actions(state), store=store, balance=balance, seed=args.seed)
        except CampaignCompletedError as e:
            print(str(e), file=sys.stderr)
            return 1
        state = result.game_state

        if args.json:
            print(result.model_dump_json(indent=2))
        else:
            print(f"Turn {state.current_turn}: {result.summary.financial_breakdown}")
            print(f"  money ${state.money:,}  reputation {state.reputation}  "
                  f"streams {result.summary.streams:,}")
            for change in result.summary.changes:
                if change.type == "rejected":
                    print(f"  rejected: {change.description}")
        if result.campaign_results is not None:
            cr = result.campaign_results
            if not args.json:
                print(f"Campaign over: {cr.victory_type} (score {cr.final_score})")
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())
