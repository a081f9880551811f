"""Command-line entry point for the basic-strategy simulation.

Usage:
    python run_simulation.py -d 6 -n 10000
    python run_simulation.py --seed 42 --no-progress
    python run_simulation.py --strategy my_chart.json --show-strategy
"""

import argparse
import logging
import sys
from typing import List, Optional

from basic_strategy import GameError, StrategyLookupError, StrategyTable
from blackjack_simulator import BlackjackSimulator, SimulationConfig, print_simulation_results

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate blackjack games to test the effectiveness of basic strategy."
    )
    parser.add_argument("-d", "--decks", type=_positive_int, default=6,
                        help="number of 52-card decks in the shoe (default: 6)")
    parser.add_argument("-n", "--simulations", type=_positive_int, default=10000,
                        help="number of games to simulate (default: 10000)")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the shuffle, for reproducible runs")
    parser.add_argument("--workers", type=_positive_int, default=None,
                        help="worker threads (default: ThreadPoolExecutor default)")
    parser.add_argument("--strategy", metavar="FILE", default=None,
                        help="JSON strategy table to use instead of basic strategy")
    parser.add_argument("--show-strategy", action="store_true",
                        help="print the strategy table before simulating")
    parser.add_argument("--no-progress", action="store_true",
                        help="disable the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every move")
    return parser


def run_blackjack_simulation(config: SimulationConfig,
                             strategy: Optional[StrategyTable] = None):
    """
    Run a blackjack simulation with basic strategy and print the report.

    Args:
        config: Deck count, game count and execution settings
        strategy: Table to play by; defaults to the standard basic strategy
    """
    strategy = strategy or StrategyTable.basic()
    simulator = BlackjackSimulator(strategy, config)

    print(f"Starting simulation of {config.simulation_count:,} games...")
    print(f"Using {config.number_of_decks} decks")
    print("\nSimulating...")

    results = simulator.run_simulation()
    print_simulation_results(results, config)
    return results


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    config = SimulationConfig(
        number_of_decks=args.decks,
        simulation_count=args.simulations,
        max_workers=args.workers,
        seed=args.seed,
        show_progress=not args.no_progress,
    )

    try:
        if args.strategy:
            strategy = StrategyTable.from_json(args.strategy)
        else:
            strategy = StrategyTable.basic()
        if args.show_strategy:
            strategy.print_tables()
        run_blackjack_simulation(config, strategy)
    except StrategyLookupError as e:
        print(f"Error: strategy table has no entry for {e.key}", file=sys.stderr)
        return 1
    except (GameError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
