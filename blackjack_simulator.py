from blackjack import Agent, CardSource, Deck, RoundResult, SplitPolicy, play_game
from basic_strategy import Action, StrategyTable
from typing import List, Optional
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor, as_completed
import random
from tqdm import tqdm
import logging
import math

logger = logging.getLogger(__name__)

@dataclass
class SimulationConfig:
    number_of_decks: int = 6  # Vegas tables
    simulation_count: int = 10000
    max_workers: Optional[int] = None  # ThreadPoolExecutor default
    seed: Optional[int] = None
    show_progress: bool = True

    def validate(self):
        if self.number_of_decks < 1:
            raise ValueError(f"Number of decks must be positive, got {self.number_of_decks}")
        if self.simulation_count < 1:
            raise ValueError(f"Simulation count must be positive, got {self.simulation_count}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"Worker count must be positive, got {self.max_workers}")

@dataclass
class SimulationResult:
    games_played: int = 0
    player_wins: int = 0
    dealer_wins: int = 0
    ties: int = 0
    doubles: int = 0
    splits: int = 0
    sample: Optional[RoundResult] = None

    def add(self, result: RoundResult):
        self.games_played += 1
        if result.winner == Agent.PLAYER:
            self.player_wins += 1
        elif result.winner == Agent.DEALER:
            self.dealer_wins += 1
        else:
            self.ties += 1
        if Action.DOUBLE in result.actions:
            self.doubles += 1
        if Action.SPLIT in result.actions:
            self.splits += 1

    def pct(self, count: int) -> float:
        if self.games_played == 0:
            return math.nan
        return count / self.games_played * 100

    @property
    def player_win_pct(self) -> float:
        return self.pct(self.player_wins)

    @property
    def dealer_win_pct(self) -> float:
        return self.pct(self.dealer_wins)

    @property
    def tie_pct(self) -> float:
        return self.pct(self.ties)

    @classmethod
    def from_rounds(cls, rounds: List[RoundResult]) -> "SimulationResult":
        """Aggregate finished games; the first one is kept as the sample trace."""
        combined = cls(sample=rounds[0] if rounds else None)
        for result in rounds:
            combined.add(result)
        return combined

class BlackjackSimulator:
    def __init__(self, strategy: StrategyTable, config: Optional[SimulationConfig] = None,
                 card_source: Optional[CardSource] = None,
                 split_policy: Optional[SplitPolicy] = None):
        self.strategy = strategy
        self.config = config or SimulationConfig()
        self.config.validate()
        self.split_policy = split_policy
        if card_source is None:
            deck = Deck(self.config.number_of_decks, random.Random(self.config.seed))
            card_source = CardSource.from_deck(deck)
        self.card_source = card_source

    def play_game(self) -> RoundResult:
        """Play a single game against the shared card source"""
        return play_game(self.card_source, self.strategy, self.split_policy)

    def run_simulation(self) -> SimulationResult:
        """Run every game concurrently and aggregate once all have finished"""
        count = self.config.simulation_count
        logger.info(f"Starting simulation of {count:,} games over "
                    f"{self.config.number_of_decks} decks")

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(self.play_game) for _ in range(count)]
            try:
                progress = tqdm(as_completed(futures), total=count, unit="game",
                                disable=not self.config.show_progress)
                for future in progress:
                    # Surface the first failure instead of dropping the game
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        rounds = [future.result() for future in futures]
        combined = SimulationResult.from_rounds(rounds)

        logger.info("Simulation complete")
        return combined

def print_simulation_results(results: SimulationResult, config: SimulationConfig):
    """Print formatted simulation results"""
    print("********************************************")
    print("*                                          *")
    print("* Testing effectiveness of 'basic strategy' *")
    print("*                                          *")
    print("********************************************")

    if results.sample is not None:
        print("\nSample game:")
        print(results.sample.describe())

    print(f"\nDeck size: {config.number_of_decks}")
    print(f"Simulated games: {results.games_played:,}")
    print(f"\nOutcomes:")
    print(f"Player wins: {results.player_wins:,} ({results.player_win_pct:.2f}%)")
    print(f"Dealer wins: {results.dealer_wins:,} ({results.dealer_win_pct:.2f}%)")
    print(f"Ties: {results.ties:,} ({results.tie_pct:.2f}%)")
    print(f"\nSpecial Plays:")
    print(f"Doubles: {results.doubles:,} ({results.pct(results.doubles):.2f}%)")
    print(f"Splits: {results.splits:,} ({results.pct(results.splits):.2f}%)")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    config = SimulationConfig(number_of_decks=6, simulation_count=10000)
    simulator = BlackjackSimulator(StrategyTable.basic(), config)

    print("Running simulation...")
    results = simulator.run_simulation()
    print_simulation_results(results, config)
