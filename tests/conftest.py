"""Pytest configuration and fixtures for blackjack simulator tests."""

import pytest

from basic_strategy import StrategyTable
from blackjack import CardSource, Game, Rank


def ranks(symbols):
    """Parse a space separated list of rank symbols, e.g. "10 7 A"."""
    return [Rank.from_symbol(s) for s in symbols.split()]


@pytest.fixture(scope="session")
def basic_strategy():
    return StrategyTable.basic()


@pytest.fixture
def make_game(basic_strategy):
    """Build a Game dealt from a fixed card order (dealer two, then player two)."""
    def _make(symbols, strategy=None):
        source = CardSource(ranks(symbols))
        return Game(source, strategy if strategy is not None else basic_strategy)
    return _make
