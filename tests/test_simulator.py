"""
Tests for the concurrent simulation driver and aggregation.
"""

import math

import pytest

from basic_strategy import Action, StrategyLookupError, StrategyTable
from blackjack import Agent, CardSource, Rank, RoundResult
from blackjack_simulator import (
    BlackjackSimulator, SimulationConfig, SimulationResult, print_simulation_results
)


def _config(**kwargs):
    kwargs.setdefault("show_progress", False)
    return SimulationConfig(**kwargs)


class TestSimulationResult:
    """Test aggregation of finished games."""

    def test_zero_games_reports_nan(self):
        result = SimulationResult()
        assert math.isnan(result.player_win_pct)
        assert math.isnan(result.dealer_win_pct)
        assert math.isnan(result.tie_pct)

    def test_each_game_counts_once(self):
        def round_result(winner, actions):
            return RoundResult((), 0, (), 0, actions, winner)

        result = SimulationResult.from_rounds([
            round_result(Agent.PLAYER, (Action.DOUBLE,)),
            round_result(Agent.DEALER, (Action.HIT, Action.HIT)),
            round_result(None, (Action.SPLIT,)),
            round_result(Agent.DEALER, ()),
        ])

        assert result.games_played == 4
        assert (result.player_wins, result.dealer_wins, result.ties) == (1, 2, 1)
        assert (result.doubles, result.splits) == (1, 1)
        assert result.dealer_win_pct == 50.0
        assert result.sample.winner == Agent.PLAYER


class TestBlackjackSimulator:
    """Test running many games against one shared card source."""

    def test_percentages_sum_to_100(self, basic_strategy):
        simulator = BlackjackSimulator(basic_strategy, _config(number_of_decks=6,
                                                               simulation_count=1000,
                                                               seed=7))
        result = simulator.run_simulation()

        assert result.games_played == 1000
        assert result.player_wins + result.dealer_wins + result.ties == 1000
        total = result.player_win_pct + result.dealer_win_pct + result.tie_pct
        assert total == pytest.approx(100.0)
        assert result.sample is not None

    def test_all_sixes_shoe_always_pushes(self, basic_strategy):
        """6,6 vs 6 splits to a tracked 18; the dealer reveals 12 and draws to 18."""
        source = CardSource([Rank.SIX])
        simulator = BlackjackSimulator(basic_strategy, _config(simulation_count=50,
                                                               max_workers=4),
                                       card_source=source)
        result = simulator.run_simulation()

        assert result.ties == 50
        assert result.splits == 50
        # 2 dealer + 2 player + 2 split + 1 dealer hit per game
        assert source.draws == 50 * 7

    def test_failed_game_is_surfaced(self):
        simulator = BlackjackSimulator(StrategyTable({}), _config(simulation_count=20),
                                       card_source=CardSource([Rank.SIX]))
        with pytest.raises(StrategyLookupError) as exc_info:
            simulator.run_simulation()
        assert exc_info.value.key == "6,6,6"

    @pytest.mark.parametrize("field", ["number_of_decks", "simulation_count", "max_workers"])
    def test_invalid_config_rejected(self, basic_strategy, field):
        with pytest.raises(ValueError):
            BlackjackSimulator(basic_strategy, _config(**{field: 0}))


def test_print_simulation_results(basic_strategy, capsys):
    config = _config(simulation_count=20, seed=3)
    result = BlackjackSimulator(basic_strategy, config).run_simulation()
    print_simulation_results(result, config)

    out = capsys.readouterr().out
    assert "Sample game:" in out
    assert "Player wins:" in out
    assert "Dealer wins:" in out
    assert "Ties:" in out
