"""
Tests for the synthetic market data generators.
"""

import numpy as np
import pytest

from replaytrader.synthetic import (
    BREAKOUT, RANGING, SCENARIOS, TRENDING, VOLATILE, MarketCondition, TestDataConfig,
    generate_backtest_data, generate_market_data, generate_pattern_data, price_movement
)


def assert_well_formed(bars):
    for bar in bars:
        bar.validate()
    timestamps = [b.timestamp for b in bars]
    assert timestamps == sorted(set(timestamps))


class TestMarketData:
    def test_bar_count_and_spacing(self):
        config = TestDataConfig(candle_count=20, start_time=1_000, timeframe=5_000)

        bars = generate_market_data(config)

        assert len(bars) == 20
        assert bars[0].timestamp == 1_000
        assert bars[1].timestamp - bars[0].timestamp == 5_000
        assert bars[0].open == config.start_price
        assert_well_formed(bars)

    def test_bars_are_continuous(self):
        bars = generate_market_data(TestDataConfig(candle_count=50))

        assert all(b.open == a.close for a, b in zip(bars, bars[1:]))

    def test_deterministic_per_seed(self):
        config = TestDataConfig(candle_count=100, conditions=[MarketCondition(VOLATILE, 1.0, 100)])

        assert generate_market_data(config) == generate_market_data(config)
        assert generate_market_data(config) != generate_market_data(TestDataConfig(
            candle_count=100, conditions=[MarketCondition(VOLATILE, 1.0, 100)], seed=1))

    def test_uptrend_without_noise(self):
        config = TestDataConfig(candle_count=30, add_noise=False,
                                conditions=[MarketCondition(TRENDING, 1.0, 30)])

        closes = np.array([b.close for b in generate_market_data(config)])

        assert np.all(np.diff(closes) > 0)

    def test_last_condition_persists(self):
        config = TestDataConfig(candle_count=40, add_noise=False,
                                conditions=[MarketCondition(TRENDING, 1.0, 10),
                                            MarketCondition(TRENDING, -1.0, 10)])

        closes = np.array([b.close for b in generate_market_data(config)])

        assert np.all(np.diff(closes[10:]) < 0)

    def test_unknown_condition(self):
        with pytest.raises(ValueError, match='sideways'):
            price_movement(MarketCondition('sideways', 1.0, 10), 0, np.random.default_rng(0))

    def test_breakout_quiet_then_moves(self):
        condition = MarketCondition(BREAKOUT, 1.0, 100)
        rng = np.random.default_rng(0)

        quiet = [abs(price_movement(condition, p, rng)) for p in range(80)]
        moves = [abs(price_movement(condition, p, rng)) for p in range(80, 100)]

        assert max(quiet) <= 0.0001
        assert all(m == pytest.approx(0.001) for m in moves)

    def test_ranging_is_bounded(self):
        condition = MarketCondition(RANGING, 0.5, 100)
        rng = np.random.default_rng(0)

        assert all(abs(price_movement(condition, p, rng)) <= 0.0005 for p in range(100))


class TestScenarios:
    @pytest.mark.parametrize("scenario", sorted(SCENARIOS))
    def test_scenarios_are_well_formed(self, scenario):
        bars, expected = generate_backtest_data(scenario)

        assert len(bars) == 1000
        assert set(expected) == {'trend', 'volatility', 'expected_profitability'}
        assert_well_formed(bars)

    def test_bull_rises_bear_falls(self):
        bull, _ = generate_backtest_data('bull_market')
        bear, _ = generate_backtest_data('bear_market')

        assert bull[799].close > bull[0].open
        assert bear[799].close < bear[0].open

    def test_seed_override(self):
        default, _ = generate_backtest_data('mixed')
        reseeded, _ = generate_backtest_data('mixed', seed=3)

        assert default != reseeded
        assert SCENARIOS['mixed'][0].seed == 42

    def test_unknown_scenario(self):
        with pytest.raises(ValueError):
            generate_backtest_data('crash')


class TestPatterns:
    @pytest.mark.parametrize("pattern", ['bullish_engulfing', 'doji', 'hammer', 'shooting_star'])
    def test_pattern_at_midpoint(self, pattern):
        bars = generate_pattern_data(pattern, count=20)

        assert len(bars) == 20
        assert_well_formed(bars)
        assert bars[10].open != bars[9].open

    def test_hammer_shape(self):
        bar = generate_pattern_data('hammer', count=10)[5]

        lower_wick = min(bar.open, bar.close) - bar.low
        body = abs(bar.close - bar.open)
        assert lower_wick > 2 * body

    def test_unknown_pattern(self):
        with pytest.raises(ValueError):
            generate_pattern_data('triangle')
