# -*- coding: utf-8 -*-
"""
Synthetic market data for tests and benchmarks.

Price paths are built from a closed set of market conditions. Each
condition maps progress within the condition (and a seeded random
generator) to a fractional price move. Output is deterministic for a given
seed.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from replaytrader.backtesting.models import PriceBar


# Market conditions
TRENDING = 'trending'
RANGING = 'ranging'
VOLATILE = 'volatile'
BREAKOUT = 'breakout'

BASE_MOVEMENT = 0.001  # 0.1% base move per bar


@dataclass(frozen=True)
class MarketCondition:
    type: str
    strength: float  # Sign sets trend direction for TRENDING
    duration: int  # In bars


@dataclass
class TestDataConfig:
    """Configuration for generate_market_data."""

    __test__ = False  # Not a pytest test class

    symbol: str = "TEST"
    start_price: float = 100.0
    candle_count: int = 500
    start_time: int = 0  # Epoch milliseconds of the first bar
    timeframe: int = 60_000  # Milliseconds between bars
    conditions: List[MarketCondition] = field(default_factory=list)
    add_noise: bool = True
    noise_level: float = 0.001
    seed: int = 42


def _trending(condition: MarketCondition, progress: int, rng: np.random.Generator) -> float:
    return BASE_MOVEMENT * condition.strength


def _ranging(condition: MarketCondition, progress: int, rng: np.random.Generator) -> float:
    return np.sin(progress * 0.1) * BASE_MOVEMENT * condition.strength


def _volatile(condition: MarketCondition, progress: int, rng: np.random.Generator) -> float:
    return (rng.random() - 0.5) * BASE_MOVEMENT * condition.strength * 4


def _breakout(condition: MarketCondition, progress: int, rng: np.random.Generator) -> float:
    if progress < condition.duration * 0.8:
        # Quiet consolidation before the break
        return (rng.random() - 0.5) * BASE_MOVEMENT * 0.2
    return BASE_MOVEMENT * condition.strength * (1 if rng.random() > 0.5 else -1)


PRICE_MOVEMENTS = {
    TRENDING: _trending,
    RANGING: _ranging,
    VOLATILE: _volatile,
    BREAKOUT: _breakout,
}


def price_movement(condition: MarketCondition, progress: int, rng: np.random.Generator) -> float:
    """
    Fractional price move for one bar.

    Parameters
    ----------
    condition : MarketCondition
        Active condition
    progress : int
        Bars elapsed since the condition started
    rng : np.random.Generator
        Random source for the stochastic conditions

    Returns
    -------
    float
        Move as a fraction of the current price
    """
    try:
        movement = PRICE_MOVEMENTS[condition.type]
    except KeyError:
        raise ValueError(f"Unknown market condition: {condition.type!r}") from None
    return float(movement(condition, progress, rng))


def generate_market_data(config: TestDataConfig) -> List[PriceBar]:
    """
    Generate OHLCV bars following the configured conditions in sequence.

    The last condition stays active once the earlier ones are exhausted.
    Every bar satisfies high >= max(open, close) and low <= min(open, close).
    """
    rng = np.random.default_rng(config.seed)
    conditions = config.conditions or [MarketCondition(RANGING, 0.5, config.candle_count)]

    bars: List[PriceBar] = []
    current_price = config.start_price
    condition_index = 0
    progress = 0
    active = conditions[0]

    for i in range(config.candle_count):
        # Switch market condition if needed
        if progress >= active.duration and condition_index < len(conditions) - 1:
            condition_index += 1
            active = conditions[condition_index]
            progress = 0

        base_change = current_price * price_movement(active, progress, rng)
        noise = (rng.random() - 0.5) * config.noise_level * current_price if config.add_noise else 0.0
        price_change = base_change + noise

        # Calculate OHLC
        open_ = current_price
        close = current_price + price_change
        spread = abs(price_change) * (0.5 + rng.random() * 0.5)
        high = max(open_, close) + spread * rng.random()
        low = min(open_, close) - spread * rng.random()

        # More volume during volatile periods
        volatility_factor = abs(price_change / current_price) * 100
        volume = (1000 + rng.random() * 1000) * (1 + volatility_factor)

        bars.append(PriceBar(
            timestamp=config.start_time + i * config.timeframe,
            open=open_, high=high, low=low, close=close, volume=volume,
        ))

        current_price = close
        progress += 1

    return bars


SCENARIOS: Dict[str, Tuple[TestDataConfig, Dict[str, str]]] = {
    'bull_market': (
        TestDataConfig(symbol='BULL', start_price=1.2, candle_count=1000,
                       conditions=[MarketCondition(TRENDING, 0.8, 800),
                                   MarketCondition(RANGING, 0.3, 200)],
                       noise_level=0.001),
        {'trend': 'bullish', 'volatility': 'medium', 'expected_profitability': 'positive'},
    ),
    'bear_market': (
        TestDataConfig(symbol='BEAR', start_price=1.2, candle_count=1000,
                       conditions=[MarketCondition(TRENDING, -0.8, 800),
                                   MarketCondition(RANGING, 0.3, 200)],
                       noise_level=0.001),
        {'trend': 'bearish', 'volatility': 'medium', 'expected_profitability': 'negative'},
    ),
    'sideways': (
        TestDataConfig(symbol='SIDE', start_price=1.2, candle_count=1000,
                       conditions=[MarketCondition(RANGING, 0.5, 1000)],
                       noise_level=0.0005),
        {'trend': 'sideways', 'volatility': 'low', 'expected_profitability': 'neutral'},
    ),
    'mixed': (
        TestDataConfig(symbol='MIXED', start_price=1.2, candle_count=1000,
                       conditions=[MarketCondition(TRENDING, 0.6, 250),
                                   MarketCondition(RANGING, 0.4, 200),
                                   MarketCondition(VOLATILE, 0.8, 150),
                                   MarketCondition(TRENDING, -0.5, 250),
                                   MarketCondition(BREAKOUT, 0.7, 150)],
                       noise_level=0.002),
        {'trend': 'mixed', 'volatility': 'high', 'expected_profitability': 'neutral'},
    ),
}


def generate_backtest_data(scenario: str, seed: Optional[int] = None
                           ) -> Tuple[List[PriceBar], Dict[str, str]]:
    """
    Bars for a named scenario plus its expected character.

    Parameters
    ----------
    scenario : str
        'bull_market', 'bear_market', 'sideways' or 'mixed'
    seed : int or None, optional
        Overrides the scenario's default seed

    Returns
    -------
    tuple of (list of PriceBar, dict)
    """
    if scenario not in SCENARIOS:
        raise ValueError(f"Unknown scenario: {scenario!r}. Choose from {sorted(SCENARIOS)}")

    config, expected = SCENARIOS[scenario]
    if seed is not None:
        config = replace(config, seed=seed)
    return generate_market_data(config), dict(expected)


def _pattern_candle(pattern: str, price: float) -> Dict[str, Any]:
    base_spread = price * 0.0005

    if pattern == 'bullish_engulfing':
        return dict(open=price - base_spread, close=price + base_spread * 3,
                    high=price + base_spread * 3.2, low=price - base_spread * 1.2, volume=1500.0)
    if pattern == 'doji':
        return dict(open=price, close=price + base_spread * 0.1,
                    high=price + base_spread * 2, low=price - base_spread * 2, volume=800.0)
    if pattern == 'hammer':
        return dict(open=price - base_spread * 0.5, close=price,
                    high=price + base_spread * 0.5, low=price - base_spread * 4, volume=1200.0)
    if pattern == 'shooting_star':
        return dict(open=price + base_spread * 0.5, close=price,
                    high=price + base_spread * 4, low=price - base_spread * 0.5, volume=1200.0)
    raise ValueError(f"Unknown pattern: {pattern!r}")


def generate_pattern_data(pattern: str, count: int = 50, seed: int = 42) -> List[PriceBar]:
    """Random-walk bars with one candlestick pattern inserted at the midpoint."""
    rng = np.random.default_rng(seed)
    bars: List[PriceBar] = []
    price = 1.2

    for i in range(count):
        if i == count // 2:
            candle = _pattern_candle(pattern, price)
        else:
            change = (rng.random() - 0.5) * 0.002
            open_ = price
            close = price + change
            spread = abs(change) * 0.5
            candle = dict(open=open_, close=close,
                          high=max(open_, close) + spread * rng.random(),
                          low=min(open_, close) - spread * rng.random(),
                          volume=1000 + rng.random() * 500)

        bars.append(PriceBar(timestamp=i * 60_000, **candle))
        price = candle['close']

    return bars
