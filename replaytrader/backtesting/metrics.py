# -*- coding: utf-8 -*-
"""
Performance metrics.

Pure functions over the closed-trade ledger and the equity curve.
"""

from typing import Sequence, Union

import numpy as np

from replaytrader.backtesting.models import EquityPoint, PerformanceMetrics, Trade


# Profit factor when there are winning trades and no losing ones
PROFIT_FACTOR_INFINITE = float('inf')


def _equity_values(equity_curve: Sequence[Union[EquityPoint, float]],
                   initial_capital: float) -> np.ndarray:
    """Equity values prefixed with the starting capital."""
    values = [initial_capital]
    for point in equity_curve:
        values.append(point.marked_value if isinstance(point, EquityPoint) else float(point))
    return np.asarray(values, dtype=float)


def calculate_returns(equity_values) -> np.ndarray:
    """
    Per-bar simple returns between consecutive equity values.

    Non-finite returns (previous equity of zero) are dropped.
    """
    equity_array = np.asarray(equity_values, dtype=float)
    if len(equity_array) < 2:
        return np.array([], dtype=float)

    with np.errstate(divide='ignore', invalid='ignore'):
        returns = np.diff(equity_array) / equity_array[:-1]

    return returns[np.isfinite(returns)]


def calculate_sharpe_ratio(equity_values) -> float:
    """
    Calculate per-bar Sharpe ratio from equity curve.

    Parameters
    ----------
    equity_values : list or array
        List of equity values over time

    Returns
    -------
    float
        mean(returns) / population std(returns), not annualized;
        0.0 with fewer than two returns or zero deviation
    """
    returns = calculate_returns(equity_values)

    if len(returns) < 2:
        return 0.0

    std_return = np.std(returns)
    if std_return == 0:
        return 0.0

    return float(np.mean(returns) / std_return)


def calculate_max_drawdown(equity_values) -> float:
    """Largest peak-to-trough decline as a fraction of the running peak."""
    equity_array = np.asarray(equity_values, dtype=float)
    if len(equity_array) == 0:
        return 0.0

    peaks = np.maximum.accumulate(equity_array)
    with np.errstate(divide='ignore', invalid='ignore'):
        drawdowns = np.where(peaks > 0, (peaks - equity_array) / peaks, 0.0)

    return float(max(drawdowns.max(), 0.0))


def calculate_performance_metrics(trades: Sequence[Trade],
                                  equity_curve: Sequence[Union[EquityPoint, float]],
                                  initial_capital: float) -> PerformanceMetrics:
    """
    Calculate performance metrics for one run.

    Parameters
    ----------
    trades : sequence of Trade
        Closed-trade ledger
    equity_curve : sequence of EquityPoint or float
        One marked value per processed bar
    initial_capital : float
        Equity before the first bar; seeds returns and the drawdown peak

    Returns
    -------
    PerformanceMetrics
    """
    equity_values = _equity_values(equity_curve, initial_capital)
    sharpe_ratio = calculate_sharpe_ratio(equity_values)
    max_drawdown = calculate_max_drawdown(equity_values)

    if len(trades) == 0:
        return PerformanceMetrics(sharpe_ratio=sharpe_ratio, max_drawdown=max_drawdown)

    pnl = np.array([t.net_pnl for t in trades], dtype=float)
    wins = pnl[pnl > 0]
    losses = pnl[pnl < 0]

    total_trades = len(pnl)
    win_rate = len(wins) / total_trades

    # Profit factor
    gross_profit = float(wins.sum()) if len(wins) > 0 else 0.0
    gross_loss = float(losses.sum()) if len(losses) > 0 else 0.0
    if gross_loss < 0:
        profit_factor = gross_profit / abs(gross_loss)
    elif gross_profit > 0:
        profit_factor = PROFIT_FACTOR_INFINITE
    else:
        profit_factor = 0.0

    net_profit = float(pnl.sum())

    return PerformanceMetrics(
        total_trades=total_trades,
        win_rate=win_rate,
        profit_factor=profit_factor,
        sharpe_ratio=sharpe_ratio,
        max_drawdown=max_drawdown,
        net_profit=net_profit,
        winning_trades=len(wins),
        losing_trades=len(losses),
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        average_trade=float(pnl.mean()),
        best_trade=float(pnl.max()),
        worst_trade=float(pnl.min()),
        total_return=net_profit / initial_capital if initial_capital > 0 else 0.0,
    )
