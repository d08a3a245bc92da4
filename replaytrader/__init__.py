# -*- coding: utf-8 -*-
"""
replaytrader: deterministic replay of trading signals against price bars.
"""

from replaytrader.backtesting import BacktestConfig, BacktestEngine, BacktestResult, run_backtest

__version__ = "0.1.0"

__all__ = [
    'BacktestConfig',
    'BacktestEngine',
    'BacktestResult',
    'run_backtest'
]
