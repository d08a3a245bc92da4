# -*- coding: utf-8 -*-
"""
Backtesting engine module.

Replays price bars and trading signals, simulating risk-based sizing,
stop/target exits, transaction costs and mark-to-market equity, and reports
the trade ledger, equity curve and performance metrics.
"""

from replaytrader.backtesting.config import BacktestConfig
from replaytrader.backtesting.errors import (
    BacktestError,
    InvalidConfiguration,
    InputError,
    UnorderedInputError,
    MalformedBarError,
    InvalidRiskInput,
    InvariantViolation
)
from replaytrader.backtesting.models import (
    PriceBar,
    Signal,
    Position,
    Trade,
    EquityPoint,
    RejectedSignal,
    PerformanceMetrics,
    BacktestResult
)
from replaytrader.backtesting.risk_manager import RiskManager
from replaytrader.backtesting.execution_engine import ExecutionEngine
from replaytrader.backtesting.exit_evaluator import ExitEvaluator
from replaytrader.backtesting.position_manager import PositionManager
from replaytrader.backtesting.capital_accounting import CapitalAccountant
from replaytrader.backtesting.metrics import calculate_performance_metrics, PROFIT_FACTOR_INFINITE
from replaytrader.backtesting.engine import BacktestEngine, run_backtest, run_backtests

__all__ = [
    'BacktestConfig',
    'BacktestError',
    'InvalidConfiguration',
    'InputError',
    'UnorderedInputError',
    'MalformedBarError',
    'InvalidRiskInput',
    'InvariantViolation',
    'PriceBar',
    'Signal',
    'Position',
    'Trade',
    'EquityPoint',
    'RejectedSignal',
    'PerformanceMetrics',
    'BacktestResult',
    'RiskManager',
    'ExecutionEngine',
    'ExitEvaluator',
    'PositionManager',
    'CapitalAccountant',
    'calculate_performance_metrics',
    'PROFIT_FACTOR_INFINITE',
    'BacktestEngine',
    'run_backtest',
    'run_backtests'
]
