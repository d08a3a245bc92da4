# -*- coding: utf-8 -*-
"""
Backtest driver.

Replays price bars in timestamp order, matches signals to bars by exact
timestamp and drives exits, entries and equity marking bar by bar:

1. Close positions whose stop or target was reached inside the bar
2. Open at most one position per signal stamped with this bar
3. On the final bar, force-close everything still open at the close
4. Mark the portfolio at the close and append one equity point

The final force-close runs before the final mark, so the last equity point
is the realized cash balance with exit costs already deducted.

Each call builds its own position manager and capital accountant, so one
engine can serve several runs, including concurrent ones.
"""

import logging
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from replaytrader.backtesting.capital_accounting import CapitalAccountant
from replaytrader.backtesting.config import BacktestConfig
from replaytrader.backtesting.errors import InvariantViolation, UnorderedInputError
from replaytrader.backtesting.execution_engine import ExecutionEngine
from replaytrader.backtesting.exit_evaluator import ExitEvaluator
from replaytrader.backtesting.metrics import calculate_performance_metrics
from replaytrader.backtesting.models import (
    REJECT_NO_MATCHING_BAR, BacktestResult, PriceBar, RejectedSignal, Signal
)
from replaytrader.backtesting.position_manager import PositionManager
from replaytrader.backtesting.risk_manager import RiskManager
from replaytrader.config import Settings


logger = logging.getLogger(__name__)

BacktestJob = Tuple[Sequence[PriceBar], Iterable[Signal], Optional[BacktestConfig]]


def index_signals(signals: Iterable[Signal]) -> Dict[object, List[Signal]]:
    """Group signals by timestamp, keeping input order within a timestamp."""
    index: Dict[object, List[Signal]] = OrderedDict()
    for signal in signals:
        index.setdefault(signal.timestamp, []).append(signal)
    return index


class BacktestEngine:
    """Runs one configuration against one signal stream, deterministically."""

    def __init__(self, config: Optional[BacktestConfig] = None,
                 exit_evaluator: Optional[ExitEvaluator] = None):
        """
        Initialize backtest engine.

        Parameters
        ----------
        config : BacktestConfig or None, optional
            Default configuration for runs that do not pass one
        exit_evaluator : ExitEvaluator or None, optional
            Stateless exit rules shared by all runs
        """
        self.config = config or BacktestConfig()
        self.exit_evaluator = exit_evaluator or ExitEvaluator()

    def run_backtest(self, bars: Sequence[PriceBar], signals: Iterable[Signal],
                     config: Optional[BacktestConfig] = None) -> BacktestResult:
        """
        Replay bars and signals and return the completed result.

        Parameters
        ----------
        bars : sequence of PriceBar
            Strictly increasing timestamps
        signals : iterable of Signal
            Any order; matched to bars by timestamp equality
        config : BacktestConfig or None, optional
            Overrides the engine's default configuration

        Returns
        -------
        BacktestResult

        Raises
        ------
        InvalidConfiguration
            Before any bar is processed
        UnorderedInputError, MalformedBarError
            On the offending bar; no partial result is returned
        InvariantViolation
            If the simulation's own bookkeeping is inconsistent
        """
        config = (config or self.config).validate()
        bars = list(bars)
        pending_signals = index_signals(signals)

        position_manager = PositionManager(
            config,
            risk_manager=RiskManager.from_config(config),
            execution_engine=ExecutionEngine(config.transaction_cost_percent),
        )
        accountant = CapitalAccountant()
        rejected: List[RejectedSignal] = []

        logger.info(f"Starting backtest: {len(bars)} bars, "
                    f"{sum(len(s) for s in pending_signals.values())} signals, "
                    f"initial capital {config.initial_capital:.2f}")
        start_time = time.time()

        previous_timestamp = None
        last_index = len(bars) - 1
        for i, bar in enumerate(bars):
            if i > 0 and not bar.timestamp > previous_timestamp:
                raise UnorderedInputError(
                    f"Bar {i} timestamp {bar.timestamp} does not follow {previous_timestamp}"
                )
            bar.validate()

            # Step 1: Intrabar stop/target exits
            for position in list(position_manager.open_positions):
                decision, exit_price = self.exit_evaluator.check_exit(position, bar)
                if decision is not None:
                    position_manager.close(position, exit_price, bar.timestamp, decision)

            # Step 2: Entries for signals stamped with this bar
            bar_signals = pending_signals.pop(bar.timestamp, None)
            if bar_signals:
                account_value = accountant.calculate_equity(
                    position_manager.cash, position_manager.open_positions, bar.close
                )
                for signal in bar_signals:
                    outcome = position_manager.try_open(signal, bar, account_value)
                    if isinstance(outcome, RejectedSignal):
                        rejected.append(outcome)

            if len(position_manager.open_positions) > config.max_concurrent_positions:
                raise InvariantViolation(
                    f"{len(position_manager.open_positions)} open positions exceed cap "
                    f"{config.max_concurrent_positions}"
                )

            # Step 3: Nothing stays open past the final bar
            if i == last_index:
                for position in list(position_manager.open_positions):
                    reason, exit_price = self.exit_evaluator.force_close(bar)
                    position_manager.close(position, exit_price, bar.timestamp, reason)

            # Step 4: Mark to market
            accountant.mark_and_append(bar, position_manager.cash, position_manager.open_positions)
            previous_timestamp = bar.timestamp

        # Signals whose timestamp never appeared in the price stream
        for timestamp, unmatched in pending_signals.items():
            logger.warning(f"Dropping {len(unmatched)} signal(s) at {timestamp}: no matching bar")
            for signal in unmatched:
                rejected.append(RejectedSignal(signal=signal, reason=REJECT_NO_MATCHING_BAR,
                                               detail=f"no bar at {timestamp}"))

        if position_manager.open_positions:
            raise InvariantViolation(
                f"{len(position_manager.open_positions)} position(s) still open after the final bar"
            )
        if len(accountant.equity_history) != len(bars):
            raise InvariantViolation(
                f"Equity curve has {len(accountant.equity_history)} points for {len(bars)} bars"
            )

        metrics = calculate_performance_metrics(
            position_manager.ledger, accountant.equity_history, config.initial_capital
        )

        elapsed = time.time() - start_time
        logger.info(f"Backtest finished in {elapsed:.2f}s: {metrics.total_trades} trades, "
                    f"{len(rejected)} rejected signals, net profit {metrics.net_profit:.2f}")

        return BacktestResult(
            trades=list(position_manager.ledger),
            equity_curve=list(accountant.equity_history),
            metrics=metrics,
            rejected_signals=rejected,
        )

    def run_backtests(self, jobs: Iterable[BacktestJob],
                      max_workers: Optional[int] = None) -> List[BacktestResult]:
        """
        Run independent backtests concurrently.

        Parameters
        ----------
        jobs : iterable of (bars, signals, config)
            config may be None to use the engine default
        max_workers : int or None, optional
            Thread pool size; BACKTEST_MAX_WORKERS when omitted

        Returns
        -------
        list of BacktestResult
            In job order. The first failing job's error is re-raised.
        """
        jobs = list(jobs)
        if not jobs:
            return []

        if max_workers is None:
            max_workers = Settings().max_workers

        logger.info(f"Running {len(jobs)} backtests (max_workers={max_workers})")
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self.run_backtest, bars, signals, config)
                       for bars, signals, config in jobs]
            return [future.result() for future in futures]


def run_backtest(bars: Sequence[PriceBar], signals: Iterable[Signal],
                 config: Optional[BacktestConfig] = None) -> BacktestResult:
    """Run a single backtest with a throwaway engine."""
    return BacktestEngine(config).run_backtest(bars, signals)


def run_backtests(jobs: Iterable[BacktestJob],
                  max_workers: Optional[int] = None) -> List[BacktestResult]:
    return BacktestEngine().run_backtests(jobs, max_workers=max_workers)
