# -*- coding: utf-8 -*-
"""
Position management for one backtest run.

Owns the open positions, the cash balance and the closed-trade ledger.
Cash only moves when a position closes; unrealized PnL is left to the
capital accountant.
"""

import logging
from typing import List, Optional, Union

from replaytrader.backtesting.config import BacktestConfig
from replaytrader.backtesting.errors import InvalidRiskInput, InvariantViolation
from replaytrader.backtesting.execution_engine import ExecutionEngine
from replaytrader.backtesting.models import (
    CLOSE_STATUS_BY_REASON, DIRECTION_LONG, REJECT_CAPACITY_EXCEEDED,
    REJECT_INVALID_RISK_INPUT, REJECT_INVALID_SIGNAL, Position, PriceBar,
    RejectedSignal, Signal, Trade, direction_sign
)
from replaytrader.backtesting.risk_manager import RiskManager


logger = logging.getLogger(__name__)


class PositionManager:
    """Opens and closes positions and keeps the run's cash and ledger."""

    def __init__(self, config: BacktestConfig,
                 risk_manager: Optional[RiskManager] = None,
                 execution_engine: Optional[ExecutionEngine] = None):
        """
        Initialize position manager.

        Parameters
        ----------
        config : BacktestConfig
            Validated run configuration
        risk_manager : RiskManager or None, optional
            Position sizer (built from config if omitted)
        execution_engine : ExecutionEngine or None, optional
            Transaction cost model (built from config if omitted)
        """
        self.config = config
        self.risk_manager = risk_manager or RiskManager.from_config(config)
        self.execution_engine = execution_engine or ExecutionEngine(config.transaction_cost_percent)

        self.cash: float = config.initial_capital
        self.open_positions: List[Position] = []
        self.ledger: List[Trade] = []
        self._next_id = 1

    @property
    def has_capacity(self) -> bool:
        return len(self.open_positions) < self.config.max_concurrent_positions

    def calculate_exit_levels(self, direction: str, entry_price: float):
        """
        Calculate stop loss and take profit prices.

        Parameters
        ----------
        direction : str
            'long' or 'short'
        entry_price : float
            Entry price

        Returns
        -------
        tuple of (float, float)
            (stop_price, target_price)
        """
        if direction == DIRECTION_LONG:
            stop_price = entry_price * (1 - self.config.stop_loss_percent)
            target_price = entry_price * (1 + self.config.take_profit_percent)
        else:  # short
            stop_price = entry_price * (1 + self.config.stop_loss_percent)
            target_price = entry_price * (1 - self.config.take_profit_percent)
        return stop_price, target_price

    def try_open(self, signal: Signal, bar: PriceBar,
                 account_value: float) -> Union[Position, RejectedSignal]:
        """
        Open a position for a signal at the bar's close.

        Parameters
        ----------
        signal : Signal
            Entry request matched to this bar
        bar : PriceBar
            Bar whose timestamp equals the signal's
        account_value : float
            Marked account value used for sizing

        Returns
        -------
        Position or RejectedSignal
            The new open position, or the reason it was not opened
        """
        if not signal.is_valid():
            return self._reject(signal, REJECT_INVALID_SIGNAL,
                                f"direction={signal.direction!r} confidence={signal.confidence}")

        if not self.has_capacity:
            return self._reject(signal, REJECT_CAPACITY_EXCEEDED,
                                f"{len(self.open_positions)} of {self.config.max_concurrent_positions} slots used")

        entry_price = bar.close
        stop_price, target_price = self.calculate_exit_levels(signal.direction, entry_price)

        try:
            size = self.risk_manager.calculate_position_size(account_value, entry_price, stop_price)
        except InvalidRiskInput as e:
            return self._reject(signal, REJECT_INVALID_RISK_INPUT, str(e))

        if not size > 0:
            raise InvariantViolation(f"Refusing to open position with size {size}")

        position = Position(
            id=self._next_id,
            direction=signal.direction,
            entry_time=bar.timestamp,
            entry_price=entry_price,
            size=size,
            stop_price=stop_price,
            target_price=target_price,
            confidence=signal.confidence,
            reference_price=signal.reference_price,
        )
        self._next_id += 1
        self.open_positions.append(position)

        logger.debug(f"Opened #{position.id} {position.direction} {size:.6f} @ {entry_price} "
                     f"(stop={stop_price:.6f}, target={target_price:.6f})")
        return position

    def close(self, position: Position, exit_price: float, exit_time, reason: str) -> Trade:
        """
        Close an open position and book the trade.

        Parameters
        ----------
        position : Position
            Position to close; must be open and owned by this manager
        exit_price : float
            Fill price
        exit_time : Any
            Timestamp of the closing bar
        reason : str
            EXIT_STOP, EXIT_TARGET or EXIT_FORCED

        Returns
        -------
        Trade
            Closed trade record, also appended to the ledger
        """
        if not position.is_open or position not in self.open_positions:
            raise InvariantViolation(f"Position #{position.id} is not open (status={position.status})")
        if reason not in CLOSE_STATUS_BY_REASON:
            raise InvariantViolation(f"Unknown close reason {reason!r}")

        gross_pnl = direction_sign(position.direction) * (exit_price - position.entry_price) * position.size
        costs = self.execution_engine.calculate_total_fees(position.entry_price, exit_price, position.size)
        net_pnl = gross_pnl - costs

        position.status = CLOSE_STATUS_BY_REASON[reason]
        self.open_positions.remove(position)
        self.cash += net_pnl

        trade = Trade(
            trade_id=position.id,
            entry_time=position.entry_time,
            entry_price=position.entry_price,
            exit_time=exit_time,
            exit_price=exit_price,
            direction=position.direction,
            size=position.size,
            gross_pnl=gross_pnl,
            costs=costs,
            net_pnl=net_pnl,
            close_reason=reason,
            confidence=position.confidence,
        )
        self.ledger.append(trade)

        logger.debug(f"Closed #{position.id} {reason} @ {exit_price}: net PnL = {net_pnl:.2f}")
        return trade

    def _reject(self, signal: Signal, reason: str, detail: str) -> RejectedSignal:
        logger.debug(f"Rejected {signal.direction} signal at {signal.timestamp}: {reason} ({detail})")
        return RejectedSignal(signal=signal, reason=reason, detail=detail)
