# -*- coding: utf-8 -*-
"""
Risk management module.

Handles risk-based position sizing and the notional position cap.
"""

import logging

from replaytrader.backtesting.config import BacktestConfig
from replaytrader.backtesting.errors import InvalidRiskInput


logger = logging.getLogger(__name__)


class RiskManager:
    """Manages position sizing and position caps."""

    def __init__(self, risk_per_trade_percent: float = 0.01,
                 position_size_percent: float = 0.10):
        """
        Initialize risk manager.

        Parameters
        ----------
        risk_per_trade_percent : float, default 0.01
            Fraction of account value put at risk per trade
        position_size_percent : float, default 0.10
            Max position notional as fraction of account value
        """
        self.risk_per_trade_percent = risk_per_trade_percent
        self.position_size_percent = position_size_percent

    @classmethod
    def from_config(cls, config: BacktestConfig) -> 'RiskManager':
        return cls(risk_per_trade_percent=config.risk_per_trade_percent,
                   position_size_percent=config.position_size_percent)

    def calculate_risk_amount(self, account_value: float) -> float:
        """Currency amount at risk for one trade."""
        return account_value * self.risk_per_trade_percent

    def calculate_position_size(self, account_value: float, entry_price: float,
                                stop_price: float) -> float:
        """
        Calculate position size based on risk amount and position cap.

        Parameters
        ----------
        account_value : float
            Current account value (cash plus unrealized PnL)
        entry_price : float
            Entry price
        stop_price : float
            Stop loss price

        Returns
        -------
        float
            Position size in units of the base asset, the smaller of the
            risk-based size and the notional cap

        Raises
        ------
        InvalidRiskInput
            If account value or stop distance is not positive, or the
            resulting size is not positive
        """
        if not account_value > 0:
            raise InvalidRiskInput(f"Account value must be positive, got {account_value}")

        # Calculate risk per unit
        risk_per_unit = abs(entry_price - stop_price)
        if not risk_per_unit > 0:
            raise InvalidRiskInput(
                f"Stop distance must be positive (entry={entry_price}, stop={stop_price})"
            )

        # Calculate position size based on risk
        risk_based_size = self.calculate_risk_amount(account_value) / risk_per_unit

        # Apply notional cap
        size = self.apply_position_cap(risk_based_size, entry_price, account_value)

        if not size > 0:
            raise InvalidRiskInput(
                f"Position size {size} is not positive (account={account_value}, entry={entry_price})"
            )

        logger.debug(f"Sized position: risk_based={risk_based_size:.6f} capped={size:.6f}")
        return size

    def apply_position_cap(self, position_size: float, entry_price: float,
                           account_value: float) -> float:
        """
        Apply position value cap to position size.

        Parameters
        ----------
        position_size : float
            Unconstrained position size
        entry_price : float
            Entry price
        account_value : float
            Current account value

        Returns
        -------
        float
            Capped position size
        """
        if not entry_price > 0:
            raise InvalidRiskInput(f"Entry price must be positive, got {entry_price}")

        max_position_value = account_value * self.position_size_percent
        max_size = max_position_value / entry_price

        return min(position_size, max_size)
