# -*- coding: utf-8 -*-
"""
Execution engine for trade entry and exit.

Models transaction costs as a percentage of the notional traded on each leg.
"""


class ExecutionEngine:
    """Handles trade execution costs."""

    def __init__(self, transaction_cost_percent: float = 0.0):
        """
        Initialize execution engine.

        Parameters
        ----------
        transaction_cost_percent : float, default 0.0
            Cost per leg as fraction of notional (e.g., 0.001 for 0.1%)
        """
        self.transaction_cost_percent = transaction_cost_percent

    def calculate_leg_cost(self, price: float, position_size: float) -> float:
        """
        Cost of one fill (entry or exit).

        Parameters
        ----------
        price : float
            Fill price
        position_size : float
            Units filled

        Returns
        -------
        float
            Cost in account currency
        """
        if self.transaction_cost_percent == 0.0:
            return 0.0

        # Cost is percentage of notional value
        return abs(price * position_size) * self.transaction_cost_percent

    def calculate_total_fees(self, entry_price: float, exit_price: float,
                             position_size: float) -> float:
        """
        Calculate total fees for a round-trip trade.

        Parameters
        ----------
        entry_price : float
            Entry price
        exit_price : float
            Exit price
        position_size : float
            Position size

        Returns
        -------
        float
            Total fees paid (entry + exit)
        """
        entry_fee = self.calculate_leg_cost(entry_price, position_size)
        exit_fee = self.calculate_leg_cost(exit_price, position_size)
        return entry_fee + exit_fee
