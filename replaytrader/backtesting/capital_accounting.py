# -*- coding: utf-8 -*-
"""
Capital accounting module.

Marks open positions to market and builds the equity curve, one point per
processed bar.
"""

from typing import Iterable, List, Optional

from replaytrader.backtesting.models import EquityPoint, Position, PriceBar


class CapitalAccountant:
    """Manages mark-to-market equity and the equity curve."""

    def __init__(self):
        self.equity_history: List[EquityPoint] = []

    def calculate_unrealized_pnl(self, open_positions: Iterable[Position],
                                 current_price: float) -> float:
        """
        Calculate unrealized PnL for open positions.

        Parameters
        ----------
        open_positions : iterable of Position
            Positions still open
        current_price : float
            Current market price

        Returns
        -------
        float
            Unrealized PnL (0.0 if nothing is open)
        """
        return sum(p.unrealized_pnl(current_price) for p in open_positions)

    def calculate_equity(self, cash: float, open_positions: Iterable[Position],
                         current_price: float) -> float:
        """Cash plus unrealized PnL at the given price."""
        return cash + self.calculate_unrealized_pnl(open_positions, current_price)

    def mark_and_append(self, bar: PriceBar, cash: float,
                        open_positions: Iterable[Position]) -> EquityPoint:
        """
        Mark the portfolio at the bar's close and record it.

        Parameters
        ----------
        bar : PriceBar
            Bar just processed
        cash : float
            Realized cash balance
        open_positions : iterable of Position
            Positions still open after this bar's exits and entries

        Returns
        -------
        EquityPoint
            The point appended to the equity history
        """
        point = EquityPoint(timestamp=bar.timestamp,
                            marked_value=self.calculate_equity(cash, open_positions, bar.close))
        self.equity_history.append(point)
        return point

    @property
    def latest(self) -> Optional[EquityPoint]:
        return self.equity_history[-1] if self.equity_history else None

    def get_equity_series(self) -> List[float]:
        """
        Get equity values as a list.

        Returns
        -------
        list of float
            Equity values over time
        """
        return [point.marked_value for point in self.equity_history]
