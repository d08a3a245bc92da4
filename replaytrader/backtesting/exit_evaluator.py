# -*- coding: utf-8 -*-
"""
Exit evaluation for open positions.

Checks each bar's range against a position's stop and target. When a bar
reaches both, the stop wins: the adverse move is assumed to happen first
inside the bar.
"""

from typing import Optional, Tuple

from replaytrader.backtesting.models import (
    DIRECTION_LONG, EXIT_FORCED, EXIT_STOP, EXIT_TARGET, Position, PriceBar
)


class ExitEvaluator:
    """Decides whether and how a position closes on a bar."""

    def stop_hit(self, position: Position, bar: PriceBar) -> bool:
        if position.direction == DIRECTION_LONG:
            return bar.low <= position.stop_price
        return bar.high >= position.stop_price

    def target_hit(self, position: Position, bar: PriceBar) -> bool:
        if position.direction == DIRECTION_LONG:
            return bar.high >= position.target_price
        return bar.low <= position.target_price

    def evaluate(self, position: Position, bar: PriceBar) -> Optional[str]:
        """
        Evaluate if stop loss or take profit was hit on the bar.

        Parameters
        ----------
        position : Position
            Open position
        bar : PriceBar
            Current bar

        Returns
        -------
        str or None
            EXIT_STOP, EXIT_TARGET, or None if the position stays open
        """
        # Stop loss has priority over take profit within the same bar
        if self.stop_hit(position, bar):
            return EXIT_STOP
        if self.target_hit(position, bar):
            return EXIT_TARGET
        return None

    def exit_price(self, position: Position, decision: str) -> float:
        """Fill at the stop or target level itself."""
        if decision == EXIT_STOP:
            return position.stop_price
        if decision == EXIT_TARGET:
            return position.target_price
        raise ValueError(f"No trigger price for exit decision {decision!r}")

    def check_exit(self, position: Position, bar: PriceBar) -> Tuple[Optional[str], Optional[float]]:
        """Return (decision, fill price), or (None, None) if nothing triggered."""
        decision = self.evaluate(position, bar)
        if decision is None:
            return None, None
        return decision, self.exit_price(position, decision)

    def force_close(self, bar: PriceBar) -> Tuple[str, float]:
        """Final-bar close at the bar's close price."""
        return EXIT_FORCED, bar.close
