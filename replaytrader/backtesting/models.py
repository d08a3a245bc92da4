# -*- coding: utf-8 -*-
"""
Data model for the backtesting engine.

Bars, signals, positions, closed trades, equity points and the run result.
Timestamps can be any orderable, hashable value (epoch ints, datetimes,
pandas Timestamps) as long as one run uses a single kind.
"""

from collections import Counter
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from replaytrader.backtesting.errors import MalformedBarError


# Directions
DIRECTION_LONG = 'long'
DIRECTION_SHORT = 'short'
DIRECTIONS = (DIRECTION_LONG, DIRECTION_SHORT)

# Position statuses
STATUS_OPEN = 'Open'
STATUS_CLOSED_BY_STOP = 'ClosedByStop'
STATUS_CLOSED_BY_TARGET = 'ClosedByTarget'
STATUS_CLOSED_FORCED = 'ClosedForced'

# Exit decisions / trade close reasons
EXIT_STOP = 'Stop'
EXIT_TARGET = 'Target'
EXIT_FORCED = 'ClosedForced'

CLOSE_STATUS_BY_REASON = {
    EXIT_STOP: STATUS_CLOSED_BY_STOP,
    EXIT_TARGET: STATUS_CLOSED_BY_TARGET,
    EXIT_FORCED: STATUS_CLOSED_FORCED,
}

# Signal rejection reasons
REJECT_CAPACITY_EXCEEDED = 'CapacityExceeded'
REJECT_INVALID_RISK_INPUT = 'InvalidRiskInput'
REJECT_NO_MATCHING_BAR = 'NoMatchingBar'
REJECT_INVALID_SIGNAL = 'InvalidSignal'


def direction_sign(direction: str) -> int:
    """Return +1 for long and -1 for short."""
    return 1 if direction == DIRECTION_LONG else -1


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV observation."""

    timestamp: Any
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def validate(self) -> 'PriceBar':
        """
        Check the OHLCV relationships.

        Returns
        -------
        PriceBar
            The bar itself, for chaining

        Raises
        ------
        MalformedBarError
            If high/low do not bound open/close or volume is negative
        """
        if self.high < max(self.open, self.close):
            raise MalformedBarError(
                f"Bar {self.timestamp}: high {self.high} below max(open, close)"
            )
        if self.low > min(self.open, self.close):
            raise MalformedBarError(
                f"Bar {self.timestamp}: low {self.low} above min(open, close)"
            )
        if self.volume < 0:
            raise MalformedBarError(f"Bar {self.timestamp}: negative volume {self.volume}")
        return self


@dataclass(frozen=True)
class Signal:
    """Directional entry request produced outside the engine."""

    timestamp: Any
    direction: str
    confidence: float = 1.0
    reference_price: Optional[float] = None

    def is_valid(self) -> bool:
        return self.direction in DIRECTIONS and 0.0 <= self.confidence <= 1.0


@dataclass
class Position:
    """Open position. Mutated only by the position manager."""

    id: int
    direction: str
    entry_time: Any
    entry_price: float
    size: float
    stop_price: float
    target_price: float
    status: str = STATUS_OPEN
    confidence: float = 1.0
    reference_price: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_OPEN

    def unrealized_pnl(self, price: float) -> float:
        return direction_sign(self.direction) * (price - self.entry_price) * self.size


@dataclass(frozen=True)
class Trade:
    """Immutable record of a closed position."""

    trade_id: int
    entry_time: Any
    entry_price: float
    exit_time: Any
    exit_price: float
    direction: str
    size: float
    gross_pnl: float
    costs: float
    net_pnl: float
    close_reason: str
    confidence: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EquityPoint:
    timestamp: Any
    marked_value: float


@dataclass(frozen=True)
class RejectedSignal:
    """A signal the engine refused to act on, with the reason."""

    signal: Signal
    reason: str
    detail: str = ''


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate statistics over one run. Rates and drawdown are fractions."""

    total_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    net_profit: float = 0.0
    winning_trades: int = 0
    losing_trades: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    average_trade: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0
    total_return: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return asdict(self)


@dataclass
class BacktestResult:
    """Everything a run produces."""

    trades: List[Trade] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    rejected_signals: List[RejectedSignal] = field(default_factory=list)

    @property
    def final_equity(self) -> Optional[float]:
        if not self.equity_curve:
            return None
        return self.equity_curve[-1].marked_value

    def rejection_counts(self) -> Dict[str, int]:
        """Count rejected signals by reason."""
        return dict(Counter(r.reason for r in self.rejected_signals))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trades': [t.to_dict() for t in self.trades],
            'equity_curve': [(p.timestamp, p.marked_value) for p in self.equity_curve],
            'metrics': self.metrics.to_dict(),
            'rejected_signals': self.rejection_counts(),
        }
