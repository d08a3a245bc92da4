"""Bar and signal builders shared by the backtesting tests."""

from replaytrader.backtesting.models import PriceBar, Signal


def make_bar(timestamp, close, high=None, low=None, open_=None, volume=1000.0):
    """Bar around a close price; high/low default to the open/close envelope."""
    open_ = close if open_ is None else open_
    high = max(open_, close) if high is None else high
    low = min(open_, close) if low is None else low
    return PriceBar(timestamp=timestamp, open=open_, high=high, low=low, close=close, volume=volume)


def bars_from_closes(closes, start=0):
    """Flat bars (open == high == low == close) at consecutive integer timestamps."""
    return [make_bar(start + i, close) for i, close in enumerate(closes)]


def long_signal(timestamp, confidence=0.8, reference_price=None):
    return Signal(timestamp=timestamp, direction='long', confidence=confidence,
                  reference_price=reference_price)


def short_signal(timestamp, confidence=0.8, reference_price=None):
    return Signal(timestamp=timestamp, direction='short', confidence=confidence,
                  reference_price=reference_price)
