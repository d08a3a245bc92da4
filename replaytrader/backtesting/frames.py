# -*- coding: utf-8 -*-
"""
pandas adapters.

Convert OHLCV DataFrames and signal tables into engine inputs, and trades and
equity curves back into DataFrame/Series for analysis.
"""

from typing import List, Sequence

import pandas as pd

from replaytrader.backtesting.models import EquityPoint, PriceBar, Signal, Trade


OHLCV_COLS = ["open", "high", "low", "close", "volume"]
TIMESTAMP_COLS = ("timestamp", "open_time")

TRADE_COLS = [
    "trade_id", "entry_time", "entry_price", "exit_time", "exit_price", "direction",
    "size", "gross_pnl", "costs", "net_pnl", "close_reason", "confidence",
]


def _timestamps(df: pd.DataFrame) -> pd.Index:
    for col in TIMESTAMP_COLS:
        if col in df.columns:
            return pd.Index(df[col])
    return df.index


def bars_from_frame(df: pd.DataFrame) -> List[PriceBar]:
    """
    Build price bars from an OHLCV DataFrame.

    Timestamps come from a 'timestamp' or 'open_time' column when present,
    otherwise from the index. A missing 'volume' column means zero volume.

    Parameters
    ----------
    df : pd.DataFrame
        Columns open, high, low, close and optionally volume

    Returns
    -------
    list of PriceBar
        In frame order; ordering is checked by the engine, not here
    """
    required_cols = ["open", "high", "low", "close"]
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}. Found columns: {list(df.columns)}")

    volume = df["volume"] if "volume" in df.columns else pd.Series(0.0, index=df.index)
    timestamps = _timestamps(df)

    return [
        PriceBar(timestamp=ts, open=float(o), high=float(h), low=float(l),
                 close=float(c), volume=float(v))
        for ts, o, h, l, c, v in zip(timestamps, df["open"], df["high"], df["low"],
                                     df["close"], volume)
    ]


def signals_from_frame(df: pd.DataFrame) -> List[Signal]:
    """
    Build signals from a DataFrame with direction, confidence and optionally
    price/reference_price columns. Timestamps as in bars_from_frame.
    """
    if "direction" not in df.columns:
        raise ValueError(f"DataFrame missing 'direction' column. Found columns: {list(df.columns)}")

    confidence = df["confidence"] if "confidence" in df.columns else pd.Series(1.0, index=df.index)
    if "reference_price" in df.columns:
        price = df["reference_price"]
    elif "price" in df.columns:
        price = df["price"]
    else:
        price = pd.Series(None, index=df.index, dtype=object)

    signals = []
    for ts, direction, conf, ref in zip(_timestamps(df), df["direction"], confidence, price):
        signals.append(Signal(
            timestamp=ts,
            direction=str(direction).lower(),
            confidence=float(conf),
            reference_price=None if pd.isna(ref) else float(ref),
        ))
    return signals


def trades_to_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    """Convert the trade ledger to a DataFrame (empty frame keeps the columns)."""
    if not trades:
        return pd.DataFrame(columns=TRADE_COLS)
    return pd.DataFrame([t.to_dict() for t in trades], columns=TRADE_COLS)


def equity_to_series(equity_curve: Sequence[EquityPoint]) -> pd.Series:
    """Equity curve as a float Series indexed by timestamp."""
    return pd.Series(
        [p.marked_value for p in equity_curve],
        index=pd.Index([p.timestamp for p in equity_curve], name="timestamp"),
        name="equity",
        dtype=float,
    )
