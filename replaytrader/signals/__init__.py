# -*- coding: utf-8 -*-
"""
Signal interface for the backtesting engine.

Signal producers are external to the engine; this package holds the
standardized record format they emit and its conversion into Signals.
"""

from replaytrader.signals.base import (
    BarHistory,
    BaseSignal,
    STANDARD_SIGNAL_FORMAT,
    validate_signal_record,
    signal_from_record,
    signals_from_records
)

__all__ = [
    'BarHistory',
    'BaseSignal',
    'STANDARD_SIGNAL_FORMAT',
    'validate_signal_record',
    'signal_from_record',
    'signals_from_records'
]
