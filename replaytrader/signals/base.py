# -*- coding: utf-8 -*-
"""
Base signal interface and standardized signal format.

Signal producers (models, rules, inference services) live outside the
backtesting engine. This module defines the record format they emit and
converts those records into engine Signals.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from replaytrader.backtesting.models import DIRECTION_LONG, DIRECTION_SHORT, PriceBar, Signal


# Standardized signal format structure
STANDARD_SIGNAL_FORMAT = {
    'direction': int,      # -1 (short), 0 (flat), 1 (long)
    'strength': float,     # 0.0 to 1.0 (confidence/strength)
    'timestamp': Any,      # Timestamp of the bar the signal is for
    'index': int,          # Index position in data
    'metadata': dict,      # Producer-specific metadata
    'source': str          # Signal producer name
}

DIRECTION_BY_CODE = {1: DIRECTION_LONG, -1: DIRECTION_SHORT}


def validate_signal_record(record: Dict[str, Any]) -> bool:
    """
    Validate that a record conforms to the standard format.

    Parameters
    ----------
    record : dict
        Signal record to validate.

    Returns
    -------
    bool
        True if the record is valid.

    Raises
    ------
    ValueError
        If the record is invalid (missing required keys, wrong types, etc.)
    """
    # Check required keys
    missing_keys = [key for key in STANDARD_SIGNAL_FORMAT if key not in record]
    if missing_keys:
        raise ValueError(f"Signal missing required keys: {missing_keys}")

    # Validate direction
    if record['direction'] not in (-1, 0, 1):
        raise ValueError(f"Invalid direction: {record['direction']}. Must be -1, 0, or 1.")

    # Validate strength
    if isinstance(record['strength'], bool) or not isinstance(record['strength'], (int, float)):
        raise ValueError(f"Invalid strength type: {type(record['strength'])}. Must be numeric.")
    if record['strength'] < 0.0 or record['strength'] > 1.0:
        raise ValueError(f"Invalid strength value: {record['strength']}. Must be between 0.0 and 1.0.")

    # Validate index
    if isinstance(record['index'], bool) or not isinstance(record['index'], int):
        raise ValueError(f"Invalid index type: {type(record['index'])}. Must be integer.")

    # Validate metadata
    if not isinstance(record['metadata'], dict):
        raise ValueError(f"Invalid metadata type: {type(record['metadata'])}. Must be dict.")

    # Validate source
    if not isinstance(record['source'], str):
        raise ValueError(f"Invalid source type: {type(record['source'])}. Must be string.")

    return True


def signal_from_record(record: Dict[str, Any]) -> Optional[Signal]:
    """
    Convert a standard signal record into an engine Signal.

    Flat records (direction 0) return None. The reference price is taken
    from metadata['entry_price'], falling back to record['price'].
    """
    validate_signal_record(record)

    direction = DIRECTION_BY_CODE.get(record['direction'])
    if direction is None:
        return None

    reference_price = record['metadata'].get('entry_price', record.get('price'))
    return Signal(
        timestamp=record['timestamp'],
        direction=direction,
        confidence=float(record['strength']),
        reference_price=None if reference_price is None else float(reference_price),
    )


def signals_from_records(records: Iterable[Dict[str, Any]]) -> List[Signal]:
    """Convert records, dropping flat ones."""
    signals = []
    for record in records:
        signal = signal_from_record(record)
        if signal is not None:
            signals.append(signal)
    return signals


class BarHistory(Sequence[PriceBar]):
    """
    Read-only window over the first `length` bars of a stream.

    Indexing and len() never reach past the window, and no bars are copied
    unless a slice is requested.
    """

    def __init__(self, bars: Sequence[PriceBar], length: int):
        self._bars = bars
        self._length = length

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, key):
        positions = range(self._length)[key]
        if isinstance(key, slice):
            return [self._bars[j] for j in positions]
        return self._bars[positions]


class BaseSignal(ABC):
    """
    Abstract base class for signal producers.

    Producers consume market data and output standardized signal records.
    They have no knowledge of positions, money, stop-loss, take-profit or
    account balance. Any internal state is passed in and returned.
    """

    def __init__(self, name: str):
        """
        Initialize signal producer.

        Parameters
        ----------
        name : str
            Name of the producer (e.g., 'momentum', 'onnx').
        """
        self.name = name

    @abstractmethod
    def generate_signal(self, bar: PriceBar, history: Sequence[PriceBar], index: int,
                        state: Optional[Dict[str, Any]] = None
                        ) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        """
        Generate a standardized signal record for one bar.

        Parameters
        ----------
        bar : PriceBar
            Bar being analyzed. The signal, if any, is for this bar's timestamp.
        history : sequence of PriceBar
            Bars before this one (no look-ahead), as a BarHistory view.
        index : int
            Position of the bar in the stream.
        state : dict or None, optional
            Internal state from the previous call.

        Returns
        -------
        tuple of (dict, dict or None)
            - signal record in STANDARD_SIGNAL_FORMAT
            - updated state (or None if stateless)
        """

    def create_flat_signal(self, timestamp: Any, index: int,
                           metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create a standardized flat (no signal) record.

        Parameters
        ----------
        timestamp : Any
            Timestamp of the signal.
        index : int
            Index position in data.
        metadata : dict or None, optional
            Optional metadata to include in signal.

        Returns
        -------
        dict
            Standardized flat signal dictionary.
        """
        return {
            'direction': 0,
            'strength': 0.0,
            'timestamp': timestamp,
            'index': index,
            'metadata': metadata or {},
            'source': self.name
        }

    def generate_signals(self, bars: Sequence[PriceBar]) -> List[Signal]:
        """Walk the bars in order and collect the non-flat signals."""
        state: Optional[Dict[str, Any]] = None
        records = []
        for i, bar in enumerate(bars):
            record, state = self.generate_signal(bar, BarHistory(bars, i), i, state)
            records.append(record)
        return signals_from_records(records)
