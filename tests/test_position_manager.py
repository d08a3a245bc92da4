"""
Unit tests for opening/closing positions, costs and cash bookkeeping.
"""

from dataclasses import replace

import pytest

from replaytrader.backtesting.errors import InvariantViolation
from replaytrader.backtesting.models import (
    EXIT_FORCED, EXIT_STOP, EXIT_TARGET, REJECT_CAPACITY_EXCEEDED,
    REJECT_INVALID_RISK_INPUT, REJECT_INVALID_SIGNAL, STATUS_CLOSED_BY_STOP,
    STATUS_CLOSED_BY_TARGET, STATUS_OPEN, Position, RejectedSignal, Signal
)
from replaytrader.backtesting.position_manager import PositionManager
from tests.helpers import long_signal, make_bar, short_signal


class TestOpen:
    def test_long_levels_and_size(self, config):
        pm = PositionManager(config)

        position = pm.try_open(long_signal(0, confidence=0.7), make_bar(0, 100.0), 10000.0)

        assert isinstance(position, Position)
        assert position.status == STATUS_OPEN
        assert position.entry_price == 100.0
        assert position.stop_price == pytest.approx(98.0)
        assert position.target_price == pytest.approx(104.0)
        assert position.size == pytest.approx(50.0)
        assert position.confidence == 0.7
        assert pm.open_positions == [position]

    def test_short_levels(self, config):
        pm = PositionManager(config)

        position = pm.try_open(short_signal(0), make_bar(0, 100.0), 10000.0)

        assert position.stop_price == pytest.approx(102.0)
        assert position.target_price == pytest.approx(96.0)

    def test_entry_at_bar_close_not_reference_price(self, config):
        pm = PositionManager(config)

        position = pm.try_open(long_signal(0, reference_price=95.0), make_bar(0, 100.0), 10000.0)

        assert position.entry_price == 100.0
        assert position.reference_price == 95.0

    def test_capacity_rejection(self, config):
        pm = PositionManager(replace(config, max_concurrent_positions=1))
        bar = make_bar(0, 100.0)

        first = pm.try_open(long_signal(0), bar, 10000.0)
        second = pm.try_open(long_signal(0), bar, 10000.0)

        assert isinstance(first, Position)
        assert isinstance(second, RejectedSignal)
        assert second.reason == REJECT_CAPACITY_EXCEEDED
        assert len(pm.open_positions) == 1

    def test_invalid_risk_input_rejection(self, config):
        pm = PositionManager(config)

        outcome = pm.try_open(long_signal(0), make_bar(0, 100.0), 0.0)

        assert isinstance(outcome, RejectedSignal)
        assert outcome.reason == REJECT_INVALID_RISK_INPUT
        assert pm.open_positions == []

    @pytest.mark.parametrize("signal", [
        Signal(timestamp=0, direction='flat'),
        Signal(timestamp=0, direction='long', confidence=1.5),
    ])
    def test_invalid_signal_rejection(self, config, signal):
        pm = PositionManager(config)

        outcome = pm.try_open(signal, make_bar(0, 100.0), 10000.0)

        assert outcome.reason == REJECT_INVALID_SIGNAL

    def test_ids_increase(self, config):
        pm = PositionManager(config)
        bar = make_bar(0, 100.0)

        ids = [pm.try_open(long_signal(0), bar, 10000.0).id for _ in range(3)]

        assert ids == [1, 2, 3]


class TestClose:
    def test_long_target_pnl_and_cash(self, config):
        pm = PositionManager(config)
        position = pm.try_open(long_signal(0), make_bar(0, 100.0), 10000.0)

        trade = pm.close(position, 104.0, 1, EXIT_TARGET)

        assert trade.gross_pnl == pytest.approx(200.0)
        assert trade.costs == 0.0
        assert trade.net_pnl == pytest.approx(200.0)
        assert trade.close_reason == EXIT_TARGET
        assert position.status == STATUS_CLOSED_BY_TARGET
        assert pm.cash == pytest.approx(10200.0)
        assert pm.open_positions == []
        assert pm.ledger == [trade]

    def test_short_stop_pnl_negated(self, config):
        pm = PositionManager(config)
        position = pm.try_open(short_signal(0), make_bar(0, 100.0), 10000.0)

        trade = pm.close(position, 102.0, 1, EXIT_STOP)

        assert trade.gross_pnl == pytest.approx(-100.0)
        assert position.status == STATUS_CLOSED_BY_STOP
        assert pm.cash == pytest.approx(9900.0)

    def test_costs_on_both_legs(self, config):
        pm = PositionManager(replace(config, transaction_cost_percent=0.001))
        position = pm.try_open(long_signal(0), make_bar(0, 100.0), 10000.0)

        trade = pm.close(position, 104.0, 1, EXIT_TARGET)

        # 50 units: entry notional 5000, exit notional 5200
        assert trade.costs == pytest.approx(5.0 + 5.2)
        assert trade.net_pnl == pytest.approx(200.0 - 10.2)
        assert pm.cash == pytest.approx(10000.0 + 200.0 - 10.2)

    def test_cash_untouched_while_open(self, config):
        pm = PositionManager(replace(config, transaction_cost_percent=0.001))

        pm.try_open(long_signal(0), make_bar(0, 100.0), 10000.0)

        assert pm.cash == 10000.0

    def test_closing_twice_is_invariant_violation(self, config):
        pm = PositionManager(config)
        position = pm.try_open(long_signal(0), make_bar(0, 100.0), 10000.0)
        pm.close(position, 101.0, 1, EXIT_FORCED)

        with pytest.raises(InvariantViolation):
            pm.close(position, 101.0, 2, EXIT_FORCED)

    def test_unknown_reason_is_invariant_violation(self, config):
        pm = PositionManager(config)
        position = pm.try_open(long_signal(0), make_bar(0, 100.0), 10000.0)

        with pytest.raises(InvariantViolation):
            pm.close(position, 101.0, 1, 'Manual')
