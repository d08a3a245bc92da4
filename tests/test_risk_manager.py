"""
Unit tests for risk-based position sizing.
"""

import pytest

from replaytrader.backtesting.config import BacktestConfig
from replaytrader.backtesting.errors import InvalidRiskInput
from replaytrader.backtesting.risk_manager import RiskManager


class TestPositionSizing:
    def test_risk_based_size(self):
        """1% of 10,000 at risk over a 2.0 stop distance is 50 units."""
        rm = RiskManager(risk_per_trade_percent=0.01, position_size_percent=1.0)

        size = rm.calculate_position_size(10000.0, 100.0, 98.0)

        assert size == pytest.approx(50.0)
        assert size * 2.0 == pytest.approx(100.0)

    def test_notional_cap_wins_when_smaller(self):
        """10% notional cap: 1,000 / 100 = 10 units instead of 50."""
        rm = RiskManager(risk_per_trade_percent=0.01, position_size_percent=0.10)

        size = rm.calculate_position_size(10000.0, 100.0, 98.0)

        assert size == pytest.approx(10.0)
        assert size * 100.0 <= 10000.0 * 0.10 + 1e-9

    def test_short_stop_above_entry(self):
        rm = RiskManager(risk_per_trade_percent=0.01, position_size_percent=1.0)

        assert rm.calculate_position_size(10000.0, 100.0, 102.0) == pytest.approx(50.0)

    @pytest.mark.parametrize("account_value", [0.0, -500.0])
    def test_non_positive_account_rejected(self, account_value):
        rm = RiskManager()

        with pytest.raises(InvalidRiskInput):
            rm.calculate_position_size(account_value, 100.0, 98.0)

    def test_zero_stop_distance_rejected(self):
        rm = RiskManager()

        with pytest.raises(InvalidRiskInput):
            rm.calculate_position_size(10000.0, 100.0, 100.0)

    def test_zero_notional_cap_rejected(self):
        rm = RiskManager(position_size_percent=0.0)

        with pytest.raises(InvalidRiskInput):
            rm.calculate_position_size(10000.0, 100.0, 98.0)

    def test_from_config(self):
        config = BacktestConfig(risk_per_trade_percent=0.02, position_size_percent=0.5)
        rm = RiskManager.from_config(config)

        assert rm.risk_per_trade_percent == 0.02
        assert rm.position_size_percent == 0.5
        assert rm.calculate_risk_amount(5000.0) == pytest.approx(100.0)
