import pytest

from replaytrader.backtesting.config import BacktestConfig


@pytest.fixture
def config():
    """Round numbers: 1% risk, 2% stop, 4% target, no notional cap, no costs."""
    return BacktestConfig(
        initial_capital=10000.0,
        position_size_percent=1.0,
        stop_loss_percent=0.02,
        take_profit_percent=0.04,
        transaction_cost_percent=0.0,
        max_concurrent_positions=3,
        risk_per_trade_percent=0.01,
    )
