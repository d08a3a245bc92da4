# -*- coding: utf-8 -*-
"""
Backtesting configuration schema.

Defines all configurable parameters for one backtest run. Every percentage
is a fraction (0.02 == 2%).
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional

from replaytrader.backtesting.errors import InvalidConfiguration


# Environment variable -> field name
ENV_FIELDS = {
    'BACKTEST_INITIAL_CAPITAL': 'initial_capital',
    'BACKTEST_POSITION_SIZE_PERCENT': 'position_size_percent',
    'BACKTEST_STOP_LOSS_PERCENT': 'stop_loss_percent',
    'BACKTEST_TAKE_PROFIT_PERCENT': 'take_profit_percent',
    'BACKTEST_TRANSACTION_COST_PERCENT': 'transaction_cost_percent',
    'BACKTEST_MAX_CONCURRENT_POSITIONS': 'max_concurrent_positions',
    'BACKTEST_RISK_PER_TRADE_PERCENT': 'risk_per_trade_percent',
}


@dataclass(frozen=True)
class BacktestConfig:
    """Configuration for backtesting engine."""

    # Account
    initial_capital: float = 10000.0

    # Position Sizing
    position_size_percent: float = 0.10  # Max notional per position as fraction of account value
    risk_per_trade_percent: float = 0.01  # Risk per trade as fraction (0.01 = 1%)
    max_concurrent_positions: int = 3

    # Exits
    stop_loss_percent: float = 0.02  # Stop distance from entry
    take_profit_percent: float = 0.04  # Target distance from entry

    # Execution
    transaction_cost_percent: float = 0.001  # Charged on entry and exit notional

    def validate(self) -> 'BacktestConfig':
        """
        Validate the configuration.

        Returns
        -------
        BacktestConfig
            The config itself, for chaining

        Raises
        ------
        InvalidConfiguration
            If capital is not positive, a percentage is out of range or the
            concurrency cap is below one
        """
        if not self.initial_capital > 0:
            raise InvalidConfiguration(f"initial_capital must be > 0, got {self.initial_capital}")

        for name in ('position_size_percent', 'stop_loss_percent', 'take_profit_percent',
                     'transaction_cost_percent', 'risk_per_trade_percent'):
            value = getattr(self, name)
            if not value >= 0:
                raise InvalidConfiguration(f"{name} must be >= 0, got {value}")

        if not self.stop_loss_percent > 0:
            raise InvalidConfiguration(f"stop_loss_percent must be > 0, got {self.stop_loss_percent}")
        if not self.take_profit_percent > 0:
            raise InvalidConfiguration(f"take_profit_percent must be > 0, got {self.take_profit_percent}")
        if not 0 < self.risk_per_trade_percent <= 1:
            raise InvalidConfiguration(
                f"risk_per_trade_percent must be in (0, 1], got {self.risk_per_trade_percent}"
            )
        if self.max_concurrent_positions < 1:
            raise InvalidConfiguration(
                f"max_concurrent_positions must be >= 1, got {self.max_concurrent_positions}"
            )
        return self

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'BacktestConfig':
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    @staticmethod
    def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Field values set through BACKTEST_* environment variables."""
        environ = os.environ if environ is None else environ

        overrides: Dict[str, Any] = {}
        for env_name, field_name in ENV_FIELDS.items():
            raw = environ.get(env_name)
            if raw is None or raw == '':
                continue
            try:
                if field_name == 'max_concurrent_positions':
                    overrides[field_name] = int(raw)
                else:
                    overrides[field_name] = float(raw)
            except ValueError as e:
                raise InvalidConfiguration(f"{env_name}={raw!r} is not a number") from e

        return overrides

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'BacktestConfig':
        """Create config from BACKTEST_* environment variables."""
        return cls(**cls.env_overrides(environ))
