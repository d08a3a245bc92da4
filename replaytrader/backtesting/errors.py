# -*- coding: utf-8 -*-
"""
Backtest error taxonomy.

Configuration and input errors abort a run. Invalid risk input is raised by
the risk manager and folded into the rejected signals by the engine.
Invariant violations indicate a bug in the simulation itself.
"""


class BacktestError(Exception):
    """Base class for all backtest errors."""


class InvalidConfiguration(BacktestError, ValueError):
    """Configuration failed validation before any bar was processed."""


class InputError(BacktestError, ValueError):
    """Price stream is unusable."""


class UnorderedInputError(InputError):
    """Bar timestamp did not strictly increase."""


class MalformedBarError(InputError):
    """Bar violates the OHLCV relationships."""


class InvalidRiskInput(BacktestError, ValueError):
    """Position cannot be sized from the given account state and stop."""


class InvariantViolation(BacktestError, RuntimeError):
    """Internal state is inconsistent."""
