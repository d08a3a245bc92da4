# -*- coding: utf-8 -*-
"""
Process-level settings.

Reads a .env file from the project root (if present) and BACKTEST_*
environment variables, and sets up logging for the package.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from replaytrader.backtesting.config import BacktestConfig


logger = logging.getLogger(__name__)

# Load .env file from project root if it exists
project_root = Path(__file__).parent.parent
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)
    logger.debug(f"Loaded environment variables from {env_file}")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class Settings:
    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None  # No file logging when unset

    # Batch runs
    max_workers: Optional[int] = None  # ThreadPoolExecutor default when unset

    # Default run configuration
    backtest: BacktestConfig = field(default_factory=BacktestConfig)

    def __post_init__(self):
        """Override defaults with environment variables if present."""
        self.log_level = os.getenv("BACKTEST_LOG_LEVEL", self.log_level)
        self.log_file = os.getenv("BACKTEST_LOG_FILE", self.log_file) or None

        if os.getenv("BACKTEST_MAX_WORKERS"):
            self.max_workers = int(os.getenv("BACKTEST_MAX_WORKERS"))

        self.backtest = replace(self.backtest, **BacktestConfig.env_overrides())


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Attach console (and optional file) handlers to the package logger.

    Parameters
    ----------
    settings : Settings or None, optional
        Level and file; read from the environment if omitted

    Returns
    -------
    logging.Logger
        The 'replaytrader' logger
    """
    settings = settings or Settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    package_logger = logging.getLogger("replaytrader")
    package_logger.setLevel(log_level)

    # Replace handlers from an earlier call
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    # File handler
    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger
