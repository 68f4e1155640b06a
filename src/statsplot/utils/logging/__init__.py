"""Logging helpers"""

from .logger import (
    StatsPlotLogger, ContextualLogger, get_logger, configure_logging,
    log_function_call
)
