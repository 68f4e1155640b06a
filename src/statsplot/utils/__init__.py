"""Utilities package"""

from .logging.logger import (
    StatsPlotLogger, ContextualLogger, get_logger, configure_logging,
    log_function_call
)

__all__ = [
    # Logging
    'StatsPlotLogger', 'ContextualLogger', 'get_logger',
    'configure_logging', 'log_function_call'
]
