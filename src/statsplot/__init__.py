"""
statsplot - statistical pie and dot charts

Charts come back as immutable ChartSpec objects carrying the summary
tables and test results; ``.draw()`` renders them with matplotlib.
"""

__version__ = "1.0.0"

from .core.exceptions import (
    AnalysisError, DataValidationError, InsufficientDataError,
    MissingColumnError, InvalidWeightError, EmptyGroupError,
    InsufficientPaletteError
)
from .visualization import ChartSpec, Layer, ggpiestats, ggdotplotstats
from .utils.logging import configure_logging, get_logger

__all__ = [
    'ggpiestats', 'ggdotplotstats', 'ChartSpec', 'Layer',
    'configure_logging', 'get_logger',
    'AnalysisError', 'DataValidationError', 'InsufficientDataError',
    'MissingColumnError', 'InvalidWeightError', 'EmptyGroupError',
    'InsufficientPaletteError',
]
