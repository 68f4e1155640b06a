"""Core package for base classes and exceptions"""

from .base import BaseChartBuilder
from .exceptions import (
    AnalysisError, DataValidationError, InsufficientDataError,
    MissingColumnError, InvalidWeightError, EmptyGroupError,
    InsufficientPaletteError
)

__all__ = [
    # Base classes
    'BaseChartBuilder',
    
    # Exceptions
    'AnalysisError', 'DataValidationError', 'InsufficientDataError',
    'MissingColumnError', 'InvalidWeightError', 'EmptyGroupError',
    'InsufficientPaletteError'
]
