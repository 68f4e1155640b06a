"""Custom exceptions"""

class AnalysisError(Exception):
    """Base exception for analysis errors"""
    pass

class DataValidationError(AnalysisError):
    """Exception for data validation errors"""
    pass

class MissingColumnError(DataValidationError):
    """A referenced column is absent from the input table"""
    pass

class InvalidWeightError(DataValidationError):
    """A count/weight value is not a non-negative integer"""
    pass

class InsufficientDataError(AnalysisError):
    """Exception for insufficient data"""
    pass

class EmptyGroupError(InsufficientDataError):
    """A category has no usable observations after filtering"""
    pass

class InsufficientPaletteError(UserWarning):
    """Palette has fewer colours than there are categories.

    Emitted through ``warnings.warn``; the chart is still built with a
    recycled colour set.
    """
    pass
