"""Base classes and interfaces"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Sequence
import pandas as pd

from .exceptions import MissingColumnError


class BaseChartBuilder(ABC):
    """Base class for the statistical chart builders"""
    
    def __init__(self, name: str):
        self.name = name
        self.results: Dict[str, Any] = {}
    
    @abstractmethod
    def build(self, data: pd.DataFrame):
        """Build the chart specification for ``data``"""
        pass
    
    def validate_input(self, data: pd.DataFrame,
                       required_columns: Sequence[Optional[str]]) -> None:
        """Validate that every referenced column exists in ``data``"""
        if not isinstance(data, pd.DataFrame):
            raise TypeError(f"{self.name}: expected a pandas DataFrame, got {type(data).__name__}")
        missing = [col for col in required_columns
                   if col is not None and col not in data.columns]
        if missing:
            raise MissingColumnError(
                f"{self.name}: Missing columns {missing}. "
                f"Available columns: {list(data.columns)}"
            )
