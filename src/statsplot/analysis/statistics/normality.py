"""Normality diagnostics reported alongside the charts"""

import logging
from typing import Dict, Any, Optional, Sequence, Union

import pandas as pd
from scipy import stats

from ...config.settings import NORMALITY_SAMPLE_RANGE
from .labels import format_number

logger = logging.getLogger(__name__)


def normality_message(x: Sequence[float], lab: Optional[str] = None,
                      k: int = 2, output: str = 'message') -> Union[str, Dict[str, Any], None]:
    """
    Shapiro-Wilk test of ``x``

    Parameters:
    -----------
    x : sequence of float
        Sample; missing values are ignored
    lab : str, optional
        Variable name used in the note
    k : int
        Decimal places of the p-value
    output : str
        'message' logs the note and returns its text, 'stats' returns the
        test results

    Returns:
    --------
    str, dict or None
        None when the sample size is outside the supported range
    """
    values = pd.Series(x, dtype=float).dropna()
    lower, upper = NORMALITY_SAMPLE_RANGE

    if not lower <= len(values) <= upper:
        logger.debug(
            f"Skipping Shapiro-Wilk test: {len(values)} observations outside [{lower}, {upper}]"
        )
        return None

    statistic, p_value = stats.shapiro(values)

    if output == 'stats':
        return {'statistic': float(statistic), 'p_value': float(p_value), 'n': len(values)}

    name = lab if lab is not None else 'x'
    note = f"Note: Shapiro-Wilk Normality Test for {name}: p-value = {format_number(p_value, max(k, 3))}"
    logger.info(note)
    return note
