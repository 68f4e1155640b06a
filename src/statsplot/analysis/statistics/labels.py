"""Label formatting for slices, group sizes and test results"""

import math
from typing import Optional

import numpy as np
import pandas as pd

from ...config.settings import (
    CONDITION_COLUMN, SIGNIFICANCE_THRESHOLDS, NOT_SIGNIFICANT_LABEL
)

SLICE_LABEL_MODES = ('percentage', 'counts', 'both')


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_number(value, k: int = 2) -> str:
    """Fixed-point text with ``k`` decimals; ``NA`` for missing values"""
    if _is_missing(value):
        return 'NA'
    return f"{float(value):.{k}f}"


def format_rounded(value, k: int = 0) -> str:
    """Round to ``k`` decimals and drop trailing zeros (66.67 -> '67' at k=0)"""
    if _is_missing(value):
        return 'NA'
    text = f"{round(float(value), k):.{max(k, 0)}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def format_pvalue(p_value, k: int = 2) -> str:
    """``p = 0.03`` style text; very small values read ``p < 0.001``"""
    if _is_missing(p_value):
        return 'p = NA'
    if p_value < 0.001:
        return 'p < 0.001'
    return f"p = {format_number(p_value, max(k, 3))}"


def format_conf_int(low, high, conf_level: float = 0.95, k: int = 2) -> str:
    """``CI95% [low, high]``"""
    return f"CI{format_rounded(conf_level * 100)}% [{format_number(low, k)}, {format_number(high, k)}]"


def format_slice_label(count: int, perc: float, mode: str = 'percentage',
                       perc_k: int = 0) -> str:
    """
    Text shown inside a pie slice

    Args:
        count: Number of observations in the slice
        perc: Percentage of the group total
        mode: 'percentage', 'counts' or 'both'
        perc_k: Decimal places for the percentage

    Returns:
        The label text
    """
    if mode == 'percentage':
        return f"{format_rounded(perc, perc_k)}%"
    if mode == 'counts':
        return f"n = {int(count)}"
    if mode == 'both':
        return f"n = {int(count)}\n({format_rounded(perc, perc_k)}%)"
    raise ValueError(f"Unknown slice label '{mode}'. Use one of {SLICE_LABEL_MODES}")


def add_slice_labels(summary: pd.DataFrame, mode: str = 'percentage',
                     perc_k: int = 0) -> pd.DataFrame:
    """Return a copy of ``summary`` with a ``slice_label`` column"""
    if mode not in SLICE_LABEL_MODES:
        raise ValueError(f"Unknown slice label '{mode}'. Use one of {SLICE_LABEL_MODES}")

    labelled = summary.copy()
    labelled['slice_label'] = [
        format_slice_label(count, perc, mode, perc_k)
        for count, perc in zip(labelled['counts'], labelled['perc'])
    ]
    return labelled


def first_row_only(frame: pd.DataFrame, column: str,
                   by: str = CONDITION_COLUMN) -> pd.Series:
    """
    Keep ``column`` on the first row of every ``by`` group, NaN elsewhere
    """
    position = frame.groupby(by, observed=True, sort=False).cumcount()
    return frame[column].where(position == 0)


def group_size_labels(summary: pd.DataFrame,
                      by: str = CONDITION_COLUMN) -> pd.DataFrame:
    """
    Attach ``total_n`` and a ``(n = <total>)`` label carried by one row per group

    Returns a copy of ``summary``; every group has exactly one non-null
    ``condition_n_label``.
    """
    labelled = summary.copy()
    labelled['total_n'] = (
        labelled.groupby(by, observed=True)['counts'].transform('sum').astype(np.int64)
    )
    labelled['condition_n_label'] = [f"(n = {total})" for total in labelled['total_n']]
    labelled['condition_n_label'] = first_row_only(labelled, 'condition_n_label', by)
    return labelled


def significance_stars(p_value: Optional[float]) -> str:
    """Map a p-value to ``***``, ``**``, ``*`` or ``ns``"""
    if _is_missing(p_value):
        return NOT_SIGNIFICANT_LABEL
    for threshold, label in SIGNIFICANCE_THRESHOLDS:
        if p_value < threshold:
            return label
    return NOT_SIGNIFICANT_LABEL
