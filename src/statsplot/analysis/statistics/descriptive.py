"""Descriptive statistics functions"""

import pandas as pd
import numpy as np
from typing import Dict, Optional

from ...core.exceptions import EmptyGroupError
from ...config.settings import MAIN_COLUMN

def calculate_basic_statistics(data: pd.Series,
                             name: Optional[str] = None,
                             include_advanced: bool = False) -> Dict[str, float]:
    """
    Calculate comprehensive descriptive statistics

    Parameters:
    -----------
    data : pd.Series
        Input data series
    name : str, optional
        Prefix for statistic names
    include_advanced : bool, default False
        Whether to include skewness and kurtosis

    Returns:
    --------
    Dict[str, float]
        Dictionary of statistics
    """
    clean_data = pd.Series(data, dtype=float).dropna()

    if len(clean_data) == 0:
        return {}

    prefix = f"{name}_" if name else ""

    stats = {
        f'{prefix}count': len(clean_data),
        f'{prefix}mean': clean_data.mean(),
        f'{prefix}std': clean_data.std(),
        f'{prefix}min': clean_data.min(),
        f'{prefix}q25': clean_data.quantile(0.25),
        f'{prefix}median': clean_data.median(),
        f'{prefix}q75': clean_data.quantile(0.75),
        f'{prefix}max': clean_data.max(),
    }

    if include_advanced:
        stats[f'{prefix}skewness'] = clean_data.skew()
        stats[f'{prefix}kurtosis'] = clean_data.kurtosis()

    return stats

def calculate_centrality(values, centrality: str = 'mean') -> float:
    """Mean or median of ``values`` ignoring missing entries"""
    clean = pd.Series(values, dtype=float).dropna()
    if centrality == 'mean':
        return float(clean.mean())
    if centrality == 'median':
        return float(clean.median())
    raise ValueError(f"Unknown centrality '{centrality}'. Use 'mean' or 'median'")

def summarize_proportions(frame: pd.DataFrame,
                          by: Optional[str] = None) -> pd.DataFrame:
    """
    Count observations per category and convert them to percentages

    Parameters:
    -----------
    frame : pd.DataFrame
        Normalized table with a categorical ``main`` column
    by : str, optional
        Grouping column; percentages are normalized to 100 within each
        of its levels

    Returns:
    --------
    pd.DataFrame
        One row per observed (group, category) pair with ``counts`` and
        ``perc``, sorted by category in descending label order
    """
    keys = [MAIN_COLUMN] if by is None else [by, MAIN_COLUMN]

    summary = (
        frame.groupby(keys, observed=True)
        .size()
        .rename('counts')
        .reset_index()
    )
    # Empty groups produce no rows at all
    summary = summary[summary['counts'] > 0].reset_index(drop=True)

    if by is None:
        totals = summary['counts'].sum()
    else:
        totals = summary.groupby(by, observed=True)['counts'].transform('sum')

    summary['counts'] = summary['counts'].astype(np.int64)
    summary['perc'] = summary['counts'] / totals * 100

    return summary.sort_values(
        MAIN_COLUMN, ascending=False, kind='mergesort'
    ).reset_index(drop=True)

def summarize_ranks(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Average ``x`` per label ``y`` and rank the averages

    Labels are ordered by ascending mean; ties keep label order. ``rank``
    runs from 1 to N and ``percent_rank`` is the truncated average rank
    over N, times 100.

    Raises:
    -------
    EmptyGroupError
        If a label has no non-missing ``x`` value
    """
    grouped = frame.groupby('y', observed=True, sort=True)['x']

    valid_counts = grouped.count()
    empty = valid_counts[valid_counts == 0]
    if len(empty):
        raise EmptyGroupError(
            f"Labels without usable observations: {[str(label) for label in empty.index]}"
        )

    ranked = grouped.mean().reset_index()
    ranked = ranked.sort_values('x', kind='mergesort').reset_index(drop=True)

    n_labels = len(ranked)
    ranked['y'] = pd.Categorical(ranked['y'], categories=list(ranked['y']))
    ranked['percent_rank'] = np.trunc(ranked['x'].rank(method='average')) / n_labels * 100
    ranked['rank'] = np.arange(1, n_labels + 1)

    return ranked

def calculate_summary_by_group(df: pd.DataFrame,
                              value_col: str,
                              group_col: str) -> pd.DataFrame:
    """
    Calculate summary statistics by groups

    Parameters:
    -----------
    df : pd.DataFrame
        Input dataframe
    value_col : str
        Column to summarize
    group_col : str
        Column to group by

    Returns:
    --------
    pd.DataFrame
        Summary statistics by group
    """
    return df.groupby(group_col, observed=True)[value_col].agg([
        'count', 'mean', 'std', 'min', 'median', 'max'
    ]).round(3)
