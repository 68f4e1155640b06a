"""Column selection and count expansion for chart inputs"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from ...core.exceptions import (
    DataValidationError, EmptyGroupError, InvalidWeightError, MissingColumnError
)
from ...config.settings import MAIN_COLUMN, CONDITION_COLUMN, COUNTS_COLUMN

logger = logging.getLogger(__name__)


def validate_columns_exist(df: pd.DataFrame, required_columns: List[str]) -> None:
    """
    Validate that required columns exist in dataframe

    Parameters:
    -----------
    df : pd.DataFrame
        Input dataframe
    required_columns : List[str]
        List of required column names

    Raises:
    -------
    MissingColumnError
        If any required columns are missing
    """
    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        available = list(df.columns)
        raise MissingColumnError(
            f"Missing required columns: {missing}. "
            f"Available columns: {available}"
        )


def select_columns(data: pd.DataFrame, main: str,
                   condition: Optional[str] = None,
                   counts: Optional[str] = None) -> pd.DataFrame:
    """
    Extract the referenced columns under canonical names

    Parameters:
    -----------
    data : pd.DataFrame
        Input table
    main : str
        Column holding the main categorical variable
    condition : str, optional
        Column holding the grouping variable
    counts : str, optional
        Column holding integer multiplicities

    Returns:
    --------
    pd.DataFrame
        Copy with columns ``main`` and, when given, ``condition`` and ``counts``
    """
    mapping = {MAIN_COLUMN: main}
    if condition is not None:
        mapping[CONDITION_COLUMN] = condition
    if counts is not None:
        mapping[COUNTS_COLUMN] = counts

    validate_columns_exist(data, list(mapping.values()))

    return pd.DataFrame(
        {name: data[source].reset_index(drop=True) for name, source in mapping.items()}
    )


def validate_weights(weights: pd.Series) -> np.ndarray:
    """
    Check that every weight is a non-negative integer

    Integer-valued floats are accepted. Returns the weights as int64.

    Raises:
    -------
    InvalidWeightError
        On missing, negative, fractional or non-numeric weights
    """
    if pd.api.types.is_bool_dtype(weights) or not pd.api.types.is_numeric_dtype(weights):
        raise InvalidWeightError(
            f"Count column must be numeric, got dtype '{weights.dtype}'"
        )

    if weights.isna().any():
        rows = list(weights.index[weights.isna()][:5])
        raise InvalidWeightError(f"Count column has missing values at rows {rows}")

    values = weights.astype(float).to_numpy()
    bad = ~np.isfinite(values) | (values < 0) | (values != np.floor(values))
    if bad.any():
        rows = list(weights.index[bad][:5])
        raise InvalidWeightError(
            f"Counts must be non-negative integers; invalid values at rows {rows}"
        )

    return values.astype(np.int64)


def expand_counts(frame: pd.DataFrame, counts: str = COUNTS_COLUMN) -> pd.DataFrame:
    """
    Repeat every row ``counts`` times and drop the count column

    Rows with a count of zero disappear.
    """
    repeats = validate_weights(frame[counts])
    expanded = (
        frame.loc[frame.index.repeat(repeats)]
        .drop(columns=counts)
        .reset_index(drop=True)
    )
    logger.debug(f"Expanded {len(frame)} weighted rows into {len(expanded)} observations")
    return expanded


def as_categorical(series: pd.Series) -> pd.Series:
    """Coerce to categorical and remove unused categories"""
    if not isinstance(series.dtype, pd.CategoricalDtype):
        series = series.astype('category')
    return series.cat.remove_unused_categories()


def drop_missing(frame: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """Drop rows with missing values in any of ``columns``"""
    cleaned = frame.dropna(subset=columns).reset_index(drop=True)
    dropped = len(frame) - len(cleaned)
    if dropped:
        logger.debug(f"Dropped {dropped} rows with missing values in {columns}")
    return cleaned


def prepare_pie_data(data: pd.DataFrame, main: str,
                     condition: Optional[str] = None,
                     counts: Optional[str] = None) -> pd.DataFrame:
    """
    Normalize a table for the pie chart pipeline

    Selects and renames the columns, expands counts into observations,
    drops rows with missing categories and turns the key columns into
    categoricals without unused levels.

    Raises:
    -------
    MissingColumnError, InvalidWeightError
        On invalid input
    EmptyGroupError
        If no observation survives the filtering
    """
    frame = select_columns(data, main, condition, counts)

    if counts is not None:
        frame = expand_counts(frame)

    keys = [MAIN_COLUMN] if condition is None else [MAIN_COLUMN, CONDITION_COLUMN]
    frame = drop_missing(frame, keys)

    if frame.empty:
        raise EmptyGroupError(
            f"No usable observations for '{main}' after removing missing values"
        )

    for key in keys:
        frame[key] = as_categorical(frame[key])

    return frame


def prepare_dot_data(data: pd.DataFrame, x: str, y: str) -> pd.DataFrame:
    """
    Normalize a table for the dot chart pipeline

    Returns a frame with a numeric ``x`` and a categorical ``y``. Rows with a
    missing label are dropped; missing ``x`` values are kept so that the
    aggregation step can detect labels without usable observations.
    """
    validate_columns_exist(data, [x, y])

    frame = pd.DataFrame({
        'x': data[x].reset_index(drop=True),
        'y': data[y].reset_index(drop=True),
    })

    if not pd.api.types.is_numeric_dtype(frame['x']) or pd.api.types.is_bool_dtype(frame['x']):
        raise DataValidationError(f"Column '{x}' must be numeric, got dtype '{frame['x'].dtype}'")

    frame = drop_missing(frame, ['y'])

    if frame.empty:
        raise EmptyGroupError(f"No labelled observations in column '{y}'")

    frame['x'] = frame['x'].astype(float)
    frame['y'] = as_categorical(frame['y'])

    return frame
