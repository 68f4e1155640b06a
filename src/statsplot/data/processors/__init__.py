"""Data processing and reshaping utilities"""

from .reshaping import (
    select_columns, expand_counts, validate_weights, as_categorical,
    drop_missing, prepare_pie_data, prepare_dot_data, validate_columns_exist
)
