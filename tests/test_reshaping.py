"""Test suite for column selection and count expansion"""

import pytest
import pandas as pd
import numpy as np

from statsplot.core.exceptions import (
    DataValidationError, EmptyGroupError, InvalidWeightError, MissingColumnError
)
from statsplot.data.processors import (
    select_columns, expand_counts, validate_weights, as_categorical,
    drop_missing, prepare_pie_data, prepare_dot_data
)


class TestSelectColumns:
    """Test canonical column selection"""

    def setup_method(self):
        self.data = pd.DataFrame({
            'sex': ['a', 'b'],
            'class': ['x', 'y'],
            'freq': [1, 2],
            'other': [0, 0],
        })

    def test_canonical_names(self):
        frame = select_columns(self.data, 'sex', 'class', 'freq')
        assert list(frame.columns) == ['main', 'condition', 'counts']
        assert list(frame['main']) == ['a', 'b']

    def test_main_only(self):
        frame = select_columns(self.data, 'class')
        assert list(frame.columns) == ['main']

    def test_missing_column(self):
        with pytest.raises(MissingColumnError, match="nope"):
            select_columns(self.data, 'sex', condition='nope')


class TestExpandCounts:
    """Test weight validation and row expansion"""

    def test_single_weighted_row(self):
        frame = pd.DataFrame({'main': ['X'], 'counts': [3]})
        expanded = expand_counts(frame)

        assert len(expanded) == 3
        assert list(expanded['main']) == ['X', 'X', 'X']
        assert 'counts' not in expanded.columns

    def test_zero_weight_drops_row(self):
        frame = pd.DataFrame({'main': ['X', 'Y'], 'counts': [2, 0]})
        expanded = expand_counts(frame)
        assert list(expanded['main']) == ['X', 'X']

    def test_integer_valued_floats(self):
        weights = validate_weights(pd.Series([2.0, 0.0, 5.0]))
        assert weights.dtype == np.int64
        assert list(weights) == [2, 0, 5]

    @pytest.mark.parametrize('weights', [
        [1, -1],
        [1.5],
        [1.0, np.nan],
        [np.inf],
        ['a'],
        [True, False],
    ])
    def test_invalid_weights(self, weights):
        with pytest.raises(InvalidWeightError):
            validate_weights(pd.Series(weights))


class TestCategoricalHelpers:
    """Test categorical coercion and missing-value filtering"""

    def test_unused_categories_removed(self):
        series = pd.Series(pd.Categorical(['a', 'a'], categories=['a', 'b', 'c']))
        result = as_categorical(series)
        assert list(result.cat.categories) == ['a']

    def test_plain_strings_coerced(self):
        result = as_categorical(pd.Series(['y', 'x', 'y']))
        assert isinstance(result.dtype, pd.CategoricalDtype)
        assert list(result.cat.categories) == ['x', 'y']

    def test_drop_missing(self):
        frame = pd.DataFrame({'main': ['a', None, 'b'], 'condition': ['x', 'y', None]})
        cleaned = drop_missing(frame, ['main'])
        assert list(cleaned['main']) == ['a', 'b']


class TestPreparePieData:
    """Test the pie chart input pipeline"""

    def test_weighted_round_trip(self, titanic_counts):
        prepared = prepare_pie_data(titanic_counts, 'survived', 'sex', 'n')
        assert len(prepared) == titanic_counts['n'].sum()

        counts = prepared.groupby(['condition', 'main'], observed=True).size()
        for _, row in titanic_counts.iterrows():
            assert counts[(row['sex'], row['survived'])] == row['n']

    def test_missing_keys_dropped(self):
        data = pd.DataFrame({
            'main': ['a', None, 'b', 'a'],
            'cond': ['x', 'x', None, 'y'],
        })
        prepared = prepare_pie_data(data, 'main', 'cond')

        assert len(prepared) == 2
        assert list(prepared['main'].cat.categories) == ['a']
        assert list(prepared['condition'].cat.categories) == ['x', 'y']

    def test_all_missing(self):
        data = pd.DataFrame({'main': [None, None]})
        with pytest.raises(EmptyGroupError):
            prepare_pie_data(data, 'main')

    def test_invalid_counts(self, titanic_counts):
        titanic_counts.loc[0, 'n'] = -3
        with pytest.raises(InvalidWeightError):
            prepare_pie_data(titanic_counts, 'survived', 'sex', 'n')


class TestPrepareDotData:
    """Test the dot chart input pipeline"""

    def test_missing_label_dropped(self):
        data = pd.DataFrame({'score': [1.0, 2.0, np.nan], 'label': ['a', None, 'b']})
        prepared = prepare_dot_data(data, 'score', 'label')

        assert list(prepared.columns) == ['x', 'y']
        assert len(prepared) == 2
        assert np.isnan(prepared['x'].iloc[1])

    def test_non_numeric_values(self):
        data = pd.DataFrame({'score': ['high', 'low'], 'label': ['a', 'b']})
        with pytest.raises(DataValidationError, match="numeric"):
            prepare_dot_data(data, 'score', 'label')

    def test_missing_column(self):
        data = pd.DataFrame({'score': [1.0]})
        with pytest.raises(MissingColumnError):
            prepare_dot_data(data, 'score', 'label')
