"""Shared pytest bootstrap for repository-local imports."""

from pathlib import Path
import sys

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import pandas as pd
import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / 'src'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


@pytest.fixture
def titanic_counts():
    """Survival by sex as a weighted table (one row per cell)"""
    return pd.DataFrame({
        'sex': ['Male', 'Male', 'Female', 'Female'],
        'survived': ['No', 'Yes', 'No', 'Yes'],
        'n': [1364, 367, 126, 344],
    })


@pytest.fixture
def label_scores():
    """Two observations per label; means b=1, e=3, a=4, d=6, c=11"""
    return pd.DataFrame({
        'country': ['a', 'a', 'b', 'b', 'c', 'c', 'd', 'd', 'e', 'e'],
        'score': [3.0, 5.0, 1.0, 1.0, 10.0, 12.0, 6.0, 6.0, 2.0, 4.0],
    })


def observations_from_table(table, rows, cols, row_name='main', col_name='condition'):
    """Expand a nested list of counts into one row per observation"""
    records = []
    for row_label, counts in zip(rows, table):
        for col_label, count in zip(cols, counts):
            records.extend([{row_name: row_label, col_name: col_label}] * count)
    frame = pd.DataFrame(records)
    return frame.astype('category')


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def make_observations():
    return observations_from_table
