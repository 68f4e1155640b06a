"""Test suite for chart specifications and the matplotlib renderer"""

import dataclasses

import pytest
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.patches import Wedge

from statsplot.config import setup_plotting_style
from statsplot.visualization import (
    ChartSpec, Layer, ChartLabels, build_pie_spec, build_dot_spec, render
)


@pytest.fixture
def pie_spec(titanic_counts):
    return build_pie_spec(titanic_counts, 'survived', condition='sex', counts='n',
                          nboot=5, messages=False, random_state=1)


@pytest.fixture
def dot_spec(label_scores):
    return build_dot_spec(label_scores, 'score', 'country', messages=False)


class TestChartSpec:
    """Test the immutable chart description"""

    def test_frozen(self, pie_spec):
        with pytest.raises(dataclasses.FrozenInstanceError):
            pie_spec.kind = 'dot'

    def test_add_layers_returns_new_spec(self, dot_spec):
        extra = Layer('hline', params={'yintercept': 2.0})
        updated = dot_spec.add_layers(extra)

        assert len(updated.layers) == len(dot_spec.layers) + 1
        assert updated.layers[-1] is extra
        assert dot_spec.layers_of('hline') == ()

    def test_with_labels(self, dot_spec):
        updated = dot_spec.with_labels(title='Scores')
        assert updated.labels.title == 'Scores'
        assert updated.labels.subtitle == dot_spec.labels.subtitle
        assert dot_spec.labels.title is None

    def test_layer_data_default(self):
        frame = pd.DataFrame({'a': [1]})
        own = pd.DataFrame({'b': [2]})
        assert Layer('point').layer_data(frame) is frame
        assert Layer('point', data=own).layer_data(frame) is own


class TestRenderer:
    """Test figure rendering"""

    def test_pie_one_panel_per_facet(self, pie_spec):
        fig = pie_spec.draw()

        assert isinstance(fig, plt.Figure)
        assert len(fig.axes) == 2
        for ax in fig.axes:
            wedges = [patch for patch in ax.patches if isinstance(patch, Wedge)]
            assert len(wedges) == 2
        titles = sorted(ax.get_title() for ax in fig.axes)
        assert titles == ['sex: Female', 'sex: Male']

    def test_pie_annotations_drawn(self, pie_spec):
        fig = pie_spec.draw()
        texts = [text.get_text() for ax in fig.axes for text in ax.texts]

        assert '(n = 470)' in texts
        assert '(n = 1731)' in texts
        assert texts.count('***') == 2

    def test_dot_chart_axes(self, dot_spec):
        fig = dot_spec.draw(figsize=(6, 4))
        main_ax = fig.axes[0]

        labels = [tick.get_text() for tick in main_ax.get_yticklabels()]
        assert labels == ['b', 'e', 'a', 'd', 'c']
        assert any(ax.get_ylabel() == 'percentile' for ax in fig.axes[1:])
        assert len(main_ax.lines) >= 1

    def test_unsupported_geom(self, pie_spec):
        spec = ChartSpec(kind='pie', data=pie_spec.data,
                         layers=(Layer('point', mapping={'x': 'counts', 'y': 'perc'}),))
        with pytest.raises(ValueError, match="not supported"):
            spec.draw()

    def test_unknown_kind(self, pie_spec):
        spec = dataclasses.replace(pie_spec, kind='bar')
        with pytest.raises(ValueError, match="Unknown chart kind"):
            render(spec)

    def test_save(self, dot_spec, tmp_path):
        path = tmp_path / 'dots.png'
        dot_spec.with_labels(title='Scores').save(str(path), dpi=50)
        assert path.exists()
        assert plt.get_fignums() == []

    def test_figure_text(self):
        spec = ChartSpec(kind='dot', data=pd.DataFrame({'x': [1.0], 'rank': [1]}),
                         layers=(Layer('point', mapping={'x': 'x', 'y': 'rank'}),),
                         labels=ChartLabels(title='T', subtitle='S', caption='C'))
        fig = spec.draw()
        texts = [text.get_text() for text in fig.texts]
        assert texts == ['T', 'S', 'C']


def test_setup_plotting_style():
    with plt.rc_context():
        setup_plotting_style('white')
        assert plt.rcParams['savefig.dpi'] == 300
        assert tuple(plt.rcParams['figure.figsize']) == (8, 6)
