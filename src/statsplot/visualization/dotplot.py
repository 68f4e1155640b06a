"""
Dot charts of per-label means with a one-sample test subtitle
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..analysis.statistics import (
    summarize_ranks, calculate_centrality, calculate_basic_statistics,
    calculate_summary_by_group, subtitle_t_onesample, bf_one_sample_ttest,
    normality_message, format_number
)
from ..analysis.statistics.onesample import normalize_test_type
from ..config.plotting import DotAppearance
from ..config.settings import (
    DEFAULT_CONFIDENCE_LEVEL, DOT_BOOTSTRAP_SAMPLES, DEFAULT_BF_PRIOR, DEFAULT_DIGITS
)
from ..core.base import BaseChartBuilder
from ..data.processors import prepare_dot_data
from ..utils.logging import ContextualLogger, get_logger, log_function_call
from .spec import AxisSpec, ChartLabels, ChartSpec, Layer, ThemeSpec

logger = logging.getLogger(__name__)

PERCENTILE_LABELS = ('0', '25', '50', '75', '100')


def percentile_breaks(n_labels: int) -> Tuple[Tuple[float, ...], Tuple[str, ...]]:
    """Breaks and labels of the percentile axis for ranks 1..n_labels"""
    if n_labels == 1:
        return (1.0,), ('100',)
    step = (n_labels - 1) / 4
    return tuple(1 + i * step for i in range(5)), PERCENTILE_LABELS


def reference_line_layers(value: float,
                          label: Optional[str],
                          label_y: float,
                          color: str = 'black',
                          size: float = 1.0,
                          linetype: str = 'dashed') -> List[Layer]:
    """Vertical line at ``value`` and, if ``label`` is given, a label on it"""
    layers = [Layer('vline', params={'xintercept': value, 'color': color,
                                     'size': size, 'linetype': linetype})]
    if label is not None:
        layers.append(Layer('label', params={'x': value, 'y': label_y, 'label': label,
                                             'color': color, 'alpha': 0.5}))
    return layers


class DotPlotBuilder(BaseChartBuilder):
    """
    Builds the ChartSpec of a ranked dot chart

    Means of ``x`` per level of ``y`` are sorted ascending and drawn at
    their rank; the subtitle tests the means against ``test_value``.
    """

    def __init__(self,
                 x: str,
                 y: str,
                 xlab: Optional[str] = None,
                 ylab: Optional[str] = None,
                 title: Optional[str] = None,
                 subtitle: Optional[str] = None,
                 caption: Optional[str] = None,
                 type: str = 'parametric',
                 test_value: float = 0.0,
                 bf_prior: float = DEFAULT_BF_PRIOR,
                 bf_message: bool = False,
                 robust_estimator: str = 'onestep',
                 conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                 nboot: int = DOT_BOOTSTRAP_SAMPLES,
                 k: int = DEFAULT_DIGITS,
                 results_subtitle: bool = True,
                 theme: str = 'whitegrid',
                 statsplot_layer: bool = True,
                 point_color: str = 'black',
                 point_size: float = 3,
                 point_shape: str = 'o',
                 centrality_para: str = 'mean',
                 centrality_color: str = 'blue',
                 centrality_size: float = 1.0,
                 centrality_linetype: str = 'dashed',
                 centrality_line_labeller: bool = True,
                 centrality_k: int = 2,
                 test_value_line: bool = False,
                 test_value_color: str = 'black',
                 test_value_size: float = 1.0,
                 test_value_linetype: str = 'dashed',
                 test_line_labeller: bool = True,
                 test_k: int = 0,
                 extra_layers: Optional[Sequence[Layer]] = None,
                 messages: bool = True,
                 random_state: Optional[int] = None):
        super().__init__("DotPlotBuilder")
        self.x = x
        self.y = y
        self.xlab = xlab if xlab is not None else x
        self.ylab = ylab if ylab is not None else y
        self.title = title
        self.subtitle = subtitle
        self.caption = caption
        self.type = normalize_test_type(type)
        self.test_value = test_value
        self.bf_prior = bf_prior
        self.bf_message = bf_message
        self.robust_estimator = robust_estimator
        self.conf_level = conf_level
        self.nboot = nboot
        self.k = k
        self.results_subtitle = results_subtitle
        self.theme = theme
        self.statsplot_layer = statsplot_layer
        self.point_color = point_color
        self.point_size = point_size
        self.point_shape = point_shape
        self.centrality_para = centrality_para
        self.centrality_color = centrality_color
        self.centrality_size = centrality_size
        self.centrality_linetype = centrality_linetype
        self.centrality_line_labeller = centrality_line_labeller
        self.centrality_k = centrality_k
        self.test_value_line = test_value_line
        self.test_value_color = test_value_color
        self.test_value_size = test_value_size
        self.test_value_linetype = test_value_linetype
        self.test_line_labeller = test_line_labeller
        self.test_k = test_k
        self.extra_layers = tuple(extra_layers) if extra_layers else ()
        self.messages = messages
        self.random_state = random_state

    def _subtitle_and_caption(self, means: pd.Series):
        if not self.results_subtitle:
            return self.subtitle, self.caption

        if len(means) < 2:
            logger.info(
                f"Only {len(means)} label in '{self.y}'; skipping the one-sample test subtitle"
            )
            return self.subtitle, self.caption

        caption = self.caption
        if self.bf_message and self.type == 'parametric':
            caption = bf_one_sample_ttest(
                means, test_value=self.test_value, bf_prior=self.bf_prior,
                caption=self.caption, k=self.k
            )

        subtitle = subtitle_t_onesample(
            means, test_type=self.type, test_value=self.test_value,
            bf_prior=self.bf_prior, robust_estimator=self.robust_estimator,
            conf_level=self.conf_level, nboot=self.nboot, k=self.k,
            messages=self.messages, random_state=self.random_state
        )
        return subtitle, caption

    def _reference_layers(self, means: pd.Series, n_labels: int) -> List[Layer]:
        label_y = float(np.median([1, n_labels]))
        centrality = calculate_centrality(means, self.centrality_para)

        label = None
        if self.centrality_line_labeller:
            label = f"{self.centrality_para} = {format_number(centrality, self.centrality_k)}"
        layers = reference_line_layers(
            centrality, label, label_y, color=self.centrality_color,
            size=self.centrality_size, linetype=self.centrality_linetype
        )

        if self.test_value_line:
            label = None
            if self.test_line_labeller:
                label = f"test = {format_number(self.test_value, self.test_k)}"
            layers += reference_line_layers(
                self.test_value, label, label_y, color=self.test_value_color,
                size=self.test_value_size, linetype=self.test_value_linetype
            )

        return layers

    def build(self, data: pd.DataFrame) -> ChartSpec:
        """
        Rank the per-label means of ``data`` and assemble the chart

        Returns:
        --------
        ChartSpec
            The chart; ``results`` holds the ranked means, their
            descriptive statistics and the subtitle/caption text
        """
        self.validate_input(data, [self.x, self.y])

        prepared = prepare_dot_data(data, self.x, self.y)
        ranked = summarize_ranks(prepared)
        means = ranked['x']
        n_labels = len(ranked)
        logger.debug(f"Ranked {n_labels} labels of '{self.y}'")

        subtitle, caption = self._subtitle_and_caption(means)

        layers = [Layer('point', mapping={'x': 'x', 'y': 'rank'},
                        params={'color': self.point_color, 'size': self.point_size,
                                'shape': self.point_shape})]
        layers += self._reference_layers(means, n_labels)
        layers += list(self.extra_layers)

        secondary_breaks, secondary_labels = percentile_breaks(n_labels)
        appearance = DotAppearance()

        y_axis = AxisSpec(
            name=self.ylab,
            breaks=tuple(float(rank) for rank in ranked['rank']),
            labels=tuple(str(label) for label in ranked['y']),
            secondary=AxisSpec(name=appearance.percentile_axis_name,
                               breaks=secondary_breaks, labels=secondary_labels),
        )
        x_axis = AxisSpec(name=self.xlab, secondary=AxisSpec(name=None))

        normality = None
        if self.messages:
            normality = normality_message(means, lab=self.xlab, k=self.k)

        self.results = {
            'ranked': ranked,
            'subtitle': subtitle,
            'caption': caption,
            'statistics': calculate_basic_statistics(means, include_advanced=True),
            'by_label': calculate_summary_by_group(prepared, 'x', 'y'),
            'normality': normality,
        }

        return ChartSpec(
            kind='dot',
            data=ranked,
            layers=tuple(layers),
            x_axis=x_axis,
            y_axis=y_axis,
            labels=ChartLabels(title=self.title, subtitle=subtitle, caption=caption,
                               x=self.xlab, y=self.ylab),
            theme=ThemeSpec(
                style=self.theme, statsplot_layer=self.statsplot_layer,
                legend_position=None,
                major_grid_y={'color': appearance.grid_color,
                              'linewidth': appearance.grid_linewidth,
                              'linetype': appearance.grid_linestyle},
            ),
            results=self.results,
        )


def build_dot_spec(data: pd.DataFrame, x: str, y: str, **options) -> ChartSpec:
    """Build the dot chart ChartSpec without structured event logging"""
    return DotPlotBuilder(x, y, **options).build(data)


@log_function_call
def ggdotplotstats(data: pd.DataFrame, x: str, y: str, **options: Any) -> ChartSpec:
    """
    Dot chart of the mean of ``x`` per level of ``y``

    Args:
        data: Input table
        x: Numeric column
        y: Label column
        **options: Any ``DotPlotBuilder`` option, e.g. ``type='np'`` or
            ``test_value=15``

    Returns:
        ChartSpec; call ``.draw()`` for a matplotlib figure
    """
    context: Dict[str, Any] = {'x': x, 'y': y, 'type': options.get('type', 'parametric')}
    with ContextualLogger(get_logger('statsplot.events', enable_console_logging=False),
                          'ggdotplotstats', **context):
        return build_dot_spec(data, x, y, **options)
