"""
Pie charts of a categorical variable with statistical annotations

The chart shows the share of each ``main`` category, optionally one pie
per ``condition`` level. The subtitle carries the test of independence
(or of equal proportions without a condition) and the facets carry a
per-level proportion test.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Union

import pandas as pd

from ..analysis.statistics import (
    summarize_proportions, add_slice_labels, group_size_labels, first_row_only,
    subtitle_contingency_tab, subtitle_onesample_proptest, grouped_proptest,
    bf_contingency_tab, bf_onesample_proptest
)
from ..config.plotting import (
    SLICE_LABEL_SIZE, SIGNIFICANCE_LABEL_SIZE, SAMPLE_SIZE_LABEL_SIZE,
    FACET_LABEL_OFFSET, PieAppearance
)
from ..config.settings import (
    MAIN_COLUMN, CONDITION_COLUMN, COUNTS_COLUMN, DEFAULT_CONFIDENCE_LEVEL,
    PIE_BOOTSTRAP_SAMPLES, MONTE_CARLO_REPLICATES, DEFAULT_PRIOR_CONCENTRATION,
    DEFAULT_PALETTE, DEFAULT_DIGITS, DEFAULT_PERCENT_DIGITS
)
from ..core.base import BaseChartBuilder
from ..data.processors import prepare_pie_data
from ..utils.logging import ContextualLogger, get_logger, log_function_call
from .palettes import get_palette, palette_message
from .spec import ChartSpec, ChartLabels, FacetSpec, FillScale, Layer, ThemeSpec

logger = logging.getLogger(__name__)


class PieChartBuilder(BaseChartBuilder):
    """
    Builds the ChartSpec of a (faceted) pie chart

    Parameters:
    -----------
    main : str
        Categorical column whose shares are shown
    condition : str, optional
        Categorical column; one pie per level
    counts : str, optional
        Column of non-negative integer weights (one row per cell)
    ratio : sequence of float, optional
        Expected proportions for the test without a condition
    paired : bool
        Use McNemar's test for paired (square) designs
    factor_levels : sequence of str, optional
        Legend labels replacing the ``main`` levels, in legend order
    stat_title : str, optional
        Prefix of the subtitle
    sample_size_label : bool
        Draw ``(n = <total>)`` once per facet
    bf_message : bool
        Replace the caption with the Bayes factor in favour of the null
    sampling_plan, fixed_margin, prior_concentration
        Options of the contingency table Bayes factor
    title, caption : str, optional
        Plot text
    conf_level : float
        Confidence level of the effect size interval
    nboot : int
        Bootstrap replicates for the effect size interval
    simulate_p_value : bool
        Monte Carlo p-value from ``B`` tables with fixed margins
    legend_title : str, optional
        Defaults to ``main``
    facet_wrap_name : str, optional
        Prefix of the facet titles; defaults to ``condition``
    k, perc_k : int
        Decimal places of statistics and of slice percentages
    slice_label : str
        'percentage', 'counts' or 'both'
    facet_proptest : bool
        Run and draw the per-facet proportion tests
    theme : str
        Seaborn style
    statsplot_layer : bool
        Bold title treatment
    palette : str or int
        Palette name or index into QUALITATIVE_PALETTES
    direction : int
        1 or -1 to reverse the palette
    messages : bool
        Log the diagnostic notes
    random_state : int, optional
        Seed for the bootstrap and Monte Carlo draws
    """

    def __init__(self,
                 main: str,
                 condition: Optional[str] = None,
                 counts: Optional[str] = None,
                 ratio: Optional[Sequence[float]] = None,
                 paired: bool = False,
                 factor_levels: Optional[Sequence[str]] = None,
                 stat_title: Optional[str] = None,
                 sample_size_label: bool = True,
                 bf_message: bool = False,
                 sampling_plan: str = 'indepMulti',
                 fixed_margin: str = 'rows',
                 prior_concentration: float = DEFAULT_PRIOR_CONCENTRATION,
                 title: Optional[str] = None,
                 caption: Optional[str] = None,
                 conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                 nboot: int = PIE_BOOTSTRAP_SAMPLES,
                 simulate_p_value: bool = False,
                 B: int = MONTE_CARLO_REPLICATES,
                 legend_title: Optional[str] = None,
                 facet_wrap_name: Optional[str] = None,
                 k: int = DEFAULT_DIGITS,
                 perc_k: int = DEFAULT_PERCENT_DIGITS,
                 slice_label: str = 'percentage',
                 facet_proptest: bool = True,
                 theme: str = 'whitegrid',
                 statsplot_layer: bool = True,
                 palette: Union[str, int] = DEFAULT_PALETTE,
                 direction: int = 1,
                 messages: bool = True,
                 random_state: Optional[int] = None):
        super().__init__("PieChartBuilder")
        self.main = main
        self.condition = condition
        self.counts = counts
        self.ratio = ratio
        self.paired = paired
        self.factor_levels = factor_levels
        self.stat_title = stat_title
        self.sample_size_label = sample_size_label
        self.bf_message = bf_message
        self.sampling_plan = sampling_plan
        self.fixed_margin = fixed_margin
        self.prior_concentration = prior_concentration
        self.title = title
        self.caption = caption
        self.conf_level = conf_level
        self.nboot = nboot
        self.simulate_p_value = simulate_p_value
        self.B = B
        self.legend_title = legend_title if legend_title is not None else main
        self.facet_wrap_name = facet_wrap_name if facet_wrap_name is not None else condition
        self.k = k
        self.perc_k = perc_k
        self.slice_label = slice_label
        self.facet_proptest = facet_proptest
        self.theme = theme
        self.statsplot_layer = statsplot_layer
        self.palette = palette
        self.direction = direction
        self.messages = messages
        self.random_state = random_state

    def _fill_scale(self, summary: pd.DataFrame) -> FillScale:
        breaks = tuple(pd.unique(summary[MAIN_COLUMN]))

        if self.factor_levels is not None:
            labels = tuple(str(label) for label in self.factor_levels)
            if len(labels) != len(breaks):
                raise ValueError(
                    f"'factor_levels' has {len(labels)} labels but '{self.main}' "
                    f"has {len(breaks)} levels"
                )
        else:
            labels = tuple(str(level) for level in breaks)

        palette_message(self.palette, len(breaks))
        colors = get_palette(self.palette, len(breaks), self.direction)

        return FillScale(column=MAIN_COLUMN, breaks=breaks, values=tuple(colors),
                         labels=labels, title=self.legend_title)

    def _slice_layers(self):
        appearance = PieAppearance()
        return (
            Layer('col', mapping={'y': COUNTS_COLUMN, 'fill': MAIN_COLUMN},
                  params={'position': 'fill', 'width': appearance.bar_width,
                          'color': appearance.edge_color}),
            Layer('label', mapping={'y': COUNTS_COLUMN, 'label': 'slice_label'},
                  params={'vjust': 0.5, 'size': SLICE_LABEL_SIZE[self.slice_label],
                          'color': appearance.label_color,
                          'fill': appearance.label_box_color}),
        )

    def _facet_annotations(self, summary: pd.DataFrame, prepared: pd.DataFrame):
        """Sample size and significance layers, one label per facet"""
        layers = []
        proptest = None

        if self.sample_size_label:
            labelled = group_size_labels(summary, CONDITION_COLUMN)
            layers.append(Layer(
                'text',
                mapping={'y': COUNTS_COLUMN, 'label': 'condition_n_label'},
                params={'x': FACET_LABEL_OFFSET, 'vjust': 0.5, 'size': SAMPLE_SIZE_LABEL_SIZE},
                data=labelled[labelled['condition_n_label'].notna()].reset_index(drop=True),
            ))

        if self.facet_proptest:
            proptest = grouped_proptest(prepared, MAIN_COLUMN, CONDITION_COLUMN, k=self.k)
            if self.messages:
                logger.info(
                    f"Proportion test results for each level of '{self.condition}':\n"
                    f"{proptest.rename(columns={CONDITION_COLUMN: self.condition}).to_string(index=False)}"
                )
            merged = summary.merge(
                proptest[[CONDITION_COLUMN, 'p_value', 'significance']],
                on=CONDITION_COLUMN, how='left', sort=False
            )
            merged['significance'] = first_row_only(merged, 'significance', CONDITION_COLUMN)
            layers.append(Layer(
                'text',
                mapping={'y': COUNTS_COLUMN, 'label': 'significance'},
                params={'x': FACET_LABEL_OFFSET, 'vjust': 1.0, 'size': SIGNIFICANCE_LABEL_SIZE},
                data=merged[merged['significance'].notna()].reset_index(drop=True),
            ))

        return tuple(layers), proptest

    def _subtitle_and_caption(self, prepared: pd.DataFrame):
        if self.condition is not None:
            subtitle = subtitle_contingency_tab(
                prepared, MAIN_COLUMN, CONDITION_COLUMN, paired=self.paired,
                stat_title=self.stat_title, conf_level=self.conf_level,
                nboot=self.nboot, simulate_p_value=self.simulate_p_value, B=self.B,
                k=self.k, messages=self.messages, random_state=self.random_state
            )
            caption = self.caption
            if self.bf_message:
                caption = bf_contingency_tab(
                    prepared, MAIN_COLUMN, CONDITION_COLUMN,
                    sampling_plan=self.sampling_plan, fixed_margin=self.fixed_margin,
                    prior_concentration=self.prior_concentration,
                    caption=self.caption, k=self.k
                )
            return subtitle, caption

        subtitle = subtitle_onesample_proptest(
            prepared, MAIN_COLUMN, ratio=self.ratio,
            legend_title=self.legend_title, k=self.k
        )
        caption = self.caption
        if self.bf_message:
            caption = bf_onesample_proptest(
                prepared, MAIN_COLUMN, ratio=self.ratio,
                prior_concentration=self.prior_concentration,
                caption=self.caption, k=self.k
            )
        return subtitle, caption

    def build(self, data: pd.DataFrame) -> ChartSpec:
        """
        Summarize ``data`` and assemble the chart

        Returns:
        --------
        ChartSpec
            The chart; ``results`` holds the summary table, the subtitle
            and caption text and the per-facet proportion tests
        """
        self.validate_input(data, [self.main, self.condition, self.counts])

        prepared = prepare_pie_data(data, self.main, self.condition, self.counts)
        by = CONDITION_COLUMN if self.condition is not None else None
        summary = add_slice_labels(
            summarize_proportions(prepared, by=by), self.slice_label, self.perc_k
        )
        logger.debug(f"Summarized {len(prepared)} observations into {len(summary)} slices")

        fill = self._fill_scale(summary)
        layers = self._slice_layers()
        facet = None
        proptest = None

        if self.condition is not None:
            annotations, proptest = self._facet_annotations(summary, prepared)
            layers += annotations
            facet = FacetSpec(
                column=CONDITION_COLUMN,
                labels={
                    level: f"{self.facet_wrap_name}: {level}"
                    for level in prepared[CONDITION_COLUMN].cat.categories
                },
            )

        subtitle, caption = self._subtitle_and_caption(prepared)

        self.results = {
            'summary': summary,
            'subtitle': subtitle,
            'caption': caption,
            'proptest': proptest,
            'n': len(prepared),
        }

        return ChartSpec(
            kind='pie',
            data=summary,
            layers=layers,
            coord='polar',
            facet=facet,
            fill=fill,
            labels=ChartLabels(title=self.title, subtitle=subtitle, caption=caption),
            theme=ThemeSpec(style=self.theme, statsplot_layer=self.statsplot_layer),
            results=self.results,
        )


def build_pie_spec(data: pd.DataFrame, main: str,
                   condition: Optional[str] = None,
                   counts: Optional[str] = None,
                   **options) -> ChartSpec:
    """Build the pie ChartSpec without structured event logging"""
    return PieChartBuilder(main, condition=condition, counts=counts, **options).build(data)


@log_function_call
def ggpiestats(data: pd.DataFrame, main: str,
               condition: Optional[str] = None,
               counts: Optional[str] = None,
               **options: Any) -> ChartSpec:
    """
    Pie chart(s) of ``main`` with statistical details in the subtitle

    Args:
        data: Input table
        main: Categorical column whose shares are shown
        condition: Optional categorical column; one pie per level
        counts: Optional column of integer weights
        **options: Any ``PieChartBuilder`` option

    Returns:
        ChartSpec; call ``.draw()`` for a matplotlib figure

    Raises:
        MissingColumnError: A referenced column is absent
        InvalidWeightError: A weight is missing, negative or fractional
        EmptyGroupError: No rows left after dropping missing values
    """
    context: Dict[str, Any] = {'main': main, 'condition': condition, 'n_rows': len(data)}
    with ContextualLogger(get_logger('statsplot.events', enable_console_logging=False),
                          'ggpiestats', **context):
        return build_pie_spec(data, main, condition=condition, counts=counts, **options)
