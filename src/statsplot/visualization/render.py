"""
Matplotlib renderer for ChartSpec objects

Pie charts are drawn as wedges on an equal-aspect axis, one panel per
facet. Stacked positions follow the fill-position convention: every layer
is normalized to the unit circle and a text layer sits at
``vjust`` of its segment, at radius ``x / 1.5``.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.patches import Patch, Wedge

from ..config.plotting import (
    FIGURE_SETTINGS, LINETYPES, PieAppearance, DotAppearance, to_points, line_width
)
from .spec import ChartSpec, Layer

logger = logging.getLogger(__name__)

# Bar centre x = 1 with width 1 maps to the 2/3 of the unit radius
RADIUS_SCALE = 1.5
PIE_LIMIT = 1.3


def _facet_levels(spec: ChartSpec) -> List[Any]:
    if spec.facet is None:
        return [None]
    column = spec.data[spec.facet.column]
    if isinstance(column.dtype, pd.CategoricalDtype):
        return [level for level in column.cat.categories if (column == level).any()]
    return list(pd.unique(column))


def _panel(frame: pd.DataFrame, spec: ChartSpec, level) -> pd.DataFrame:
    if level is None or spec.facet.column not in frame.columns:
        return frame
    return frame[frame[spec.facet.column] == level]


def _stack_positions(weights: np.ndarray, vjust: float) -> np.ndarray:
    """Position of each segment on [0, 1] after normalizing the stack"""
    total = weights.sum()
    if total <= 0:
        return np.zeros(len(weights))
    fractions = weights / total
    starts = np.concatenate([[0.0], np.cumsum(fractions)[:-1]])
    return starts + vjust * fractions


def _polar_to_xy(position: float, radius: float) -> Tuple[float, float]:
    # Clockwise from twelve o'clock
    angle = np.deg2rad(90.0 - 360.0 * position)
    return radius * np.cos(angle), radius * np.sin(angle)


def _draw_pie_col(ax, layer: Layer, frame: pd.DataFrame, spec: ChartSpec):
    appearance = PieAppearance()
    weights = frame[layer.mapping['y']].to_numpy(dtype=float)
    starts = _stack_positions(weights, 0.0)
    ends = _stack_positions(weights, 1.0)
    fill_column = layer.mapping.get('fill')

    for idx, (start, end) in enumerate(zip(starts, ends)):
        if end <= start:
            continue
        if fill_column is not None and spec.fill is not None:
            color = spec.fill.color_for(frame[fill_column].iloc[idx])
        else:
            color = layer.params.get('fill', 'grey')
        ax.add_patch(Wedge(
            (0, 0), 1.0,
            90.0 - 360.0 * end, 90.0 - 360.0 * start,
            facecolor=color,
            edgecolor=layer.params.get('color', appearance.edge_color),
            linewidth=0.8,
        ))


def _draw_pie_text(ax, layer: Layer, frame: pd.DataFrame, spec: ChartSpec):
    appearance = PieAppearance()
    weight_column = layer.mapping.get('y', 'counts')
    weights = frame[weight_column].to_numpy(dtype=float)
    positions = _stack_positions(weights, layer.params.get('vjust', 0.5))
    radius = layer.params.get('x', 1.0) / RADIUS_SCALE
    fontsize = to_points(layer.params.get('size', 4))

    bbox = None
    if layer.geom == 'label':
        bbox = dict(boxstyle='round,pad=0.25',
                    facecolor=layer.params.get('fill', appearance.label_box_color),
                    edgecolor=appearance.label_color, linewidth=0.5)

    for position, text in zip(positions, frame[layer.mapping['label']]):
        if pd.isna(text):
            continue
        x_pos, y_pos = _polar_to_xy(position, radius)
        ax.text(x_pos, y_pos, str(text), ha='center', va='center',
                fontsize=fontsize, color=layer.params.get('color', appearance.label_color),
                bbox=bbox)


def _aesthetic(layer: Layer, frame: pd.DataFrame, name: str, default=None):
    """Column values when mapped, otherwise the fixed parameter"""
    if name in layer.mapping:
        return frame[layer.mapping[name]].to_numpy()
    value = layer.params.get(name, default)
    return np.repeat(value, max(len(frame), 1)) if layer.mapping else np.array([value])


def _draw_point(ax, layer: Layer, frame: pd.DataFrame, spec: ChartSpec):
    ax.scatter(
        frame[layer.mapping['x']], frame[layer.mapping['y']],
        color=layer.params.get('color', 'black'),
        s=to_points(layer.params.get('size', 3)) ** 2,
        marker=layer.params.get('shape', 'o'),
        zorder=3,
    )


def _draw_reference_line(ax, layer: Layer, frame: pd.DataFrame, spec: ChartSpec):
    kwargs = dict(
        color=layer.params.get('color', 'black'),
        linewidth=line_width(layer.params.get('size', 1.0)),
        linestyle=LINETYPES.get(layer.params.get('linetype', 'solid'), '-'),
        zorder=2,
    )
    if layer.geom == 'vline':
        for value in _aesthetic(layer, frame, 'xintercept'):
            ax.axvline(value, **kwargs)
    else:
        for value in _aesthetic(layer, frame, 'yintercept'):
            ax.axhline(value, **kwargs)


def _draw_cartesian_text(ax, layer: Layer, frame: pd.DataFrame, spec: ChartSpec):
    xs = _aesthetic(layer, frame, 'x')
    ys = _aesthetic(layer, frame, 'y')
    texts = _aesthetic(layer, frame, 'label', '')
    color = layer.params.get('color', 'black')

    bbox = None
    if layer.geom == 'label':
        bbox = dict(boxstyle='round,pad=0.3', facecolor=layer.params.get('fill', 'white'),
                    edgecolor=color, alpha=layer.params.get('alpha', 0.5))

    for x_pos, y_pos, text in zip(xs, ys, texts):
        ax.text(x_pos, y_pos, str(text), ha='center', va='center',
                fontsize=to_points(layer.params.get('size', 4)), color=color,
                bbox=bbox, zorder=4)


PIE_DRAWERS: Dict[str, Callable] = {
    'col': _draw_pie_col,
    'label': _draw_pie_text,
    'text': _draw_pie_text,
}

CARTESIAN_DRAWERS: Dict[str, Callable] = {
    'point': _draw_point,
    'vline': _draw_reference_line,
    'hline': _draw_reference_line,
    'label': _draw_cartesian_text,
    'text': _draw_cartesian_text,
}


def _drawer(drawers: Dict[str, Callable], layer: Layer, kind: str) -> Callable:
    try:
        return drawers[layer.geom]
    except KeyError:
        raise ValueError(f"Geometry '{layer.geom}' is not supported in {kind} charts") from None


def _add_figure_text(fig, spec: ChartSpec):
    labels = spec.labels
    top = 0.97
    if labels.title:
        weight = 'bold' if spec.theme.statsplot_layer else 'normal'
        fig.text(0.5, top, labels.title, ha='center', va='top',
                 fontsize=14, fontweight=weight)
        top -= 0.05
    if labels.subtitle:
        fig.text(0.5, top, labels.subtitle, ha='center', va='top', fontsize=10)
        top -= 0.05
    if labels.caption:
        fig.text(0.98, 0.01, labels.caption, ha='right', va='bottom', fontsize=9)
    return top


def render_pie(spec: ChartSpec, figsize: Optional[Tuple[float, float]] = None) -> plt.Figure:
    """One pie per facet level with a shared fill legend"""
    levels = _facet_levels(spec)
    if figsize is None:
        figsize = (FIGURE_SETTINGS['facet_width'] * len(levels) + 2,
                   FIGURE_SETTINGS['facet_height'])

    with sns.axes_style(spec.theme.style):
        fig, axes = plt.subplots(1, len(levels), figsize=figsize, squeeze=False)

    for ax, level in zip(axes[0], levels):
        for layer in spec.layers:
            draw = _drawer(PIE_DRAWERS, layer, 'pie')
            draw(ax, layer, _panel(layer.layer_data(spec.data), spec, level), spec)

        ax.set_xlim(-PIE_LIMIT, PIE_LIMIT)
        ax.set_ylim(-PIE_LIMIT, PIE_LIMIT)
        ax.set_aspect('equal')
        ax.axis('off')
        if level is not None:
            ax.set_title(spec.facet.labels.get(level, str(level)), fontsize=11)

    if spec.fill is not None and spec.theme.legend_position is not None:
        handles = [
            Patch(facecolor=color, edgecolor=PieAppearance().edge_color, label=label)
            for color, label in zip(spec.fill.values, spec.fill.labels)
        ]
        fig.legend(handles=handles, title=spec.fill.title, loc='center right',
                   frameon=False)

    top = _add_figure_text(fig, spec)
    right = 0.85 if spec.fill is not None and spec.theme.legend_position is not None else 0.98
    fig.subplots_adjust(top=top - 0.02, bottom=0.08, left=0.02, right=right)
    return fig


def render_dot(spec: ChartSpec, figsize: Optional[Tuple[float, float]] = None) -> plt.Figure:
    """Ranked dot chart with a duplicated percentile axis"""
    appearance = DotAppearance()
    with sns.axes_style(spec.theme.style):
        fig, ax = plt.subplots(figsize=figsize or FIGURE_SETTINGS['figsize_default'])

    for layer in spec.layers:
        draw = _drawer(CARTESIAN_DRAWERS, layer, 'dot')
        draw(ax, layer, layer.layer_data(spec.data), spec)

    y_axis = spec.y_axis
    if y_axis is not None and y_axis.breaks:
        ax.set_ylim(min(y_axis.breaks) - 0.5, max(y_axis.breaks) + 0.5)
        ax.set_yticks(list(y_axis.breaks))
        ax.set_yticklabels(list(y_axis.labels or y_axis.breaks))
    ax.set_ylabel(spec.labels.y if spec.labels.y is not None else (y_axis.name if y_axis else None))
    ax.set_xlabel(spec.labels.x if spec.labels.x is not None else
                  (spec.x_axis.name if spec.x_axis else None))

    grid = spec.theme.major_grid_y
    ax.xaxis.grid(False)
    if grid:
        ax.yaxis.grid(True, color=grid.get('color', appearance.grid_color),
                      linewidth=grid.get('linewidth', appearance.grid_linewidth),
                      linestyle=LINETYPES.get(grid.get('linetype', appearance.grid_linestyle), '--'))

    if y_axis is not None and y_axis.secondary is not None:
        twin = ax.twinx()
        twin.set_ylim(ax.get_ylim())
        twin.set_yticks(list(y_axis.secondary.breaks))
        twin.set_yticklabels(list(y_axis.secondary.labels))
        twin.set_ylabel(y_axis.secondary.name)
        twin.grid(False)

    if spec.x_axis is not None and spec.x_axis.secondary is not None:
        top_axis = ax.secondary_xaxis('top')
        top_axis.set_xlabel(spec.x_axis.secondary.name or '')

    top = _add_figure_text(fig, spec)
    fig.subplots_adjust(top=top - 0.06, bottom=0.12)
    return fig


RENDERERS: Dict[str, Callable] = {
    'pie': render_pie,
    'dot': render_dot,
}


def render(spec: ChartSpec, figsize: Optional[Tuple[float, float]] = None) -> plt.Figure:
    """Render ``spec`` to a new matplotlib figure"""
    try:
        renderer = RENDERERS[spec.kind]
    except KeyError:
        raise ValueError(f"Unknown chart kind '{spec.kind}'") from None

    logger.debug(f"Rendering {spec.kind} chart with {len(spec.layers)} layers")
    return renderer(spec, figsize=figsize)
