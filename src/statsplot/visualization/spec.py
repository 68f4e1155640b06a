"""
Declarative chart specification

A chart is an immutable description: the summarized data, an ordered
tuple of layers, scales, facets and text. Nothing is drawn until
``ChartSpec.draw`` hands the description to a renderer.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from ..config.plotting import FIGURE_SETTINGS

Geom = Literal['col', 'label', 'text', 'point', 'vline', 'hline']


@dataclass(frozen=True, eq=False)
class Layer:
    """One visual layer: a geometry, its aesthetic mapping and fixed parameters"""
    geom: Geom
    mapping: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    data: Optional[pd.DataFrame] = None

    def layer_data(self, default: pd.DataFrame) -> pd.DataFrame:
        """Own data if set, otherwise the chart data"""
        return self.data if self.data is not None else default


@dataclass(frozen=True, eq=False)
class AxisSpec:
    """Axis name, optional explicit breaks and labels, optional duplicate axis"""
    name: Optional[str] = None
    breaks: Optional[Tuple[float, ...]] = None
    labels: Optional[Tuple[str, ...]] = None
    secondary: Optional['AxisSpec'] = None


@dataclass(frozen=True, eq=False)
class FacetSpec:
    """Wrap the chart into one panel per level of ``column``"""
    column: str
    labels: Mapping[Any, str] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class FillScale:
    """Discrete fill colours; ``breaks`` are data levels in legend order"""
    column: str
    breaks: Tuple[Any, ...]
    values: Tuple[Any, ...]
    labels: Tuple[str, ...]
    title: Optional[str] = None

    def color_for(self, level) -> Any:
        return dict(zip(self.breaks, self.values))[level]


@dataclass(frozen=True)
class ChartLabels:
    """Plot text"""
    title: Optional[str] = None
    subtitle: Optional[str] = None
    caption: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None


@dataclass(frozen=True)
class ThemeSpec:
    """Seaborn style plus the package's own title/subtitle treatment"""
    style: str = 'whitegrid'
    statsplot_layer: bool = True
    legend_position: Optional[str] = 'right'
    major_grid_y: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True, eq=False)
class ChartSpec:
    """Complete, immutable chart description"""
    kind: Literal['pie', 'dot']
    data: pd.DataFrame
    layers: Tuple[Layer, ...] = ()
    coord: Literal['cartesian', 'polar'] = 'cartesian'
    facet: Optional[FacetSpec] = None
    x_axis: Optional[AxisSpec] = None
    y_axis: Optional[AxisSpec] = None
    fill: Optional[FillScale] = None
    labels: ChartLabels = field(default_factory=ChartLabels)
    theme: ThemeSpec = field(default_factory=ThemeSpec)
    results: Mapping[str, Any] = field(default_factory=dict)

    def add_layers(self, *layers: Layer) -> 'ChartSpec':
        """New spec with ``layers`` appended"""
        return replace(self, layers=self.layers + tuple(layers))

    def with_labels(self, **labels) -> 'ChartSpec':
        """New spec with some of the plot text replaced"""
        return replace(self, labels=replace(self.labels, **labels))

    def layers_of(self, geom: Geom) -> Tuple[Layer, ...]:
        return tuple(layer for layer in self.layers if layer.geom == geom)

    def draw(self, figsize: Optional[Tuple[float, float]] = None) -> plt.Figure:
        """Render with matplotlib and return the figure"""
        from .render import render

        return render(self, figsize=figsize)

    def save(self, path: str, figsize: Optional[Tuple[float, float]] = None, **kwargs):
        """Render and save to ``path``; the figure is closed afterwards"""
        fig = self.draw(figsize=figsize)
        save_kwargs: Dict[str, Any] = {'dpi': FIGURE_SETTINGS['savefig_dpi'], 'bbox_inches': 'tight'}
        save_kwargs.update(kwargs)
        try:
            fig.savefig(path, **save_kwargs)
        finally:
            plt.close(fig)
