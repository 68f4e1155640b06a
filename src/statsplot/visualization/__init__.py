"""
Chart assembly and rendering

This package includes:
- spec: immutable chart description (ChartSpec and its parts)
- render: matplotlib renderer for ChartSpec objects
- pie: pie charts with contingency/proportion tests
- dotplot: ranked dot charts with one-sample tests
- palettes: discrete fill colours
"""

from .spec import ChartSpec, Layer, AxisSpec, FacetSpec, FillScale, ChartLabels, ThemeSpec
from .render import render, render_pie, render_dot
from .palettes import get_palette, palette_message, QUALITATIVE_PALETTES
from .pie import PieChartBuilder, build_pie_spec, ggpiestats
from .dotplot import DotPlotBuilder, build_dot_spec, ggdotplotstats

__all__ = [
    'ChartSpec', 'Layer', 'AxisSpec', 'FacetSpec', 'FillScale', 'ChartLabels', 'ThemeSpec',
    'render', 'render_pie', 'render_dot',
    'get_palette', 'palette_message', 'QUALITATIVE_PALETTES',
    'PieChartBuilder', 'build_pie_spec', 'ggpiestats',
    'DotPlotBuilder', 'build_dot_spec', 'ggdotplotstats',
]
