"""Plotting configuration"""

from dataclasses import dataclass

import matplotlib.pyplot as plt
import seaborn as sns

FIGURE_SETTINGS = {
    'dpi': 150,
    'savefig_dpi': 300,
    'figsize_default': (8, 6),
    'facet_width': 4.5,
    'facet_height': 5.0,
}

# Label sizes in the grammar's size units, converted to points on render
SLICE_LABEL_SIZE = {
    'percentage': 4,
    'counts': 4,
    'both': 3,
}
SIGNIFICANCE_LABEL_SIZE = 5
SAMPLE_SIZE_LABEL_SIZE = 4
SIZE_TO_POINTS = 2.845276
LINE_SIZE_TO_POINTS = 2.134

# Facet annotations sit outside the unit-width stacked bar
FACET_LABEL_OFFSET = 1.65


@dataclass(frozen=True)
class PieAppearance:
    """Fixed appearance of the pie layers"""
    edge_color: str = 'black'
    bar_width: float = 1.0
    label_color: str = 'black'
    label_box_color: str = 'white'


@dataclass(frozen=True)
class DotAppearance:
    """Fixed appearance of the dot chart decorations"""
    grid_color: str = 'black'
    grid_linewidth: float = 0.1
    grid_linestyle: str = 'dashed'
    percentile_axis_name: str = 'percentile'


LINETYPES = {
    'solid': '-',
    'dashed': '--',
    'dotted': ':',
    'dotdash': '-.',
}


def to_points(size: float) -> float:
    """Convert a grammar text size (mm) to matplotlib points"""
    return size * SIZE_TO_POINTS


def line_width(size: float) -> float:
    """Convert a grammar line size to a matplotlib linewidth"""
    return size * LINE_SIZE_TO_POINTS


def setup_plotting_style(style: str = 'whitegrid'):
    """Apply default plotting style"""
    sns.set_style(style)
    plt.rcParams.update({
        'figure.figsize': FIGURE_SETTINGS['figsize_default'],
        'figure.dpi': FIGURE_SETTINGS['dpi'],
        'savefig.dpi': FIGURE_SETTINGS['savefig_dpi'],
        'font.size': 12,
        'axes.labelsize': 14,
        'axes.titlesize': 16,
    })
