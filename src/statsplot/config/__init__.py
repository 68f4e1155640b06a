"""Configuration package"""

from .settings import *
from .plotting import (
    FIGURE_SETTINGS, PieAppearance, DotAppearance, setup_plotting_style
)
