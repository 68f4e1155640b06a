"""Discrete colour palettes for the fill scale"""

import logging
import warnings
from typing import List, Tuple, Union

import seaborn as sns

from ..core.exceptions import InsufficientPaletteError

logger = logging.getLogger(__name__)

# Indexed (1-based) when a palette is given as a number
QUALITATIVE_PALETTES = (
    'Accent', 'Dark2', 'Paired', 'Pastel1', 'Pastel2', 'Set1', 'Set2', 'Set3',
    'tab10', 'tab20', 'tab20b', 'tab20c',
)

PaletteRef = Union[str, int]
RGB = Tuple[float, float, float]


def resolve_palette_name(palette: PaletteRef) -> str:
    """Turn a palette index into its name; names pass through"""
    if isinstance(palette, bool):
        raise ValueError(f"Invalid palette {palette!r}")
    if isinstance(palette, int):
        if not 1 <= palette <= len(QUALITATIVE_PALETTES):
            raise ValueError(
                f"Palette index must be between 1 and {len(QUALITATIVE_PALETTES)}, got {palette}"
            )
        return QUALITATIVE_PALETTES[palette - 1]
    return palette


def palette_colors(palette: PaletteRef) -> List[RGB]:
    """All colours of a named or indexed palette"""
    name = resolve_palette_name(palette)
    try:
        return list(sns.color_palette(name))
    except ValueError:
        raise ValueError(f"Unknown palette '{name}'") from None


def get_palette(palette: PaletteRef, n_colors: int, direction: int = 1) -> List[RGB]:
    """
    ``n_colors`` colours from ``palette``

    Args:
        palette: Palette name or 1-based index into QUALITATIVE_PALETTES
        n_colors: Number of colours needed
        direction: 1 for the palette order, -1 to reverse it

    Returns:
        List of RGB tuples; colours repeat when the palette is too short
    """
    if direction not in (1, -1):
        raise ValueError(f"'direction' must be 1 or -1, got {direction}")

    colors = palette_colors(palette)
    if direction == -1:
        colors = colors[::-1]
    return [colors[i % len(colors)] for i in range(n_colors)]


def palette_message(palette: PaletteRef, min_length: int) -> bool:
    """
    Warn when ``palette`` has fewer colours than ``min_length``

    Returns:
        True if the palette is long enough
    """
    available = len(palette_colors(palette))
    if min_length <= available:
        return True

    message = (
        f"Number of labels ({min_length}) is greater than the number of colours "
        f"in palette '{resolve_palette_name(palette)}' ({available}). "
        "Colours will be recycled; try using another `palette`."
    )
    logger.warning(message)
    warnings.warn(message, InsufficientPaletteError, stacklevel=2)
    return False
