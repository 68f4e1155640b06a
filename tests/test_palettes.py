"""Test suite for fill palettes"""

import warnings

import pytest
import seaborn as sns

from statsplot.core.exceptions import InsufficientPaletteError
from statsplot.visualization.palettes import (
    QUALITATIVE_PALETTES, get_palette, palette_colors, palette_message,
    resolve_palette_name
)


def test_named_palette():
    colors = get_palette('Dark2', 3)
    assert colors == list(sns.color_palette('Dark2'))[:3]


def test_indexed_palette():
    assert resolve_palette_name(2) == 'Dark2'
    assert get_palette(2, 3) == get_palette('Dark2', 3)
    with pytest.raises(ValueError, match="between 1 and"):
        resolve_palette_name(len(QUALITATIVE_PALETTES) + 1)


def test_reversed_palette():
    full = palette_colors('Dark2')
    assert get_palette('Dark2', 1, direction=-1)[0] == full[-1]
    with pytest.raises(ValueError, match="direction"):
        get_palette('Dark2', 2, direction=0)


def test_colours_recycled():
    colors = get_palette('Dark2', 10)
    assert len(colors) == 10
    assert colors[8] == colors[0]


def test_unknown_palette():
    with pytest.raises(ValueError, match="Unknown palette"):
        get_palette('NotAPalette', 3)
    with pytest.raises(ValueError):
        resolve_palette_name(True)


def test_palette_message_warns_when_short(caplog):
    with pytest.warns(InsufficientPaletteError, match="greater than the number of colours"):
        assert palette_message('Dark2', 12) is False
    assert "Colours will be recycled" in caplog.text


def test_palette_message_silent_when_long_enough():
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        assert palette_message('Set3', 12) is True
