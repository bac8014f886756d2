"""
Unit tests for tier layout.
"""

import dataclasses

import numpy as np
import pytest

from sampling_lab.constants import COLS, HEADROOM, MIN_CELL
from sampling_lab.geometry import BOT, MID, MIN_HEIGHT, MIN_WIDTH, TOP, compute_layout


def test_reference_viewport():
    lay = compute_layout(960, 900)
    assert lay.cell == 9
    assert lay.grid_x0 == 210
    assert (lay.top_h, lay.mid_h, lay.bot_h) == (270, 216, 324)
    assert lay.surface_height == 826


def test_degenerate_viewport_is_clamped():
    lay = compute_layout(0, 0)
    assert lay.width == MIN_WIDTH == 392
    assert lay.height == MIN_HEIGHT == 572
    assert lay.cell == MIN_CELL


@pytest.mark.parametrize("size", [(400, 600), (960, 900), (1920, 1080), (3000, 700)])
def test_grid_fits_viewport(size):
    lay = compute_layout(*size)
    assert lay.grid_x0 >= 0
    assert lay.grid_x0 + lay.grid_w <= lay.width
    assert lay.top_h + lay.mid_h + lay.bot_h <= lay.height


def test_layout_is_immutable():
    lay = compute_layout(960, 900)
    with pytest.raises(dataclasses.FrozenInstanceError):
        lay.cell = 12


def test_tiers_are_stacked():
    lay = compute_layout(960, 900)
    assert lay.tier_y(TOP) == lay.margin_y
    assert lay.tier_y(MID) == lay.tier_y(TOP) + lay.top_h
    assert lay.tier_y(BOT) == lay.tier_y(MID) + lay.mid_h
    with pytest.raises(ValueError):
        lay.tier_y("side")


def test_columns():
    lay = compute_layout(960, 900)
    assert lay.col_left(0) == 210
    assert lay.col_center(0) == pytest.approx(214.5)
    assert np.allclose(lay.col_center(np.array([0, 1])), [214.5, 223.5])
    assert lay.col_at(lay.col_center(17)) == 17
    assert lay.col_at(-100) == 0
    assert lay.col_at(10_000) == COLS - 1


def test_value_to_x_is_clamped():
    lay = compute_layout(960, 900)
    assert lay.value_to_x(0.0) == lay.grid_x0
    assert lay.value_to_x(1.0) == lay.grid_x0 + lay.grid_w
    assert lay.value_to_x(5.0) == lay.grid_x0 + lay.grid_w
    assert lay.value_to_x(0.25, 0.0, 0.5) == pytest.approx(lay.grid_x0 + lay.grid_w / 2)


def test_row_height_squashes_tall_stacks():
    lay = compute_layout(960, 900)
    assert lay.row_height(TOP, 0) == lay.cell
    assert lay.row_height(TOP, 20) == lay.cell
    squashed = lay.row_height(MID, 100)
    assert squashed < lay.cell
    assert 100 * squashed == pytest.approx(lay.mid_h - HEADROOM)


def test_slot_y_grows_upward():
    lay = compute_layout(960, 900)
    y0 = lay.slot_y(BOT, 0, lay.cell)
    y1 = lay.slot_y(BOT, 1, lay.cell)
    assert y0 == pytest.approx(lay.tier_base(BOT) - lay.cell / 2)
    assert y1 == pytest.approx(y0 - lay.cell)


def test_hit_population():
    lay = compute_layout(960, 900)
    assert lay.hit_population(lay.col_center(10), 100) == 10
    assert lay.hit_population(lay.col_center(10), lay.tier_y(MID) + 5) is None
