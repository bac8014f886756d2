"""
Unit tests for weighted sampling.
"""

import numpy as np

from sampling_lab.constants import COLS
from sampling_lab.numeric import make_rng
from sampling_lab.population import preset_weights
from sampling_lab.sampling import draw_sample


def test_same_seed_same_sample():
    w = preset_weights("bimodal")
    a = draw_sample(w, 50, make_rng(11))
    b = draw_sample(w, 50, make_rng(11))
    assert np.array_equal(a.bins, b.bins)
    assert np.array_equal(a.values, b.values)
    assert len(a) == 50


def test_generator_advances_exactly_n_draws():
    w = preset_weights("normal")
    rng = make_rng(5)
    draw_sample(w, 17, rng)
    ref = make_rng(5)
    ref.random(17)
    assert rng.random() == ref.random()


def test_values_are_bin_centres():
    s = draw_sample(preset_weights("uniform"), 100, make_rng(3))
    assert np.allclose(s.values, (s.bins + 0.5) / COLS)
    assert ((s.values > 0) & (s.values < 1)).all()


def test_zero_weight_bins_never_drawn():
    w = np.zeros(COLS, dtype=int)
    w[3] = 1
    w[7] = 5
    s = draw_sample(w, 500, make_rng(2))
    assert set(s.bins.tolist()) <= {3, 7}
    assert np.count_nonzero(s.bins == 7) > np.count_nonzero(s.bins == 3)


def test_zero_total_falls_back_to_uniform_bins():
    s = draw_sample(np.zeros(COLS), 2000, make_rng(8))
    assert s.bins.min() >= 0 and s.bins.max() <= COLS - 1
    assert len(np.unique(s.bins)) > COLS // 2
