"""
Population model: a fixed-size histogram of non-negative integer weights
over ``[0, 1]``.

Bin ``c`` stands for the value ``(c + 0.5) / N``. Weights are replaced by the
preset generators or edited one bin at a time by painting. Summary
statistics treat the histogram as a fully enumerated population, so the SD
divides by the total weight (not total - 1).
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .constants import COLS, MAX_WEIGHT, PRESETS, PRESET_SCALE
from .errors import UnknownPreset


@dataclass(frozen=True)
class PopulationStats:
    mu: float
    sd: float
    median: float
    p_threshold: float
    total: int


def bin_centers(cols: int = COLS) -> np.ndarray:
    return (np.arange(cols, dtype=float) + 0.5) / cols


# ----------------------------
# Preset shapes
# ----------------------------
def preset_shape(name: str, xs: np.ndarray) -> np.ndarray:
    """
    Unnormalised preset density evaluated at the bin values ``xs``.
    """
    xs = np.asarray(xs, dtype=float)

    if name == "uniform":
        return np.ones_like(xs)

    if name == "normal":
        z = (xs - 0.5) / 0.16
        return np.exp(-0.5 * z * z)

    if name == "bimodal":
        z1 = (xs - 0.32) / 0.07
        z2 = (xs - 0.72) / 0.07
        return 0.55 * np.exp(-0.5 * z1 * z1) + 0.45 * np.exp(-0.5 * z2 * z2)

    if name == "lognormal":
        # right-skewed: log-normal kernel with log-mean ln(0.3), log-sd 0.6
        safe = np.maximum(xs, 1e-4)
        z = (np.log(safe) - np.log(0.3)) / 0.6
        return np.exp(-0.5 * z * z) / safe

    raise UnknownPreset(f"Unknown population preset: {name!r} (expected one of {', '.join(PRESETS)})")


def preset_weights(name: str, cols: int = COLS) -> np.ndarray:
    w = preset_shape(name, bin_centers(cols))
    # round half up, then clamp into the paintable range
    counts = np.floor(w * PRESET_SCALE + 0.5)
    return np.clip(counts, 0, MAX_WEIGHT).astype(np.int64)


# ----------------------------
# Model
# ----------------------------
class Population:
    def __init__(self, cols: int = COLS, preset: Optional[str] = "normal"):
        self.cols = int(cols)
        self.values = bin_centers(self.cols)
        self._weights = np.zeros(self.cols, dtype=np.int64)
        self._version = 0
        self._stats_cache: Optional[Tuple[float, PopulationStats]] = None
        if preset is not None:
            self.apply_preset(preset)

    @property
    def weights(self) -> np.ndarray:
        """Read-only view of the weights."""
        view = self._weights.view()
        view.flags.writeable = False
        return view

    @property
    def total(self) -> int:
        return int(self._weights.sum())

    @property
    def version(self) -> int:
        """Incremented on every mutation; derived caches key on it."""
        return self._version

    def _changed(self) -> None:
        self._version += 1
        self._stats_cache = None

    def apply_preset(self, name: str) -> None:
        self._weights = preset_weights(name, self.cols)
        self._changed()

    def replace(self, weights) -> None:
        w = np.asarray(weights, dtype=float)
        if w.shape != (self.cols,):
            raise ValueError(f"expected {self.cols} weights, got shape {w.shape}")
        if not np.isfinite(w).all():
            raise ValueError("weights must be finite")
        self._weights = np.clip(np.rint(w), 0, MAX_WEIGHT).astype(np.int64)
        self._changed()

    def paint(self, col: int, delta: int = 1) -> int:
        """
        Add ``delta`` to one bin, clamped to ``[0, MAX_WEIGHT]``.
        Returns the change actually applied.
        """
        col = int(col)
        if not 0 <= col < self.cols:
            raise IndexError(f"bin {col} outside 0..{self.cols - 1}")
        before = int(self._weights[col])
        after = min(MAX_WEIGHT, max(0, before + int(delta)))
        if after != before:
            self._weights[col] = after
            self._changed()
        return after - before

    def summary_stats(self, threshold: float = 0.5) -> PopulationStats:
        key = float(threshold)
        # only the most recent threshold is kept
        if self._stats_cache is not None and self._stats_cache[0] == key:
            return self._stats_cache[1]

        w = self._weights.astype(float)
        xs = self.values
        total = float(w.sum())
        if total <= 0:
            stats = PopulationStats(mu=0.5, sd=0.0, median=0.5, p_threshold=0.0, total=0)
        else:
            mu = float(np.dot(w, xs) / total)
            s2 = float(np.dot(w, (xs - mu) ** 2) / total)
            cum = np.cumsum(w)
            med_bin = int(np.argmax(cum >= total / 2.0))
            greater = float(w[xs > key].sum())
            stats = PopulationStats(
                mu=mu,
                sd=float(np.sqrt(max(s2, 0.0))),
                median=float(xs[med_bin]),
                p_threshold=greater / total,
                total=int(total),
            )
        self._stats_cache = (key, stats)
        return stats
