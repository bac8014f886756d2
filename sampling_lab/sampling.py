"""
Weighted sampling from the population histogram.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Sample:
    bins: np.ndarray      # int bin index per draw
    values: np.ndarray    # representative value per draw

    def __len__(self) -> int:
        return int(self.bins.size)


def draw_sample(weights, n: int, rng: np.random.Generator) -> Sample:
    """
    Draw ``n`` independent bins by cumulative-weight inversion.

    Each draw takes one uniform ``u`` from ``rng``; the chosen bin is the
    first whose cumulative weight exceeds ``u * total``, so zero-weight bins
    are never picked. With zero total weight every bin is equally likely.
    The generator advances by exactly ``n`` draws either way.
    """
    w = np.asarray(weights, dtype=float)
    cols = w.size
    n = int(n)
    u = rng.random(n)
    total = float(w.sum())

    if total <= 0:
        bins = np.minimum((u * cols).astype(np.int64), cols - 1)
    else:
        cum = np.cumsum(w)
        bins = np.searchsorted(cum, u * total, side="right")
        bins = np.minimum(bins, cols - 1).astype(np.int64)

    values = (bins + 0.5) / cols
    return Sample(bins=bins, values=values)
