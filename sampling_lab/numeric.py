"""
Numeric utilities: seeded generator, descriptive statistics, normal density
and sample-size validation.

Undefined results are reported as NaN, never as zero, except for
``standard_deviation`` which falls back to 0 so that a one-element sample
still renders.
"""

from typing import Sequence, Union

import numpy as np

from .constants import MAX_SAMPLE_SIZE, MIN_SAMPLE_SIZE
from .errors import InvalidSampleSize

ArrayLike = Union[Sequence[float], np.ndarray]

_STAT_LABELS = {
    "mean": "x̄",
    "median": "Median",
    "sd": "s",
    "proportion": "p̂",
}


# ----------------------------
# Random numbers
# ----------------------------
def make_rng(seed: int) -> np.random.Generator:
    """
    Return an independent generator for a 32-bit seed.

    Two generators built from the same seed produce the same stream; there is
    no shared global state between instances.
    """
    return np.random.default_rng(int(seed) & 0xFFFFFFFF)


def parse_seed(value) -> int:
    """Coerce user input to a seed; anything unparsable becomes 0."""
    try:
        return int(value) & 0xFFFFFFFF
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value)) & 0xFFFFFFFF
    except (TypeError, ValueError, OverflowError):
        return 0


# ----------------------------
# Descriptive statistics
# ----------------------------
def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def mean(xs: ArrayLike) -> float:
    a = np.asarray(xs, dtype=float)
    if a.size == 0:
        return float("nan")
    return float(a.sum() / a.size)


def variance(xs: ArrayLike) -> float:
    """Unbiased sample variance, two-pass. NaN when fewer than two values."""
    a = np.asarray(xs, dtype=float)
    n = a.size
    if n < 2:
        return float("nan")
    m = a.sum() / n
    return float(np.sum((a - m) ** 2) / (n - 1))


def standard_deviation(xs: ArrayLike) -> float:
    v = variance(xs)
    if np.isfinite(v) and v >= 0:
        return float(np.sqrt(v))
    return 0.0


def median(xs: ArrayLike) -> float:
    b = np.sort(np.asarray(xs, dtype=float))
    n = b.size
    if n == 0:
        return float("nan")
    mid = n // 2
    if n % 2:
        return float(b[mid])
    return float(0.5 * (b[mid - 1] + b[mid]))


def normal_density(x, mu: float, sigma: float):
    """
    Gaussian PDF at ``x`` (scalar or array). Returns zeros when sigma is
    effectively zero.
    """
    x = np.asarray(x, dtype=float)
    if not sigma > 1e-12:
        out = np.zeros_like(x)
    else:
        out = np.exp(-0.5 * ((x - mu) / sigma) ** 2) / (sigma * np.sqrt(2.0 * np.pi))
    return float(out) if out.ndim == 0 else out


def stat_label(kind) -> str:
    key = getattr(kind, "value", kind)
    return _STAT_LABELS[key]


# ----------------------------
# Validation
# ----------------------------
def validate_sample_size(n) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer, float, np.floating)):
        raise InvalidSampleSize(n, f"Sample size must be a whole number, got {n!r}")
    if not np.isfinite(n) or int(n) != n:
        raise InvalidSampleSize(n, f"Sample size must be a whole number, got {n!r}")
    n = int(n)
    if n < MIN_SAMPLE_SIZE:
        raise InvalidSampleSize(n, f"Sample size must be at least {MIN_SAMPLE_SIZE}")
    if n > MAX_SAMPLE_SIZE:
        raise InvalidSampleSize(n, f"Sample size too large (max {MAX_SAMPLE_SIZE})")
    return n
