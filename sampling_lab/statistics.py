"""
Statistic aggregator.

The supported statistics form a closed set (``Statistic``). Each member has
exactly one evaluation function and one value domain; both tables are
checked for completeness at import time.
"""

import enum
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from .constants import STAT_BINS
from .errors import UnknownStatistic
from .numeric import mean, median, stat_label, standard_deviation
from .population import PopulationStats

Domain = Tuple[float, float]


class Statistic(str, enum.Enum):
    MEAN = "mean"
    MEDIAN = "median"
    SD = "sd"
    PROPORTION = "proportion"

    @classmethod
    def parse(cls, kind) -> "Statistic":
        if isinstance(kind, cls):
            return kind
        try:
            return cls(str(kind).lower())
        except ValueError:
            raise UnknownStatistic(f"Unknown statistic: {kind!r}") from None

    @property
    def label(self) -> str:
        return stat_label(self.value)

    @property
    def parameter_symbol(self) -> str:
        return _PARAMETER_SYMBOLS[self]


def _proportion(xs: np.ndarray, threshold: float) -> float:
    if xs.size == 0:
        return float("nan")
    return float(np.count_nonzero(xs > threshold) / xs.size)


_EVALUATORS: Dict[Statistic, Callable[[np.ndarray, float], float]] = {
    Statistic.MEAN: lambda xs, _t: mean(xs),
    Statistic.MEDIAN: lambda xs, _t: median(xs),
    Statistic.SD: lambda xs, _t: standard_deviation(xs),
    Statistic.PROPORTION: _proportion,
}

# SD of the supported populations stays well below 0.5, hence the narrower domain.
_DOMAINS: Dict[Statistic, Domain] = {
    Statistic.MEAN: (0.0, 1.0),
    Statistic.MEDIAN: (0.0, 1.0),
    Statistic.SD: (0.0, 0.5),
    Statistic.PROPORTION: (0.0, 1.0),
}

_PARAMETER_SYMBOLS: Dict[Statistic, str] = {
    Statistic.MEAN: "μ",
    Statistic.MEDIAN: "μ̃",
    Statistic.SD: "σ",
    Statistic.PROPORTION: "π",
}

for _table in (_EVALUATORS, _DOMAINS, _PARAMETER_SYMBOLS):
    if set(_table) != set(Statistic):
        raise RuntimeError("statistic table out of sync with Statistic")


# ----------------------------
# Evaluation and binning
# ----------------------------
def compute_statistic(kind, xs, threshold: float = 0.5) -> float:
    kind = Statistic.parse(kind)
    return _EVALUATORS[kind](np.asarray(xs, dtype=float), float(threshold))


def domain_for(kind) -> Domain:
    return _DOMAINS[Statistic.parse(kind)]


def bin_of(value: float, domain: Domain, bin_count: int = STAT_BINS) -> int:
    """
    Map ``value`` linearly onto ``[0, bin_count - 1]``. Values outside the
    domain saturate to the edge bins; NaN maps to bin 0.
    """
    lo, hi = domain
    value = float(value)
    if np.isnan(value):
        return 0
    x01 = min(1.0, max(0.0, (value - lo) / (hi - lo + 1e-9)))
    return min(bin_count - 1, int(np.floor(x01 * bin_count)))


def bin_value(b: int, domain: Domain, bin_count: int = STAT_BINS) -> float:
    lo, hi = domain
    return lo + (b + 0.5) / bin_count * (hi - lo)


def parameter_value(kind, stats: PopulationStats) -> float:
    """Population-level value of the statistic (the parameter line)."""
    kind = Statistic.parse(kind)
    if kind is Statistic.MEAN:
        return stats.mu
    if kind is Statistic.MEDIAN:
        return stats.median
    if kind is Statistic.SD:
        return stats.sd
    return stats.p_threshold


# ----------------------------
# Summaries
# ----------------------------
@dataclass(frozen=True)
class SampleStats:
    n: int
    value: float
    sd: float
    se: float
    theoretical_se: float


@dataclass(frozen=True)
class DistributionStats:
    count: int
    mean: float
    sd: float


def summarize_sample(kind, xs, threshold: float, population_sd: float) -> SampleStats:
    xs = np.asarray(xs, dtype=float)
    n = int(xs.size)
    s = standard_deviation(xs)
    sqn = np.sqrt(n)
    return SampleStats(
        n=n,
        value=compute_statistic(kind, xs, threshold),
        sd=s,
        se=float(s / max(1e-9, sqn)),
        theoretical_se=float(population_sd / max(1e-9, sqn)),
    )


class SamplingDistribution:
    """Accumulated histogram of the statistic over repeated samples."""

    def __init__(self, bins: int = STAT_BINS):
        self.bins = int(bins)
        self.counts = np.zeros(self.bins, dtype=np.int64)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def add(self, b: int, count: int = 1) -> None:
        self.counts[int(b)] += int(count)

    def add_many(self, bins) -> None:
        np.add.at(self.counts, np.asarray(bins, dtype=np.int64), 1)

    def reset(self) -> None:
        self.counts[:] = 0

    def summary(self, domain: Domain) -> DistributionStats:
        total = self.total
        if total == 0:
            return DistributionStats(count=0, mean=float("nan"), sd=float("nan"))
        vals = np.array([bin_value(b, domain, self.bins) for b in range(self.bins)])
        w = self.counts.astype(float)
        m = float(np.dot(w, vals) / total)
        s2 = float(np.dot(w, (vals - m) ** 2) / total)
        return DistributionStats(count=total, mean=m, sd=float(np.sqrt(max(0.0, s2))))
