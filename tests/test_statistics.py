"""
Unit tests for statistic evaluation, binning and the sampling distribution.
"""

import math

import numpy as np
import pytest

from sampling_lab.constants import STAT_BINS
from sampling_lab.errors import UnknownStatistic
from sampling_lab.population import Population
from sampling_lab.statistics import (
    SamplingDistribution, Statistic, bin_of, bin_value, compute_statistic,
    domain_for, parameter_value, summarize_sample,
)

XS = [0.1, 0.2, 0.6, 0.9]


def test_compute_each_statistic():
    assert compute_statistic("mean", XS) == pytest.approx(0.45)
    assert compute_statistic("median", XS) == pytest.approx(0.4)
    assert compute_statistic("sd", XS) == pytest.approx(np.std(XS, ddof=1))
    assert compute_statistic("proportion", XS, threshold=0.5) == pytest.approx(0.5)


def test_proportion_is_strictly_greater():
    assert compute_statistic(Statistic.PROPORTION, [0.5, 0.5, 0.7], threshold=0.5) == pytest.approx(1 / 3)


def test_statistic_parse():
    assert Statistic.parse("MEAN") is Statistic.MEAN
    assert Statistic.parse(Statistic.SD) is Statistic.SD
    with pytest.raises(UnknownStatistic):
        Statistic.parse("mode")
    with pytest.raises(ValueError):
        compute_statistic("iqr", XS)


def test_domains():
    assert domain_for("sd") == (0.0, 0.5)
    for kind in (Statistic.MEAN, Statistic.MEDIAN, Statistic.PROPORTION):
        assert domain_for(kind) == (0.0, 1.0)


def test_every_statistic_has_a_label_and_symbol():
    for kind in Statistic:
        assert kind.label
        assert kind.parameter_symbol


@pytest.mark.parametrize("value, expected", [
    (0.0, 0),
    (0.5, 29),
    (1.0, STAT_BINS - 1),
    (-3.0, 0),
    (7.0, STAT_BINS - 1),
    (float("nan"), 0),
    (float("inf"), STAT_BINS - 1),
])
def test_bin_of(value, expected):
    assert bin_of(value, (0.0, 1.0)) == expected


def test_bin_of_narrow_domain():
    assert bin_of(0.25, (0.0, 0.5)) == 29
    assert bin_of(0.6, (0.0, 0.5)) == STAT_BINS - 1


def test_bin_value_is_bin_centre():
    assert bin_value(0, (0.0, 1.0)) == pytest.approx(0.5 / STAT_BINS)
    assert bin_value(59, (0.0, 0.5)) == pytest.approx(0.5 * 59.5 / STAT_BINS)


def test_parameter_value_per_statistic():
    stats = Population(preset="uniform").summary_stats(threshold=0.25)
    assert parameter_value("mean", stats) == pytest.approx(stats.mu)
    assert parameter_value("median", stats) == pytest.approx(stats.median)
    assert parameter_value("sd", stats) == pytest.approx(stats.sd)
    assert parameter_value("proportion", stats) == pytest.approx(0.75)


def test_summarize_sample():
    ss = summarize_sample("mean", XS, 0.5, population_sd=0.2)
    assert ss.n == 4
    assert ss.value == pytest.approx(0.45)
    assert ss.se == pytest.approx(ss.sd / 2)
    assert ss.theoretical_se == pytest.approx(0.1)


def test_summarize_single_value_sample():
    ss = summarize_sample("sd", [0.3], 0.5, population_sd=0.2)
    assert ss.sd == 0.0
    assert ss.value == 0.0


def test_sampling_distribution_accumulates():
    dist = SamplingDistribution()
    assert dist.total == 0
    summary = dist.summary((0.0, 1.0))
    assert summary.count == 0
    assert math.isnan(summary.mean) and math.isnan(summary.sd)

    dist.add(29)
    dist.add(29)
    summary = dist.summary((0.0, 1.0))
    assert summary.count == 2
    assert summary.mean == pytest.approx(29.5 / STAT_BINS)
    assert summary.sd == pytest.approx(0.0)


def test_sampling_distribution_add_many_counts_repeats():
    dist = SamplingDistribution()
    dist.add_many([3, 3, 3, 10])
    assert dist.counts[3] == 3
    assert dist.counts[10] == 1
    assert dist.total == 4
    dist.reset()
    assert dist.total == 0


@pytest.mark.parametrize("domain", [(0.0, 1.0), (0.0, 0.5)])
def test_bin_of_is_monotone_and_in_range(domain):
    bins = np.array([bin_of(v, domain) for v in np.linspace(-1.0, 2.0, 2001)])
    assert (np.diff(bins) >= 0).all()
    assert bins.min() == 0
    assert bins.max() == STAT_BINS - 1


def test_statistic_tables_cover_every_member():
    from sampling_lab import statistics

    for table in (statistics._EVALUATORS, statistics._DOMAINS, statistics._PARAMETER_SYMBOLS):
        assert set(table) == set(Statistic)
