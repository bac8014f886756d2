"""
Sampling Distribution Lab

Animated sampling-distribution (Central Limit Theorem) demonstration: a
painted population histogram is sampled repeatedly and each sample's
statistic is dropped into a sampling-distribution histogram.
"""

from .animation import Phase, Speed
from .config import LabConfig, configure, get_config
from .engine import Engine, RepeatProgress
from .errors import InvalidSampleSize, SamplingLabError, UnknownPreset, UnknownSpeed, UnknownStatistic
from .geometry import Layout, compute_layout
from .population import Population, PopulationStats
from .sampling import Sample, draw_sample
from .statistics import (
    DistributionStats, SampleStats, SamplingDistribution, Statistic, bin_of,
    compute_statistic, domain_for,
)

APP_NAME = "Sampling Distribution Lab"
APP_VERSION = "1.0.0"
__version__ = APP_VERSION
