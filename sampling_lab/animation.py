"""
Schedules driven by the engine's tick: emission plans, gather operations,
population flashes and queued draw requests.

These objects only describe timing and geometry; the engine decides when
histograms change.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .errors import UnknownSpeed


class Phase(str, enum.Enum):
    IDLE = "idle"
    EMITTING = "emitting"
    GATHERING = "gathering"


class Speed(str, enum.Enum):
    NORMAL = "normal"
    FAST = "fast"

    @classmethod
    def parse(cls, mode) -> "Speed":
        if isinstance(mode, cls):
            return mode
        try:
            return cls(str(mode).lower())
        except ValueError:
            raise UnknownSpeed(f"Unknown speed mode: {mode!r}") from None


@dataclass(frozen=True)
class DrawRequest:
    n: int
    drop_ms: float
    gather_ms: float
    fast: bool = False
    repeat: bool = False


@dataclass
class EmissionPlan:
    start: float
    end: float
    bins: np.ndarray
    values: np.ndarray
    emitted: int = 0

    @property
    def total(self) -> int:
        return int(self.bins.size)

    @property
    def done(self) -> bool:
        return self.emitted >= self.total

    def fraction(self, now: float) -> float:
        span = self.end - self.start
        if span <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.start) / span))

    def due(self, now: float) -> int:
        """
        Number of particles to release at ``now`` so releases keep pace
        linearly with elapsed time, whatever the frame timing.
        """
        f = self.fraction(now)
        to_emit = math.floor(f * self.total) - self.emitted
        if f >= 1.0:
            to_emit = self.total - self.emitted
        return max(0, min(to_emit, self.total - self.emitted))


@dataclass
class GatherOperation:
    start: float
    duration: float
    start_x: np.ndarray
    start_y: np.ndarray
    target_x: float
    target_y: float
    bin: int
    value: float
    values: np.ndarray
    pending: Optional[DrawRequest] = None
    x: np.ndarray = field(init=False)
    y: np.ndarray = field(init=False)

    def __post_init__(self):
        self.x = self.start_x.copy()
        self.y = self.start_y.copy()

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.start) / self.duration))

    def advance(self, now: float) -> bool:
        """Move captured particles toward the target; True once they arrive."""
        t = self.progress(now)
        self.x = self.start_x + (self.target_x - self.start_x) * t
        self.y = self.start_y + (self.target_y - self.start_y) * t
        return t >= 1.0


@dataclass(frozen=True)
class Flash:
    col: int
    y: float
    until: float
