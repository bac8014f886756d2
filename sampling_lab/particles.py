"""
Arena of falling particles.

Particles live in parallel numpy columns with a live count; removal swaps the
last live particle into the freed slot, so the arena never shifts or
reallocates per frame.
"""

import numpy as np

from .constants import LAND_EPSILON


class ParticleArena:
    def __init__(self, capacity: int = 64):
        capacity = max(1, int(capacity))
        self.x = np.zeros(capacity)
        self.y = np.zeros(capacity)
        self.vy = np.zeros(capacity)
        self.target_y = np.zeros(capacity)
        self.bin = np.zeros(capacity, dtype=np.int64)
        self.size = 0

    def __len__(self) -> int:
        return self.size

    def __bool__(self) -> bool:
        return self.size > 0

    @property
    def capacity(self) -> int:
        return self.x.size

    def _grow(self) -> None:
        cap = self.capacity * 2
        for name in ("x", "y", "vy", "target_y", "bin"):
            old = getattr(self, name)
            new = np.zeros(cap, dtype=old.dtype)
            new[: self.size] = old[: self.size]
            setattr(self, name, new)

    def spawn(self, x: float, y: float, target_y: float, b: int, vy: float = 0.0) -> int:
        if self.size == self.capacity:
            self._grow()
        i = self.size
        self.x[i] = x
        self.y[i] = y
        self.vy[i] = vy
        self.target_y[i] = target_y
        self.bin[i] = b
        self.size += 1
        return i

    def remove_at(self, i: int) -> int:
        """Remove particle ``i`` by swapping the last one in; returns its bin."""
        if not 0 <= i < self.size:
            raise IndexError(i)
        b = int(self.bin[i])
        last = self.size - 1
        if i != last:
            self.x[i] = self.x[last]
            self.y[i] = self.y[last]
            self.vy[i] = self.vy[last]
            self.target_y[i] = self.target_y[last]
            self.bin[i] = self.bin[last]
        self.size = last
        return b

    def clear(self) -> None:
        self.size = 0

    def live_bins(self) -> np.ndarray:
        return self.bin[: self.size]

    def count_by_bin(self, bins: int) -> np.ndarray:
        return np.bincount(self.live_bins(), minlength=bins)

    def count_in_bin(self, b: int) -> int:
        return int(np.count_nonzero(self.live_bins() == b))

    def positions(self):
        return self.x[: self.size], self.y[: self.size]

    def step(self, dt: float, gravity: float) -> np.ndarray:
        """
        Advance every live particle by ``dt`` seconds under constant
        acceleration. Particles never pass their target; those within
        ``LAND_EPSILON`` of it are removed and their bins returned.
        """
        n = self.size
        if n == 0:
            return np.zeros(0, dtype=np.int64)
        vy = self.vy[:n]
        y = self.y[:n]
        vy += gravity * dt
        np.minimum(y + vy * dt, self.target_y[:n], out=y)
        landed = np.flatnonzero(y >= self.target_y[:n] - LAND_EPSILON)
        return self._remove_indices(landed)

    def land_all(self) -> np.ndarray:
        """Drop every particle onto its target at once; returns their bins."""
        bins = self.live_bins().copy()
        self.size = 0
        return bins

    def _remove_indices(self, idx: np.ndarray) -> np.ndarray:
        out = np.empty(idx.size, dtype=np.int64)
        # descending, so each swap pulls in a particle that is not itself pending
        for k, i in enumerate(idx[::-1]):
            out[k] = self.remove_at(int(i))
        return out
