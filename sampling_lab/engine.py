"""
Sampling-distribution engine.

Owns the population, the current sample and the sampling distribution, and
animates values between the three tiers. The host drives it once per frame::

    engine.tick(dt_seconds, now_millis)
    engine.render()          # draws only when something changed

Histograms change only when a particle lands. A new ``draw_sample`` while an
animation is running first resolves that animation to completion (every
pending particle lands at once), so no sample is ever lost.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from .animation import DrawRequest, EmissionPlan, Flash, GatherOperation, Phase, Speed
from .config import LabConfig, get_config
from .constants import COLS
from .errors import InvalidSampleSize
from .geometry import BOT, MID, TOP, Layout, compute_layout
from .log import get_logger
from .numeric import clamp, make_rng, parse_seed, validate_sample_size
from .particles import ParticleArena
from .population import Population, PopulationStats
from .render import RowHeights, Scene, draw_scene
from .sampling import draw_sample
from .scheduler import RedrawScheduler
from .statistics import (
    DistributionStats, SampleStats, SamplingDistribution, Statistic, bin_of,
    compute_statistic, domain_for, parameter_value, summarize_sample,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepeatProgress:
    current: int
    total: int
    running: bool


class Engine:
    def __init__(
        self,
        surface=None,
        width: float = 960,
        height: float = 900,
        *,
        config: Optional[LabConfig] = None,
        cols: int = COLS,
        preset: str = "normal",
    ):
        """
        Parameters
        ----------
        surface : matplotlib.figure.Figure or None
            Figure to draw on. ``None`` runs headless: ``render`` still
            clears the dirty flag but draws nothing.
        width, height : float
            Initial viewport size in pixels.
        config : LabConfig, optional
            Timings and physics; defaults to the global configuration.
        """
        self.config = config if config is not None else get_config()
        self.surface = surface
        self.cols = int(cols)

        self.population = Population(self.cols, preset=preset)
        self.sample_counts = np.zeros(self.cols, dtype=np.int64)
        self.distribution = SamplingDistribution(self.cols)

        self.statistic = Statistic.MEAN
        self.threshold = 0.5
        self.speed = Speed.NORMAL
        self.show_parameter_line = True
        self.show_normal_fit = False
        self.seed = parse_seed(self.config.seed)
        self._rng = make_rng(self.seed)

        self.layout: Layout = compute_layout(width, height, self.cols)
        self._scheduler = RedrawScheduler()
        self._now = 0.0

        self._sample_values = np.zeros(0)
        self._emission: Optional[EmissionPlan] = None
        self._gather: Optional[GatherOperation] = None
        self._drops = ParticleArena()
        self._stat_drops = ParticleArena()
        self._flashes: List[Flash] = []
        self._fast_active = False
        self.last_statistic: Optional[float] = None

        self._queue: deque = deque()
        self._repeat_done = 0
        self._repeat_total = 0

        self._idle_listeners: List[Callable[["Engine"], None]] = []
        self._was_idle = True

    # ----------------------------
    # State queries
    # ----------------------------
    @property
    def now(self) -> float:
        return self._now

    @property
    def dirty(self) -> bool:
        return self._scheduler.dirty

    @property
    def phase(self) -> Phase:
        if self._emission is not None or self._drops:
            return Phase.EMITTING
        if self._gather is not None or self._stat_drops:
            return Phase.GATHERING
        return Phase.IDLE

    @property
    def is_idle(self) -> bool:
        return not self._has_work() and not self._queue

    @property
    def surface_height(self) -> int:
        return self.layout.surface_height

    @property
    def repeat_progress(self) -> RepeatProgress:
        running = bool(self._queue) or (self._repeat_total > 0 and not self.is_idle)
        return RepeatProgress(self._repeat_done, self._repeat_total, running)

    @property
    def particles_in_flight(self) -> Tuple[int, int]:
        """(sample-tier particles, sampling-distribution particles) still falling."""
        return len(self._drops), len(self._stat_drops)

    @property
    def sample_values(self) -> np.ndarray:
        """Values of the current sample, including particles still falling."""
        return self._current_values().copy()

    def has_current_sample(self) -> bool:
        return self._sample_values.size > 0 or bool(self.sample_counts.any())

    def population_stats(self) -> PopulationStats:
        return self.population.summary_stats(self.threshold)

    def parameter_value(self) -> float:
        return parameter_value(self.statistic, self.population_stats())

    def sample_stats(self) -> Optional[SampleStats]:
        values = self._gather.values if self._gather is not None else self._current_values()
        if values.size == 0:
            return None
        return summarize_sample(self.statistic, values, self.threshold, self.population_stats().sd)

    def distribution_stats(self) -> DistributionStats:
        return self.distribution.summary(domain_for(self.statistic))

    def add_idle_listener(self, callback: Callable[["Engine"], None]) -> None:
        self._idle_listeners.append(callback)

    def remove_idle_listener(self, callback: Callable[["Engine"], None]) -> None:
        self._idle_listeners.remove(callback)

    # ----------------------------
    # Mutators
    # ----------------------------
    def set_population_preset(self, name: str) -> None:
        self.population.apply_preset(name)
        logger.debug("population preset %s", name)
        self._scheduler.mark()

    def paint_population(self, col: int, delta: int = 1) -> int:
        applied = self.population.paint(col, delta)
        if applied:
            self._scheduler.mark()
        return applied

    def paint_at(self, x: float, y: float, *, erase: bool = False) -> int:
        """Paint the population column under a surface point (if any)."""
        col = self.layout.hit_population(x, y)
        if col is None:
            return 0
        return self.paint_population(col, -1 if erase else 1)

    def set_statistic(self, kind) -> None:
        self.statistic = Statistic.parse(kind)
        self._scheduler.mark()

    def set_threshold(self, t: float) -> None:
        self.threshold = clamp(float(t), 0.0, 1.0)
        self._scheduler.mark()

    def set_speed(self, mode) -> None:
        self.speed = Speed.parse(mode)

    def set_seed(self, value) -> None:
        self.seed = parse_seed(value)
        self._rng = make_rng(self.seed)

    def set_show_parameter_line(self, show: bool) -> None:
        self.show_parameter_line = bool(show)
        self._scheduler.mark()

    def set_show_normal_fit(self, show: bool) -> None:
        self.show_normal_fit = bool(show)
        self._scheduler.mark()

    def resize(self, width: float, height: float) -> Layout:
        layout = compute_layout(width, height, self.cols)
        if layout != self.layout:
            old, self.layout = self.layout, layout
            self._reproject(old)
        self._scheduler.mark()
        return self.layout

    # ----------------------------
    # Actions
    # ----------------------------
    def draw_sample(self, n: int, duration_ms: Optional[float] = None) -> None:
        """
        Draw a sample of size ``n`` and animate it into the sample tier.

        Any running animation is resolved first. If a sample is already in
        the tier it is gathered into the sampling distribution, and the new
        sample drops once the gather finishes.
        """
        n = self._validated(n)
        fast = self.speed is Speed.FAST
        if duration_ms is None:
            duration_ms = self.config.fast_drop_ms if fast else self.config.drop_ms
        request = DrawRequest(n=n, drop_ms=float(duration_ms), gather_ms=self.config.gather_ms, fast=fast)

        self.cancel_repeat()
        self._resolve_active()
        logger.debug("draw sample n=%d drop=%.0fms", n, duration_ms)
        self._begin(request)
        self._scheduler.mark()

    def gather(self) -> bool:
        """
        Collapse the current sample into the sampling distribution without
        drawing a new one. Returns False when there is nothing to gather.
        """
        self._resolve_active()
        if not self.has_current_sample():
            return False
        self._was_idle = False
        self._start_gather(None)
        self._scheduler.mark()
        return True

    def repeat(self, n: int, times: int = 10) -> None:
        """Queue ``times`` animated draw+gather cycles at fast speed."""
        n = self._validated(n)
        times = int(times)
        if times < 0:
            raise ValueError(f"times must be non-negative, got {times}")
        if not self._queue:
            self._repeat_done = 0
            self._repeat_total = 0
        request = DrawRequest(
            n=n,
            drop_ms=self.config.fast_drop_ms,
            gather_ms=self.config.fast_gather_ms,
            fast=True,
            repeat=True,
        )
        self._queue.extend([request] * times)
        self._repeat_total += times
        logger.info("queued %d repeats of n=%d", times, n)
        if not self._has_work():
            self._pump_queue()
        self._scheduler.mark()

    def cancel_repeat(self) -> None:
        """Drop queued repeats that have not started; running ones finish."""
        if self._queue:
            logger.debug("cancelled %d queued repeats", len(self._queue))
        self._queue.clear()
        self._repeat_done = 0
        self._repeat_total = 0

    def turbo_repeat(self, n: int, times: int = 1000) -> None:
        """Accumulate ``times`` statistics straight into the distribution."""
        n = self._validated(n)
        times = int(times)
        if times < 0:
            raise ValueError(f"times must be non-negative, got {times}")
        weights = self.population.weights
        domain = domain_for(self.statistic)
        bins = np.empty(times, dtype=np.int64)
        for i in range(times):
            sample = draw_sample(weights, n, self._rng)
            value = compute_statistic(self.statistic, sample.values, self.threshold)
            bins[i] = bin_of(value, domain, self.distribution.bins)
        self.distribution.add_many(bins)
        logger.info("turbo repeat: %d samples of n=%d", times, n)
        self._scheduler.mark()

    def reset_sample(self) -> None:
        """Discard the current sample and anything dropping into the sample tier."""
        self.cancel_repeat()
        self.sample_counts[:] = 0
        self._sample_values = np.zeros(0)
        self._emission = None
        self._gather = None
        self._drops.clear()
        self._flashes.clear()
        self._scheduler.mark()
        self._notify_idle()

    def reset_distribution(self) -> None:
        self.distribution.reset()
        self._stat_drops.clear()
        self.last_statistic = None
        logger.info("sampling distribution reset")
        self._scheduler.mark()
        self._notify_idle()

    def reset(self) -> None:
        self.reset_sample()
        self.reset_distribution()

    def settle(self) -> None:
        """Finish every running animation now. Queued repeats stay queued."""
        self._resolve_active()
        self._scheduler.mark()
        self._notify_idle()

    # ----------------------------
    # Per frame
    # ----------------------------
    def tick(self, dt: float, now: Optional[float] = None) -> None:
        """
        Advance animations by ``dt`` seconds (clamped to ``config.max_dt``).
        ``now`` is the host clock in milliseconds; when omitted the engine
        advances its own clock by ``dt``.
        """
        dt = min(max(float(dt), 0.0), self.config.max_dt)
        self._now = self._now + dt * 1000.0 if now is None else float(now)
        had_animations = self._has_animations()
        gravity = self._gravity()

        if self._emission is not None:
            due = self._emission.due(self._now)
            if due:
                self._emit(due)
            if self._emission.done:
                self._emission = None

        landed = self._drops.step(dt, gravity)
        if landed.size:
            np.add.at(self.sample_counts, landed, 1)

        if self._gather is not None and self._gather.advance(self._now):
            self._finish_gather()

        landed = self._stat_drops.step(dt, gravity)
        if landed.size:
            self.distribution.add_many(landed)

        if self._flashes:
            self._flashes = [f for f in self._flashes if f.until > self._now]

        if not self._has_work():
            self._pump_queue()

        if had_animations or self._has_animations():
            self._scheduler.mark()
        self._notify_idle()

    def render(self) -> bool:
        """Draw a frame if anything changed; returns whether it drew."""
        return self._scheduler.run(self._draw)

    def scene(self) -> Scene:
        """Read-only snapshot of everything the renderer needs."""
        rows = self._row_heights()
        drop_x, drop_y = self._drops.positions()
        stat_x, stat_y = self._stat_drops.positions()
        gather = self._gather
        return Scene(
            layout=self.layout,
            statistic=self.statistic,
            domain=domain_for(self.statistic),
            population=np.array(self.population.weights),
            sample_counts=self.sample_counts.copy(),
            distribution=self.distribution.counts.copy(),
            rows=rows,
            flashes=[(f.col, f.y) for f in self._flashes],
            drops=(drop_x.copy(), drop_y.copy()),
            stat_drops=(stat_x.copy(), stat_y.copy()),
            gather=(gather.x.copy(), gather.y.copy()) if gather is not None else None,
            population_stats=self.population_stats(),
            sample_stats=self.sample_stats() if self.phase is not Phase.EMITTING else None,
            distribution_stats=self.distribution_stats(),
            parameter=self.parameter_value(),
            show_parameter_line=self.show_parameter_line,
            show_normal_fit=self.show_normal_fit,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _validated(self, n) -> int:
        try:
            return validate_sample_size(n)
        except InvalidSampleSize as exc:
            logger.warning("rejected sample size %r: %s", n, exc)
            raise

    def _draw(self) -> None:
        if self.surface is None:
            return
        draw_scene(self.surface, self.scene())

    def _gravity(self) -> float:
        if self.speed is Speed.FAST or self._fast_active:
            return self.config.fast_gravity
        return self.config.gravity

    def _has_work(self) -> bool:
        return (
            self._emission is not None
            or self._gather is not None
            or bool(self._drops)
            or bool(self._stat_drops)
        )

    def _has_animations(self) -> bool:
        return self._has_work() or bool(self._flashes)

    def _current_values(self) -> np.ndarray:
        if self._sample_values.size:
            return self._sample_values
        # landed boxes only, e.g. after an emission was discarded midway
        return np.repeat(self.population.values, self.sample_counts)

    def _row_heights(self) -> RowHeights:
        lay = self.layout
        mid_counts = self.sample_counts + self._drops.count_by_bin(self.cols)
        if self._emission is not None:
            pending = self._emission.bins[self._emission.emitted:]
            mid_counts = mid_counts + np.bincount(pending, minlength=self.cols)
        bot_counts = self.distribution.counts + self._stat_drops.count_by_bin(self.distribution.bins)
        return RowHeights(
            top=lay.row_height(TOP, int(self.population.weights.max(initial=0))),
            mid=lay.row_height(MID, int(mid_counts.max(initial=0))),
            bot=lay.row_height(BOT, int(bot_counts.max(initial=0))),
        )

    def _begin(self, request: DrawRequest) -> None:
        self._was_idle = False
        self._fast_active = request.fast
        if request.repeat:
            self._repeat_done += 1
        if self.has_current_sample():
            self._start_gather(request)
        else:
            self._start_emission(request)

    def _pump_queue(self) -> None:
        if self._queue:
            self._begin(self._queue.popleft())

    def _start_emission(self, request: DrawRequest) -> None:
        sample = draw_sample(self.population.weights, request.n, self._rng)
        self._sample_values = sample.values.copy()
        self._emission = EmissionPlan(
            start=self._now,
            end=self._now + request.drop_ms,
            bins=sample.bins,
            values=sample.values,
        )

    def _emit(self, count: int) -> None:
        plan = self._emission
        lay = self.layout
        rows = self._row_heights()
        weights = self.population.weights
        inflight = self._drops.count_by_bin(self.cols)
        for _ in range(min(count, plan.total - plan.emitted)):
            col = int(plan.bins[plan.emitted])
            if weights[col] > 0:
                y_start = lay.slot_y(TOP, int(weights[col]) - 1, rows.top)
            else:
                y_start = lay.tier_y(TOP) + 2 * rows.top
            level = int(self.sample_counts[col] + inflight[col])
            inflight[col] += 1
            self._flashes.append(Flash(col=col, y=y_start, until=self._now + self.config.flash_ms))
            self._drops.spawn(lay.col_center(col), y_start, lay.slot_y(MID, level, rows.mid), col)
            plan.emitted += 1

    def _start_gather(self, request: Optional[DrawRequest]) -> None:
        lay = self.layout
        values = self._current_values().copy()
        value = compute_statistic(self.statistic, values, self.threshold)
        b = bin_of(value, domain_for(self.statistic), self.distribution.bins)

        start_x, start_y = self._gather_origins()
        self._gather = GatherOperation(
            start=self._now,
            duration=request.gather_ms if request is not None else self.config.gather_ms,
            start_x=start_x,
            start_y=start_y,
            target_x=lay.col_center(b),
            target_y=lay.tier_y(MID) + lay.mid_h / 2,
            bin=b,
            value=value,
            values=values,
            pending=request,
        )

    def _gather_origins(self) -> Tuple[np.ndarray, np.ndarray]:
        """Centres of the landed sample boxes, column by column, bottom up."""
        lay = self.layout
        rows = self._row_heights()
        counts = self.sample_counts
        cols = np.repeat(np.arange(self.cols), counts)
        levels = np.arange(cols.size) - np.repeat(np.cumsum(counts) - counts, counts)
        return lay.col_center(cols), lay.tier_base(MID) - levels * rows.mid - rows.mid / 2

    def _reproject(self, old: Layout) -> None:
        """Carry running animations over from ``old`` to the current layout."""
        lay = self.layout
        ratio = lay.cell / old.cell

        def scale_y(y):
            return lay.margin_y + (y - old.margin_y) * ratio

        rows = self._row_heights()
        for arena, tier, row_h, landed in (
            (self._drops, MID, rows.mid, self.sample_counts),
            (self._stat_drops, BOT, rows.bot, self.distribution.counts),
        ):
            n = arena.size
            if n == 0:
                continue
            bins = arena.bin[:n]
            stacked = landed.copy()
            for i in range(n):
                b = int(bins[i])
                arena.target_y[i] = lay.slot_y(tier, int(stacked[b]), row_h)
                stacked[b] += 1
            arena.x[:n] = lay.col_center(bins)
            arena.y[:n] = np.minimum(scale_y(arena.y[:n]), arena.target_y[:n])
            arena.vy[:n] *= ratio

        op = self._gather
        if op is not None:
            op.start_x, op.start_y = self._gather_origins()
            op.target_x = lay.col_center(op.bin)
            op.target_y = lay.tier_y(MID) + lay.mid_h / 2
            op.advance(self._now)

        self._flashes = [Flash(col=f.col, y=scale_y(f.y), until=f.until) for f in self._flashes]

    def _finish_gather(self) -> None:
        op = self._gather
        self._gather = None
        self.sample_counts[:] = 0
        self._sample_values = np.zeros(0)
        self.last_statistic = op.value

        rows = self._row_heights()
        level = int(self.distribution.counts[op.bin]) + self._stat_drops.count_in_bin(op.bin)
        self._stat_drops.spawn(
            self.layout.col_center(op.bin),
            op.target_y,
            self.layout.slot_y(BOT, level, rows.bot),
            op.bin,
        )
        if op.pending is not None:
            self._start_emission(op.pending)

    def _resolve_active(self) -> None:
        # finishing a gather may start its queued emission; loop until quiet
        while self._has_work():
            if self._emission is not None:
                self._emit(self._emission.total - self._emission.emitted)
                self._emission = None
            landed = self._drops.land_all()
            if landed.size:
                np.add.at(self.sample_counts, landed, 1)
            if self._gather is not None:
                self._finish_gather()
            landed = self._stat_drops.land_all()
            if landed.size:
                self.distribution.add_many(landed)
        self._flashes.clear()

    def _notify_idle(self) -> None:
        idle = self.is_idle
        if idle and not self._was_idle:
            for callback in list(self._idle_listeners):
                callback(self)
        self._was_idle = idle
