"""
matplotlib renderer for an engine scene.

The figure is treated as a pixel canvas: one axes fills it, x runs
left-to-right in pixels and y runs top-to-bottom, matching the layout
geometry. Font sizes are given in pixels and converted to points from the
figure DPI.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from .constants import COLORS, FONT_FAMILIES
from .geometry import BOT, MID, TOP, Layout
from .numeric import normal_density
from .population import PopulationStats
from .statistics import DistributionStats, SampleStats, Statistic

Points = Tuple[np.ndarray, np.ndarray]


@dataclass(frozen=True)
class RowHeights:
    top: float
    mid: float
    bot: float


@dataclass(frozen=True)
class Scene:
    layout: Layout
    statistic: Statistic
    domain: Tuple[float, float]
    population: np.ndarray
    sample_counts: np.ndarray
    distribution: np.ndarray
    rows: RowHeights
    flashes: List[Tuple[int, float]]
    drops: Points
    stat_drops: Points
    gather: Optional[Points]
    population_stats: PopulationStats
    sample_stats: Optional[SampleStats]
    distribution_stats: DistributionStats
    parameter: float
    show_parameter_line: bool
    show_normal_fit: bool


_SAMPLE_SYMBOLS = {
    Statistic.MEAN: "x̄",
    Statistic.MEDIAN: "med",
    Statistic.SD: "s",
    Statistic.PROPORTION: "p̂",
}


# ----------------------------
# Drawing helpers
# ----------------------------
def _text(ax, x, y, s, *, px: float, size: float, ha: str = "left", color=None, weight="semibold"):
    ax.text(
        x, y, s,
        ha=ha, va="baseline",
        fontsize=size * px,
        fontweight=weight,
        family=FONT_FAMILIES,
        color=color or COLORS['text'],
        zorder=6,
    )


def _draw_tray(ax, lay: Layout, tier: str, title: str, domain, px: float) -> None:
    y = lay.tier_y(tier)
    h = lay.tier_h(tier)
    ax.add_patch(Rectangle((0, y), lay.width, h, facecolor=COLORS['band'], edgecolor='none', zorder=0))
    _text(ax, lay.grid_x0, y + 22, title, px=px, size=18)

    ticks = lay.grid_x0 + lay.grid_w * np.arange(11) / 10.0
    ax.vlines(ticks, y + h - 12, y + h - 4, colors=COLORS['tick'], linewidth=px, zorder=1)
    lo, hi = domain
    for x, v in ((lay.grid_x0, lo), (lay.grid_x0 + lay.grid_w, hi)):
        _text(ax, x, y + h - 2, f"{v:g}", px=px, size=13, ha="center",
              color=COLORS['tick_label'], weight="normal")


def _box_tops(counts: np.ndarray):
    cols = np.flatnonzero(counts)
    per_col = counts[cols]
    box_cols = np.repeat(cols, per_col)
    levels = np.arange(box_cols.size) - np.repeat(np.cumsum(per_col) - per_col, per_col)
    return box_cols, levels


def _draw_stacks(ax, lay: Layout, counts, base: float, row_h: float, fill, top, px: float) -> None:
    counts = np.asarray(counts)
    cols = np.flatnonzero(counts)
    if cols.size == 0:
        return
    ax.bar(
        lay.grid_x0 + cols * lay.cell, -counts[cols] * row_h,
        width=lay.cell, bottom=base, align='edge',
        color=fill, linewidth=0, zorder=2,
    )
    # per-box highlight; skipped once boxes are squashed below two pixels
    if row_h >= 2:
        box_cols, levels = _box_tops(counts)
        left = lay.grid_x0 + box_cols * lay.cell
        ax.hlines(base - (levels + 1) * row_h, left, left + lay.cell, colors=top, linewidth=px, zorder=3)


def _draw_boxes(ax, xs, ys, w: float, h: float, fill, top, px: float) -> None:
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if xs.size == 0:
        return
    ax.bar(xs - w / 2, h, width=w, bottom=ys - h / 2, align='edge', color=fill, linewidth=0, zorder=4)
    ax.hlines(ys - h / 2, xs - w / 2, xs + w / 2, colors=top, linewidth=px, zorder=5)


def _label_position(lay: Layout, x: float, value: float, parameter: Optional[float]):
    """Put a line label on the side facing away from the parameter line."""
    padding = 8
    pos, ha = x + padding, "left"
    if parameter is not None and not value > parameter:
        pos, ha = x - padding, "right"
    if ha == "left" and pos > lay.grid_x0 + lay.grid_w - 30:
        pos, ha = x - padding, "right"
    elif ha == "right" and pos < lay.grid_x0 + 30:
        pos, ha = x + padding, "left"
    return pos, ha


def _draw_lines(ax, scene: Scene, px: float) -> None:
    lay = scene.layout
    lo, hi = scene.domain
    kind = scene.statistic
    y_mid = lay.tier_y(MID)
    y_bot = lay.tier_y(BOT)
    mid_base = lay.tier_base(MID)
    bot_base = lay.tier_base(BOT)

    param_x = lay.value_to_x(scene.parameter, lo, hi)
    for y0, y1 in ((y_mid + 32, mid_base - 8), (y_bot + 32, bot_base - 8)):
        ax.plot([param_x, param_x], [y0, y1], color=COLORS['theta'], linewidth=3 * px,
                linestyle=(0, (6, 3)), zorder=7)
    pos, ha = _label_position(lay, param_x, scene.parameter, None)
    _text(ax, pos, y_mid + 46, kind.parameter_symbol, px=px, size=12, ha=ha, color=COLORS['theta'])

    ss = scene.sample_stats
    if ss is not None and np.isfinite(ss.value):
        x = lay.value_to_x(ss.value, lo, hi)
        ax.plot([x, x], [y_mid + 32, mid_base - 8], color=COLORS['sample_stat'], linewidth=2 * px, zorder=7)
        pos, ha = _label_position(lay, x, ss.value, scene.parameter)
        _text(ax, pos, y_mid + 46, _SAMPLE_SYMBOLS[kind], px=px, size=12, ha=ha, color=COLORS['sample_stat'])

    ds = scene.distribution_stats
    if ds.count > 0:
        x = lay.value_to_x(ds.mean, lo, hi)
        ax.plot([x, x], [y_bot + 32, bot_base - 8], color=COLORS['bot_fill'], linewidth=2 * px, zorder=7)
        pos, ha = _label_position(lay, x, ds.mean, scene.parameter)
        _text(ax, pos, y_bot + 46, f"E[{_SAMPLE_SYMBOLS[kind]}]", px=px, size=12, ha=ha,
              color=COLORS['bot_fill'])


def _draw_normal_fit(ax, scene: Scene, px: float) -> None:
    lay = scene.layout
    ds = scene.distribution_stats
    if ds.count <= 5 or not ds.sd > 1e-6:
        return
    lo, hi = scene.domain
    max_pix = float(scene.distribution.max()) * scene.rows.bot
    pdf_max = 1.0 / (ds.sd * np.sqrt(2.0 * np.pi))
    scale = 0.9 * max_pix / pdf_max
    x01 = np.linspace(0.0, 1.0, 221)
    ys = lay.tier_base(BOT) - scale * normal_density(lo + x01 * (hi - lo), ds.mean, ds.sd)
    ax.plot(lay.grid_x0 + x01 * lay.grid_w, ys, color=COLORS['normal'], linewidth=2 * px, zorder=8)


# ----------------------------
# Scene
# ----------------------------
def draw_scene(fig: Figure, scene: Scene) -> None:
    """Render ``scene`` on ``fig`` (cleared first)."""
    lay = scene.layout
    dpi = fig.get_dpi()
    px = 72.0 / dpi
    fig.clf()
    fig.set_size_inches(lay.width / dpi, lay.surface_height / dpi, forward=False)
    fig.patch.set_facecolor("white")

    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, lay.width)
    ax.set_ylim(lay.surface_height, 0)
    ax.set_axis_off()

    rows = scene.rows
    right = lay.grid_x0 + lay.grid_w
    kind = scene.statistic

    # ── Population ───────────────────────────────────────────────────────
    y_top = lay.tier_y(TOP)
    _draw_tray(ax, lay, TOP, "Population Distribution", (0, 1), px)
    _draw_stacks(ax, lay, scene.population, lay.tier_base(TOP), rows.top,
                 COLORS['pop_fill'], COLORS['pop_top'], px)
    if scene.flashes:
        cols, ys = zip(*scene.flashes)
        _draw_boxes(ax, lay.col_center(np.asarray(cols)), ys, lay.cell, rows.top,
                    COLORS['flash'], COLORS['flash'], px)
    ps = scene.population_stats
    _text(ax, right, y_top + 40, f"μ = {ps.mu:.3f}", px=px, size=18, ha="right")
    _text(ax, right, y_top + 60, f"σ = {ps.sd:.3f}", px=px, size=18, ha="right")

    # ── Sample ───────────────────────────────────────────────────────────
    y_mid = lay.tier_y(MID)
    _draw_tray(ax, lay, MID, "Sample Distribution", (0, 1), px)
    if scene.gather is None:
        _draw_stacks(ax, lay, scene.sample_counts, lay.tier_base(MID), rows.mid,
                     COLORS['mid_fill'], COLORS['mid_top'], px)
    else:
        _draw_boxes(ax, scene.gather[0], scene.gather[1], lay.cell, rows.mid,
                    COLORS['flash'], COLORS['mid_top'], px)
    ss = scene.sample_stats
    if ss is not None:
        _text(ax, lay.grid_x0, y_mid + 40, f"n = {ss.n}", px=px, size=18)
        _text(ax, lay.grid_x0, y_mid + 60, f"√n = {np.sqrt(ss.n):.2f}", px=px, size=18)
        lines = [
            f"{kind.label} = {ss.value:.3f}",
            f"s = {ss.sd:.3f}",
            f"SE(s) = {ss.se:.3f}",
        ]
        if kind is Statistic.MEAN:
            lines.append(f"SE(σ) = {ss.theoretical_se:.3f}")
        for i, line in enumerate(lines):
            _text(ax, right, y_mid + 40 + 20 * i, line, px=px, size=18, ha="right")

    # ── Sampling distribution ────────────────────────────────────────────
    y_bot = lay.tier_y(BOT)
    _draw_tray(ax, lay, BOT, f"Sampling Distribution of the {kind.label}", scene.domain, px)
    _draw_stacks(ax, lay, scene.distribution, lay.tier_base(BOT), rows.bot,
                 COLORS['bot_fill'], COLORS['bot_top'], px)
    ds = scene.distribution_stats
    if ds.count > 0:
        _text(ax, lay.grid_x0, y_bot + 40, f"runs = {ds.count}", px=px, size=18)
        _text(ax, right, y_bot + 40, f"E[{kind.label}] = {ds.mean:.3f}", px=px, size=18, ha="right")
        _text(ax, right, y_bot + 60, f"SD[{kind.label}] = {ds.sd:.3f}", px=px, size=18, ha="right")
    if scene.show_normal_fit:
        _draw_normal_fit(ax, scene, px)

    # ── Particles in flight ──────────────────────────────────────────────
    _draw_boxes(ax, scene.drops[0], scene.drops[1], lay.cell, rows.mid,
                COLORS['mid_fill'], COLORS['mid_top'], px)
    _draw_boxes(ax, scene.stat_drops[0], scene.stat_drops[1], lay.cell, rows.bot,
                COLORS['bot_fill'], COLORS['bot_top'], px)

    if scene.show_parameter_line:
        _draw_lines(ax, scene, px)
