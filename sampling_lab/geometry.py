"""
Pixel geometry for the three tiers.

One square cell size serves every column so the population, sample and
sampling-distribution grids line up. The cell is the largest size that fits
both the viewport width (``cols`` columns) and the viewport height (the three
tiers' unit heights stacked). ``Layout`` is immutable: a resize produces a
new one, so geometry is never half-updated.
"""

from dataclasses import dataclass
from typing import Optional

from .constants import (
    BASE_INSET, BOT_UNITS, COLS, HEADROOM, MARGIN_Y, MID_UNITS, MIN_CELL,
    PAD, TOP_UNITS, TOTAL_UNITS, VIEWPORT_SLACK_Y,
)

MIN_WIDTH = MIN_CELL * COLS + 2 * PAD
MIN_HEIGHT = TOTAL_UNITS * MIN_CELL + VIEWPORT_SLACK_Y

TOP, MID, BOT = "top", "mid", "bot"


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    cols: int
    cell: int
    grid_x0: int
    top_h: int
    mid_h: int
    bot_h: int
    margin_y: int = MARGIN_Y

    # ── Horizontal ───────────────────────────────────────────────────────
    @property
    def grid_w(self) -> int:
        return self.cell * self.cols

    def col_left(self, col) -> float:
        return self.grid_x0 + col * self.cell

    def col_center(self, col) -> float:
        return self.grid_x0 + col * self.cell + self.cell / 2

    def value_to_x(self, value: float, lo: float = 0.0, hi: float = 1.0) -> float:
        p = min(1.0, max(0.0, (value - lo) / (hi - lo)))
        return self.grid_x0 + p * self.grid_w

    def col_at(self, x: float) -> int:
        col = int((x - self.grid_x0) // self.cell)
        return min(self.cols - 1, max(0, col))

    # ── Vertical ─────────────────────────────────────────────────────────
    def tier_y(self, tier: str) -> float:
        if tier == TOP:
            return self.margin_y
        if tier == MID:
            return self.margin_y + self.top_h
        if tier == BOT:
            return self.margin_y + self.top_h + self.mid_h
        raise ValueError(f"unknown tier {tier!r}")

    def tier_h(self, tier: str) -> int:
        return {TOP: self.top_h, MID: self.mid_h, BOT: self.bot_h}[tier]

    def tier_base(self, tier: str) -> float:
        """y of the floor that stacks in ``tier`` grow up from."""
        return self.tier_y(tier) + self.tier_h(tier) - BASE_INSET

    def row_height(self, tier: str, max_count: int) -> float:
        """
        Height of one stacked box in ``tier``. Boxes are square until the
        tallest column would overflow the tier; then they are squashed.
        """
        need = max_count * self.cell
        if need <= 0:
            return float(self.cell)
        return self.cell * min(1.0, (self.tier_h(tier) - HEADROOM) / need)

    def slot_y(self, tier: str, level: int, row_h: float) -> float:
        """Centre y of the box at stack position ``level`` (0 = bottom)."""
        return self.tier_base(tier) - level * row_h - row_h / 2

    @property
    def surface_height(self) -> int:
        return self.top_h + self.mid_h + self.bot_h + 2 * self.margin_y

    def hit_population(self, x: float, y: float) -> Optional[int]:
        """Column under a point in the population tier, or None elsewhere."""
        if y > self.margin_y + self.top_h:
            return None
        return self.col_at(x)


def compute_layout(width: float, height: float, cols: int = COLS) -> Layout:
    """
    Fit the grid into a ``width`` x ``height`` viewport. Degenerate sizes are
    clamped to a minimum usable viewport.
    """
    width = int(max(MIN_CELL * cols + 2 * PAD, width or 0))
    height = int(max(MIN_HEIGHT, height or 0))

    inner_w = width - 2 * PAD
    from_width = max(MIN_CELL, inner_w // cols)
    from_height = max(MIN_CELL, (height - VIEWPORT_SLACK_Y) // TOTAL_UNITS)
    cell = int(min(from_width, from_height))

    grid_x0 = (width - cell * cols) // 2
    return Layout(
        width=width,
        height=height,
        cols=cols,
        cell=cell,
        grid_x0=int(grid_x0),
        top_h=TOP_UNITS * cell,
        mid_h=MID_UNITS * cell,
        bot_h=BOT_UNITS * cell,
    )
