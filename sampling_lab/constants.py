"""
Constants for the sampling lab.

Grid dimensions, tier unit heights, and the plot palette shared by the
engine and the renderer.
"""

# ── Grid ─────────────────────────────────────────────────────────────────
COLS = 60                 # population / sample bins
STAT_BINS = COLS          # sampling-distribution bins (share the column grid)
MAX_WEIGHT = 10000        # per-bin population weight ceiling

MIN_SAMPLE_SIZE = 2
MAX_SAMPLE_SIZE = 1000

# ── Layout (pixels / logical units) ──────────────────────────────────────
PAD = 16                  # horizontal padding around the grid
MARGIN_Y = 8              # vertical margin above and below the tiers
VIEWPORT_SLACK_Y = 32     # height reserved outside the tiers when fitting
MIN_CELL = 6
TOP_UNITS = 30
MID_UNITS = 24
BOT_UNITS = 36
TOTAL_UNITS = TOP_UNITS + MID_UNITS + BOT_UNITS
BASE_INSET = 16           # gap between a tier's bottom edge and its stack base
HEADROOM = 28             # space kept free above the tallest stack

LAND_EPSILON = 0.1        # px; a particle closer than this to its target lands

# ── Population presets ───────────────────────────────────────────────────
PRESETS = ("uniform", "normal", "bimodal", "lognormal")
PRESET_SCALE = 20

# ── Plot palette ─────────────────────────────────────────────────────────
COLORS = {
    'text':       '#001524',
    'band':       (0.0, 0.0, 0.0, 0.04),
    'tick':       '#EAECEF',
    'tick_label': '#475569',
    'pop_fill':   '#15616D',
    'pop_top':    '#2199AB',
    'mid_fill':   '#FF7D00',
    'mid_top':    '#FF9C33',
    'bot_fill':   '#901328',
    'bot_top':    '#B51732',
    'flash':      (1.0, 0.49, 0.0, 0.85),
    'theta':      '#78290F',
    'normal':     '#111827',
    'sample_stat': '#FF7D00',
}

FONT_FAMILIES = ["Inter", "DejaVu Sans", "Liberation Sans", "sans-serif"]
