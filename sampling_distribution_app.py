import time

import streamlit as st
from matplotlib.figure import Figure

from sampling_lab import APP_NAME, APP_VERSION, Engine, InvalidSampleSize, Phase, Statistic, get_config
from sampling_lab.constants import COLS, MAX_SAMPLE_SIZE, PRESETS
from sampling_lab.log import configure_logging


FRAME_INTERVAL_S = 0.05
MAX_LOOP_SECONDS = 600.0
VIEWPORT = (960, 900)

STATISTIC_NAMES = {
    "Mean": Statistic.MEAN,
    "Median": Statistic.MEDIAN,
    "Standard deviation": Statistic.SD,
    "Proportion above threshold": Statistic.PROPORTION,
}


# ----------------------------
# Engine / session helpers
# ----------------------------
def clock_ms() -> float:
    return time.perf_counter() * 1000.0


def get_engine() -> Engine:
    if "engine" not in st.session_state:
        config = get_config()
        config.load_from_env()
        configure_logging(config.log_level)
        fig = Figure(dpi=100)
        engine = Engine(fig, *VIEWPORT, config=config)
        engine.tick(0.0, clock_ms())
        st.session_state.engine = engine
        st.session_state.preset = "normal"
        st.session_state.seed = engine.seed
    return st.session_state.engine


def sync_setting(key: str, value, apply) -> None:
    """Apply a widget value to the engine only when it changed."""
    if st.session_state.get(key) != value:
        apply(value)
        st.session_state[key] = value


def stats_markdown(engine: Engine) -> str:
    kind = engine.statistic
    pop = engine.population_stats()
    md = (
        f"**Running stats**\n\n"
        f"- Population: μ = **{pop.mu:.4f}**, σ = **{pop.sd:.4f}**, "
        f"parameter {kind.parameter_symbol} = **{engine.parameter_value():.4f}**\n"
    )
    sample = engine.sample_stats()
    if sample is not None and engine.phase is not Phase.EMITTING:
        md += (
            f"- Current sample: n = **{sample.n}**, {kind.label} = **{sample.value:.4f}**, "
            f"s = {sample.sd:.4f}, SE(s) = {sample.se:.4f}, SE(σ) = {sample.theoretical_se:.4f}\n"
        )
    dist = engine.distribution_stats()
    if dist.count > 0:
        md += (
            f"- Sampling distribution: runs = **{dist.count}**, "
            f"E[{kind.label}] = **{dist.mean:.4f}**, SD[{kind.label}] = **{dist.sd:.4f}**\n"
        )
    else:
        md += "- Sampling distribution: **(no samples yet)**\n"
    progress = engine.repeat_progress
    if progress.running:
        md += f"- Repeating: {progress.current} / {progress.total}\n"
    return md


def run_frames(engine: Engine, plot_area, stats_area) -> None:
    """Host frame loop: tick, redraw when dirty, stop once the engine is idle."""
    started = last = time.perf_counter()
    while True:
        now = time.perf_counter()
        engine.tick(now - last, now * 1000.0)
        last = now
        if engine.render():
            plot_area.pyplot(engine.surface)
            stats_area.markdown(stats_markdown(engine))
        if engine.is_idle or now - started > MAX_LOOP_SECONDS:
            break
        time.sleep(FRAME_INTERVAL_S)


# ----------------------------
# Streamlit UI
# ----------------------------
st.set_page_config(page_title=APP_NAME, layout="centered")
st.title(APP_NAME)
st.caption("Explore how sample statistics behave as sample size changes")

engine = get_engine()
engine.tick(0.0, clock_ms())

with st.sidebar:
    st.header("Population")

    preset = st.selectbox("Preset shape", list(PRESETS), index=list(PRESETS).index("normal"))
    sync_setting("preset", preset, engine.set_population_preset)

    with st.expander("Paint population"):
        paint_bin = st.slider("Bin", min_value=0, max_value=COLS - 1, value=COLS // 2)
        c1, c2 = st.columns(2)
        if c1.button("Add (+1)"):
            engine.paint_population(paint_bin, +1)
        if c2.button("Erase (−1)"):
            engine.paint_population(paint_bin, -1)

    st.divider()
    st.header("Statistic")

    stat_name = st.selectbox("Statistic", list(STATISTIC_NAMES), index=0)
    engine.set_statistic(STATISTIC_NAMES[stat_name])

    if engine.statistic is Statistic.PROPORTION:
        threshold = st.slider("Threshold θ = P(X > t)", min_value=0.0, max_value=1.0, value=0.5, step=0.01)
        engine.set_threshold(threshold)

    n = int(st.number_input("Sample size (n)", min_value=1, max_value=2 * MAX_SAMPLE_SIZE, value=30, step=1))

    st.divider()
    st.subheader("Display")

    engine.set_show_parameter_line(st.checkbox("Show parameter line", value=True))
    engine.set_show_normal_fit(st.checkbox("Overlay normal fit", value=False))
    engine.set_speed(st.radio("Speed", ["normal", "fast"], index=0, horizontal=True))

    seed = st.number_input("Seed", value=int(get_config().seed), step=1)
    sync_setting("seed", int(seed), engine.set_seed)

    st.divider()
    st.caption(f"App version: {APP_VERSION}")

b1, b2, b3, b4 = st.columns(4)
draw_clicked = b1.button(f"Draw sample ({n})")
repeat_clicked = b2.button("Repeat ×10")
turbo_clicked = b3.button("Turbo ×1000")
reset_clicked = b4.button("Reset")

plot_area = st.empty()
stats_area = st.empty()

try:
    if draw_clicked:
        engine.draw_sample(n)
    if repeat_clicked:
        engine.repeat(n, 10)
    if turbo_clicked:
        engine.turbo_repeat(n, 1000)
except InvalidSampleSize as exc:
    st.error(str(exc))

if reset_clicked:
    engine.reset()

# Streamlit re-creates the placeholders on every run, so always push a frame.
engine.render()
plot_area.pyplot(engine.surface)
stats_area.markdown(stats_markdown(engine))

if not engine.is_idle:
    run_frames(engine, plot_area, stats_area)
