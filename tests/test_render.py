"""
Smoke tests for the matplotlib renderer.
"""

import numpy as np
import pytest
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from sampling_lab import Engine, LabConfig


@pytest.fixture
def figure():
    fig = Figure(dpi=100)
    FigureCanvasAgg(fig)
    return fig


@pytest.fixture
def drawn_engine(figure):
    return Engine(figure, 960, 900, config=LabConfig())


def test_first_frame(drawn_engine, figure):
    assert drawn_engine.render()
    assert len(figure.axes) == 1
    w, h = figure.get_size_inches() * figure.get_dpi()
    assert (w, h) == pytest.approx((960, 826))
    figure.canvas.draw()
    assert not drawn_engine.render()


def test_frames_during_animation(drawn_engine, figure):
    drawn_engine.set_show_normal_fit(True)
    drawn_engine.turbo_repeat(10, 200)
    drawn_engine.draw_sample(10, duration_ms=1000)
    drawn_engine.tick(0.0, 500.0)
    assert drawn_engine.render()
    figure.canvas.draw()

    drawn_engine.draw_sample(10)
    drawn_engine.tick(0.01)
    assert drawn_engine.scene().gather is not None
    assert drawn_engine.render()
    figure.canvas.draw()


@pytest.mark.parametrize("kind", ["mean", "median", "sd", "proportion"])
def test_each_statistic_renders(drawn_engine, figure, kind):
    drawn_engine.set_statistic(kind)
    drawn_engine.draw_sample(20)
    drawn_engine.settle()
    drawn_engine.turbo_repeat(20, 50)
    assert drawn_engine.render()
    figure.canvas.draw()


def test_tall_stacks_render(drawn_engine, figure):
    drawn_engine.population.replace(np.full(60, 5000))
    drawn_engine.set_show_parameter_line(False)
    assert drawn_engine.render()
    figure.canvas.draw()
