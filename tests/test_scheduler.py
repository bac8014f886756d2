"""
Unit tests for the redraw gate.
"""

import pytest

from sampling_lab.scheduler import RedrawScheduler


def test_draws_only_when_dirty():
    calls = []
    sched = RedrawScheduler()
    assert sched.run(lambda: calls.append(1))
    assert not sched.run(lambda: calls.append(1))
    sched.mark()
    sched.mark()
    assert sched.run(lambda: calls.append(1))
    assert calls == [1, 1]
    assert sched.frames == 2


def test_failed_draw_stays_dirty():
    sched = RedrawScheduler()

    def boom():
        raise RuntimeError("draw failed")

    with pytest.raises(RuntimeError):
        sched.run(boom)
    assert sched.dirty
