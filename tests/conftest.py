"""Shared pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root is importable without installation
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from sampling_lab import Engine, LabConfig  # noqa: E402


def run_until_idle(engine, dt: float = 0.05, max_ticks: int = 200_000) -> int:
    """Tick the engine on its own clock until nothing is left to animate."""
    for i in range(max_ticks):
        if engine.is_idle:
            return i
        engine.tick(dt)
    raise AssertionError("engine never became idle")


@pytest.fixture
def config():
    return LabConfig(seed=1234, log_level="WARNING")


@pytest.fixture
def engine(config):
    return Engine(None, 960, 900, config=config)


@pytest.fixture
def make_engine(config):
    def _make(**kwargs):
        kwargs.setdefault("config", config)
        return Engine(None, 960, 900, **kwargs)
    return _make
