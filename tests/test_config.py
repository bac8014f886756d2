"""
Tests for runtime configuration and logging helpers.
"""

import logging

import pytest

from sampling_lab.config import LabConfig, configure, get_config
from sampling_lab.log import configure_logging, get_logger


def test_defaults():
    cfg = LabConfig()
    assert cfg.seed == 1234
    assert cfg.fast_drop_ms < cfg.drop_ms
    assert cfg.max_dt == pytest.approx(0.06)


def test_update_rejects_unknown_keys():
    cfg = LabConfig()
    cfg.update(gravity=900.0)
    assert cfg.gravity == 900.0
    with pytest.raises(AttributeError):
        cfg.update(warp_factor=9)


def test_load_from_env(monkeypatch):
    monkeypatch.setenv("SAMPLING_LAB_SEED", "99")
    monkeypatch.setenv("SAMPLING_LAB_DROP_MS", "500")
    monkeypatch.setenv("SAMPLING_LAB_LOG_LEVEL", "debug")
    cfg = LabConfig()
    cfg.load_from_env()
    assert cfg.seed == 99 and isinstance(cfg.seed, int)
    assert cfg.drop_ms == 500.0 and isinstance(cfg.drop_ms, float)
    assert cfg.log_level == "debug"


def test_copy_is_independent():
    cfg = LabConfig()
    other = cfg.copy()
    other.seed = 5
    assert cfg.seed == 1234


def test_configure_global():
    original = get_config()
    try:
        configure(LabConfig(seed=5))
        assert get_config().seed == 5
        configure(flash_ms=10.0)
        assert get_config().flash_ms == 10.0
    finally:
        configure(original)
    assert get_config() is original


def test_logging_helpers():
    configure_logging("DEBUG")
    assert logging.getLogger("sampling_lab").level == logging.DEBUG
    logger = get_logger("sampling_lab.tests")
    assert isinstance(logger, logging.Logger)
    configure_logging("WARNING")
    assert logging.getLogger("sampling_lab").level == logging.WARNING
