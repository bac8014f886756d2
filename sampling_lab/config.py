"""
Runtime configuration for the sampling lab.

Animation timings, fall physics and the default seed live here so the host
can tune them (or override them from ``SAMPLING_LAB_*`` environment
variables) without touching engine code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional


@dataclass
class LabConfig:
    seed: int = 1234
    drop_ms: float = 1200.0
    fast_drop_ms: float = 600.0
    gather_ms: float = 260.0
    fast_gather_ms: float = 180.0
    gravity: float = 1400.0        # px / s^2
    fast_gravity: float = 2400.0
    flash_ms: float = 160.0
    max_dt: float = 0.06           # s; longest step a single tick may advance
    log_level: str = field(default_factory=lambda: os.environ.get("SAMPLING_LAB_LOG_LEVEL", "WARNING"))

    def update(self, **kwargs: Any) -> None:
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"unknown config option '{key}'")
            setattr(self, key, value)

    def load_from_env(self, prefix: str = "SAMPLING_LAB_") -> None:
        # Values are coerced to the type of the current field value.
        for f in fields(self):
            env_key = f"{prefix}{f.name.upper()}"
            if env_key not in os.environ:
                continue
            raw = os.environ[env_key]
            current = getattr(self, f.name)
            if isinstance(current, int):
                value: Any = int(raw)
            elif isinstance(current, float):
                value = float(raw)
            else:
                value = raw
            setattr(self, f.name, value)

    def copy(self) -> "LabConfig":
        return replace(self)


_GLOBAL_CONFIG = LabConfig()


def get_config() -> LabConfig:
    return _GLOBAL_CONFIG


def configure(config: Optional[LabConfig] = None, **kwargs: Any) -> LabConfig:
    """Replace and/or update the global configuration and return it."""
    global _GLOBAL_CONFIG
    if config is not None:
        _GLOBAL_CONFIG = config
    if kwargs:
        _GLOBAL_CONFIG.update(**kwargs)
    return _GLOBAL_CONFIG
