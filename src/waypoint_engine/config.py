"""Engine configuration: sampling cadence, matching tolerances and event names.

Load from YAML:
    config = EngineConfig.from_yaml("engine.yml")

    # engine.yml
    engine:
      sampling_period_ms: 100
      tolerance_bins: 2
      max_strikes: 2
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

logger = logging.getLogger("waypoint_engine.config")


@dataclass
class EngineConfig:
    sampling_period_ms: int = 100  # one poll per period (10 Hz)
    tolerance_bins: int = 2
    max_strikes: int = 2
    resolution: int = 18
    stop_event: str = "stop-recording"
    abort_event: str = "abort-matching"
    discovery_timeout_s: float = 10.0
    realtime: bool = False

    @property
    def sampling_period(self) -> float:
        """Sampling period in seconds."""
        return self.sampling_period_ms / 1000.0

    def validate(self) -> EngineConfig:
        if self.sampling_period_ms <= 0:
            raise ValueError("sampling_period_ms must be positive")
        if self.tolerance_bins < 0:
            raise ValueError("tolerance_bins must be >= 0")
        if self.max_strikes < 0:
            raise ValueError("max_strikes must be >= 0")
        if self.resolution < 2:
            raise ValueError("resolution must be >= 2")
        for name in ("stop_event", "abort_event"):
            if not getattr(self, name):
                raise ValueError(f"{name} must be non-empty")
        return self

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
        return cls(**{k: v for k, v in data.items() if k in known}).validate()

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load config from a YAML file (top-level ``engine:`` mapping optional)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "engine" in data:
            data = data["engine"] or {}
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump({"engine": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
